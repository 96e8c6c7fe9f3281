# Copyright (C) 2025 Logical Mechanism LLC
# SPDX-License-Identifier: GPL-3.0-only
import json
import logging
from pathlib import Path

import pytest

from fibproof.config import Settings
from fibproof.mock import MockProver
from fibproof.proof import Proof, ProvedRun

VECTORS_PATH = (
    Path(__file__).resolve().parent.parent / "test-vectors" / "public-values-vectors.json"
)


class RecordingProver:
    """Delegates to the mock backend and records every call it receives."""

    def __init__(self, inner: MockProver | None = None, sound: bool = True):
        self.inner = inner if inner is not None else MockProver()
        self.sound = sound
        self.calls: list[tuple] = []

    def setup(self):
        self.calls.append(("setup",))
        return self.inner.setup()

    def execute(self, guest_input):
        self.calls.append(("execute", guest_input.n))
        return self.inner.execute(guest_input)

    def prove(self, guest_input, mode):
        self.calls.append(("prove", mode))
        return self.inner.prove(guest_input, mode)

    def wrap(self, run):
        self.calls.append(("wrap", run.proof.mode))
        return self.inner.wrap(run)

    def verify(self, proof, public_values, vkey):
        self.calls.append(("verify", proof.mode))
        return self.inner.verify(proof, public_values, vkey)

    def count(self, name: str) -> int:
        return sum(1 for call in self.calls if call[0] == name)


def flip_last_byte(run: ProvedRun) -> ProvedRun:
    data = bytearray(run.proof.data)
    data[-1] ^= 0x01
    return ProvedRun(Proof(run.proof.mode, bytes(data)), run.public_values, run.vkey)


class TamperingProver(RecordingProver):
    """Corrupts one proof byte after the given stage ("prove" or "wrap")."""

    def __init__(self, stage: str, **kwargs):
        super().__init__(**kwargs)
        self.stage = stage

    def prove(self, guest_input, mode):
        run = super().prove(guest_input, mode)
        return flip_last_byte(run) if self.stage == "prove" else run

    def wrap(self, run):
        wrapped = super().wrap(run)
        return flip_last_byte(wrapped) if self.stage == "wrap" else wrapped


@pytest.fixture()
def settings(tmp_path) -> Settings:
    return Settings(prover="mock", fixture_dir=tmp_path / "fixtures", plonk_min_ram_gb=0.0)


@pytest.fixture()
def mock_prover() -> MockProver:
    return MockProver()


@pytest.fixture()
def recorder() -> RecordingProver:
    return RecordingProver()


@pytest.fixture()
def vectors() -> list[dict]:
    return json.loads(VECTORS_PATH.read_text())


@pytest.fixture()
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)
