# Copyright (C) 2025 Logical Mechanism LLC
# SPDX-License-Identifier: GPL-3.0-only

# prover.py

"""
Adapter around the external zkVM prover.

The orchestration code only talks to the `ProverClient` capability below.
`BinaryProver` drives the prover host binary through subprocess calls;
`fibproof.mock.MockProver` is the in-process development backend.

The host binary is invoked as

    <prover> vkey    --elf ELF
    <prover> execute --elf ELF --stdin FILE
    <prover> prove   --elf ELF --stdin FILE --mode core|compressed --out FILE
    <prover> wrap    --elf ELF --proof FILE --public-values HEX --out FILE
    <prover> verify  --elf ELF --proof FILE --public-values HEX --vkey HEX --mode MODE

Progress output goes to stdout before a final JSON line carrying the result.
`verify` reports through its exit status.
"""

import json
import logging
import os
import subprocess
import tempfile
from pathlib import Path
from typing import Any, Protocol

from fibproof.config import Settings
from fibproof.errors import (
    ExecutionFailure,
    FibProofError,
    ProvingFailure,
    ResourceExhausted,
    VerificationFailure,
    WrappingFailure,
)
from fibproof.hashing import from_hex
from fibproof.mock import MockProver
from fibproof.proof import ExecutionReport, Proof, ProofMode, ProvedRun, VerifyingKey
from fibproof.stdin import GuestInput

logger = logging.getLogger(__name__)

# exit statuses of a prover killed by the OOM killer or a supervisor
KILLED_STATUSES = (-9, 137)


class ProverClient(Protocol):
    sound: bool

    def setup(self) -> VerifyingKey: ...

    def execute(self, guest_input: GuestInput) -> ExecutionReport: ...

    def prove(self, guest_input: GuestInput, mode: ProofMode) -> ProvedRun: ...

    def wrap(self, run: ProvedRun) -> ProvedRun: ...

    def verify(self, proof: Proof, public_values: bytes, vkey: VerifyingKey) -> bool: ...


def _last_json_line(stdout: str) -> dict[str, Any]:
    for line in reversed(stdout.splitlines()):
        line = line.strip()
        if line.startswith("{"):
            return json.loads(line)
    raise ValueError("prover printed no JSON result")


def _tail(text: str | None, lines: int = 5) -> str:
    if not text:
        return ""
    return " | ".join(text.strip().splitlines()[-lines:])


class BinaryProver:
    def __init__(
        self,
        prover_path: str | Path,
        elf_path: str | Path,
        dev: bool = False,
        timeout: float | None = None,
    ):
        self.prover_path = Path(prover_path)
        self.elf_path = Path(elf_path)
        self.dev = dev
        self.timeout = timeout
        self._vkey: VerifyingKey | None = None

    @property
    def sound(self) -> bool:
        return not self.dev

    def _env(self) -> dict[str, str]:
        env = os.environ.copy()
        if self.dev:
            env["SP1_DEV"] = "1"
            env["FRI_QUERIES"] = "1"
        else:
            env.pop("SP1_DEV", None)
            env.pop("FRI_QUERIES", None)
        return env

    def _run(
        self, args: list[str], failure: type[FibProofError], check: bool = True
    ) -> subprocess.CompletedProcess:
        cmd = [str(self.prover_path), *args, "--elf", str(self.elf_path)]
        logger.debug("running %s", " ".join(cmd))
        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                check=check,
                timeout=self.timeout,
                env=self._env(),
            )
        except FileNotFoundError as err:
            raise failure(f"prover binary not found at {self.prover_path}") from err
        except subprocess.TimeoutExpired as err:
            raise ResourceExhausted(
                f"prover {args[0]} exceeded the {self.timeout}s budget", stage=failure.stage
            ) from err
        except subprocess.CalledProcessError as err:
            if err.returncode in KILLED_STATUSES:
                raise ResourceExhausted(
                    f"prover {args[0]} was killed (status {err.returncode}), likely out of memory",
                    stage=failure.stage,
                ) from err
            raise failure(
                f"prover {args[0]} exited with status {err.returncode}: {_tail(err.stderr)}"
            ) from err
        if result.returncode in KILLED_STATUSES:
            raise ResourceExhausted(
                f"prover {args[0]} was killed (status {result.returncode}), likely out of memory",
                stage=failure.stage,
            )
        return result

    def _result(self, args: list[str], failure: type[FibProofError]) -> dict[str, Any]:
        result = self._run(args, failure)
        try:
            return _last_json_line(result.stdout)
        except ValueError as err:
            raise failure(f"prover {args[0]} returned no usable result: {err}") from err

    def setup(self) -> VerifyingKey:
        if self._vkey is None:
            data = self._result(["vkey"], ProvingFailure)
            try:
                self._vkey = VerifyingKey.from_hex(data["vkey"])
            except (KeyError, ValueError) as err:
                raise ProvingFailure(f"prover returned a malformed vkey: {err}") from err
        return self._vkey

    def execute(self, guest_input: GuestInput) -> ExecutionReport:
        with tempfile.TemporaryDirectory(prefix="fibproof-") as tmp:
            stdin_path = Path(tmp) / "stdin.bin"
            stdin_path.write_bytes(guest_input.buffer)
            data = self._result(["execute", "--stdin", str(stdin_path)], ExecutionFailure)

        try:
            return ExecutionReport(
                public_values=from_hex(data["publicValues"]),
                cycles=int(data["cycles"]),
                opcode_counts=dict(data.get("opcodeCounts", {})),
                syscall_counts=dict(data.get("syscallCounts", {})),
            )
        except (KeyError, TypeError, ValueError) as err:
            raise ExecutionFailure(f"prover returned a malformed execution report: {err}") from err

    def prove(self, guest_input: GuestInput, mode: ProofMode) -> ProvedRun:
        if mode not in (ProofMode.CORE, ProofMode.COMPRESSED):
            raise ProvingFailure(f"{mode.value} proofs are produced by wrapping, not proving")
        vkey = self.setup()

        with tempfile.TemporaryDirectory(prefix="fibproof-") as tmp:
            stdin_path = Path(tmp) / "stdin.bin"
            proof_path = Path(tmp) / "proof.bin"
            stdin_path.write_bytes(guest_input.buffer)
            data = self._result(
                [
                    "prove",
                    "--stdin",
                    str(stdin_path),
                    "--mode",
                    mode.value,
                    "--out",
                    str(proof_path),
                ],
                ProvingFailure,
            )
            try:
                proof_bytes = proof_path.read_bytes()
            except OSError as err:
                raise ProvingFailure(f"prover wrote no proof: {err}") from err

        try:
            public_values = from_hex(data["publicValues"])
            proved_vkey = VerifyingKey.from_hex(data.get("vkey", vkey.bytes32()))
        except (KeyError, ValueError) as err:
            raise ProvingFailure(f"prover returned a malformed result: {err}") from err
        if proved_vkey != vkey:
            raise ProvingFailure(
                f"prover proved against {proved_vkey.bytes32()}, expected {vkey.bytes32()}"
            )
        return ProvedRun(Proof(mode, proof_bytes), public_values, vkey)

    def wrap(self, run: ProvedRun) -> ProvedRun:
        if run.proof.mode != ProofMode.COMPRESSED:
            raise WrappingFailure(f"only compressed proofs can be wrapped, got {run.proof.mode.value}")

        with tempfile.TemporaryDirectory(prefix="fibproof-") as tmp:
            in_path = Path(tmp) / "compressed.bin"
            out_path = Path(tmp) / "plonk.bin"
            in_path.write_bytes(run.proof.data)
            self._run(
                [
                    "wrap",
                    "--proof",
                    str(in_path),
                    "--public-values",
                    run.public_values.hex(),
                    "--out",
                    str(out_path),
                ],
                WrappingFailure,
            )
            try:
                wrapped = out_path.read_bytes()
            except OSError as err:
                raise WrappingFailure(f"prover wrote no plonk proof: {err}") from err

        return ProvedRun(Proof(ProofMode.PLONK, wrapped), run.public_values, run.vkey)

    def verify(self, proof: Proof, public_values: bytes, vkey: VerifyingKey) -> bool:
        """
        Run the verifier. A non-zero exit status is a rejected proof.

        Raises:
            VerificationFailure: If the verifier cannot be started.
            ResourceExhausted: If the verifier times out or is killed.
        """
        with tempfile.TemporaryDirectory(prefix="fibproof-") as tmp:
            proof_path = Path(tmp) / "proof.bin"
            proof_path.write_bytes(proof.data)
            result = self._run(
                [
                    "verify",
                    "--proof",
                    str(proof_path),
                    "--public-values",
                    public_values.hex(),
                    "--vkey",
                    vkey.bytes32(),
                    "--mode",
                    proof.mode.value,
                ],
                VerificationFailure,
                check=False,
            )
        if result.returncode != 0:
            logger.debug("verifier rejected proof: %s", _tail(result.stderr))
        return result.returncode == 0


def make_client(settings: Settings) -> ProverClient:
    """Build the prover backend selected by `settings.prover`."""
    if settings.prover == "mock":
        return MockProver.for_elf(settings.elf_path)
    return BinaryProver(
        settings.prover_path,
        settings.elf_path,
        dev=settings.dev,
        timeout=settings.timeout,
    )
