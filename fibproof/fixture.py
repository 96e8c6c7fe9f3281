# Copyright (C) 2025 Logical Mechanism LLC
# SPDX-License-Identifier: GPL-3.0-only

# fibproof/fixture.py

"""
Versioned JSON fixtures consumed by the Solidity test harness.

On disk a fixture looks like:

    {
      "a": 55,
      "b": 89,
      "dev": false,
      "mode": "core",
      "n": 10,
      "proof": "0x...",
      "publicValues": "0x...",
      "version": 1,
      "vkey": "0x..."
    }

`vkey`, `publicValues` and `proof` are the fields a verifier contract needs.
`n`, `a` and `b` are the decoded public values, kept for readability.
`dev` marks fixtures whose proof was produced under unsound settings.
"""

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from eth_typing import HexStr

from fibproof.config import Settings
from fibproof.constants import FIXTURE_VERSION
from fibproof.errors import EncodingFailure
from fibproof.files import load_json, save_json
from fibproof.hashing import from_hex
from fibproof.proof import ProofMode, VerifyingKey

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("version", "mode", "vkey", "publicValues", "proof", "n", "a", "b")


@dataclass(frozen=True)
class Fixture:
    mode: ProofMode
    n: int
    a: int
    b: int
    vkey: HexStr
    public_values: HexStr
    proof: HexStr
    dev: bool = False
    version: int = FIXTURE_VERSION

    def vkey_bytes(self) -> bytes:
        return from_hex(self.vkey)

    def public_values_bytes(self) -> bytes:
        return from_hex(self.public_values)

    def proof_bytes(self) -> bytes:
        return from_hex(self.proof)

    def verifying_key(self) -> VerifyingKey:
        return VerifyingKey(self.vkey_bytes())

    def to_json(self) -> dict[str, Any]:
        return {
            "version": self.version,
            "mode": self.mode.value,
            "dev": self.dev,
            "n": self.n,
            "a": self.a,
            "b": self.b,
            "vkey": self.vkey,
            "publicValues": self.public_values,
            "proof": self.proof,
        }

    @classmethod
    def from_json(cls, data: Any) -> "Fixture":
        """
        Rebuild a fixture from its JSON form.

        Raises:
            EncodingFailure: If the document is not a fixture of a known
                version, a hex field does not decode, or a field has the
                wrong JSON type.
            UnknownMode: If `mode` is not a known proof mode.
        """
        if not isinstance(data, dict):
            raise EncodingFailure(f"fixture must be a JSON object, got {type(data).__name__}")
        missing = [k for k in REQUIRED_FIELDS if k not in data]
        if missing:
            raise EncodingFailure(f"fixture is missing fields: {', '.join(missing)}")
        if data["version"] != FIXTURE_VERSION:
            raise EncodingFailure(
                f"unsupported fixture version {data['version']!r}, expected {FIXTURE_VERSION}"
            )
        for key in ("vkey", "publicValues", "proof"):
            try:
                from_hex(data[key])
            except ValueError as err:
                raise EncodingFailure(f"fixture field {key!r} is not hex: {err}") from err
        if len(from_hex(data["vkey"])) != 32:
            raise EncodingFailure("fixture field 'vkey' must be a bytes32 digest")

        mode = ProofMode.parse(data["mode"])
        for key in ("n", "a", "b"):
            if isinstance(data[key], bool) or not isinstance(data[key], int):
                raise EncodingFailure(
                    f"fixture field {key!r} must be an integer, got {data[key]!r}"
                )
        dev = data.get("dev", False)
        if not isinstance(dev, bool):
            raise EncodingFailure(f"fixture field 'dev' must be a boolean, got {dev!r}")

        return cls(
            mode=mode,
            n=data["n"],
            a=data["a"],
            b=data["b"],
            vkey=HexStr(data["vkey"]),
            public_values=HexStr(data["publicValues"]),
            proof=HexStr(data["proof"]),
            dev=dev,
            version=data["version"],
        )


def default_fixture_path(settings: Settings, mode: ProofMode) -> Path:
    return Path(settings.fixture_dir) / f"{mode.value}-fixture.json"


def write_fixture(fixture: Fixture, path: str | Path) -> Path:
    path = Path(path)
    save_json(path, fixture.to_json())
    logger.info("wrote %s fixture to %s", fixture.mode.value, path)
    return path


def read_fixture(path: str | Path) -> Fixture:
    try:
        data = load_json(path)
    except json.JSONDecodeError as err:
        raise EncodingFailure(f"{path} is not valid JSON: {err}", stage="read") from err
    return Fixture.from_json(data)
