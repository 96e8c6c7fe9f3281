# Copyright (C) 2025 Logical Mechanism LLC
# SPDX-License-Identifier: GPL-3.0-only
import hashlib
from dataclasses import dataclass, field
from enum import Enum

from fibproof.errors import UnknownMode
from fibproof.hashing import from_hex, to_hex


class ProofMode(str, Enum):
    CORE = "core"
    COMPRESSED = "compressed"
    PLONK = "plonk"

    @classmethod
    def parse(cls, text: "str | ProofMode") -> "ProofMode":
        if isinstance(text, cls):
            return text
        if not isinstance(text, str):
            raise UnknownMode(f"proof mode must be a string, got {type(text).__name__}")
        try:
            return cls(text.strip().lower())
        except ValueError as err:
            choices = ", ".join(m.value for m in cls)
            raise UnknownMode(f"unknown proof mode {text!r}, expected one of {choices}") from err


@dataclass(frozen=True)
class Proof:
    mode: ProofMode
    data: bytes

    @property
    def digest(self) -> str:
        return hashlib.sha256(self.data).hexdigest()

    def __len__(self) -> int:
        return len(self.data)


@dataclass(frozen=True)
class VerifyingKey:
    digest: bytes

    def __post_init__(self):
        if len(self.digest) != 32:
            raise ValueError(f"verifying key digest must be 32 bytes, got {len(self.digest)}")

    @classmethod
    def from_hex(cls, h: str) -> "VerifyingKey":
        return cls(from_hex(h))

    def bytes32(self) -> str:
        return to_hex(self.digest)


@dataclass(frozen=True)
class ProvedRun:
    """A proof together with the public values and key it was made for."""

    proof: Proof
    public_values: bytes
    vkey: VerifyingKey


@dataclass(frozen=True)
class ExecutionReport:
    public_values: bytes
    cycles: int
    opcode_counts: dict[str, int] = field(default_factory=dict)
    syscall_counts: dict[str, int] = field(default_factory=dict)


def sorted_table_lines(counts: dict[str, int]) -> list[str]:
    """Render a count table largest first, the way the SDK prints its execution report."""
    if not counts:
        return []
    width = max(len(str(v)) for v in counts.values())
    rows = sorted(counts.items(), key=lambda kv: (-kv[1], kv[0]))
    return [f"{count:>{width}} {name}" for name, count in rows]
