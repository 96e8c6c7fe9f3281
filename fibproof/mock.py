# Copyright (C) 2025 Logical Mechanism LLC
# SPDX-License-Identifier: GPL-3.0-only

# mock.py

"""
In-process development prover.

Runs the Fibonacci program natively and emits deterministic proofs that only
commit to (mode, vkey, public values). They carry no soundness whatsoever, so
every fixture produced here is marked `dev`.

Proof layouts:

  core / compressed
      canonical CBOR map { 0 => mode, 1 => vkey digest, 2 => [commitment] }
      with one commitment per shard for core and a single one for compressed.

  plonk
      sha256(vkey)[:4] || x || y || sha256(public values)
      where (x, y) is the BN254 G1 point [s]G for s derived from the vkey and
      public values; 100 bytes regardless of the input.
"""

import hashlib
import hmac
import logging
from pathlib import Path

import cbor2
from py_ecc.optimized_bn128 import FQ, G1, b, curve_order, is_on_curve, multiply, normalize

from fibproof.abi import PublicValues, decode_public_values, encode_public_values
from fibproof.constants import (
    COMPRESSED_DOMAIN_TAG,
    CORE_DOMAIN_TAG,
    MOCK_BASE_CYCLES,
    MOCK_CYCLES_PER_STEP,
    MOCK_PROGRAM_ID,
    MOCK_SHARD_CYCLES,
    PLONK_DOMAIN_TAG,
    U32_MAX,
    VKEY_DOMAIN_TAG,
)
from fibproof.errors import (
    EncodingFailure,
    ExecutionFailure,
    InvalidInput,
    ProvingFailure,
    WrappingFailure,
)
from fibproof.hashing import tagged_digest
from fibproof.proof import ExecutionReport, Proof, ProofMode, ProvedRun, VerifyingKey
from fibproof.stdin import GuestInput, parse_input

logger = logging.getLogger(__name__)

PLONK_PROOF_LENGTH = 4 + 32 + 32 + 32


def fibonacci(n: int) -> tuple[int, int]:
    """
    Run the guest recurrence: start from (a, b) = (0, 1) and step
    (a, b) <- (b, a + b) `n` times with u32 wrapping addition.

    Uses fast doubling so any u32 `n` is cheap.

    Returns:
        (a, b) = (F(n), F(n + 1)) modulo 2**32.
    """
    a, b_ = 0, 1
    for bit in bin(n)[2:]:
        c = (a * ((2 * b_ - a) & U32_MAX)) & U32_MAX
        d = (a * a + b_ * b_) & U32_MAX
        if bit == "1":
            a, b_ = d, (c + d) & U32_MAX
        else:
            a, b_ = c, d
    return a, b_


def cycle_count(n: int) -> int:
    return MOCK_BASE_CYCLES + MOCK_CYCLES_PER_STEP * n


def shard_count(cycles: int) -> int:
    return max(1, -(-cycles // MOCK_SHARD_CYCLES))


class MockProver:
    sound = False

    def __init__(self, program: bytes = MOCK_PROGRAM_ID):
        self.program = program
        self._vkey = VerifyingKey(tagged_digest(VKEY_DOMAIN_TAG, program))

    @classmethod
    def for_elf(cls, elf_path: str | Path) -> "MockProver":
        """Key the mock to a compiled program when one is present."""
        path = Path(elf_path)
        if path.is_file():
            return cls(path.read_bytes())
        logger.debug("no program at %s, using the built-in program id", path)
        return cls()

    def setup(self) -> VerifyingKey:
        return self._vkey

    def execute(self, guest_input: GuestInput) -> ExecutionReport:
        try:
            n = parse_input(guest_input.buffer)
        except InvalidInput as err:
            raise ExecutionFailure(f"guest rejected its input: {err}") from err

        a, b_ = fibonacci(n)
        public_values = encode_public_values(PublicValues(n=n, a=a, b=b_))
        cycles = cycle_count(n)
        return ExecutionReport(
            public_values=public_values,
            cycles=cycles,
            opcode_counts={"ADD": 2 * n + 8, "BNE": n + 1, "ECALL": 4, "SW": 16, "LW": 12},
            syscall_counts={"HINT_LEN": 1, "HINT_READ": 1, "COMMIT": 1, "HALT": 1},
        )

    def prove(self, guest_input: GuestInput, mode: ProofMode) -> ProvedRun:
        if mode not in (ProofMode.CORE, ProofMode.COMPRESSED):
            raise ProvingFailure(f"{mode.value} proofs are produced by wrapping, not proving")
        try:
            report = self.execute(guest_input)
        except ExecutionFailure as err:
            raise ProvingFailure(f"execution failed while proving: {err}") from err

        data = self._envelope(mode, report.public_values, self._vkey)
        return ProvedRun(Proof(mode, data), report.public_values, self._vkey)

    def wrap(self, run: ProvedRun) -> ProvedRun:
        if run.proof.mode != ProofMode.COMPRESSED:
            raise WrappingFailure(f"only compressed proofs can be wrapped, got {run.proof.mode.value}")
        if not self.verify(run.proof, run.public_values, run.vkey):
            raise WrappingFailure("refusing to wrap a compressed proof that does not verify")
        data = self._plonk(run.public_values, run.vkey)
        return ProvedRun(Proof(ProofMode.PLONK, data), run.public_values, run.vkey)

    def verify(self, proof: Proof, public_values: bytes, vkey: VerifyingKey) -> bool:
        try:
            if proof.mode == ProofMode.PLONK:
                if not _plonk_point_on_curve(proof.data):
                    return False
                expected = self._plonk(public_values, vkey)
            else:
                expected = self._envelope(proof.mode, public_values, vkey)
        except EncodingFailure:
            return False
        return hmac.compare_digest(proof.data, expected)

    @staticmethod
    def _envelope(mode: ProofMode, public_values: bytes, vkey: VerifyingKey) -> bytes:
        values = decode_public_values(public_values)
        if mode == ProofMode.CORE:
            tag, shards = CORE_DOMAIN_TAG, shard_count(cycle_count(values.n))
        else:
            tag, shards = COMPRESSED_DOMAIN_TAG, 1
        commitments = [
            tagged_digest(tag, vkey.digest, public_values, i.to_bytes(4, "big"))
            for i in range(shards)
        ]
        return cbor2.dumps({0: mode.value, 1: vkey.digest, 2: commitments}, canonical=True)

    @staticmethod
    def _plonk(public_values: bytes, vkey: VerifyingKey) -> bytes:
        decode_public_values(public_values)
        s = int.from_bytes(tagged_digest(PLONK_DOMAIN_TAG, vkey.digest, public_values), "big")
        s = s % curve_order or 1
        x, y = normalize(multiply(G1, s))
        selector = hashlib.sha256(vkey.digest).digest()[:4]
        return (
            selector
            + x.n.to_bytes(32, "big")
            + y.n.to_bytes(32, "big")
            + hashlib.sha256(public_values).digest()
        )


def _plonk_point_on_curve(data: bytes) -> bool:
    if len(data) != PLONK_PROOF_LENGTH:
        return False
    x = FQ(int.from_bytes(data[4:36], "big"))
    y = FQ(int.from_bytes(data[36:68], "big"))
    return is_on_curve((x, y, FQ.one()), b)
