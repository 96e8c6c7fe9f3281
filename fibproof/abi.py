# Copyright (C) 2025 Logical Mechanism LLC
# SPDX-License-Identifier: GPL-3.0-only

# abi.py

"""
Solidity ABI encoding of the guest's public values.

The guest commits `PublicValuesStruct::abi_encode`, with the struct declared as

    struct PublicValuesStruct {
        uint32 n;
        uint32 a;
        uint32 b;
    }

so the public values are three 32-byte big-endian words in that order. The
verifier contract decodes them with `abi.decode(publicValues, (PublicValuesStruct))`.
Field order is part of that contract.
"""

from dataclasses import dataclass

from eth_abi import decode, encode
from eth_abi.exceptions import DecodingError, EncodingError
from eth_typing import HexStr

from fibproof.constants import PUBLIC_VALUES_LENGTH, PUBLIC_VALUES_TYPES, U32_MAX
from fibproof.errors import EncodingFailure
from fibproof.fixture import Fixture
from fibproof.hashing import to_hex
from fibproof.proof import Proof, VerifyingKey


@dataclass(frozen=True)
class PublicValues:
    n: int
    a: int
    b: int

    def as_tuple(self) -> tuple[int, int, int]:
        return (self.n, self.a, self.b)


def encode_public_values(values: PublicValues) -> bytes:
    """
    ABI encode public values as `(uint32 n, uint32 a, uint32 b)`.

    Raises:
        EncodingFailure: If a field is not an integer that fits in uint32.
    """
    for name, v in zip(("n", "a", "b"), values.as_tuple()):
        if isinstance(v, bool) or not isinstance(v, int) or not 0 <= v <= U32_MAX:
            raise EncodingFailure(f"public value {name}={v!r} does not fit in uint32")
    try:
        return encode(list(PUBLIC_VALUES_TYPES), list(values.as_tuple()))
    except EncodingError as err:
        raise EncodingFailure(f"cannot ABI encode public values: {err}") from err


def decode_public_values(data: bytes) -> PublicValues:
    """
    Strictly decode ABI public values.

    Args:
        data: The raw public values the guest committed.

    Returns:
        The decoded record.

    Raises:
        EncodingFailure: If `data` is not exactly three uint32 words.
    """
    if len(data) != PUBLIC_VALUES_LENGTH:
        raise EncodingFailure(
            f"public values must be {PUBLIC_VALUES_LENGTH} bytes, got {len(data)}"
        )
    try:
        n, a, b = decode(list(PUBLIC_VALUES_TYPES), data)
    except DecodingError as err:
        raise EncodingFailure(f"public values are not (uint32,uint32,uint32): {err}") from err
    return PublicValues(n=n, a=a, b=b)


def encode_fixture(
    public_values: bytes | PublicValues,
    proof: Proof,
    vkey: VerifyingKey,
    dev: bool = False,
) -> Fixture:
    """
    Turn a verified proof into the fixture the contract tests consume.

    The public values are decoded first, both to validate their shape and to
    record `n`, `a` and `b` next to the raw encoding. The three byte fields are
    hex encoded losslessly with a `0x` prefix.

    Args:
        public_values: ABI encoded public values committed by the guest, or
            the decoded record.
        proof: The proof that was checked against `vkey`.
        vkey: The program's verifying key.
        dev: Whether the proof was produced under unsound settings.

    Returns:
        The fixture, ready for `write_fixture`.

    Raises:
        EncodingFailure: If the public values have the wrong shape.
    """
    if isinstance(public_values, PublicValues):
        public_values = encode_public_values(public_values)
    values = decode_public_values(public_values)
    return Fixture(
        mode=proof.mode,
        n=values.n,
        a=values.a,
        b=values.b,
        vkey=HexStr(vkey.bytes32()),
        public_values=HexStr(to_hex(public_values)),
        proof=HexStr(to_hex(proof.data)),
        dev=dev,
    )
