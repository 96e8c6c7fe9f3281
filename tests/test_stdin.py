# Copyright (C) 2025 Logical Mechanism LLC
# SPDX-License-Identifier: GPL-3.0-only
import pytest

from fibproof.errors import InvalidInput
from fibproof.stdin import GuestInput, build_input, parse_input


def test_build_input_is_little_endian_u32():
    assert build_input(10).buffer == b"\x0a\x00\x00\x00"
    assert build_input(0x01020304).buffer == b"\x04\x03\x02\x01"


@pytest.mark.parametrize("n", [0, 1, 10, 20, 2**31, 2**32 - 1])
def test_build_input_is_deterministic(n):
    assert build_input(n) == build_input(n)
    assert build_input(n).buffer == build_input(n).buffer
    assert build_input(n).n == n


def test_guest_input_is_immutable():
    guest_input = build_input(5)
    with pytest.raises(AttributeError):
        guest_input.buffer = b"\x06\x00\x00\x00"


@pytest.mark.parametrize("n", [-1, 2**32, 2**64])
def test_build_input_rejects_out_of_range(n):
    with pytest.raises(InvalidInput, match="u32"):
        build_input(n)


@pytest.mark.parametrize("n", [True, 1.0, "10", None])
def test_build_input_rejects_non_integers(n):
    with pytest.raises(InvalidInput):
        build_input(n)


def test_matches_vectors(vectors):
    for vector in vectors:
        assert build_input(vector["n"]).hex() == vector["stdin_hex"]


def test_parse_input():
    assert parse_input(build_input(20).buffer) == 20
    with pytest.raises(InvalidInput, match="4 bytes"):
        parse_input(b"\x01\x00")


def test_guest_input_hex():
    assert GuestInput(b"\x14\x00\x00\x00").hex() == "14000000"


if __name__ == "__main__":
    pytest.main()
