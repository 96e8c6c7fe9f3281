# Copyright (C) 2025 Logical Mechanism LLC
# SPDX-License-Identifier: GPL-3.0-only

# fibproof/stdin.py

from dataclasses import dataclass

from fibproof.constants import STDIN_WIDTH, U32_MAX
from fibproof.errors import InvalidInput


@dataclass(frozen=True)
class GuestInput:
    buffer: bytes

    @property
    def n(self) -> int:
        return int.from_bytes(self.buffer, "little")

    def hex(self) -> str:
        return self.buffer.hex()


def build_input(n: int) -> GuestInput:
    """
    Build the stdin buffer the Fibonacci guest reads.

    The guest calls `sp1_zkvm::io::read::<u32>()`, so the buffer is the bincode
    encoding of a `u32`: four bytes, little-endian. The encoding is canonical,
    equal `n` always gives equal bytes.

    Args:
        n: Number of Fibonacci steps the guest runs.

    Returns:
        The immutable guest input.

    Raises:
        InvalidInput: If `n` is not an integer in `[0, 2**32 - 1]`.
    """
    if isinstance(n, bool) or not isinstance(n, int):
        raise InvalidInput(f"n must be an unsigned integer, got {type(n).__name__}")
    if n < 0 or n > U32_MAX:
        raise InvalidInput(f"n must fit in u32, got {n}")
    return GuestInput(n.to_bytes(STDIN_WIDTH, "little"))


def parse_input(buffer: bytes) -> int:
    """Decode a guest stdin buffer, rejecting anything but a bincode u32."""
    if len(buffer) != STDIN_WIDTH:
        raise InvalidInput(f"guest input must be {STDIN_WIDTH} bytes, got {len(buffer)}")
    return int.from_bytes(buffer, "little")
