# Copyright (C) 2025 Logical Mechanism LLC
# SPDX-License-Identifier: GPL-3.0-only

import hashlib


def tagged_digest(tag: bytes, *parts: bytes) -> bytes:
    """
    Calculates a domain separated sha256 digest.

    Each part is length-prefixed (8 bytes, big-endian) so that different
    splits of the same concatenation never collide.

    Args:
        tag (bytes): Domain tag, see `fibproof.constants`.
        *parts (bytes): Byte strings to absorb in order.

    Returns:
        bytes: The 32 byte digest.
    """
    h = hashlib.sha256(tag)
    for part in parts:
        h.update(len(part).to_bytes(8, "big"))
        h.update(part)
    return h.digest()


def to_hex(data: bytes) -> str:
    return "0x" + data.hex()


def from_hex(h: str) -> bytes:
    """
    Decode a hex string with or without a `0x` prefix.

    Raises:
        ValueError: If `h` is not a string of hex digit pairs.
    """
    if not isinstance(h, str):
        raise ValueError(f"expected a hex string, got {type(h).__name__}")
    h = h.strip().lower()
    if h.startswith("0x"):
        h = h[2:]
    return bytes.fromhex(h)
