#!/usr/bin/env python3

# Copyright (C) 2025 Logical Mechanism LLC
# SPDX-License-Identifier: GPL-3.0-only

"""
Generate public-values-vectors.json for the Solidity decoding tests.

Each vector pins the guest stdin bytes for `n` and the ABI encoded public
values the guest commits for it.

Run from the repository root:
    PYTHONPATH=. python test-vectors/generate_vectors.py
"""

import json
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))
from fibproof.abi import PublicValues, encode_public_values
from fibproof.mock import fibonacci
from fibproof.stdin import build_input


def make_vector(name: str, n: int) -> dict:
    a, b = fibonacci(n)
    public_values = encode_public_values(PublicValues(n=n, a=a, b=b))
    return {
        "name": name,
        "n": n,
        "a": a,
        "b": b,
        "stdin_hex": build_input(n).hex(),
        "public_values_hex": public_values.hex(),
    }


vectors = [
    make_vector("zero", 0),
    make_vector("one", 1),
    make_vector("ten", 10),
    make_vector("default-twenty", 20),
    make_vector("wrapping-b", 47),
]

out_path = Path(__file__).resolve().parent / "public-values-vectors.json"
out_path.write_text(json.dumps(vectors, indent=2) + "\n")
print(f"Wrote {len(vectors)} vectors to {out_path}")
