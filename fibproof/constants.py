# Copyright (C) 2025 Logical Mechanism LLC
# SPDX-License-Identifier: GPL-3.0-only

# domain tags
VKEY_DOMAIN_TAG = "FIB|VKEY|v1|".encode("utf-8")
CORE_DOMAIN_TAG = "FIB|CORE|PROOF|v1|".encode("utf-8")
COMPRESSED_DOMAIN_TAG = "FIB|COMPRESSED|PROOF|v1|".encode("utf-8")
PLONK_DOMAIN_TAG = "FIB|PLONK|BN254|v1|".encode("utf-8")

# guest boundary
U32_MAX = 2**32 - 1
STDIN_WIDTH = 4
PUBLIC_VALUES_TYPES = ("uint32", "uint32", "uint32")
PUBLIC_VALUES_LENGTH = 32 * len(PUBLIC_VALUES_TYPES)

# fixture format
FIXTURE_VERSION = 1

# cli defaults
DEFAULT_N = 20
DEFAULT_PROVER_PATH = "prover/sp1-prover"
DEFAULT_ELF_PATH = "program/elf/riscv32im-succinct-zkvm-elf"
DEFAULT_FIXTURE_DIR = "fixtures"

# plonk wrapping needs more than this much host memory (GB)
LIMIT_RAM_GB = 120
HIGH_CYCLE_THRESHOLD = 100_000_000

# mock backend
MOCK_PROGRAM_ID = "fibonacci-program".encode("utf-8")
MOCK_SHARD_CYCLES = 1 << 22
MOCK_BASE_CYCLES = 1_024
MOCK_CYCLES_PER_STEP = 8
