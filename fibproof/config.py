# Copyright (C) 2025 Logical Mechanism LLC
# SPDX-License-Identifier: GPL-3.0-only

"""
Driver configuration.

Loads settings from:
  1. Defaults
  2. Environment variables
  3. Explicit overrides (CLI flags) via `Settings.replace`
"""

import dataclasses
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

from fibproof.constants import (
    DEFAULT_ELF_PATH,
    DEFAULT_FIXTURE_DIR,
    DEFAULT_PROVER_PATH,
    LIMIT_RAM_GB,
)
from fibproof.errors import InvalidInput

PROVER_BACKENDS = ("local", "mock")

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"", "0", "false", "no", "off"}


def _flag(value: str, name: str) -> bool:
    v = value.strip().lower()
    if v in _TRUE:
        return True
    if v in _FALSE:
        return False
    raise InvalidInput(f"{name} must be a boolean flag, got {value!r}", stage="config")


def _number(value: str, name: str) -> float:
    try:
        number = float(value)
    except ValueError as err:
        raise InvalidInput(f"{name} must be a number, got {value!r}", stage="config") from err
    if number <= 0:
        raise InvalidInput(f"{name} must be positive, got {value!r}", stage="config")
    return number


@dataclass(frozen=True)
class Settings:
    prover: str = "local"
    prover_path: Path = Path(DEFAULT_PROVER_PATH)
    elf_path: Path = Path(DEFAULT_ELF_PATH)
    dev: bool = False
    fixture_dir: Path = Path(DEFAULT_FIXTURE_DIR)
    timeout: float | None = None
    plonk_min_ram_gb: float = LIMIT_RAM_GB

    def __post_init__(self):
        if self.prover not in PROVER_BACKENDS:
            raise InvalidInput(
                f"prover must be one of {', '.join(PROVER_BACKENDS)}, got {self.prover!r}",
                stage="config",
            )

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> "Settings":
        """
        Build settings from environment variables on top of the defaults.

        Recognised variables:
            FIBPROOF_PROVER            local | mock
            FIBPROOF_PROVER_PATH       prover host binary
            FIBPROOF_ELF               compiled guest program
            FIBPROOF_DEV / SP1_DEV     relaxed proving settings
            FIBPROOF_FIXTURE_DIR       where fixtures are written
            FIBPROOF_TIMEOUT           prover subprocess timeout in seconds
            FIBPROOF_PLONK_MIN_RAM_GB  host memory required for plonk

        Raises:
            InvalidInput: If a variable holds a malformed value.
        """
        env = os.environ if env is None else env
        kwargs: dict = {}

        if "FIBPROOF_PROVER" in env:
            kwargs["prover"] = env["FIBPROOF_PROVER"].strip().lower()
        if "FIBPROOF_PROVER_PATH" in env:
            kwargs["prover_path"] = Path(env["FIBPROOF_PROVER_PATH"])
        if "FIBPROOF_ELF" in env:
            kwargs["elf_path"] = Path(env["FIBPROOF_ELF"])
        if "FIBPROOF_FIXTURE_DIR" in env:
            kwargs["fixture_dir"] = Path(env["FIBPROOF_FIXTURE_DIR"])
        if "FIBPROOF_TIMEOUT" in env:
            kwargs["timeout"] = _number(env["FIBPROOF_TIMEOUT"], "FIBPROOF_TIMEOUT")
        if "FIBPROOF_PLONK_MIN_RAM_GB" in env:
            kwargs["plonk_min_ram_gb"] = _number(
                env["FIBPROOF_PLONK_MIN_RAM_GB"], "FIBPROOF_PLONK_MIN_RAM_GB"
            )

        # FIBPROOF_DEV wins over the SDK-level SP1_DEV when both are set
        for name in ("SP1_DEV", "FIBPROOF_DEV"):
            if name in env:
                kwargs["dev"] = _flag(env[name], name)

        return cls(**kwargs)

    def replace(self, **overrides) -> "Settings":
        """Return a copy with the non-None overrides applied."""
        changes = {k: v for k, v in overrides.items() if v is not None}
        return dataclasses.replace(self, **changes)
