# Copyright (C) 2025 Logical Mechanism LLC
# SPDX-License-Identifier: GPL-3.0-only
import logging
from pathlib import Path

import pytest

from fibproof.config import Settings
from fibproof.constants import LIMIT_RAM_GB
from fibproof.errors import InvalidInput
from fibproof.log import setup_logger, verbosity_to_level


def test_defaults():
    settings = Settings.from_env({})
    assert settings == Settings()
    assert settings.prover == "local"
    assert settings.dev is False
    assert settings.timeout is None
    assert settings.plonk_min_ram_gb == LIMIT_RAM_GB


def test_from_env():
    settings = Settings.from_env(
        {
            "FIBPROOF_PROVER": " Mock ",
            "FIBPROOF_PROVER_PATH": "/opt/sp1/prover",
            "FIBPROOF_ELF": "/opt/sp1/fib.elf",
            "FIBPROOF_FIXTURE_DIR": "out",
            "FIBPROOF_TIMEOUT": "600",
            "FIBPROOF_PLONK_MIN_RAM_GB": "64",
        }
    )
    assert settings.prover == "mock"
    assert settings.prover_path == Path("/opt/sp1/prover")
    assert settings.elf_path == Path("/opt/sp1/fib.elf")
    assert settings.fixture_dir == Path("out")
    assert settings.timeout == 600.0
    assert settings.plonk_min_ram_gb == 64.0


@pytest.mark.parametrize(
    "env, dev",
    [
        ({"SP1_DEV": "1"}, True),
        ({"SP1_DEV": "true"}, True),
        ({"FIBPROOF_DEV": "yes"}, True),
        ({"SP1_DEV": "0"}, False),
        ({"SP1_DEV": "1", "FIBPROOF_DEV": "0"}, False),
        ({"SP1_DEV": "0", "FIBPROOF_DEV": "on"}, True),
    ],
)
def test_dev_flags(env, dev):
    assert Settings.from_env(env).dev is dev


@pytest.mark.parametrize(
    "env",
    [
        {"FIBPROOF_PROVER": "cuda"},
        {"FIBPROOF_DEV": "maybe"},
        {"FIBPROOF_TIMEOUT": "soon"},
        {"FIBPROOF_TIMEOUT": "-5"},
        {"FIBPROOF_PLONK_MIN_RAM_GB": "0"},
    ],
)
def test_malformed_env(env):
    with pytest.raises(InvalidInput) as info:
        Settings.from_env(env)
    assert info.value.stage == "config"


def test_replace_ignores_unset_overrides():
    base = Settings.from_env({"FIBPROOF_DEV": "1"})
    assert base.replace(prover=None, dev=None) == base
    assert base.replace(dev=False).dev is False
    assert base.replace(prover="mock").prover == "mock"


def test_replace_validates():
    with pytest.raises(InvalidInput):
        Settings().replace(prover="remote")


def test_verbosity_to_level():
    assert verbosity_to_level(-1) == logging.WARNING
    assert verbosity_to_level(0) == logging.INFO
    assert verbosity_to_level(2) == logging.DEBUG


def test_log_env_override(monkeypatch, restore_root_logger):
    monkeypatch.setenv("FIBPROOF_LOG", "warning")
    setup_logger(2)
    assert restore_root_logger.level == logging.WARNING

    monkeypatch.setenv("FIBPROOF_LOG", "chatty")
    setup_logger(0)
    assert restore_root_logger.level == logging.INFO


if __name__ == "__main__":
    pytest.main()
