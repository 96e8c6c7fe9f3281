# Copyright (C) 2025 Logical Mechanism LLC
# SPDX-License-Identifier: GPL-3.0-only
import json

import pytest
from click.testing import CliRunner

from fibproof.cli import compressed_cli, core_cli, execute_cli, main, plonk_cli


@pytest.fixture(autouse=True)
def cli_env(monkeypatch, tmp_path, restore_root_logger):
    for name in (
        "FIBPROOF_PROVER",
        "FIBPROOF_PROVER_PATH",
        "FIBPROOF_ELF",
        "FIBPROOF_DEV",
        "FIBPROOF_TIMEOUT",
        "FIBPROOF_PLONK_MIN_RAM_GB",
        "FIBPROOF_LOG",
        "SP1_DEV",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("FIBPROOF_FIXTURE_DIR", str(tmp_path / "fixtures"))
    return tmp_path / "fixtures"


@pytest.fixture()
def runner() -> CliRunner:
    return CliRunner()


@pytest.mark.parametrize(
    "command, name",
    [
        (core_cli, "core-fixture.json"),
        (compressed_cli, "compressed-fixture.json"),
        (plonk_cli, "plonk-fixture.json"),
    ],
)
def test_prove_entry_points(runner, cli_env, command, name):
    result = runner.invoke(command, ["--n", "10", "--prover", "mock"])
    assert result.exit_code == 0
    path = cli_env / name
    assert str(path) in result.output

    data = json.loads(path.read_text())
    assert (data["n"], data["a"], data["b"]) == (10, 55, 89)
    assert data["dev"] is True


def test_default_n(runner, cli_env):
    result = runner.invoke(core_cli, ["--prover", "mock"])
    assert result.exit_code == 0
    data = json.loads((cli_env / "core-fixture.json").read_text())
    assert (data["n"], data["a"], data["b"]) == (20, 6765, 10946)


def test_output_option(runner, tmp_path):
    target = tmp_path / "elsewhere.json"
    result = runner.invoke(main, ["prove", "--mode", "compressed", "-o", str(target), "--prover", "mock"])
    assert result.exit_code == 0
    assert json.loads(target.read_text())["mode"] == "compressed"


def test_prover_from_env(runner, cli_env, monkeypatch):
    monkeypatch.setenv("FIBPROOF_PROVER", "mock")
    result = runner.invoke(main, ["prove", "--mode", "PLONK", "--n", "3"])
    assert result.exit_code == 0
    assert (cli_env / "plonk-fixture.json").exists()


def test_unknown_mode_exits_2(runner, cli_env):
    result = runner.invoke(main, ["prove", "--mode", "bogus", "--prover", "mock"])
    assert result.exit_code == 2
    assert not cli_env.exists()


def test_out_of_range_n_exits_2(runner, cli_env):
    result = runner.invoke(core_cli, ["--n=-1", "--prover", "mock"])
    assert result.exit_code == 2
    assert not cli_env.exists()


def test_missing_prover_binary(runner, tmp_path):
    result = runner.invoke(
        core_cli, ["--prover", "local", "--prover-path", str(tmp_path / "no-such-prover")]
    )
    assert result.exit_code == 4


def test_execute(runner, cli_env):
    for command, args in ((execute_cli, []), (main, ["execute"])):
        result = runner.invoke(command, [*args, "--n", "10", "--prover", "mock"])
        assert result.exit_code == 0
    assert not cli_env.exists()


def test_verify(runner, cli_env):
    assert runner.invoke(core_cli, ["--prover", "mock", "-q"]).exit_code == 0
    path = cli_env / "core-fixture.json"
    assert runner.invoke(main, ["verify", str(path), "--prover", "mock"]).exit_code == 0

    data = json.loads(path.read_text())
    data["b"] += 1
    path.write_text(json.dumps(data))
    assert runner.invoke(main, ["verify", str(path), "--prover", "mock"]).exit_code == 7


def test_verify_missing_file(runner, tmp_path):
    result = runner.invoke(main, ["verify", str(tmp_path / "absent.json"), "--prover", "mock"])
    assert result.exit_code == 8


if __name__ == "__main__":
    pytest.main()
