# Copyright (C) 2025 Logical Mechanism LLC
# SPDX-License-Identifier: GPL-3.0-only

"""
Command line entry points.

    fibonacci-execute      --n 20
    fibonacci-core         --n 20 [--output PATH]
    fibonacci-compressed   --n 20 [--output PATH]
    fibonacci-plonk        --n 20 [--output PATH]
    fibonacci prove --mode core|compressed|plonk ...
    fibonacci execute ...
    fibonacci verify PATH

Every failure exits with the status of its error category, see
`fibproof.errors`.
"""

import logging
from pathlib import Path
from typing import Callable

import click

from fibproof import pipeline
from fibproof.config import PROVER_BACKENDS, Settings
from fibproof.constants import DEFAULT_N
from fibproof.errors import FibProofError
from fibproof.log import setup_logger
from fibproof.proof import ProofMode
from fibproof.prover import make_client

logger = logging.getLogger(__name__)


BACKEND_OPTIONS = [
    click.option("--prover", type=click.Choice(PROVER_BACKENDS), default=None,
                 help="Prover backend [env: FIBPROOF_PROVER, default: local]"),
    click.option("--prover-path", type=click.Path(path_type=Path), default=None,
                 help="Prover host binary [env: FIBPROOF_PROVER_PATH]"),
    click.option("--elf", "elf_path", type=click.Path(path_type=Path), default=None,
                 help="Compiled guest program [env: FIBPROOF_ELF]"),
    click.option("--dev/--no-dev", default=None,
                 help="Relaxed proving settings, fixtures are marked dev [env: FIBPROOF_DEV]"),
    click.option("-v", "--verbose", count=True, help="More logging, repeatable"),
    click.option("-q", "--quiet", is_flag=True, help="Only log warnings and errors"),
]


def backend_options(fn: Callable) -> Callable:
    for option in reversed(BACKEND_OPTIONS):
        fn = option(fn)
    return fn


n_option = click.option("--n", "n", type=int, default=DEFAULT_N, show_default=True,
                        help="Number of Fibonacci steps the guest runs")
output_option = click.option("--output", "-o", type=click.Path(path_type=Path), default=None,
                             help="Fixture path [default: <fixture dir>/<mode>-fixture.json]")


def _settings(prover, prover_path, elf_path, dev) -> Settings:
    return Settings.from_env().replace(
        prover=prover, prover_path=prover_path, elf_path=elf_path, dev=dev
    )


def _guarded(body: Callable[[], None]) -> None:
    try:
        body()
    except FibProofError as err:
        logger.error("%s failed: %s", err.stage, err)
        raise SystemExit(err.exit_code)


def _execute(n, prover, prover_path, elf_path, dev, verbose, quiet) -> None:
    setup_logger(-1 if quiet else verbose)

    def body():
        client = make_client(_settings(prover, prover_path, elf_path, dev))
        pipeline.execute(n, client)

    _guarded(body)


def _prove(mode, n, output, prover, prover_path, elf_path, dev, verbose, quiet) -> None:
    setup_logger(-1 if quiet else verbose)

    def body():
        settings = _settings(prover, prover_path, elf_path, dev)
        client = make_client(settings)
        _, path = pipeline.prove(n, mode, client, settings, output=output)
        click.echo(str(path))

    _guarded(body)


@click.command("fibonacci-execute")
@n_option
@backend_options
def execute_cli(n, prover, prover_path, elf_path, dev, verbose, quiet):
    """Execute the Fibonacci program without generating a proof."""
    _execute(n, prover, prover_path, elf_path, dev, verbose, quiet)


def _prove_command(mode: ProofMode) -> click.Command:
    @click.command(f"fibonacci-{mode.value}")
    @n_option
    @output_option
    @backend_options
    def command(n, output, prover, prover_path, elf_path, dev, verbose, quiet):
        _prove(mode, n, output, prover, prover_path, elf_path, dev, verbose, quiet)

    command.help = f"Generate a {mode.value} proof and write its fixture."
    return command


core_cli = _prove_command(ProofMode.CORE)
compressed_cli = _prove_command(ProofMode.COMPRESSED)
plonk_cli = _prove_command(ProofMode.PLONK)


@click.group("fibonacci")
def main():
    """Prove the Fibonacci program and export verifier fixtures."""


@main.command("prove")
@click.option("--mode", default=ProofMode.CORE.value, show_default=True,
              help="Proof mode: core, compressed or plonk")
@n_option
@output_option
@backend_options
def prove_command(mode, n, output, prover, prover_path, elf_path, dev, verbose, quiet):
    """Generate a proof in the given mode and write its fixture."""
    _prove(mode, n, output, prover, prover_path, elf_path, dev, verbose, quiet)


@main.command("execute")
@n_option
@backend_options
def execute_command(n, prover, prover_path, elf_path, dev, verbose, quiet):
    """Execute the Fibonacci program without generating a proof."""
    _execute(n, prover, prover_path, elf_path, dev, verbose, quiet)


@main.command("verify")
@click.argument("fixture", type=click.Path(path_type=Path))
@backend_options
def verify_command(fixture, prover, prover_path, elf_path, dev, verbose, quiet):
    """Re-check the proof stored in a fixture file."""
    setup_logger(-1 if quiet else verbose)

    def body():
        client = make_client(_settings(prover, prover_path, elf_path, dev))
        pipeline.verify_fixture(fixture, client)

    _guarded(body)


if __name__ == "__main__":
    main()
