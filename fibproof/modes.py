# Copyright (C) 2025 Logical Mechanism LLC
# SPDX-License-Identifier: GPL-3.0-only

# modes.py

"""
Proof mode strategies.

A mode is resolved to its strategy once, before any proving work starts:

    core        prove(core)
    compressed  prove(compressed)
    plonk       prove(compressed) -> wrap

Each prover call is made at most once and is wrapped by the resource reporter.
"""

import logging
from typing import Callable

import psutil

from fibproof.config import Settings
from fibproof.constants import HIGH_CYCLE_THRESHOLD
from fibproof.errors import FibProofError, ResourceExhausted, WrappingFailure
from fibproof.proof import ExecutionReport, ProofMode, ProvedRun, sorted_table_lines
from fibproof.prover import ProverClient
from fibproof.resources import ResourceReport, measured, total_memory_gb
from fibproof.stdin import GuestInput

logger = logging.getLogger(__name__)

Sink = Callable[[ResourceReport], None] | None
Strategy = Callable[[ProverClient, GuestInput, Settings, Sink], ProvedRun]


def check_for_high_cycles(cycles: int) -> None:
    if cycles > HIGH_CYCLE_THRESHOLD:
        logger.warning(
            "high cycle count (%d), proving will take a long time and a lot of memory", cycles
        )


def log_execution_report(report: ExecutionReport) -> None:
    logger.info("execution report (totals): total_cycles=%d", report.cycles)
    if report.opcode_counts:
        logger.debug("execution report (opcode counts):")
        for line in sorted_table_lines(report.opcode_counts):
            logger.debug("  %s", line)
    if report.syscall_counts:
        logger.debug("execution report (syscall counts):")
        for line in sorted_table_lines(report.syscall_counts):
            logger.debug("  %s", line)
    check_for_high_cycles(report.cycles)


def _prove_once(
    client: ProverClient, guest_input: GuestInput, mode: ProofMode, sink: Sink
) -> ProvedRun:
    prove = measured(f"prove {mode.value}", sink)(client.prove)
    run = prove(guest_input, mode)
    logger.info("generated %s proof (%d bytes)", mode.value, len(run.proof))
    return run


def prove_core(
    client: ProverClient, guest_input: GuestInput, settings: Settings, sink: Sink = None
) -> ProvedRun:
    return _prove_once(client, guest_input, ProofMode.CORE, sink)


def prove_compressed(
    client: ProverClient, guest_input: GuestInput, settings: Settings, sink: Sink = None
) -> ProvedRun:
    return _prove_once(client, guest_input, ProofMode.COMPRESSED, sink)


def ensure_plonk_memory(client: ProverClient, settings: Settings) -> None:
    """
    Refuse to start a plonk run on a host that cannot finish it.

    Unsound clients skip the check. If memory cannot be sampled the run goes
    ahead with a warning.

    Raises:
        ResourceExhausted: If total memory is at or below
            `settings.plonk_min_ram_gb`.
    """
    if not client.sound:
        return
    try:
        total = total_memory_gb()
    except (psutil.Error, OSError) as err:
        logger.warning("cannot read total memory, skipping plonk memory check: %s", err)
        return
    if total <= settings.plonk_min_ram_gb:
        raise ResourceExhausted(
            f"not enough memory to generate plonk proof: {total:.0f}GB available, "
            f"more than {settings.plonk_min_ram_gb:.0f}GB required"
        )


def prove_plonk(
    client: ProverClient, guest_input: GuestInput, settings: Settings, sink: Sink = None
) -> ProvedRun:
    ensure_plonk_memory(client, settings)
    compressed = _prove_once(client, guest_input, ProofMode.COMPRESSED, sink)

    wrap = measured("wrap plonk", sink)(client.wrap)
    try:
        run = wrap(compressed)
    except (WrappingFailure, ResourceExhausted):
        raise
    except FibProofError as err:
        raise WrappingFailure(f"plonk wrapping failed: {err}") from err
    logger.info("wrapped into plonk proof (%d bytes)", len(run.proof))
    return run


STRATEGIES: dict[ProofMode, Strategy] = {
    ProofMode.CORE: prove_core,
    ProofMode.COMPRESSED: prove_compressed,
    ProofMode.PLONK: prove_plonk,
}


def select(mode: "str | ProofMode") -> tuple[ProofMode, Strategy]:
    """
    Resolve a mode flag to its strategy.

    Raises:
        UnknownMode: If `mode` names no proof mode. No prover call has been
            made at that point.
    """
    parsed = ProofMode.parse(mode)
    return parsed, STRATEGIES[parsed]
