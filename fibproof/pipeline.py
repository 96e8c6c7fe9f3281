# Copyright (C) 2025 Logical Mechanism LLC
# SPDX-License-Identifier: GPL-3.0-only
import logging
from pathlib import Path

from fibproof.abi import PublicValues, decode_public_values, encode_fixture
from fibproof.config import Settings
from fibproof.errors import VerificationFailure
from fibproof.fixture import Fixture, default_fixture_path, read_fixture, write_fixture
from fibproof.modes import Sink, log_execution_report, select
from fibproof.proof import ExecutionReport, Proof, ProofMode
from fibproof.prover import ProverClient
from fibproof.stdin import build_input

logger = logging.getLogger(__name__)


def execute(n: int, client: ProverClient) -> tuple[ExecutionReport, PublicValues]:
    """
    Run the guest without proving, for fast feedback.

    Args:
        n: Number of Fibonacci steps.
        client: Prover backend.

    Returns:
        The execution report and its decoded public values.

    Raises:
        InvalidInput: If `n` does not fit the guest input.
        ExecutionFailure: If the guest fails.
        EncodingFailure: If the guest's output has the wrong shape.
    """
    guest_input = build_input(n)
    report = client.execute(guest_input)
    values = decode_public_values(report.public_values)
    logger.info("program executed successfully")
    logger.info("n: %d", values.n)
    logger.info("a: %d", values.a)
    logger.info("b: %d", values.b)
    log_execution_report(report)
    return report, values


def prove(
    n: int,
    mode: "str | ProofMode",
    client: ProverClient,
    settings: Settings,
    output: str | Path | None = None,
    sink: Sink = None,
) -> tuple[Fixture, Path]:
    """
    Prove the Fibonacci program for `n` and export a verified fixture.

    Stages run in this order, each failing with its own error category:
    mode selection, input building, proving (and wrapping for plonk),
    independent verification, ABI encoding, atomic write.

    The fixture is only written after the proof verifies against the
    verifying key; a rejected proof never reaches the filesystem.

    Args:
        n: Number of Fibonacci steps.
        mode: `core`, `compressed` or `plonk`.
        client: Prover backend.
        settings: Driver settings, used for the plonk memory guard and the
            default fixture location.
        output: Fixture path. Defaults to `<fixture_dir>/<mode>-fixture.json`.
        sink: Optional receiver for resource reports.

    Returns:
        The fixture and the path it was written to.

    Raises:
        UnknownMode, InvalidInput, ProvingFailure, WrappingFailure,
        ResourceExhausted, VerificationFailure, EncodingFailure, IoFailure.
    """
    proof_mode, strategy = select(mode)
    guest_input = build_input(n)
    logger.info("proving n=%d in %s mode", n, proof_mode.value)

    run = strategy(client, guest_input, settings, sink)

    if not client.verify(run.proof, run.public_values, run.vkey):
        raise VerificationFailure(
            f"{proof_mode.value} proof {run.proof.digest[:16]} does not verify against "
            f"{run.vkey.bytes32()}, fixture not written"
        )
    logger.info("successfully verified proof")

    dev = not client.sound
    if dev:
        logger.warning("proof was produced under development settings, fixture is marked dev")
    fixture = encode_fixture(run.public_values, run.proof, run.vkey, dev=dev)

    path = Path(output) if output is not None else default_fixture_path(settings, proof_mode)
    write_fixture(fixture, path)
    return fixture, path


def verify_fixture(path: str | Path, client: ProverClient) -> Fixture:
    """
    Re-check a persisted fixture against the prover's verifier.

    Also checks that the readable `n`, `a`, `b` fields agree with the ABI
    encoded public values.

    Raises:
        IoFailure: If the file cannot be read.
        EncodingFailure: If the file is not a well-formed fixture.
        VerificationFailure: If the proof does not verify, the fields disagree,
            or the fixture was made for another program.
    """
    fixture = read_fixture(path)
    public_values = fixture.public_values_bytes()
    values = decode_public_values(public_values)
    if (values.n, values.a, values.b) != (fixture.n, fixture.a, fixture.b):
        raise VerificationFailure(
            f"{path}: n/a/b fields do not match the encoded public values"
        )

    vkey = client.setup()
    if fixture.verifying_key() != vkey:
        raise VerificationFailure(
            f"{path}: fixture vkey {fixture.vkey} is not the program vkey {vkey.bytes32()}"
        )

    proof = Proof(fixture.mode, fixture.proof_bytes())
    if not client.verify(proof, public_values, vkey):
        raise VerificationFailure(f"{path}: {fixture.mode.value} proof does not verify")
    if fixture.dev:
        logger.warning("%s was produced under development settings", path)
    logger.info("fixture %s verified", path)
    return fixture
