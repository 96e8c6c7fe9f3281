# Copyright (C) 2025 Logical Mechanism LLC
# SPDX-License-Identifier: GPL-3.0-only

"""
Failure categories raised by the proof driver.

Every error names the pipeline stage it came from and the process exit code
the CLI reports for it.
"""


class FibProofError(Exception):
    stage = "driver"
    exit_code = 1

    def __init__(self, message: str, stage: str | None = None):
        super().__init__(message)
        if stage is not None:
            self.stage = stage

    def __str__(self) -> str:
        return f"[{self.stage}] {super().__str__()}"


class InvalidInput(FibProofError, ValueError):
    stage = "input"
    exit_code = 2


class UnknownMode(FibProofError, ValueError):
    stage = "mode"
    exit_code = 2


class ExecutionFailure(FibProofError):
    stage = "execute"
    exit_code = 3


class ProvingFailure(FibProofError):
    stage = "prove"
    exit_code = 4


class WrappingFailure(FibProofError):
    stage = "wrap"
    exit_code = 5


class EncodingFailure(FibProofError, ValueError):
    stage = "encode"
    exit_code = 6


class VerificationFailure(FibProofError):
    stage = "verify"
    exit_code = 7


class IoFailure(FibProofError):
    stage = "write"
    exit_code = 8


class ResourceExhausted(FibProofError):
    stage = "prove"
    exit_code = 9
