# Copyright (C) 2025 Logical Mechanism LLC
# SPDX-License-Identifier: GPL-3.0-only

# resources.py

"""
Memory and wall clock sampling around the expensive prover calls.

Sampling is diagnostic only: the wrapped call's result and exceptions pass
through unchanged, and a failure to sample degrades to a warning.
"""

import functools
import logging
import os
import time
from dataclasses import dataclass
from typing import Callable, TypeVar

import psutil

logger = logging.getLogger(__name__)

T = TypeVar("T")

MB = 1024 * 1024


@dataclass(frozen=True)
class ResourceSample:
    rss: int
    cpu_seconds: float
    wall: float


@dataclass(frozen=True)
class ResourceReport:
    stage: str
    elapsed: float
    rss_before: int
    rss_after: int
    cpu_seconds: float
    ok: bool

    @property
    def rss_delta(self) -> int:
        return self.rss_after - self.rss_before


def sample() -> ResourceSample:
    """
    Sample this process.

    `cpu_seconds` includes reaped children, so a prover run as a subprocess
    is accounted for.

    Raises:
        psutil.Error: If the process cannot be inspected.
    """
    proc = psutil.Process(os.getpid())
    times = proc.cpu_times()
    cpu = times.user + times.system
    cpu += getattr(times, "children_user", 0.0) + getattr(times, "children_system", 0.0)
    return ResourceSample(rss=proc.memory_info().rss, cpu_seconds=cpu, wall=time.perf_counter())


def total_memory_gb() -> float:
    return psutil.virtual_memory().total / 1_000_000_000


def log_report(report: ResourceReport) -> None:
    logger.info(
        "%s %s in %.2fs, rss %.1f MB -> %.1f MB (%+.1f MB), cpu %.2fs",
        report.stage,
        "finished" if report.ok else "failed",
        report.elapsed,
        report.rss_before / MB,
        report.rss_after / MB,
        report.rss_delta / MB,
        report.cpu_seconds,
    )


def _try_sample(stage: str) -> ResourceSample | None:
    try:
        return sample()
    except (psutil.Error, OSError) as err:
        logger.warning("resource sampling for %s failed: %s", stage, err)
        return None


def measured(
    stage: str, sink: Callable[[ResourceReport], None] | None = None
) -> Callable[[Callable[..., T]], Callable[..., T]]:
    """
    Decorator factory that reports resource usage of each call.

    Args:
        stage: Label for the wrapped step, e.g. "prove core".
        sink: Receives one `ResourceReport` per call. Defaults to logging it.

    Returns:
        A decorator that leaves the wrapped function's behaviour unchanged.
    """
    emit = sink if sink is not None else log_report

    def decorator(fn: Callable[..., T]) -> Callable[..., T]:
        @functools.wraps(fn)
        def wrapper(*args, **kwargs) -> T:
            before = _try_sample(stage)
            ok = False
            try:
                result = fn(*args, **kwargs)
                ok = True
                return result
            finally:
                after = _try_sample(stage)
                if before is not None and after is not None:
                    report = ResourceReport(
                        stage=stage,
                        elapsed=after.wall - before.wall,
                        rss_before=before.rss,
                        rss_after=after.rss,
                        cpu_seconds=after.cpu_seconds - before.cpu_seconds,
                        ok=ok,
                    )
                    try:
                        emit(report)
                    except Exception as err:
                        logger.warning("resource report for %s was dropped: %s", stage, err)

        return wrapper

    return decorator
