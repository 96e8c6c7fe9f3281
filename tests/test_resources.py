# Copyright (C) 2025 Logical Mechanism LLC
# SPDX-License-Identifier: GPL-3.0-only
import logging

import psutil
import pytest

import fibproof.resources as resources_mod
from fibproof.resources import ResourceReport, measured, sample, total_memory_gb


def test_sample_reads_this_process():
    s = sample()
    assert s.rss > 0
    assert s.cpu_seconds >= 0
    assert total_memory_gb() > 0


def test_measured_passes_result_through():
    reports = []

    @measured("prove core", reports.append)
    def prove(x, y=1):
        return x + y

    assert prove(2, y=3) == 5
    assert len(reports) == 1
    report = reports[0]
    assert isinstance(report, ResourceReport)
    assert report.stage == "prove core"
    assert report.ok
    assert report.elapsed >= 0
    assert report.rss_delta == report.rss_after - report.rss_before


def test_measured_passes_exceptions_through():
    reports = []

    @measured("prove core", reports.append)
    def prove():
        raise RuntimeError("boom")

    with pytest.raises(RuntimeError, match="boom"):
        prove()
    assert [r.ok for r in reports] == [False]


def test_sampling_failure_is_only_a_warning(monkeypatch, caplog):
    def broken():
        raise psutil.AccessDenied()

    monkeypatch.setattr(resources_mod, "sample", broken)
    reports = []

    with caplog.at_level(logging.WARNING, logger="fibproof.resources"):
        result = measured("prove compressed", reports.append)(lambda: "proof")()

    assert result == "proof"
    assert reports == []
    assert "resource sampling for prove compressed failed" in caplog.text


def test_broken_sink_does_not_mask_result(caplog):
    def sink(report):
        raise ValueError("sink is full")

    with caplog.at_level(logging.WARNING, logger="fibproof.resources"):
        assert measured("wrap plonk", sink)(lambda: 42)() == 42
    assert "dropped" in caplog.text


def test_default_sink_logs(caplog):
    with caplog.at_level(logging.INFO, logger="fibproof.resources"):
        measured("prove core")(lambda: None)()
    assert "prove core finished" in caplog.text


if __name__ == "__main__":
    pytest.main()
