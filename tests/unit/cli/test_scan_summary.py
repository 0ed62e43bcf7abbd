"""Tests for the scan summary log."""

from __future__ import annotations

import logging
from pathlib import Path

from balscan.cli.commands.scan import log_scan_summary
from balscan.core.models import (
    Issue,
    LineRange,
    Location,
    ProviderRun,
    Rule,
    RuleKind,
    ScanResult,
    Source,
)


def _issue() -> Issue:
    return Issue(
        rule=Rule(1, "Avoid checkpanic", RuleKind.CODE_SMELL),
        source=Source.BUILT_IN,
        location=Location("main.bal", Path("main.bal"), LineRange.of(1, 0, 1, 10)),
    )


class TestLogScanSummary:
    """Tests for log_scan_summary."""

    def test_provider_runs_and_totals_logged(self, caplog) -> None:
        result = ScanResult(
            issues=(_issue(), _issue()),
            provider_runs=[ProviderRun("ballerina", Source.BUILT_IN, rules_run=2, issues_found=2)],
            metadata={"project_name": "demo", "duration_ms": 12, "balscan_version": "0.1.0"},
        )

        with caplog.at_level(logging.DEBUG, logger="balscan.cli.commands.scan"):
            log_scan_summary(result)

        messages = [record.getMessage() for record in caplog.records]
        assert "ballerina: ran 2 rule(s), 2 issue(s) reported" in messages
        assert "Total issues: 2 (BUILT_IN=2)" in messages
        assert "Scan of demo took 12ms (balscan 0.1.0)" in messages

    def test_no_issues(self, caplog) -> None:
        with caplog.at_level(logging.INFO, logger="balscan.cli.commands.scan"):
            log_scan_summary(ScanResult())

        assert [record.getMessage() for record in caplog.records] == ["Total issues: 0 (none)"]
