"""Scan pipeline orchestration.

This module provides the pipeline infrastructure for:
- Resolving the scan configuration and building the rule catalog
- Running rule providers (sequentially or on a thread pool)
- Accumulating and post-filtering the reported issues
"""

from balscan.pipeline.executor import AnalysisError, PipelineConfig, ScanPipeline
from balscan.pipeline.reporter import IssueReporter

__all__ = [
    "AnalysisError",
    "IssueReporter",
    "PipelineConfig",
    "ScanPipeline",
]
