"""Pipeline executor for orchestrating scan stages."""

from __future__ import annotations

from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Optional, Sequence, Tuple

from balscan.bootstrap.cache import ArtifactCache
from balscan.config.loader import ConfigResolver
from balscan.config.models import ScanConfiguration
from balscan.core.logging import get_logger
from balscan.core.models import Issue, ProviderRun, Rule, ScanResult, Source
from balscan.core.project import Project
from balscan.core.streaming import NullStreamHandler, StreamHandler
from balscan.pipeline.reporter import IssueReporter
from balscan.plugins.analyzers import AnalyzerLoader
from balscan.rules.base import RuleProvider
from balscan.rules.catalog import ProviderRuleSet, RuleCatalog
from balscan.rules.filter import RuleFilter

LOGGER = get_logger(__name__)

# Providers run one at a time unless more workers are requested
DEFAULT_MAX_WORKERS = 1

_STAGE = "analysis"


class AnalysisError(Exception):
    """A rule provider failed or returned inconsistent issues."""

    pass


@dataclass
class PipelineConfig:
    """Configuration for pipeline execution."""

    max_workers: int = DEFAULT_MAX_WORKERS
    include_rules: List[str] = field(default_factory=list)
    exclude_rules: List[str] = field(default_factory=list)


@dataclass
class _ProviderOutcome:
    rule_set: ProviderRuleSet
    source: Source
    rules_run: int
    issues: List[Issue]


class ScanPipeline:
    """Orchestrates the scan stages.

    Pipeline stages:
    1. Configuration resolution (local or cached remote Scan.toml)
    2. Rule catalog construction (core rules, then configured analyzers)
    3. Provider execution on the pre-filtered rules
    4. Post-filtering of the recorded issues

    Report generation and platform dispatch are handled by the CLI.
    """

    def __init__(
        self,
        project: Project,
        pipeline_config: Optional[PipelineConfig] = None,
        cache: Optional[ArtifactCache] = None,
        analyzer_loader: Optional[AnalyzerLoader] = None,
        core_provider: Optional[RuleProvider] = None,
        stream_handler: Optional[StreamHandler] = None,
        balscan_version: str = "unknown",
    ) -> None:
        """Initialize the pipeline.

        Args:
            project: Project to scan.
            pipeline_config: Optional pipeline-specific configuration.
            cache: Artifact cache; defaults to one in the project's target dir.
            analyzer_loader: Resolves configured analyzers to providers.
            core_provider: Override for the built-in rule provider.
            stream_handler: Sink for user-facing progress messages.
            balscan_version: Version string for metadata.
        """
        self._project = project
        self._pipeline_config = pipeline_config or PipelineConfig()
        self._stream = stream_handler or NullStreamHandler()
        self._cache = cache or ArtifactCache(project.target_dir, stream_handler=self._stream)
        self._analyzer_loader = analyzer_loader or AnalyzerLoader()
        self._core_provider = core_provider
        self._balscan_version = balscan_version

    def resolve_configuration(self) -> ScanConfiguration:
        """Resolve Scan.toml and merge the command line rule filters into it."""
        config = ConfigResolver(self._project, self._cache, self._stream).resolve()
        return config.with_rule_filters(
            include=self._pipeline_config.include_rules,
            exclude=self._pipeline_config.exclude_rules,
        )

    def build_catalog(self, config: ScanConfiguration) -> RuleCatalog:
        """Create the rule catalog for a resolved configuration."""
        catalog = RuleCatalog(self._core_provider)
        if config.analyzers:
            self._stream.status(_STAGE, f"Loading {len(config.analyzers)} external analyzer(s)...")
        catalog.resolve_external(config.analyzers, self._analyzer_loader)
        return catalog

    def execute(self, config: Optional[ScanConfiguration] = None) -> ScanResult:
        """Execute the full pipeline and return results.

        Args:
            config: Already resolved configuration; resolved when omitted.

        Returns:
            ScanResult with the final, filtered issues.

        Raises:
            ConfigError: If the configuration or an analyzer cannot be loaded.
            ArtifactDownloadError: If a remote artifact cannot be downloaded.
            RuleIntegrityError: If a provider declares an inconsistent rule set.
            AnalysisError: If a provider fails during analysis.
        """
        start_time = datetime.now(timezone.utc)

        if config is None:
            config = self.resolve_configuration()
        catalog = self.build_catalog(config)
        catalog.freeze()

        rule_filter = RuleFilter.from_config(config)
        LOGGER.debug(f"Rule filter: {rule_filter!r}")

        # Stage 3: Provider execution
        reporter = IssueReporter()
        outcomes = self._run_providers(catalog, rule_filter)
        for outcome in outcomes:
            reporter.record_all(outcome.issues)
        recorded = reporter.freeze()

        # Stage 4: Post-filtering
        final_issues = tuple(rule_filter.filter_issues(recorded))
        if len(final_issues) != len(recorded):
            LOGGER.debug(f"Filtered out {len(recorded) - len(final_issues)} issue(s)")

        end_time = datetime.now(timezone.utc)
        duration_ms = int((end_time - start_time).total_seconds() * 1000)

        result = ScanResult(
            issues=final_issues,
            rules=tuple(rule_filter.filter_rules(catalog.rules())),
            configuration=config,
            provider_runs=[self._provider_run(outcome, rule_filter) for outcome in outcomes],
        )
        result.metadata = {
            "balscan_version": self._balscan_version,
            "scan_started_at": start_time.isoformat(),
            "scan_finished_at": end_time.isoformat(),
            "duration_ms": duration_ms,
            "project_name": self._project.name,
            "project_root": str(self._project.root),
        }
        LOGGER.info(f"Scan finished with {len(final_issues)} issue(s) in {duration_ms}ms")
        return result

    def _run_providers(
        self,
        catalog: RuleCatalog,
        rule_filter: RuleFilter,
    ) -> List[_ProviderOutcome]:
        """Run every provider that has at least one active rule."""
        work: List[Tuple[RuleProvider, ProviderRuleSet, List[Rule]]] = []
        for provider, rule_set in catalog.entries():
            active = rule_filter.filter_rules(rule_set.rules)
            if not active:
                LOGGER.debug(f"Skipping {rule_set.identity}: no active rules")
                continue
            work.append((provider, rule_set, active))

        max_workers = max(1, self._pipeline_config.max_workers)
        if max_workers == 1 or len(work) <= 1:
            return [self._run_provider(*item) for item in work]

        # Buffered per provider, collected in declared order
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            futures: List[Future] = [executor.submit(self._run_provider, *item) for item in work]
            return [future.result() for future in futures]

    def _run_provider(
        self,
        provider: RuleProvider,
        rule_set: ProviderRuleSet,
        active: Sequence[Rule],
    ) -> _ProviderOutcome:
        identity = rule_set.identity
        self._stream.status(_STAGE, f"Running {len(active)} rule(s) from {identity}...")
        LOGGER.info(f"Running {identity.qualifier} with {len(active)} active rule(s)")

        try:
            issues = list(provider.analyze(self._project, list(active)))
        except Exception as e:
            raise AnalysisError(f"Analyzer {identity.qualifier} failed: {e}") from e

        declared = set(rule_set.rules)
        for issue in issues:
            if issue.rule not in declared:
                raise AnalysisError(
                    f"Analyzer {identity.qualifier} reported an issue for undeclared rule {issue.rule_id}"
                )

        LOGGER.info(f"{identity.qualifier}: found {len(issues)} issue(s)")
        return _ProviderOutcome(
            rule_set=rule_set,
            source=provider.source,
            rules_run=len(active),
            issues=issues,
        )

    def _provider_run(self, outcome: _ProviderOutcome, rule_filter: RuleFilter) -> ProviderRun:
        return ProviderRun(
            provider=str(outcome.rule_set.identity),
            source=outcome.source,
            rules_run=outcome.rules_run,
            issues_found=len(rule_filter.filter_issues(outcome.issues)),
        )
