"""Validation of Scan.toml content.

Nothing here is fatal: malformed optional entries degrade gracefully, so
validation only produces warnings that point the user at likely typos.
"""

from __future__ import annotations

from dataclasses import dataclass
from difflib import get_close_matches
from typing import Any, Dict, List, Optional, Set

from balscan.core.logging import get_logger
from balscan.core.models import QUALIFIED_RULE_ID_PATTERN

LOGGER = get_logger(__name__)

# Tables understood by the scan configuration loader
SCAN_TABLE = "scan"
PLATFORM_TABLE = "platform"
ANALYZER_TABLE = "analyzer"
RULES_TABLE = "rule"

VALID_TOP_LEVEL_KEYS: Set[str] = {
    SCAN_TABLE,
    PLATFORM_TABLE,
    ANALYZER_TABLE,
    RULES_TABLE,
}

VALID_ANALYZER_KEYS: Set[str] = {
    "org",
    "name",
    "version",
    "repository",
}

VALID_RULE_KEYS: Set[str] = {
    "include",
    "exclude",
}


@dataclass
class ConfigValidationWarning:
    """A validation warning for the scan configuration."""

    message: str
    source: str
    key: Optional[str] = None
    suggestion: Optional[str] = None


def validate_scan_config(data: Dict[str, Any], source: str) -> List[ConfigValidationWarning]:
    """Validate a parsed Scan.toml document.

    Args:
        data: Parsed TOML document.
        source: Config file path for warning messages.

    Returns:
        List of validation warnings (each one is also logged).
    """
    warnings: List[ConfigValidationWarning] = []

    for key in data.keys():
        if key not in VALID_TOP_LEVEL_KEYS:
            warnings.append(ConfigValidationWarning(
                message=f"Unknown table '{key}'",
                source=source,
                key=key,
                suggestion=_suggest_key(key, VALID_TOP_LEVEL_KEYS),
            ))

    for table in (PLATFORM_TABLE, ANALYZER_TABLE):
        value = data.get(table)
        if value is not None and not _is_array_of_tables(value):
            warnings.append(ConfigValidationWarning(
                message=f"'{table}' must be an array of tables ([[{table}]])",
                source=source,
                key=table,
            ))

    analyzers = data.get(ANALYZER_TABLE)
    if _is_array_of_tables(analyzers):
        for index, analyzer in enumerate(analyzers):
            for key in analyzer.keys():
                if key not in VALID_ANALYZER_KEYS:
                    warnings.append(ConfigValidationWarning(
                        message=f"Unknown key '{key}' in analyzer entry {index + 1}",
                        source=source,
                        key=f"{ANALYZER_TABLE}.{key}",
                        suggestion=_suggest_key(key, VALID_ANALYZER_KEYS),
                    ))

    rules = data.get(RULES_TABLE)
    if rules is not None:
        if not isinstance(rules, dict):
            warnings.append(ConfigValidationWarning(
                message=f"'{RULES_TABLE}' must be a table",
                source=source,
                key=RULES_TABLE,
            ))
        else:
            warnings.extend(_validate_rules_table(rules, source))

    for warning in warnings:
        _log_warning(warning)
    return warnings


def _validate_rules_table(rules: Dict[str, Any], source: str) -> List[ConfigValidationWarning]:
    warnings: List[ConfigValidationWarning] = []
    for key, value in rules.items():
        if key not in VALID_RULE_KEYS:
            warnings.append(ConfigValidationWarning(
                message=f"Unknown key '{RULES_TABLE}.{key}'",
                source=source,
                key=f"{RULES_TABLE}.{key}",
                suggestion=_suggest_key(key, VALID_RULE_KEYS),
            ))
            continue
        if not isinstance(value, list):
            warnings.append(ConfigValidationWarning(
                message=f"'{RULES_TABLE}.{key}' must be an array, got {type(value).__name__}",
                source=source,
                key=f"{RULES_TABLE}.{key}",
            ))
            continue
        for rule_id in value:
            if not QUALIFIED_RULE_ID_PATTERN.match(str(rule_id).strip()):
                warnings.append(ConfigValidationWarning(
                    message=(
                        f"'{rule_id}' in '{RULES_TABLE}.{key}' is not a qualified rule id "
                        "(expected 'ballerina:<n>' or '<org>/<name>:<n>')"
                    ),
                    source=source,
                    key=f"{RULES_TABLE}.{key}",
                ))
    return warnings


def _is_array_of_tables(value: Any) -> bool:
    return isinstance(value, list) and all(isinstance(item, dict) for item in value)


def _suggest_key(invalid_key: str, valid_keys: Set[str]) -> Optional[str]:
    """Suggest a valid key for a potential typo.

    Args:
        invalid_key: The invalid key entered.
        valid_keys: Set of valid keys.

    Returns:
        Closest matching valid key, or None if no good match.
    """
    matches = get_close_matches(invalid_key, list(valid_keys), n=1, cutoff=0.6)
    return matches[0] if matches else None


def _log_warning(warning: ConfigValidationWarning) -> None:
    """Log a validation warning."""
    msg = f"{warning.message} in {warning.source}"
    if warning.suggestion:
        msg += f" (did you mean '{warning.suggestion}'?)"
    LOGGER.warning(msg)
