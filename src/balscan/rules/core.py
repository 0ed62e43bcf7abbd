"""Built-in rules.

Core rule numeric ids are assigned once and never reused or renumbered:
external tooling refers to them as ``ballerina:<n>``.
"""

from __future__ import annotations

import re
from enum import Enum
from typing import Dict, Iterator, List, Pattern, Sequence, Tuple

from balscan.core.logging import get_logger
from balscan.core.models import Issue, LineRange, ProviderIdentity, Rule, RuleKind, Source
from balscan.core.project import Document, Project
from balscan.rules.base import RuleProvider

LOGGER = get_logger(__name__)


class CoreRule(Enum):
    """The fixed set of core rules: (numeric id, description, kind)."""

    AVOID_CHECKPANIC = (1, "Avoid checkpanic", RuleKind.CODE_SMELL)
    AVOID_PANIC = (2, "Avoid explicit panic", RuleKind.BUG)

    def __init__(self, numeric_id: int, description: str, kind: RuleKind) -> None:
        self.numeric_id = numeric_id
        self.description = description
        self.kind = kind

    def rule(self) -> Rule:
        return Rule(
            numeric_id=self.numeric_id,
            description=self.description,
            kind=self.kind,
            provider=ProviderIdentity.core(),
        )

    @classmethod
    def rules(cls) -> List[Rule]:
        return [member.rule() for member in cls]


# Token patterns matched against comment- and string-masked source lines
_CORE_RULE_PATTERNS: Dict[int, Pattern[str]] = {
    CoreRule.AVOID_CHECKPANIC.numeric_id: re.compile(r"\bcheckpanic\b"),
    CoreRule.AVOID_PANIC.numeric_id: re.compile(r"\bpanic\b"),
}


class CoreRuleProvider(RuleProvider):
    """Provider of the built-in ``ballerina:<n>`` rules."""

    def __init__(self) -> None:
        self._identity = ProviderIdentity.core()

    @property
    def identity(self) -> ProviderIdentity:
        return self._identity

    @property
    def source(self) -> Source:
        return Source.BUILT_IN

    def rules(self) -> List[Rule]:
        return CoreRule.rules()

    def analyze(self, project: Project, rules: Sequence[Rule]) -> List[Issue]:
        active = [(rule, _CORE_RULE_PATTERNS[rule.numeric_id]) for rule in rules]
        if not active:
            return []

        issues: List[Issue] = []
        for document in project.documents:
            issues.extend(self._analyze_document(document, active))
        LOGGER.debug(f"Core rules found {len(issues)} issue(s) in {len(project.documents)} document(s)")
        return issues

    def _analyze_document(
        self,
        document: Document,
        active: List[Tuple[Rule, Pattern[str]]],
    ) -> Iterator[Issue]:
        for line_number, line in enumerate(mask_source(document.read_text()), start=1):
            for rule, pattern in active:
                for match in pattern.finditer(line):
                    yield self.issue(
                        rule,
                        document.path,
                        LineRange.of(line_number, match.start(), line_number, match.end()),
                    )


def mask_source(text: str) -> List[str]:
    """Blank out comments and string/template literals, keeping columns.

    Every masked character becomes a space so match offsets still point at
    the original columns. Backtick templates may span lines.

    Args:
        text: Ballerina source text.

    Returns:
        Masked lines, one per source line.
    """
    masked_lines = []
    in_template = False
    for line in text.splitlines():
        chars = list(line)
        in_string = False
        i = 0
        while i < len(chars):
            ch = chars[i]
            if in_template:
                if ch == "`":
                    in_template = False
                chars[i] = " "
            elif in_string:
                if ch == "\\" and i + 1 < len(chars):
                    chars[i] = " "
                    chars[i + 1] = " "
                    i += 2
                    continue
                if ch == '"':
                    in_string = False
                chars[i] = " "
            elif ch == "/" and i + 1 < len(chars) and chars[i + 1] == "/":
                for j in range(i, len(chars)):
                    chars[j] = " "
                break
            elif ch == '"':
                in_string = True
                chars[i] = " "
            elif ch == "`":
                in_template = True
                chars[i] = " "
            i += 1
        masked_lines.append("".join(chars))
    return masked_lines
