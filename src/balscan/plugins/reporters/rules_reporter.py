"""Console table of the available rules."""

from __future__ import annotations

from typing import IO, List, Sequence

from balscan.core.models import Rule

_HEADERS = ("RuleID", "Rule Kind", "Rule Description")


class RulesReporter:
    """Prints rules as a fixed-width ``RuleID | Rule Kind | Rule Description`` table.

    Rows keep the order they are given in, which for a rule catalog is the
    core rules first and then each analyzer in declaration order.
    """

    @property
    def name(self) -> str:
        return "rules"

    def report(self, rules: Sequence[Rule], output: IO[str]) -> None:
        output.write("\n".join(self._format_table(rules)))
        output.write("\n")

    def _format_table(self, rules: Sequence[Rule]) -> List[str]:
        if not rules:
            return ["No rules available."]

        rows = [(rule.id, rule.kind.value, rule.description) for rule in rules]
        id_width = max(len(_HEADERS[0]), *(len(row[0]) for row in rows))
        kind_width = max(len(_HEADERS[1]), *(len(row[1]) for row in rows))

        header = f"{_HEADERS[0]:<{id_width}} | {_HEADERS[1]:<{kind_width}} | {_HEADERS[2]}"
        lines = ["Loaded rules:", header, "-" * len(header)]
        for rule_id, kind, description in rows:
            lines.append(f"{rule_id:<{id_width}} | {kind:<{kind_width}} | {description}")
        return lines
