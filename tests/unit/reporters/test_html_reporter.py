"""Tests for the HTML reporter."""

from __future__ import annotations

import io
import json
import zipfile
from pathlib import Path
from typing import Dict

import pytest

from balscan.core.models import Issue, LineRange, Location, Rule, RuleKind, Source
from balscan.plugins.reporters import ReportError
from balscan.plugins.reporters.html_reporter import RESULTS_HTML_FILE, HTMLReporter

RULE = Rule(1, "Avoid checkpanic", RuleKind.CODE_SMELL)


def _issue(path: Path, line: int) -> Issue:
    return Issue(
        rule=RULE,
        source=Source.BUILT_IN,
        location=Location(path.name, path, LineRange.of(line, 0, line, 4)),
    )


def _template(tmp_path: Path, entries: Dict[str, str]) -> Path:
    archive = tmp_path / "template.zip"
    with zipfile.ZipFile(archive, "w") as zf:
        for name, content in entries.items():
            zf.writestr(name, content)
    return archive


def _embedded_payload(html: str) -> dict:
    start = html.index("=") + 1
    end = html.rindex(";")
    return json.loads(html[start:end])


class TestBuildPayload:
    """Tests for HTMLReporter.build_payload."""

    def test_groups_by_file_in_first_seen_order(self, tmp_path: Path) -> None:
        a = tmp_path / "a.bal"
        b = tmp_path / "b.bal"
        a.write_text("line one\nline two\n", encoding="utf-8")
        b.write_text("other\n", encoding="utf-8")
        issues = [_issue(a, 2), _issue(b, 1), _issue(a, 1)]

        payload = HTMLReporter().build_payload(issues, "demo")

        assert payload["projectName"] == "demo"
        files = payload["scannedFiles"]
        assert [entry["fileName"] for entry in files] == ["a.bal", "b.bal"]
        assert files[0]["fileContent"] == "line one\nline two\n"
        assert [i["textRange"]["startLine"] for i in files[0]["issues"]] == [2, 1]
        assert len(files[1]["issues"]) == 1
        assert "filePath" not in files[0]["issues"][0]

    def test_interleaved_files_keep_discovery_order(self, tmp_path: Path) -> None:
        a = tmp_path / "a.bal"
        b = tmp_path / "b.bal"
        a.write_text("a1\na2\na3\na4\n", encoding="utf-8")
        b.write_text("b1\n", encoding="utf-8")
        issues = [_issue(a, 1), _issue(a, 2), _issue(b, 1), _issue(a, 4)]

        files = HTMLReporter().build_payload(issues, "demo")["scannedFiles"]

        assert [(entry["fileName"], len(entry["issues"])) for entry in files] == [("a.bal", 3), ("b.bal", 1)]
        assert [i["textRange"]["startLine"] for i in files[0]["issues"]] == [1, 2, 4]

    def test_no_issues(self) -> None:
        assert HTMLReporter().build_payload([], "demo") == {"projectName": "demo", "scannedFiles": []}

    def test_unreadable_file(self, tmp_path: Path) -> None:
        with pytest.raises(ReportError):
            HTMLReporter().build_payload([_issue(tmp_path / "gone.bal", 1)], "demo")

    def test_report_writes_payload(self, tmp_path: Path) -> None:
        source = tmp_path / "a.bal"
        source.write_text("x\n", encoding="utf-8")
        output = io.StringIO()

        HTMLReporter().report([_issue(source, 1)], output)

        payload = json.loads(output.getvalue())
        assert payload["projectName"] == ""
        assert payload["scannedFiles"][0]["fileName"] == "a.bal"

    def test_report_with_project_name(self) -> None:
        output = io.StringIO()

        HTMLReporter().report([], output, project_name="demo")

        assert json.loads(output.getvalue()) == {"projectName": "demo", "scannedFiles": []}


class TestGenerate:
    """Tests for HTMLReporter.generate."""

    def test_placeholder_replaced(self, tmp_path: Path, package_factory) -> None:
        project = package_factory({"main.bal": 'string s = "</script>";\n'})
        archive = _template(
            tmp_path,
            {
                "index.html": "<script>window.SCAN_REPORT = __data__;</script>",
                "assets/report.js": "render(window.SCAN_REPORT);",
            },
        )
        issue = _issue(project.documents[0].path, 1)

        html_path = HTMLReporter(template_archive=archive).generate([issue], project)

        assert html_path == project.target_dir / "report" / RESULTS_HTML_FILE
        assert (html_path.parent / "assets" / "report.js").is_file()
        html = html_path.read_text(encoding="utf-8")
        assert "__data__" not in html
        assert html.count("</script>") == 1
        script = html[len("<script>") : -len("</script>")]
        payload = _embedded_payload(script)
        assert payload["projectName"] == "demo"
        assert payload["scannedFiles"][0]["fileContent"] == 'string s = "</script>";\n'

    def test_named_directory(self, tmp_path: Path, package_factory) -> None:
        project = package_factory({"main.bal": ""})
        archive = _template(tmp_path, {"index.html": "var data = __data__;"})

        html_path = HTMLReporter(template_archive=archive).generate([], project, "html-out")

        assert html_path == project.root / "html-out" / RESULTS_HTML_FILE

    def test_entry_escaping_report_dir(self, tmp_path: Path, package_factory) -> None:
        project = package_factory({"main.bal": ""})
        archive = _template(tmp_path, {"../../evil.html": "x", "index.html": "__data__"})

        with pytest.raises(ReportError, match="escapes"):
            HTMLReporter(template_archive=archive).generate([], project)

    def test_invalid_archive(self, tmp_path: Path, package_factory) -> None:
        project = package_factory({"main.bal": ""})
        archive = tmp_path / "broken.zip"
        archive.write_bytes(b"not a zip")

        with pytest.raises(ReportError, match="zip"):
            HTMLReporter(template_archive=archive).generate([], project)

    def test_bundled_template(self, package_factory) -> None:
        project = package_factory({"main.bal": ""})

        html_path = HTMLReporter().generate([], project)

        html = html_path.read_text(encoding="utf-8")
        assert "__data__" not in html
        assert '"projectName": "demo"' in html
