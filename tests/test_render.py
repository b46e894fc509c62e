"""Tests for markdown and terminal rendering."""

from __future__ import annotations

import io

from conftest import write_json
from rich.console import Console

from readiness.engine import build_report
from readiness.render import format_status, render_console, render_markdown


def test_markdown_when_no_level_is_achieved(repo):
    write_json(repo / "package.json", {"name": "root-app"})

    output = render_markdown(build_report(repo, "0.0.0-test"))

    assert output.startswith("# Agent Readiness Report")
    assert "- Level achieved: 0 (0% complete)" in output
    assert "- Next gate: Level 1 (0% / 80% required)" in output
    assert "- Apps discovered: ." in output
    assert "### Level 1 (0/4 = 0%)" in output
    assert "### Level 2" not in output
    assert "## Top action items" in output


def test_markdown_shows_one_level_past_achieved(ready_repo):
    output = render_markdown(build_report(ready_repo, "0.0.0-test"))

    assert "- Level achieved: 1 (100% complete)" in output
    assert "### Level 1 (4/4 = 100%)" in output
    assert "### Level 2 (" in output
    assert "### Level 3" not in output
    assert "- [PASS] readme (1/1): README.md includes run/build/test guidance. [README.md]" in output
    assert "- [FAIL] devcontainer (0/1): No devcontainer configuration found." in output


def test_markdown_from_loaded_dict(ready_repo):
    report = build_report(ready_repo, "0.0.0-test")

    assert render_markdown(report.to_dict()) == render_markdown(report)


def test_markdown_all_levels_achieved():
    levels = {str(n): {"completion": 1.0, "evaluatedCount": 1, "passCount": 1, "unlocked": True}
              for n in range(1, 6)}
    data = {
        "repoRoot": "/work/app",
        "repoUrl": "https://github.com/acme/app",
        "apps": {},
        "report": {},
        "criteriaMeta": {},
        "levels": levels,
        "levelSummary": {"achievedLevel": 5, "nextLevel": None, "gate": 0.8, "levels": levels},
        "actionItems": [],
    }

    output = render_markdown(data)

    assert "- Repo URL: https://github.com/acme/app" in output
    assert "- Next gate: none (all levels achieved)" in output
    assert "- Apps discovered: none" in output
    assert "## Top action items" not in output


def test_status_labels():
    assert [format_status(s) for s in ("pass", "fail", "not_applicable", "not_evaluated", None)] == [
        "PASS", "FAIL", "N/A", "NOT EVALUATED", "UNKNOWN",
    ]


def test_console_tables(ready_repo):
    buffer = io.StringIO()
    console = Console(file=buffer, width=200, color_system=None)

    render_console(build_report(ready_repo, "0.0.0-test"), console)
    output = buffer.getvalue()

    assert "Agent Readiness" in output
    assert "Level 1 Functional" in output
    assert "Level 2 Documented" in output
    assert "Level 3" not in output
    assert "readme" in output
    assert "Top action items" in output
