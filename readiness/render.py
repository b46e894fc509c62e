"""
Report Rendering

Markdown for files and pull-request comments, rich tables for the
terminal. Both work from the serialized report dict, so a report loaded
from disk renders the same as a freshly built one.
"""

from typing import Union

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from readiness.criteria import LEVEL_NAMES
from readiness.models import ReadinessReport


STATUS_LABELS = {
    "pass": "PASS",
    "fail": "FAIL",
    "not_applicable": "N/A",
    "not_evaluated": "NOT EVALUATED",
}

STATUS_STYLES = {
    "pass": "green",
    "fail": "red",
    "not_applicable": "dim",
    "not_evaluated": "yellow",
}

EMPTY_LEVEL = {"completion": 0, "evaluatedCount": 0, "passCount": 0, "unlocked": False}


def as_dict(report: Union[ReadinessReport, dict]) -> dict:
    if isinstance(report, ReadinessReport):
        return report.to_dict()
    return report


def format_percent(value: float) -> str:
    return f"{round(value * 100)}%"


def format_status(status) -> str:
    return STATUS_LABELS.get(status, "UNKNOWN")


def group_by_level(results: dict) -> dict[int, list[dict]]:
    grouped: dict[int, list[dict]] = {}
    for result in results.values():
        grouped.setdefault(int(result["level"]), []).append(result)
    return dict(sorted(grouped.items()))


def level_progress_label(progress: dict) -> str:
    if progress.get("evaluatedCount", 0) == 0:
        return "not evaluated"
    return (f"{progress['passCount']}/{progress['evaluatedCount']} = "
            f"{format_percent(progress['completion'])}")


def visible_levels(data: dict) -> dict[int, list[dict]]:
    """Criteria grouped by level, up to one level past the achieved one"""
    max_visible = min(data["levelSummary"]["achievedLevel"] + 1, 5)
    return {
        level: results
        for level, results in group_by_level(data["report"]).items()
        if level <= max_visible
    }


# ════════════════════════════════════════════════════════════
# MARKDOWN
# ════════════════════════════════════════════════════════════

def render_markdown(report: Union[ReadinessReport, dict]) -> str:
    data = as_dict(report)
    summary = data["levelSummary"]
    levels = data.get("levels", {})
    achieved = summary["achievedLevel"]
    next_level = summary.get("nextLevel")

    current = levels.get(str(achieved), EMPTY_LEVEL)
    upcoming = levels.get(str(next_level)) if next_level else None

    lines = ["# Agent Readiness Report", ""]
    lines.append(f"- Repo root: {data['repoRoot']}")
    if data.get("repoUrl"):
        lines.append(f"- Repo URL: {data['repoUrl']}")
    lines.append(f"- Level achieved: {achieved} ({format_percent(current['completion'])} complete)")
    if next_level and upcoming:
        lines.append(
            f"- Next gate: Level {next_level} ({format_percent(upcoming['completion'])} / "
            f"{round(summary['gate'] * 100)}% required)"
        )
    else:
        lines.append("- Next gate: none (all levels achieved)")

    apps = list(data.get("apps", {}))
    lines.append(f"- Apps discovered: {', '.join(apps) if apps else 'none'}")

    lines.append("")
    lines.append("## Criteria")

    meta = data.get("criteriaMeta", {})
    for level, results in visible_levels(data).items():
        progress = levels.get(str(level), EMPTY_LEVEL)
        lines.append("")
        lines.append(f"### Level {level} ({level_progress_label(progress)})")
        for result in results:
            status = format_status(meta.get(result["id"], {}).get("status"))
            evidence = result.get("evidence") or []
            suffix = f" [{', '.join(evidence)}]" if evidence else ""
            lines.append(
                f"- [{status}] {result['id']} ({result['numerator']}/{result['denominator']}): "
                f"{result['rationale']}{suffix}"
            )

    action_items = data.get("actionItems") or []
    if action_items:
        lines.append("")
        lines.append("## Top action items")
        for item in action_items:
            lines.append(f"- {item['title']}: {item['details']}")

    return "\n".join(lines)


# ════════════════════════════════════════════════════════════
# TERMINAL
# ════════════════════════════════════════════════════════════

def render_console(report: Union[ReadinessReport, dict], console: Console) -> None:
    """Print the report as one rich table per visible level"""
    data = as_dict(report)
    summary = data["levelSummary"]
    levels = data.get("levels", {})
    meta = data.get("criteriaMeta", {})

    header = [f"[bold]Repo:[/bold] {escape(data['repoRoot'])}"]
    if data.get("repoUrl"):
        header.append(f"[bold]URL:[/bold] {escape(data['repoUrl'])}")
    header.append(f"[bold]Level achieved:[/bold] {summary['achievedLevel']}")
    if summary.get("nextLevel"):
        upcoming = levels.get(str(summary["nextLevel"]), EMPTY_LEVEL)
        header.append(
            f"[bold]Next gate:[/bold] Level {summary['nextLevel']} "
            f"({format_percent(upcoming['completion'])} / {round(summary['gate'] * 100)}% required)"
        )
    else:
        header.append("[bold]Next gate:[/bold] none (all levels achieved)")
    console.print(Panel("\n".join(header), title="Agent Readiness", border_style="cyan"))

    for level, results in visible_levels(data).items():
        progress = levels.get(str(level), EMPTY_LEVEL)
        table = Table(
            title=f"Level {level} {LEVEL_NAMES.get(level, '')} ({level_progress_label(progress)})",
            show_header=True,
        )
        table.add_column("Status", width=14)
        table.add_column("Criterion", style="cyan")
        table.add_column("Score", justify="center")
        table.add_column("Rationale")

        for result in results:
            status = meta.get(result["id"], {}).get("status")
            style = STATUS_STYLES.get(status, "")
            table.add_row(
                f"[{style}]{format_status(status)}[/{style}]" if style else format_status(status),
                result["id"],
                f"{result['numerator']}/{result['denominator']}",
                escape(result["rationale"]),
            )
        console.print(table)

    action_items = data.get("actionItems") or []
    if action_items:
        body = "\n".join(f"• [bold]{item['title']}[/bold]: {item['details']}" for item in action_items)
        console.print(Panel(body, title="Top action items", border_style="yellow"))
