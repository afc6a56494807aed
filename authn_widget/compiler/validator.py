"""Static analysis for widget definitions — catch config mistakes before runtime."""
from __future__ import annotations

from typing import TYPE_CHECKING

from authn_widget.types import ActionId, FlowStatus

if TYPE_CHECKING:
    from authn_widget.compiler.parser import WidgetDefinition


class ConfigIssue:
    def __init__(self, level: str, message: str, subject: str | None = None):
        self.level = level  # "error" | "warning"
        self.message = message
        self.subject = subject

    def __str__(self):
        prefix = f"[{self.subject}] " if self.subject else ""
        return f"{self.level.upper()}: {prefix}{self.message}"


def validate_widget(widget: WidgetDefinition) -> list[ConfigIssue]:
    """Run all static checks on a widget definition."""
    issues: list[ConfigIssue] = []
    issues.extend(_check_actions(widget))
    issues.extend(_check_states(widget))
    return issues


def format_issues(issues: list[ConfigIssue]) -> str:
    if not issues:
        return ""
    lines = []
    errs = [i for i in issues if i.level == "error"]
    warns = [i for i in issues if i.level == "warning"]
    if errs:
        lines.append(f"  {len(errs)} error(s):")
        for i in errs:
            lines.append(f"    ✗ {i}")
    if warns:
        lines.append(f"  {len(warns)} warning(s):")
        for i in warns:
            lines.append(f"    ⚠ {i}")
    return "\n".join(lines)


# ─── Checks ───

def _check_actions(widget: WidgetDefinition) -> list[ConfigIssue]:
    issues: list[ConfigIssue] = []
    for name in widget.actions:
        if not name.strip():
            issues.append(ConfigIssue("error", "Action has an empty name"))
            continue
        if ActionId.parse(name) is None:
            issues.append(ConfigIssue("warning", "Action is not one the client knows; registered as extension", name))
    return issues


def _check_states(widget: WidgetDefinition) -> list[ConfigIssue]:
    issues: list[ConfigIssue] = []
    for name in widget.states:
        if name == FlowStatus.RESUME.value:
            issues.append(ConfigIssue("error", "RESUME is terminal and never rendered", name))
        elif FlowStatus.parse(name) is None:
            issues.append(ConfigIssue("warning", "Status is not one the client knows", name))
    return issues
