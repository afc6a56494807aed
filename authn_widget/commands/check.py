"""authn-widget check <config> — parse and validate a widget definition."""
from __future__ import annotations

import sys
from pathlib import Path

from authn_widget.compiler import format_issues, parse_widget_yaml, validate_widget


def cmd_check(config_path: str) -> int:
    path = Path(config_path)
    if not path.exists():
        print(f"Widget config not found: {path}", file=sys.stderr)
        return 1

    try:
        widget = parse_widget_yaml(path.read_text(encoding="utf-8"))
    except (ValueError, OSError) as e:
        print(f"✗ Parse error: {e}", file=sys.stderr)
        return 1

    issues = validate_widget(widget)
    if any(i.level == "error" for i in issues):
        print(f'✗ Widget "{widget.name}" failed validation:')
        print(format_issues(issues))
        return 1

    registry = widget.build_registry()
    print(f'✓ Widget "{widget.name}" compiled ({len(registry)} actions, {len(widget.states)} states)')
    if issues:
        print(format_issues(issues))
    for action in registry.actions():
        schema = registry.get(action)
        required = ", ".join(sorted(schema.required)) or "-"
        print(f"  {action}: requires {required}")
    return 0
