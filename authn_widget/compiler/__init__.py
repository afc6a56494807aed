from authn_widget.compiler.parser import StateDefinition, WidgetDefinition, parse_widget_yaml
from authn_widget.compiler.validator import ConfigIssue, format_issues, validate_widget

__all__ = [
    "ConfigIssue",
    "StateDefinition",
    "WidgetDefinition",
    "format_issues",
    "parse_widget_yaml",
    "validate_widget",
]
