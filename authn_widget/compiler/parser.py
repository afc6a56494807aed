"""Parse YAML widget definitions (action models and state screens)."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

import yaml

from authn_widget.engine.registry import ActionModel, ActionSchemaRegistry, default_registry
from authn_widget.types import ActionSchema

if TYPE_CHECKING:
    from authn_widget.render.dispatcher import RenderDispatcher


@dataclass
class StateDefinition:
    name: str
    template: str = ""  # empty = lower-cased status name


@dataclass
class WidgetDefinition:
    name: str = "unnamed widget"
    description: str = ""
    actions: dict[str, ActionModel] = field(default_factory=dict)
    states: dict[str, StateDefinition] = field(default_factory=dict)
    extends_defaults: bool = True

    def build_registry(self) -> ActionSchemaRegistry:
        registry = default_registry() if self.extends_defaults else ActionSchemaRegistry()
        registry.update(self.actions.values())
        return registry

    def apply_templates(self, renderer: RenderDispatcher) -> None:
        for state in self.states.values():
            if state.template:
                renderer.register_template_key(state.name, state.template)


def _as_names(raw: Any, where: str) -> list[str]:
    if raw is None:
        return []
    if isinstance(raw, str):
        return [raw]
    if not isinstance(raw, list) or not all(isinstance(x, str) for x in raw):
        raise ValueError(f"{where}: expected a list of field names")
    return list(raw)


def _parse_action(name: str, body: Any) -> ActionModel:
    if body is None:
        body = {}
    if isinstance(body, list):
        # shorthand: a bare list is the required fields
        body = {"required": body}
    if not isinstance(body, dict):
        raise ValueError(f'Invalid action "{name}": expected a mapping')
    required = _as_names(body.get("required"), f'action "{name}" required')
    properties = _as_names(body.get("properties"), f'action "{name}" properties')
    return ActionModel(name=name, schema=ActionSchema.of(required, properties))


def _parse_raw_state(raw: Any) -> StateDefinition:
    if isinstance(raw, str):
        return StateDefinition(name=raw)
    if isinstance(raw, dict) and len(raw) == 1:
        name, body = next(iter(raw.items()))
        if body is None:
            return StateDefinition(name=str(name))
        if isinstance(body, dict):
            return StateDefinition(name=str(name), template=str(body.get("template", "")).lower())
    raise ValueError(f"Invalid state entry: {raw!r}")


def parse_widget_yaml(content: str) -> WidgetDefinition:
    try:
        raw = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML: {e}") from e
    if not isinstance(raw, dict):
        raise ValueError("Invalid YAML: expected a mapping")

    raw_actions = raw.get("actions") or {}
    if not isinstance(raw_actions, dict):
        raise ValueError('Invalid widget: "actions" must be a mapping')
    raw_states = raw.get("states") or []
    if not isinstance(raw_states, list):
        raise ValueError('Invalid widget: "states" must be a list')

    actions = {str(name): _parse_action(str(name), body) for name, body in raw_actions.items()}

    states: dict[str, StateDefinition] = {}
    for entry in raw_states:
        state = _parse_raw_state(entry)
        if state.name in states:
            raise ValueError(f"Duplicate state: {state.name}")
        states[state.name] = state

    return WidgetDefinition(
        name=raw.get("name", "unnamed widget"),
        description=raw.get("description", ""),
        actions=actions,
        states=states,
        extends_defaults=bool(raw.get("extends_defaults", True)),
    )
