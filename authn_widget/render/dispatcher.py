"""Render dispatcher — paints each new flow state and wires the next actions.

Listens to the flow store. ``RESUME`` navigates to ``resumeUrl`` once and
ends client-side orchestration; every other status is painted through the
template named by STATUS_TEMPLATE_KEYS, or ``general_error`` when the lookup
misses.
"""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from authn_widget.errors import TemplateMissing
from authn_widget.types import FlowStatus, status_key

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

    from authn_widget.render.expression import Template
    from authn_widget.render.mount import ClickHandler, Mount
    from authn_widget.render.templates import TemplateLoader
    from authn_widget.types import FlowState

    Wiring = Callable[[], None]

logger = logging.getLogger(__name__)

GENERAL_ERROR = "general_error"

# status -> template key; unmapped statuses use their lower-cased name
STATUS_TEMPLATE_KEYS: dict[str, str] = {
    s.value: s.value.lower() for s in FlowStatus if s is not FlowStatus.RESUME
}

_MISS = object()


class RenderDispatcher:
    def __init__(
        self,
        templates: TemplateLoader,
        mount: Mount,
        navigate: Callable[[str], Any],
        *,
        on_action: ClickHandler | None = None,
        template_keys: Mapping[str, str] | None = None,
    ):
        self.templates = templates
        self.mount = mount
        self.navigate = navigate
        self.on_action = on_action
        self.template_keys = {**STATUS_TEMPLATE_KEYS, **(template_keys or {})}
        self._compiled: dict[str, Any] = {}
        self._wiring: dict[str, Wiring] = {}
        self.terminated = False
        self.resume_url: str | None = None

    def __call__(self, previous: FlowState | None, state: FlowState) -> None:
        self.render(previous, state)

    # ─── Registration ───

    def register_state(self, status: FlowStatus | str, wiring: Wiring | None = None) -> None:
        """Wiring to run after ``status`` is painted; None restores the default."""
        key = status_key(status)
        if wiring is None:
            self._wiring.pop(key, None)
        else:
            self._wiring[key] = wiring

    def register_template_key(self, status: FlowStatus | str, template_key: str) -> None:
        self.template_keys[status_key(status)] = template_key.lower()

    def add_template(self, key: str, source: str) -> None:
        """Register a partial source and drop any cached lookup for ``key``.

        Sources added on the loader directly are not seen for a key that has
        already been looked up, hit or miss.
        """
        key = key.lower()
        self.templates.add(key, source)
        self._compiled.pop(key, None)

    # ─── Rendering ───

    def render(self, previous: FlowState | None, state: FlowState) -> None:
        if self.terminated:
            logger.debug("ignoring %s, flow already resumed", state.status)
            return

        if state.is_terminal:
            self.terminated = True
            self.resume_url = state.resume_url
            logger.info("flow resumed, navigating to %s", state.resume_url)
            self.navigate(state.resume_url or "")
            return

        template, found = self._template_for(state.status)
        self.mount.replace(template(state.context()))
        if found:
            self.register_event_listeners(state.status)

    def render_errors(self, state: FlowState, errors: list[str]) -> None:
        """Re-paint the current status with an ``errors`` list in the context."""
        if self.terminated:
            return
        template, found = self._template_for(state.status)
        self.mount.replace(template({**state.context(), "errors": list(errors)}))
        if found:
            self.register_event_listeners(state.status)

    def register_event_listeners(self, status: str) -> None:
        logger.debug("registering events for: %s", status)
        wiring = self._wiring.get(status)
        if wiring is None:
            self.default_event_handler()
        else:
            wiring()

    def default_event_handler(self) -> None:
        if self.on_action is None:
            return
        for action_id in self.mount.action_elements():
            self.mount.bind_click(action_id, self.on_action)

    # ─── Templates ───

    def template_key(self, status: str) -> str:
        return self.template_keys.get(status, status.lower())

    def get_template(self, key: str) -> Template | None:
        """Memoized lookup, misses included; keys are case-insensitive."""
        key = key.lower()
        cached = self._compiled.get(key, _MISS)
        if cached is _MISS:
            cached = self.templates.resolve(key)
            self._compiled[key] = cached
        return cached

    def _template_for(self, status: str) -> tuple[Template, bool]:
        key = self.template_key(status) if status else ""
        template = self.get_template(key) if key else None
        if template is not None:
            return template, True
        logger.warning("%s; rendering %s", TemplateMissing(key), GENERAL_ERROR)
        fallback = self.get_template(GENERAL_ERROR)
        if fallback is None:
            raise TemplateMissing(GENERAL_ERROR)
        return fallback, False
