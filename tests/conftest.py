"""Shared fixtures for authn-widget scenario tests."""
from __future__ import annotations

from typing import TYPE_CHECKING, Any

import pytest

from authn_widget.render.templates import TemplateLoader
from authn_widget.types import FlowState, action_key
from authn_widget.widget import AuthnWidget

if TYPE_CHECKING:
    from collections.abc import Mapping

FLOW_ID = "abc123"
BASE_URL = "https://idp.example"


class FakeTransport:
    """Scripted stand-in for FlowTransport.

    Each GET/POST consumes the next scripted response: a dict becomes the
    flow document, an exception instance is raised.
    """

    def __init__(self, *responses: dict | Exception):
        self.responses: list[dict | Exception] = list(responses)
        self.calls: list[tuple[str, str, str | None, dict | None]] = []
        self.closed = False

    def script(self, *responses: dict | Exception) -> None:
        self.responses.extend(responses)

    async def get_flow(self, flow_id: str) -> FlowState:
        self.calls.append(("GET", flow_id, None, None))
        return self._next()

    async def post_flow_action(self, flow_id: str, action, body: Mapping[str, Any] | None) -> FlowState:
        self.calls.append(("POST", flow_id, action_key(action), dict(body or {})))
        return self._next()

    async def aclose(self) -> None:
        self.closed = True

    @property
    def posts(self) -> list[tuple[str, str, str | None, dict | None]]:
        return [c for c in self.calls if c[0] == "POST"]

    def _next(self) -> FlowState:
        if not self.responses:
            raise AssertionError("FakeTransport ran out of scripted responses")
        resp = self.responses.pop(0)
        if isinstance(resp, Exception):
            raise resp
        return FlowState.from_payload(resp)


class CountingLoader(TemplateLoader):
    """TemplateLoader that records every resolve() call."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.resolved: list[str] = []

    def resolve(self, key: str):
        self.resolved.append(key)
        return super().resolve(key)


class WidgetHarness:
    """Test harness for driving a widget through scripted server responses.

    Uses the packaged partials and an in-memory mount; navigation is
    recorded instead of performed.
    """

    def __init__(self, *responses: dict | Exception, flow_id: str | None = FLOW_ID, **widget_kwargs):
        self.transport = FakeTransport(*responses)
        self.loader = CountingLoader()
        self.navigations: list[str] = []
        self.widget = AuthnWidget(
            BASE_URL,
            flow_id=flow_id,
            transport=self.transport,
            templates=self.loader,
            navigate=self.navigations.append,
            **widget_kwargs,
        )

    @property
    def mount(self):
        return self.widget.mount

    @property
    def state(self) -> FlowState | None:
        return self.widget.state

    @property
    def status(self) -> str | None:
        return self.state.status if self.state else None

    @property
    def markup(self) -> str:
        return self.mount.markup

    async def start(self) -> FlowState:
        return await self.widget.init()

    async def click(self, action_id: str, **fields: str | bool):
        """Fill in the rendered form, then click the action element."""
        for name, value in fields.items():
            self.mount.set_field(name, value)
        return await self.mount.click(action_id)


@pytest.fixture
def harness_factory():
    """Factory fixture that creates WidgetHarness instances."""
    def _make(*responses: dict | Exception, **kwargs) -> WidgetHarness:
        return WidgetHarness(*responses, **kwargs)
    return _make


# ─── Server documents used across tests ───

USERNAME_PASSWORD_REQUIRED = {
    "id": FLOW_ID,
    "status": "USERNAME_PASSWORD_REQUIRED",
    "username": "",
    "_links": {"initiateAccountRecovery": {"href": "https://idp.example/x"}},
}

RESUME = {"id": FLOW_ID, "status": "RESUME", "resumeUrl": "https://example/done"}
