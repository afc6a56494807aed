"""Flow store — single source of truth for where the user is in the flow."""
from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any, Protocol

from authn_widget.errors import MissingFlowIdentifier, TransportError
from authn_widget.types import action_key

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

    from authn_widget.types import ActionId, FlowState, Listener

logger = logging.getLogger(__name__)

GET_FLOW = "GET_FLOW"
POST_FLOW = "POST_FLOW"


class Transport(Protocol):
    async def get_flow(self, flow_id: str) -> FlowState: ...

    async def post_flow_action(
        self, flow_id: str, action: ActionId | str, body: Mapping[str, Any] | None
    ) -> FlowState: ...


class FlowStore:
    """Holds the current FlowState and talks to the flow resource.

    Every successful dispatch replaces the state wholesale and notifies the
    listeners synchronously, in registration order, with ``(previous, new)``.
    Failed dispatches leave the state alone, notify nobody and re-raise.
    A listener that raises does not stop the ones after it; once all have
    run, the first listener error is re-raised with the new state in place.
    Dispatches on one store are serialized, so notifications follow call order.
    """

    def __init__(self, flow_id: str | None, transport: Transport):
        self.flow_id = flow_id or ""
        self.transport = transport
        self._state: FlowState | None = None
        self._listeners: list[Listener] = []
        self._lock = asyncio.Lock()

    @property
    def state(self) -> FlowState | None:
        return self._state

    def register_listener(self, fn: Listener) -> Callable[[], None]:
        self._listeners.append(fn)
        return lambda: self.unregister_listener(fn)

    def unregister_listener(self, fn: Listener) -> None:
        if fn in self._listeners:
            self._listeners.remove(fn)

    async def dispatch(
        self, kind: str, action: ActionId | str | None = None, body: Mapping[str, Any] | None = None
    ) -> FlowState:
        async with self._lock:
            if kind == GET_FLOW:
                new_state = await self._get_flow()
            elif kind == POST_FLOW:
                new_state = await self._post_flow(action, body)
            else:
                raise ValueError(f"Unknown dispatch type: {kind}")
            self._set_state(new_state)
            return new_state

    # ─── Private ───

    def _require_flow_id(self) -> str:
        if not self.flow_id:
            raise MissingFlowIdentifier()
        return self.flow_id

    async def _get_flow(self) -> FlowState:
        flow_id = self._require_flow_id()
        try:
            return await self.transport.get_flow(flow_id)
        except TransportError as e:
            logger.warning("GET_FLOW %s failed: %s", flow_id, e)
            raise

    async def _post_flow(self, action: ActionId | str | None, body: Mapping[str, Any] | None) -> FlowState:
        flow_id = self._require_flow_id()
        if not action:
            raise ValueError("POST_FLOW needs an action id")
        name = action_key(action)
        try:
            return await self.transport.post_flow_action(flow_id, name, body)
        except TransportError as e:
            logger.warning("POST_FLOW %s %s failed: %s", flow_id, name, e)
            raise

    def _set_state(self, new_state: FlowState) -> None:
        previous = self._state
        self._state = new_state
        logger.info(
            "flow %s: %s -> %s",
            self.flow_id,
            previous.status if previous else None,
            new_state.status,
        )
        failures: list[Exception] = []
        for listener in list(self._listeners):
            try:
                listener(previous, new_state)
            except Exception as e:
                logger.exception("listener %r failed on %s", listener, new_state.status)
                failures.append(e)
        if failures:
            raise failures[0]
