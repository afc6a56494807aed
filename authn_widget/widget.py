"""AuthnWidget — composition root wiring the store, gate and renderer together."""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from authn_widget.engine.registry import default_registry
from authn_widget.engine.validation import ValidationGate
from authn_widget.errors import ConfigurationError, MissingFlowIdentifier, TransportError, ValidationError
from authn_widget.render.dispatcher import RenderDispatcher
from authn_widget.render.mount import HtmlMount
from authn_widget.render.templates import PACKAGE_TEMPLATES_DIR, TemplateLoader
from authn_widget.settings import Settings
from authn_widget.store.flow_store import GET_FLOW, POST_FLOW, FlowStore
from authn_widget.store.transport import FlowTransport

if TYPE_CHECKING:
    from collections.abc import Callable

    from authn_widget.engine.registry import ActionSchemaRegistry
    from authn_widget.render.dispatcher import Wiring
    from authn_widget.render.mount import Mount
    from authn_widget.store.flow_store import Transport
    from authn_widget.types import ActionId, ActionSchema, FlowState, FlowStatus

logger = logging.getLogger(__name__)


class AuthnWidget:
    FORM_ID = "AuthnWidgetForm"  # form id used by every state partial

    def __init__(
        self,
        base_url: str | None = None,
        *,
        flow_id: str | None = None,
        div_id: str | None = None,
        transport: Transport | None = None,
        templates: TemplateLoader | None = None,
        mount: Mount | None = None,
        navigate: Callable[[str], Any] | None = None,
        registry: ActionSchemaRegistry | None = None,
        settings: Settings | None = None,
        on_validation_error: Callable[[ValidationError], Any] | None = None,
        on_transport_error: Callable[[TransportError], Any] | None = None,
    ):
        settings = settings or Settings()
        self.base_url = base_url or settings.base_url
        if not self.base_url:
            raise ConfigurationError("Must provide base Url for PingFederate in the constructor")
        self.flow_id = flow_id or settings.flow_id
        self.div_id = div_id or settings.div_id

        self.transport = transport or FlowTransport(self.base_url, timeout=settings.timeout_sec)
        self.registry = registry or default_registry()
        self.gate = ValidationGate(self.registry)
        self.store = FlowStore(self.flow_id, self.transport)
        self.mount = mount or HtmlMount(self.div_id)
        if templates is None:
            dirs = [settings.templates_dir, PACKAGE_TEMPLATES_DIR] if settings.templates_dir else None
            templates = TemplateLoader(directories=dirs)
        self.navigations: list[str] = []
        self.renderer = RenderDispatcher(
            templates, self.mount, navigate or self.navigations.append, on_action=self.handle_click
        )
        self.store.register_listener(self.renderer)

        self.on_validation_error = on_validation_error or self._rerender_with_errors
        self.on_transport_error = on_transport_error or self._log_transport_error
        self.last_error: Exception | None = None

    @property
    def state(self) -> FlowState | None:
        return self.store.state

    async def init(self) -> FlowState:
        if not self.flow_id:
            raise MissingFlowIdentifier()
        return await self.store.dispatch(GET_FLOW)

    async def handle_click(self, action_id: str) -> FlowState | None:
        """Click-dispatch entry point bound to every ``data-actionId`` element."""
        logger.debug("source: %s", action_id)
        return await self.dispatch(action_id, self.form_data())

    async def dispatch(self, action_id: ActionId | str, form_data: dict[str, Any] | None = None) -> FlowState | None:
        """Validate and submit; validation and transport failures go to the hooks."""
        try:
            body = self.gate.validate(action_id, form_data)
        except ValidationError as e:
            self.last_error = e
            self.on_validation_error(e)
            return None
        try:
            return await self.store.dispatch(POST_FLOW, action_id, body)
        except TransportError as e:
            self.last_error = e
            self.on_transport_error(e)
            return None

    def form_data(self) -> dict[str, Any]:
        return self.mount.form_fields(self.FORM_ID) or {}

    def register_state(self, status: FlowStatus | str, wiring: Wiring | None = None) -> None:
        self.renderer.register_state(status, wiring)

    def register_action_model(self, action: ActionId | str, schema: ActionSchema) -> None:
        self.registry.register(action, schema)

    async def aclose(self) -> None:
        aclose = getattr(self.transport, "aclose", None)
        if aclose is not None:
            await aclose()

    # ─── Default hooks ───

    def _rerender_with_errors(self, error: ValidationError) -> None:
        state = self.store.state
        if state is not None:
            self.renderer.render_errors(state, [str(error)])

    def _log_transport_error(self, error: TransportError) -> None:
        logger.warning("flow request failed: %s", error)
