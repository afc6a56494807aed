"""HTTP transport to the remote flow resource (PingFederate authentication API)."""
from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any

import httpx

from authn_widget.errors import ProtocolError, TransportError
from authn_widget.types import FlowState, action_key

if TYPE_CHECKING:
    from collections.abc import Mapping

    from authn_widget.types import ActionId

logger = logging.getLogger(__name__)

FLOWS_PATH = "/pf-ws/authn/flows"
DEFAULT_TIMEOUT_SEC = 10.0


def action_content_type(action: ActionId | str) -> str:
    return f"application/vnd.pingidentity.{action_key(action)}+json"


class FlowTransport:
    """Async client for ``GET``/``POST {base_url}/pf-ws/authn/flows/{flowId}``.

    Network and timeout failures raise TransportError; non-2xx answers and
    bodies that are not a JSON object raise ProtocolError.
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = DEFAULT_TIMEOUT_SEC,
        flows_path: str = FLOWS_PATH,
        client: httpx.AsyncClient | None = None,
    ):
        if not base_url:
            raise ValueError("Must provide base Url for PingFederate")
        self.base_url = base_url.rstrip("/")
        self.flows_path = "/" + flows_path.strip("/")
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout)

    def flow_url(self, flow_id: str) -> str:
        return f"{self.base_url}{self.flows_path}/{flow_id}"

    def _headers(self, content_type: str | None = None) -> dict[str, str]:
        h = {"Accept": "application/json", "X-XSRF-Header": "PingFederate"}
        if content_type:
            h["Content-Type"] = content_type
        return h

    async def get_flow(self, flow_id: str) -> FlowState:
        return await self._request("GET", flow_id, headers=self._headers())

    async def post_flow_action(
        self, flow_id: str, action: ActionId | str, body: Mapping[str, Any] | None
    ) -> FlowState:
        content = json.dumps(dict(body or {}))
        return await self._request(
            "POST", flow_id, headers=self._headers(action_content_type(action)), content=content
        )

    async def _request(self, method: str, flow_id: str, **kwargs: Any) -> FlowState:
        url = self.flow_url(flow_id)
        try:
            resp = await self._client.request(method, url, **kwargs)
        except httpx.TimeoutException as e:
            raise TransportError(f"{method} {url} timed out: {e}") from e
        except httpx.HTTPError as e:
            raise TransportError(f"{method} {url} failed: {e}") from e

        payload = _decode(resp)
        if not resp.is_success:
            raise ProtocolError(
                f"{method} {url} returned {resp.status_code}",
                status_code=resp.status_code,
                payload=payload,
            )
        if not isinstance(payload, dict):
            raise ProtocolError(
                f"{method} {url} returned a non-object body", status_code=resp.status_code, payload=payload
            )
        logger.debug("%s %s -> %s", method, url, payload.get("status"))
        return FlowState.from_payload(payload)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> FlowTransport:
        return self

    async def __aexit__(self, *args) -> None:
        await self.aclose()


def _decode(resp: httpx.Response) -> Any:
    if not resp.content:
        return None
    try:
        return resp.json()
    except ValueError:
        return resp.text
