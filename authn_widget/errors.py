"""Error taxonomy shared by the store, the validation gate and the renderer."""
from __future__ import annotations

from typing import Any


class AuthnWidgetError(Exception):
    pass


class ConfigurationError(AuthnWidgetError):
    """Widget cannot start: base URL or flow identifier is unusable."""


class MissingFlowIdentifier(ConfigurationError):
    def __init__(self, message: str = "Must provide flowId as a query string parameter"):
        super().__init__(message)


class ValidationError(AuthnWidgetError):
    """Submission is missing required fields; nothing was sent."""

    def __init__(self, action: str, missing: tuple[str, ...] | list[str]):
        self.action = action
        self.missing = tuple(missing)
        super().__init__(
            f'Missing required attributes for "{action}": {", ".join(self.missing)}'
        )


MissingRequiredFields = ValidationError


class TransportError(AuthnWidgetError):
    """Network failure talking to the flow resource."""


class ProtocolError(TransportError):
    """The flow resource answered, but not with a usable flow document."""

    def __init__(self, message: str, status_code: int | None = None, payload: Any = None):
        self.status_code = status_code
        self.payload = payload
        super().__init__(message)


class TemplateMissing(AuthnWidgetError):
    def __init__(self, key: str):
        self.key = key
        super().__init__(f"Failed to load template: {key}")
