"""Client-side orchestration of PingFederate-style authentication flows."""
from authn_widget.errors import (
    ConfigurationError,
    MissingFlowIdentifier,
    MissingRequiredFields,
    ProtocolError,
    TemplateMissing,
    TransportError,
    ValidationError,
)
from authn_widget.types import ActionId, ActionSchema, FlowState, FlowStatus
from authn_widget.widget import AuthnWidget

__all__ = [
    "ActionId",
    "ActionSchema",
    "AuthnWidget",
    "ConfigurationError",
    "FlowState",
    "FlowStatus",
    "MissingFlowIdentifier",
    "MissingRequiredFields",
    "ProtocolError",
    "TemplateMissing",
    "TransportError",
    "ValidationError",
]
