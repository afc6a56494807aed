"""Validation gate — shape-of-data checks before a submission leaves the client.

Policy for actions without a registered schema: the data passes through
unchanged. The server validates every submission anyway, so the client only
blocks what it knows is incomplete.
"""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from authn_widget.errors import ValidationError
from authn_widget.types import action_key

if TYPE_CHECKING:
    from collections.abc import Mapping

    from authn_widget.engine.registry import ActionSchemaRegistry
    from authn_widget.types import ActionId

logger = logging.getLogger(__name__)


# ─── Result type ───

class ValidationResult:
    def __init__(self, action: str, data: dict[str, Any], missing: tuple[str, ...] = (), known: bool = True):
        self.action = action
        self.data = data
        self.missing = missing
        self.known = known

    @property
    def ok(self) -> bool:
        return not self.missing

    def __bool__(self) -> bool:
        return self.ok

    def to_dict(self) -> dict:
        return {"action": self.action, "ok": self.ok, "missing": list(self.missing), "known": self.known}


# ─── Gate ───

class ValidationGate:
    def __init__(self, registry: ActionSchemaRegistry, *, filter_properties: bool = True):
        self.registry = registry
        self.filter_properties = filter_properties

    def check(self, action: ActionId | str, data: Mapping[str, Any] | None) -> ValidationResult:
        """Check ``data`` against the action's schema without raising."""
        name = action_key(action)
        submitted = dict(data or {})
        schema = self.registry.get(name)
        if schema is None:
            logger.debug("no action model for %s, passing data through", name)
            return ValidationResult(name, submitted, known=False)

        missing = schema.missing(submitted)
        if missing:
            logger.info("missing required attributes for %s: %s", name, ", ".join(missing))
            return ValidationResult(name, submitted, missing)

        if self.filter_properties and schema.properties:
            body = schema.forwarded(submitted)
            dropped = [k for k in submitted if k not in body]
            if dropped:
                logger.debug("dropping fields outside %s model: %s", name, ", ".join(dropped))
            submitted = body
        return ValidationResult(name, submitted)

    def validate(self, action: ActionId | str, data: Mapping[str, Any] | None) -> dict[str, Any]:
        """Body to send for ``action``; raises ValidationError when required fields are absent."""
        result = self.check(action, data)
        if not result.ok:
            raise ValidationError(result.action, result.missing)
        return result.data
