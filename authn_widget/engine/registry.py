"""Action schema registry — which fields each submittable action needs."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from authn_widget.types import ActionId, ActionSchema, action_key

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Iterator, Mapping

logger = logging.getLogger(__name__)

DEFAULT_ACTION_MODELS: dict[ActionId, ActionSchema] = {
    ActionId.CHECK_USERNAME_PASSWORD: ActionSchema.of(
        ["username", "password"],
        ["username", "password", "rememberMyUsername", "thisIsMyDevice", "captchaResponse"],
    ),
    ActionId.USE_ALTERNATIVE_AUTHENTICATION_SOURCE: ActionSchema.of(
        ["authenticationSource"], ["authenticationSource"],
    ),
    ActionId.CHECK_USERNAME_RECOVERY_EMAIL: ActionSchema.of(
        ["email"], ["email", "captchaResponse"],
    ),
    ActionId.CHECK_ACCOUNT_RECOVERY_USERNAME: ActionSchema.of(
        ["username"], ["username", "captchaResponse"],
    ),
    ActionId.CHECK_NEW_PASSWORD: ActionSchema.of(
        ["username", "existingPassword", "newPassword"],
        ["username", "existingPassword", "newPassword", "captchaResponse"],
    ),
    ActionId.CHECK_PASSWORD_RESET: ActionSchema.of(["newPassword"], ["newPassword"]),
    ActionId.CHECK_RECOVERY_CODE: ActionSchema.of(["recoveryCode"], ["recoveryCode"]),
    ActionId.CHECK_CHALLENGE_RESPONSE: ActionSchema.of(["challengeResponse"], ["challengeResponse"]),
}


@dataclass
class ActionModel:
    name: str
    schema: ActionSchema


def action_model(*required: str):
    """Factory for declaring an action schema in code.

    Usage::

        from authn_widget.engine.registry import action_model

        @action_model("otp")
        def checkOtp():
            return {"properties": ["deviceRef"]}

    The function name is the action id; ``required`` fields are always
    forwarded (see ActionSchema.of).
    """
    def decorator(fn: Callable[[], Mapping[str, Any] | None]) -> ActionModel:
        config = fn() or {}
        properties = config.get("properties", ())
        return ActionModel(
            name=config.get("name", fn.__name__),
            schema=ActionSchema.of(required, properties),
        )
    return decorator


class ActionSchemaRegistry:
    """Instance-owned mapping of action id to ActionSchema.

    An action without a schema is not an error here; the validation gate
    decides what an unknown action means.
    """

    def __init__(self, models: Mapping[ActionId | str, ActionSchema] | None = None):
        self._models: dict[str, ActionSchema] = {}
        for action, schema in (models or {}).items():
            self.register(action, schema)

    def register(self, action: ActionId | str, schema: ActionSchema) -> None:
        key = action_key(action)
        if not key:
            raise ValueError("Action id must be a non-empty string")
        if key in self._models:
            logger.debug("overwriting action model %s", key)
        self._models[key] = schema

    def register_model(self, model: ActionModel) -> None:
        self.register(model.name, model.schema)

    def get(self, action: ActionId | str) -> ActionSchema | None:
        return self._models.get(action_key(action))

    def actions(self) -> list[str]:
        return list(self._models)

    def update(self, models: Iterable[ActionModel]) -> None:
        for model in models:
            self.register_model(model)

    def __contains__(self, action: object) -> bool:
        if not isinstance(action, str):
            return False
        return action_key(action) in self._models

    def __iter__(self) -> Iterator[str]:
        return iter(self._models)

    def __len__(self) -> int:
        return len(self._models)


def default_registry() -> ActionSchemaRegistry:
    return ActionSchemaRegistry(DEFAULT_ACTION_MODELS)
