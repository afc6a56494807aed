from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Mapping

    Listener = Callable[["FlowState | None", "FlowState"], None]

# ─── Flow statuses ───

class FlowStatus(str, Enum):
    USERNAME_PASSWORD_REQUIRED = "USERNAME_PASSWORD_REQUIRED"
    MUST_CHANGE_PASSWORD = "MUST_CHANGE_PASSWORD"
    NEW_PASSWORD_RECOMMENDED = "NEW_PASSWORD_RECOMMENDED"
    NEW_PASSWORD_REQUIRED = "NEW_PASSWORD_REQUIRED"
    SUCCESSFUL_PASSWORD_CHANGE = "SUCCESSFUL_PASSWORD_CHANGE"
    ACCOUNT_RECOVERY_USERNAME_REQUIRED = "ACCOUNT_RECOVERY_USERNAME_REQUIRED"
    ACCOUNT_RECOVERY_OTL_VERIFICATION_REQUIRED = "ACCOUNT_RECOVERY_OTL_VERIFICATION_REQUIRED"
    RECOVERY_CODE_REQUIRED = "RECOVERY_CODE_REQUIRED"
    PASSWORD_RESET_REQUIRED = "PASSWORD_RESET_REQUIRED"
    SUCCESSFUL_PASSWORD_RESET = "SUCCESSFUL_PASSWORD_RESET"
    USERNAME_RECOVERY_EMAIL_REQUIRED = "USERNAME_RECOVERY_EMAIL_REQUIRED"
    USERNAME_RECOVERY_EMAIL_SENT = "USERNAME_RECOVERY_EMAIL_SENT"
    SUCCESSFUL_ACCOUNT_UNLOCK = "SUCCESSFUL_ACCOUNT_UNLOCK"
    IDENTIFIER_REQUIRED = "IDENTIFIER_REQUIRED"
    RESUME = "RESUME"  # terminal: hand control back via resumeUrl

    @classmethod
    def parse(cls, value: str | None) -> FlowStatus | None:
        """Known member for ``value``, or None for statuses the client doesn't know."""
        if not value:
            return None
        try:
            return cls(value)
        except ValueError:
            return None


# Statuses that get a screen and default event wiring out of the box
CORE_STATES: tuple[FlowStatus, ...] = tuple(s for s in FlowStatus if s is not FlowStatus.RESUME)

# ─── Actions ───

class ActionId(str, Enum):
    CHECK_USERNAME_PASSWORD = "checkUsernamePassword"
    USE_ALTERNATIVE_AUTHENTICATION_SOURCE = "useAlternativeAuthenticationSource"
    CHECK_USERNAME_RECOVERY_EMAIL = "checkUsernameRecoveryEmail"
    CHECK_ACCOUNT_RECOVERY_USERNAME = "checkAccountRecoveryUsername"
    CHECK_NEW_PASSWORD = "checkNewPassword"
    CHECK_PASSWORD_RESET = "checkPasswordReset"
    CHECK_RECOVERY_CODE = "checkRecoveryCode"
    CHECK_CHALLENGE_RESPONSE = "checkChallengeResponse"

    @classmethod
    def parse(cls, value: str) -> ActionId | None:
        try:
            return cls(value)
        except ValueError:
            return None


def action_key(action: ActionId | str) -> str:
    """Wire name of an action; extension actions are plain strings."""
    return action.value if isinstance(action, ActionId) else str(action)


def status_key(status: FlowStatus | str) -> str:
    return status.value if isinstance(status, FlowStatus) else str(status)


# ─── Action schema ───

@dataclass(frozen=True)
class ActionSchema:
    required: frozenset[str] = frozenset()
    properties: frozenset[str] = frozenset()  # empty = forward every key

    @classmethod
    def of(cls, required: Iterable[str] = (), properties: Iterable[str] = ()) -> ActionSchema:
        """Schema with required fields folded into a non-empty ``properties``."""
        req, props = frozenset(required), frozenset(properties)
        return cls(required=req, properties=props | req if props else props)

    def forwarded(self, data: Mapping[str, Any]) -> dict[str, Any]:
        """``data`` limited to the model's fields; required fields are always kept."""
        if not self.properties:
            return dict(data)
        keep = self.properties | self.required
        return {k: v for k, v in data.items() if k in keep}

    def missing(self, data: Mapping[str, Any]) -> tuple[str, ...]:
        return tuple(sorted(k for k in self.required if k not in data))


# ─── Flow runtime state ───

@dataclass(frozen=True)
class FlowState:
    status: str
    resume_url: str | None = None
    payload: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> FlowState:
        doc = dict(payload)
        status = str(doc.get("status") or "")
        resume_url = doc.get("resumeUrl") if status == FlowStatus.RESUME.value else None
        return cls(status=status, resume_url=resume_url, payload=MappingProxyType(doc))

    @property
    def known_status(self) -> FlowStatus | None:
        return FlowStatus.parse(self.status)

    @property
    def is_terminal(self) -> bool:
        return self.status == FlowStatus.RESUME.value

    def context(self) -> dict[str, Any]:
        """Fresh copy of the server document for template rendering."""
        return dict(self.payload)
