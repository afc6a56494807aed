"""Tests for the validation gate.

Covers:
- every registered action rejects data missing any required field
- complete data is forwarded, filtered to the model's properties
- unregistered actions pass through unchanged (never rejected, never dropped)
"""
from __future__ import annotations

import pytest

from authn_widget.engine.registry import DEFAULT_ACTION_MODELS, ActionSchemaRegistry, default_registry
from authn_widget.engine.validation import ValidationGate
from authn_widget.errors import MissingRequiredFields, ValidationError
from authn_widget.types import ActionSchema

_MISSING_ONE = [
    (action.value, field)
    for action, schema in DEFAULT_ACTION_MODELS.items()
    for field in sorted(schema.required)
]


@pytest.fixture
def gate() -> ValidationGate:
    return ValidationGate(default_registry())


@pytest.mark.parametrize(("action", "dropped"), _MISSING_ONE)
def test_missing_required_field_is_rejected(gate, action, dropped):
    schema = DEFAULT_ACTION_MODELS[action]
    data = {f: "value" for f in schema.required if f != dropped}

    result = gate.check(action, data)
    assert not result
    assert result.missing == (dropped,)

    with pytest.raises(ValidationError) as exc:
        gate.validate(action, data)
    assert exc.value.missing == (dropped,)
    assert exc.value.action == action


@pytest.mark.parametrize("action", [a.value for a in DEFAULT_ACTION_MODELS])
def test_complete_data_is_forwarded_with_required_values_intact(gate, action):
    schema = DEFAULT_ACTION_MODELS[action]
    data = {f: f"{f}-value" for f in schema.required}
    data["notInModel"] = "junk"

    body = gate.validate(action, data)
    assert "notInModel" not in body
    for f in schema.required:
        assert body[f] == f"{f}-value"


def test_optional_properties_survive_filtering(gate):
    body = gate.validate("checkUsernamePassword", {
        "username": "bob", "password": "x", "rememberMyUsername": "on", "csrf": "t",
    })
    assert body == {"username": "bob", "password": "x", "rememberMyUsername": "on"}


def test_scenario_missing_password(gate):
    with pytest.raises(MissingRequiredFields) as exc:
        gate.validate("checkUsernamePassword", {"username": "bob"})
    assert list(exc.value.missing) == ["password"]
    assert "password" in str(exc.value)


def test_unregistered_action_passes_through_unchanged(gate):
    data = {"anything": "goes", "nested": {"a": 1}}
    result = gate.check("initiateAccountRecovery", data)
    assert result.ok
    assert not result.known
    assert result.data == data
    assert gate.validate("initiateAccountRecovery", data) == data


def test_unregistered_action_with_no_data_yields_empty_body(gate):
    assert gate.validate("continueAuthentication", None) == {}


def test_gate_does_not_mutate_input(gate):
    data = {"username": "bob", "password": "x", "extra": "1"}
    gate.validate("checkUsernamePassword", data)
    assert data == {"username": "bob", "password": "x", "extra": "1"}


def test_filtering_can_be_turned_off():
    gate = ValidationGate(default_registry(), filter_properties=False)
    body = gate.validate("checkRecoveryCode", {"recoveryCode": "123", "extra": "1"})
    assert body == {"recoveryCode": "123", "extra": "1"}


def test_schema_without_properties_forwards_everything():
    gate = ValidationGate(ActionSchemaRegistry({"checkOtp": ActionSchema.of(["otp"])}))
    assert gate.validate("checkOtp", {"otp": "1", "deviceRef": "d"}) == {"otp": "1", "deviceRef": "d"}


def test_required_fields_survive_a_schema_that_omits_them_from_properties():
    registry = ActionSchemaRegistry()
    registry.register("checkOtp", ActionSchema(required=frozenset({"otp"}), properties=frozenset({"deviceRef"})))
    gate = ValidationGate(registry)
    body = gate.validate("checkOtp", {"otp": "123456", "deviceRef": "d", "junk": "x"})
    assert body == {"otp": "123456", "deviceRef": "d"}


def test_schema_of_folds_required_into_properties():
    schema = ActionSchema.of(["otp"], ["deviceRef"])
    assert schema.properties == {"otp", "deviceRef"}
    assert ActionSchema.of(["otp"]).properties == frozenset()
    assert schema.forwarded({"otp": "1", "x": "2"}) == {"otp": "1"}


def test_presence_is_by_key_not_value(gate):
    # empty strings come from blank form inputs; the server judges their content
    body = gate.validate("checkUsernamePassword", {"username": "", "password": ""})
    assert body == {"username": "", "password": ""}


def test_result_to_dict(gate):
    assert gate.check("checkUsernamePassword", {"username": "bob"}).to_dict() == {
        "action": "checkUsernamePassword", "ok": False, "missing": ["password"], "known": True,
    }
