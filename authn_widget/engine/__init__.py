from authn_widget.engine.registry import ActionSchemaRegistry, action_model, default_registry
from authn_widget.engine.validation import ValidationGate, ValidationResult

__all__ = ["ActionSchemaRegistry", "ValidationGate", "ValidationResult", "action_model", "default_registry"]
