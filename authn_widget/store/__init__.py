from authn_widget.store.flow_store import GET_FLOW, POST_FLOW, FlowStore
from authn_widget.store.transport import FlowTransport

__all__ = ["GET_FLOW", "POST_FLOW", "FlowStore", "FlowTransport"]
