"""Inter-app action dispatch."""

from superbridge.rpc.protocol import DispatchOutcome, InboundRequest, NoReply, Reply
from superbridge.rpc.router import ActionRouter, OperationDescriptor

__all__ = ["ActionRouter", "DispatchOutcome", "InboundRequest", "NoReply", "OperationDescriptor", "Reply"]
