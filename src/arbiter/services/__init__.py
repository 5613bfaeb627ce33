"""Business services for Arbiter."""

from arbiter.services.invocation import CallableInvoker, Invoker
from arbiter.services.method_service import MethodService

__all__ = [
    "CallableInvoker",
    "Invoker",
    "MethodService",
]
