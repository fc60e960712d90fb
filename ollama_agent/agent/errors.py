"""Run-level error types for the agent loop.

Tool problems never surface here; they become tool messages. These errors
abort the current run and propagate to its caller.
"""

from __future__ import annotations


class AgentError(Exception):
    """Base class for failures that abort an agent run."""


class ModelInvocationError(AgentError):
    """Raised when the model backend cannot be reached or fails.

    Attributes:
        model: Name of the model that was being called.
        cause: The original exception raised by the backend.
    """

    def __init__(self, model: str, cause: BaseException):
        self.model = model
        self.cause = cause
        super().__init__(f"Model '{model}' invocation failed: {cause!r}")


class MaxRoundTripsExceeded(AgentError):
    """Raised when the model asks for tools after the last allowed round trip.

    Attributes:
        limit: The configured cap.
    """

    def __init__(self, limit: int):
        self.limit = limit
        super().__init__(
            f"Agent exceeded the maximum of {limit} model/tool round trips"
        )
