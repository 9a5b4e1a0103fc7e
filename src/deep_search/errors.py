"""
Exception types for the deep search agent.
"""


class DeepSearchError(RuntimeError):
    """Raised by the orchestrator when answering a question fails."""


class InvalidActionError(ValueError):
    """Raised when the model returns a decision that is missing a required field."""
