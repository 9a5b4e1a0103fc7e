"""
Base agent functionality and common utilities.
"""

from datetime import datetime

from strands import Agent
from strands.models.model import Model


def format_current_datetime(now: datetime | None = None) -> str:
    """Human readable date and time embedded in every prompt."""
    return (now or datetime.now()).strftime("%A, %B %d, %Y at %I:%M:%S %p")


class BaseAgent:
    """Base class for the loop's LLM-backed components."""

    def __init__(self, model: Model, system_prompt: str | None = None):
        """
        Initialize base agent.

        Args:
            model: Model instance for this agent
            system_prompt: Optional system prompt defining agent behavior
        """
        self.model = model
        self.system_prompt = system_prompt

    def create_agent(self) -> Agent:
        """
        Create a fresh strands agent.

        Every call gets its own agent so no conversation history leaks between
        loop iterations; all state lives in the prompt.
        """
        return Agent(
            model=self.model,
            system_prompt=self.system_prompt,
            callback_handler=None,
        )
