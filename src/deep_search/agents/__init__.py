"""
Agents package for the deep search loop.

LLM-backed components: the action chooser and the answer synthesizer.
"""

from .action_chooser import ActionChooser, build_next_action_prompt
from .answerer import Answerer, build_answer_prompt
from .base_agent import BaseAgent, format_current_datetime

__all__ = [
    "ActionChooser",
    "Answerer",
    "BaseAgent",
    "build_answer_prompt",
    "build_next_action_prompt",
    "format_current_datetime",
]
