"""
Deep Search Package

A web question-answering agent built on the Strands Agents framework. A bounded
loop lets the model search the web, scrape pages and finally answer.
"""

from deep_search.actions import (
    Action,
    ActionDecision,
    AnswerAction,
    ScrapeAction,
    SearchAction,
    parse_action,
)
from deep_search.agent_loop import AgentLoop, run_agent_loop
from deep_search.context import SystemContext
from deep_search.errors import DeepSearchError, InvalidActionError
from deep_search.logger import setup_logging
from deep_search.orchestrator import DeepSearchOrchestrator, create_orchestrator

__version__ = "1.0.0"
__all__ = [
    "Action",
    "ActionDecision",
    "AgentLoop",
    "AnswerAction",
    "DeepSearchError",
    "DeepSearchOrchestrator",
    "InvalidActionError",
    "ScrapeAction",
    "SearchAction",
    "SystemContext",
    "create_orchestrator",
    "parse_action",
    "run_agent_loop",
    "setup_logging",
]
