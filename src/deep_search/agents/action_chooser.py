"""
Action chooser implementation.

Asks the model for the next step of the research loop as a structured decision.
"""

import logging
from datetime import datetime

from ..actions import Action, ActionDecision
from ..context import SystemContext
from .base_agent import BaseAgent, format_current_datetime

logger = logging.getLogger("deep_search")

NEXT_ACTION_PROMPT = """
You are a helpful AI assistant with access to real-time web search capabilities. The current date and time is {current_datetime}.

Your goal is to help answer the user's question: "{question}"

You have three possible actions:
1. 'search' - Search the web for more information
2. 'scrape' - Scrape specific URLs to get detailed content
3. 'answer' - Answer the user's question when you have enough information

Guidelines:
- Always search the web for up-to-date information when relevant
- After finding relevant URLs from search results, scrape the most promising 4-6 URLs to get full content
- Choose diverse sources (news sites, blogs, official documentation, etc.)
- Prioritize official sources and authoritative websites
- Only answer when you have comprehensive information from multiple sources
- If you're unsure about something, search or scrape more sources to verify

Current context:

{query_history}

{scrape_history}

Based on the above context and the user's question, what should be the next action?
"""


def build_next_action_prompt(
    context: SystemContext, question: str, now: datetime | None = None
) -> str:
    return NEXT_ACTION_PROMPT.format(
        current_datetime=format_current_datetime(now),
        question=question,
        query_history=context.get_query_history(),
        scrape_history=context.get_scrape_history(),
    )


class ActionChooser(BaseAgent):
    """Chooses between searching, scraping and answering."""

    async def get_next_action(
        self, context: SystemContext, question: str, now: datetime | None = None
    ) -> Action:
        """
        Request the next action from the model.

        Args:
            context: Evidence gathered so far
            question: The user's question
            now: Current time to embed in the prompt (default: now)

        Returns:
            The validated action

        Raises:
            InvalidActionError: If the decision lacks the query or URLs its type requires
        """
        prompt = build_next_action_prompt(context, question, now)
        agent = self.create_agent()
        decision = await agent.structured_output_async(ActionDecision, prompt)
        action = decision.to_action()

        logger.info(
            f"🧭 Step {context.step}: chose '{action.type}' - {action.title}"
        )
        return action
