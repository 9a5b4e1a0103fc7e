"""
Answer synthesizer implementation.

Streams the final answer from the accumulated search and scrape evidence.
"""

import logging
from datetime import datetime

from ..context import SystemContext
from .base_agent import BaseAgent, format_current_datetime

logger = logging.getLogger("deep_search")

FINAL_INSTRUCTION = (
    "IMPORTANT: We may not have all the information we need to answer the question "
    "completely, but we need to make our best effort based on the available "
    "information. Be honest about any limitations or uncertainties."
)

COMPREHENSIVE_INSTRUCTION = (
    "You have comprehensive information from multiple sources. "
    "Provide a detailed and accurate answer."
)

ANSWER_PROMPT = """You are a helpful AI assistant with access to real-time web search capabilities. The current date and time is {current_datetime}.

Your goal is to answer the user's question: "{question}"

{mode_instruction}

Guidelines:
- Always format URLs as markdown links using the format [title](url)
- Be thorough but concise in your responses
- When providing information, always include the source where you found it using markdown links
- Never include raw URLs - always use markdown link format
- When users ask for up-to-date information, use the current date to provide context about how recent the information is
- If you're unsure about something, acknowledge the uncertainty

Current context from web searches and scraped content:

{query_history}

{scrape_history}

Based on the above information, provide a comprehensive answer to the user's question."""


def build_answer_prompt(
    context: SystemContext,
    question: str,
    *,
    is_final: bool,
    now: datetime | None = None,
) -> str:
    return ANSWER_PROMPT.format(
        current_datetime=format_current_datetime(now),
        question=question,
        mode_instruction=FINAL_INSTRUCTION if is_final else COMPREHENSIVE_INSTRUCTION,
        query_history=context.get_query_history(),
        scrape_history=context.get_scrape_history(),
    )


class Answerer(BaseAgent):
    """Produces the final natural-language answer."""

    async def answer_question(
        self,
        context: SystemContext,
        question: str,
        *,
        is_final: bool,
        now: datetime | None = None,
    ) -> str:
        """
        Generate an answer and return it once the stream has completed.

        Args:
            context: Evidence gathered by the loop
            question: The user's question
            is_final: True when the step budget ran out (best-effort answer)
            now: Current time to embed in the prompt (default: now)
        """
        prompt = build_answer_prompt(context, question, is_final=is_final, now=now)
        agent = self.create_agent()

        chunks: list[str] = []
        async for event in agent.stream_async(prompt):
            if "data" in event:
                chunks.append(event["data"])

        answer = "".join(chunks)
        logger.info(
            f"📝 Answer generated ({len(answer)} chars, best effort: {is_final})"
        )
        return answer
