"""
Unit tests for the LLM-backed agents.

The strands Agent is patched out so the tests check prompt construction and
how structured and streamed output is consumed.
"""

from datetime import datetime
from unittest.mock import AsyncMock, Mock, patch

import pytest

from deep_search.actions import ActionDecision, ScrapeAction, SearchAction
from deep_search.agents import (
    ActionChooser,
    Answerer,
    BaseAgent,
    build_answer_prompt,
    build_next_action_prompt,
    format_current_datetime,
)
from deep_search.agents.answerer import COMPREHENSIVE_INSTRUCTION, FINAL_INSTRUCTION
from deep_search.context import SystemContext
from deep_search.errors import InvalidActionError

NOW = datetime(2025, 3, 14, 15, 9, 26)


@pytest.fixture
def context():
    ctx = SystemContext()
    ctx.report_queries(
        [
            {
                "query": "arsenal last match",
                "results": [
                    {
                        "date": "Mar 9, 2025",
                        "title": "Arsenal 1-1 Man Utd",
                        "url": "https://example.com/arsenal",
                        "snippet": "Match report",
                    }
                ],
            }
        ]
    )
    ctx.report_scrapes([{"url": "https://example.com/arsenal", "result": "Full report"}])
    return ctx


def stream_of(*chunks):
    async def _stream(prompt):
        yield {"init_event_loop": True}
        for chunk in chunks:
            yield {"data": chunk}
        yield {"result": Mock()}

    return _stream


class TestBaseAgent:
    """Test cases for BaseAgent"""

    def test_format_current_datetime(self):
        assert format_current_datetime(NOW) == "Friday, March 14, 2025 at 03:09:26 PM"

    @patch("deep_search.agents.base_agent.Agent")
    def test_create_agent_builds_fresh_agent(self, mock_agent_class):
        model = Mock()
        base = BaseAgent(model, system_prompt="be helpful")

        base.create_agent()
        base.create_agent()

        assert mock_agent_class.call_count == 2
        mock_agent_class.assert_called_with(
            model=model, system_prompt="be helpful", callback_handler=None
        )


class TestActionChooser:
    """Test cases for ActionChooser"""

    def test_prompt_contains_question_date_and_histories(self, context):
        prompt = build_next_action_prompt(context, "Who did Arsenal play?", NOW)

        assert 'answer the user\'s question: "Who did Arsenal play?"' in prompt
        assert "Friday, March 14, 2025 at 03:09:26 PM" in prompt
        assert context.get_query_history() in prompt
        assert context.get_scrape_history() in prompt
        assert "scrape the most promising 4-6 URLs" in prompt

    @pytest.mark.asyncio
    async def test_get_next_action_returns_validated_action(self, context):
        chooser = ActionChooser(Mock())
        agent = Mock()
        agent.structured_output_async = AsyncMock(
            return_value=ActionDecision(
                title="Searching", reasoning="need more", type="search", query="arsenal"
            )
        )

        with patch.object(chooser, "create_agent", return_value=agent):
            action = await chooser.get_next_action(context, "question", now=NOW)

        assert isinstance(action, SearchAction)
        assert action.query == "arsenal"
        output_model, prompt = agent.structured_output_async.await_args.args
        assert output_model is ActionDecision
        assert "Friday, March 14, 2025" in prompt

    @pytest.mark.asyncio
    async def test_get_next_action_scrape(self, context):
        chooser = ActionChooser(Mock())
        agent = Mock()
        agent.structured_output_async = AsyncMock(
            return_value=ActionDecision(
                title="Reading", reasoning="details", type="scrape", urls=["https://a"]
            )
        )

        with patch.object(chooser, "create_agent", return_value=agent):
            action = await chooser.get_next_action(context, "question")

        assert isinstance(action, ScrapeAction)
        assert action.urls == ("https://a",)

    @pytest.mark.asyncio
    async def test_get_next_action_rejects_incomplete_decision(self, context):
        chooser = ActionChooser(Mock())
        agent = Mock()
        agent.structured_output_async = AsyncMock(
            return_value=ActionDecision(title="Searching", reasoning="r", type="search")
        )

        with patch.object(chooser, "create_agent", return_value=agent):
            with pytest.raises(InvalidActionError):
                await chooser.get_next_action(context, "question")


class TestAnswerer:
    """Test cases for Answerer"""

    def test_comprehensive_prompt(self, context):
        prompt = build_answer_prompt(context, "question", is_final=False, now=NOW)

        assert COMPREHENSIVE_INSTRUCTION in prompt
        assert FINAL_INSTRUCTION not in prompt
        assert "[title](url)" in prompt
        assert context.get_scrape_history() in prompt

    def test_final_prompt(self, context):
        prompt = build_answer_prompt(context, "question", is_final=True, now=NOW)

        assert FINAL_INSTRUCTION in prompt
        assert COMPREHENSIVE_INSTRUCTION not in prompt

    @pytest.mark.asyncio
    async def test_answer_question_joins_streamed_text(self, context):
        answerer = Answerer(Mock())
        agent = Mock()
        agent.stream_async = stream_of("Arsenal drew ", "1-1 with ", "Man Utd.")

        with patch.object(answerer, "create_agent", return_value=agent):
            answer = await answerer.answer_question(
                context, "question", is_final=False
            )

        assert answer == "Arsenal drew 1-1 with Man Utd."

    @pytest.mark.asyncio
    async def test_answer_question_empty_stream(self, context):
        answerer = Answerer(Mock())
        agent = Mock()
        agent.stream_async = stream_of()

        with patch.object(answerer, "create_agent", return_value=agent):
            answer = await answerer.answer_question(context, "question", is_final=True)

        assert answer == ""
