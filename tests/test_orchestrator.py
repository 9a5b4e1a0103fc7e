"""
Unit tests for DeepSearchOrchestrator.

Tests collaborator wiring, result assembly and error wrapping.
"""

from unittest.mock import AsyncMock, Mock, patch

import pytest

from deep_search.actions import AnswerAction, SearchAction
from deep_search.errors import DeepSearchError
from deep_search.orchestrator import DeepSearchOrchestrator, create_orchestrator
from deep_search.settings import Settings
from deep_search.web.crawler import WebCrawler
from deep_search.web.search import SearchCache


@pytest.fixture
def settings(tmp_path):
    return Settings(
        _env_file=None,
        serper_api_key="test-key",
        max_steps=3,
        search_results_count=5,
        search_cache_dir=str(tmp_path / "cache"),
    )


@pytest.fixture
def mock_cache():
    return Mock()


@pytest.fixture
def mock_crawler():
    crawler = Mock()
    crawler.bulk_crawl_websites = AsyncMock(return_value={"success": True, "results": []})
    return crawler


@pytest.fixture
def orchestrator(settings, mock_cache, mock_crawler):
    """Create DeepSearchOrchestrator with mocked model and logging."""
    with (
        patch("deep_search.orchestrator.create_model") as mock_create_model,
        patch("deep_search.orchestrator.setup_logging") as mock_setup_logging,
    ):
        mock_create_model.return_value = Mock()
        mock_setup_logging.return_value = Mock()
        return DeepSearchOrchestrator(
            cache=mock_cache, crawler=mock_crawler, settings=settings
        )


def scripted_chooser(*actions):
    chooser = Mock()
    chooser.get_next_action = AsyncMock(side_effect=list(actions))
    return chooser


def scripted_answerer(text):
    answerer = Mock()
    answerer.answer_question = AsyncMock(return_value=text)
    return answerer


class TestDeepSearchOrchestrator:
    """Test cases for DeepSearchOrchestrator functionality."""

    def test_initialization(self, settings, mock_cache, mock_crawler):
        with (
            patch("deep_search.orchestrator.create_model") as mock_create_model,
            patch("deep_search.orchestrator.setup_logging") as mock_setup_logging,
        ):
            mock_model = Mock()
            mock_create_model.return_value = mock_model
            callback = Mock()

            orchestrator = DeepSearchOrchestrator(
                callback, cache=mock_cache, crawler=mock_crawler, settings=settings
            )

            mock_create_model.assert_called_once_with(settings=settings)
            mock_setup_logging.assert_called_once()
            assert orchestrator.chooser.model is mock_model
            assert orchestrator.answerer.model is mock_model
            assert orchestrator.annotation_callback is callback

    @pytest.mark.asyncio
    async def test_search_web_uses_settings(self, orchestrator, mock_cache):
        items = [{"title": "t", "link": "https://a", "snippet": "s", "date": ""}]
        with patch(
            "deep_search.orchestrator.search_serper",
            AsyncMock(return_value={"query": "q", "results": items}),
        ) as mock_search:
            results = await orchestrator.search_web("q")

        assert results == items
        mock_search.assert_awaited_once_with(
            "q", 5, api_key="test-key", cache=mock_cache
        )

    @pytest.mark.asyncio
    async def test_scrape_urls_delegates_to_crawler(self, orchestrator, mock_crawler):
        await orchestrator.scrape_urls(["https://a"])
        mock_crawler.bulk_crawl_websites.assert_awaited_once_with(["https://a"])

    @pytest.mark.asyncio
    async def test_answer_returns_result(self, orchestrator):
        orchestrator.chooser = scripted_chooser(
            SearchAction(title="Searching", reasoning="r", query="q"),
            AnswerAction(title="Answering", reasoning="r"),
        )
        orchestrator.answerer = scripted_answerer("Final [answer](https://a).")
        orchestrator.search_web = AsyncMock(return_value=[])

        result = await orchestrator.answer("question")

        assert result["question"] == "question"
        assert result["answer"] == "Final [answer](https://a)."
        assert [a["type"] for a in result["actions"]] == ["search", "answer"]
        assert result["steps"] == 1
        assert result["best_effort"] is False
        assert "generated_at" in result

    @pytest.mark.asyncio
    async def test_answer_respects_configured_budget(self, orchestrator):
        search = SearchAction(title="Searching", reasoning="r", query="q")
        orchestrator.chooser = scripted_chooser(search, search, search)
        orchestrator.answerer = scripted_answerer("best effort")
        orchestrator.search_web = AsyncMock(return_value=[])

        result = await orchestrator.answer("question")

        assert result["steps"] == 3
        assert result["best_effort"] is True
        assert orchestrator.chooser.get_next_action.await_count == 3
        assert orchestrator.answerer.answer_question.await_args.kwargs == {
            "is_final": True
        }

    @pytest.mark.asyncio
    async def test_answer_emits_annotations(self, orchestrator):
        annotations = []
        orchestrator.annotation_callback = annotations.append
        orchestrator.chooser = scripted_chooser(
            AnswerAction(title="Answering", reasoning="r")
        )
        orchestrator.answerer = scripted_answerer("done")

        await orchestrator.answer("question")

        assert annotations == [
            {
                "type": "NEW_ACTION",
                "action": {"title": "Answering", "reasoning": "r", "type": "answer"},
            }
        ]

    @pytest.mark.asyncio
    async def test_answer_wraps_failures(self, orchestrator):
        orchestrator.chooser = scripted_chooser(
            SearchAction(title="Searching", reasoning="r", query="q")
        )
        orchestrator.answerer = scripted_answerer("unused")
        orchestrator.search_web = AsyncMock(side_effect=RuntimeError("search down"))

        with pytest.raises(DeepSearchError, match="search down") as exc_info:
            await orchestrator.answer("question")

        assert isinstance(exc_info.value.__cause__, RuntimeError)
        orchestrator.answerer.answer_question.assert_not_called()


class TestCreateOrchestrator:
    """Test cases for the orchestrator factory."""

    def test_builds_cache_and_crawler_from_settings(self, settings):
        with (
            patch("deep_search.orchestrator.create_model"),
            patch("deep_search.orchestrator.setup_logging"),
        ):
            orchestrator = create_orchestrator(settings=settings)

        assert isinstance(orchestrator.cache, SearchCache)
        assert isinstance(orchestrator.crawler, WebCrawler)
        assert orchestrator.crawler.user_agent == settings.crawler_user_agent
        assert orchestrator.settings is settings
