"""
Logger Configuration Module

Handles logging and telemetry setup for deep search runs.
"""

import logging
import os
from pathlib import Path

from dotenv import load_dotenv
from strands.telemetry import StrandsTelemetry

# Load environment variables from .env file
load_dotenv()

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

strands_telemetry: StrandsTelemetry | None = None
research_logger: logging.Logger | None = None


def setup_telemetry() -> StrandsTelemetry:
    """Initialize Strands telemetry, exporting over OTLP when an endpoint is configured."""
    global strands_telemetry
    if strands_telemetry is None:
        strands_telemetry = StrandsTelemetry()
        if "OTEL_EXPORTER_OTLP_ENDPOINT" in os.environ:
            strands_telemetry.setup_otlp_exporter()
    return strands_telemetry


def _add_file_handler(
    logger: logging.Logger, filename: str, fmt: str = LOG_FORMAT
) -> None:
    handler = logging.FileHandler(Path("logs") / filename, encoding="utf-8")
    handler.setFormatter(logging.Formatter(fmt))
    logger.addHandler(handler)


def create_logger() -> logging.Logger:
    # Create logs directory if it doesn't exist
    Path("logs").mkdir(parents=True, exist_ok=True)

    # Configure strands logger to write to file
    strands_logger = logging.getLogger("strands")
    strands_logger.setLevel(logging.DEBUG)
    _add_file_handler(strands_logger, "strands_agents.log")

    # Crawler diagnostics
    web_logger = logging.getLogger("web_content")
    web_logger.setLevel(logging.DEBUG)
    _add_file_handler(
        web_logger, "web_content.log", "%(asctime)s - %(levelname)s - %(message)s"
    )

    # Agent loop progress, actions and answers
    deep_search_logger = logging.getLogger("deep_search")
    deep_search_logger.setLevel(logging.INFO)
    _add_file_handler(deep_search_logger, "deep_search.log")

    return deep_search_logger


def setup_logging() -> logging.Logger:
    global research_logger
    if research_logger is None:
        setup_telemetry()
        research_logger = create_logger()
    return research_logger
