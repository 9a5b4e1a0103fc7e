"""
Model Provider Factory

Creates the strands model used for action selection and answer synthesis.
"""

from botocore.config import Config as BotocoreConfig
from strands.models.bedrock import BedrockModel
from strands.models.model import Model
from strands.models.ollama import OllamaModel

from .settings import Settings, get_settings


class ModelFactory:
    """Factory for creating model instances based on configuration."""

    @staticmethod
    def create_model(
        settings: Settings | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
        **kwargs,
    ) -> Model:
        """
        Create a model instance based on configuration.

        Args:
            settings: Settings to read provider and model ids from (default: cached settings)
            temperature: Model temperature override (0.0-1.0)
            max_tokens: Maximum tokens for generation
            **kwargs: Additional model-specific parameters

        Returns:
            Configured model instance
        """
        settings = settings or get_settings()
        temperature = (
            temperature if temperature is not None else settings.model_temperature
        )

        if settings.model_type == "ollama":
            return ModelFactory._create_ollama_model(settings, temperature, **kwargs)
        return ModelFactory._create_bedrock_model(
            settings, temperature, max_tokens, **kwargs
        )

    @staticmethod
    def _create_ollama_model(
        settings: Settings, temperature: float, **kwargs
    ) -> OllamaModel:
        """Create an Ollama model instance."""
        config = {
            "host": settings.ollama_host,
            "model_id": settings.ollama_model,
            "temperature": temperature,
        }
        config.update(kwargs)
        return OllamaModel(**config)  # type: ignore[arg-type]

    @staticmethod
    def _create_bedrock_model(
        settings: Settings,
        temperature: float,
        max_tokens: int | None = None,
        **kwargs,
    ) -> BedrockModel:
        """Create a Bedrock model instance with adaptive retries for throttling."""
        model_id = settings.bedrock_model

        if max_tokens is None:
            max_tokens = 8000 if "claude-3-5-sonnet" in model_id else 10000

        boto_config = BotocoreConfig(
            retries={
                "max_attempts": 10,
                "mode": "adaptive",
            },
            connect_timeout=30,
            read_timeout=120,
        )

        config = {
            "model_id": model_id,
            "temperature": temperature,
            "max_tokens": max_tokens,
            "streaming": "claude" in model_id,
            "boto_client_config": boto_config,
        }
        config.update(kwargs)
        return BedrockModel(**config)  # type: ignore[arg-type]


def create_model(**kwargs) -> Model:
    """Convenience function to create a model using the factory."""
    return ModelFactory.create_model(**kwargs)
