"""Create chat model adapters from ``provider:model`` identifiers."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, Optional

from pydantic_ai.models import Model, infer_model
from pydantic_ai.models.anthropic import AnthropicModel
from pydantic_ai.models.google import GoogleModel
from pydantic_ai.models.openai import OpenAIChatModel
from pydantic_ai.providers.anthropic import AnthropicProvider
from pydantic_ai.providers.google import GoogleProvider
from pydantic_ai.providers.openai import OpenAIProvider
from pydantic_ai.settings import ModelSettings

from .adapter import ChatModelAdapter, PydanticAIChatModel

logger = logging.getLogger(__name__)


def _create_openai_model(model_name: str, api_key: str) -> Model:
    return OpenAIChatModel(model_name, provider=OpenAIProvider(api_key=api_key))


def _create_anthropic_model(model_name: str, api_key: str) -> Model:
    return AnthropicModel(model_name, provider=AnthropicProvider(api_key=api_key))


def _create_google_model(model_name: str, api_key: str) -> Model:
    return GoogleModel(model_name, provider=GoogleProvider(api_key=api_key))


_PROVIDER_BUILDERS: Dict[str, Callable[[str, str], Model]] = {
    "openai": _create_openai_model,
    "anthropic": _create_anthropic_model,
    "google": _create_google_model,
    "google-gla": _create_google_model,
}


@dataclass
class ChatModelFactory:
    """Builds and caches one adapter per model identifier.

    Identifiers use pydantic-ai's ``provider:model`` form (``openai:gpt-4o``).
    When an API key is configured for the provider it is passed explicitly;
    otherwise pydantic-ai infers the model and reads the provider's standard
    environment variable.
    """

    default_model: str
    api_keys: Dict[str, str] = field(default_factory=dict)
    model_settings: Optional[ModelSettings] = None
    _cache: Dict[str, ChatModelAdapter] = field(default_factory=dict, init=False, repr=False)

    def get(self, model_id: Optional[str] = None) -> ChatModelAdapter:
        key = model_id or self.default_model
        adapter = self._cache.get(key)
        if adapter is None:
            adapter = PydanticAIChatModel(self._build(key), model_settings=self.model_settings)
            self._cache[key] = adapter
        return adapter

    def register(self, model_id: str, adapter: ChatModelAdapter) -> None:
        """Install a prebuilt adapter, e.g. a local or scripted model."""
        self._cache[model_id] = adapter

    def _build(self, model_id: str) -> Model:
        provider, sep, model_name = model_id.partition(":")
        builder = _PROVIDER_BUILDERS.get(provider.lower()) if sep else None
        api_key = self.api_keys.get(provider.lower()) if sep else None
        if builder is not None and api_key:
            logger.debug(f"Creating {provider} model {model_name} with configured API key")
            return builder(model_name, api_key)
        logger.debug(f"Inferring pydantic-ai model for {model_id}")
        return infer_model(model_id)
