"""
Generative clients for vibeprompt.

Thin, swappable boundary around hosted model SDKs:
- OpenAICompatibleClient: any OpenAI-compatible endpoint (Gemini's OpenAI
  endpoint by default, OpenRouter, Azure-style gateways)
- AnthropicClient: Claude via the Anthropic API

One network round-trip per call and no retries here; the structured
generation engine owns retry policy. Every failure is raised as a
TransportError with a structured ``kind``.
"""

import copy
import dataclasses
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Sequence

import anthropic
import openai

from .errors import ModelUnsupportedError, TransportError

logger = logging.getLogger(__name__)

GEMINI_OPENAI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta/openai/"
DEFAULT_MODEL = "gemini-2.5-flash"

ALLOWED_IMAGE_MIME_TYPES = frozenset({
    "image/jpeg",
    "image/jpg",
    "image/png",
    "image/webp",
    "image/gif",
    "image/heic",
    "image/heif",
})


@dataclass(frozen=True)
class ImageInput:
    """Base64 image (no ``data:`` prefix) plus its MIME type."""

    base64_data: str
    mime_type: str

    def __post_init__(self):
        if not self.base64_data:
            raise ValueError("ImageInput.base64_data is required")
        if self.base64_data.startswith("data:"):
            raise ValueError("ImageInput.base64_data must be raw base64, not a data: URI")
        if self.mime_type not in ALLOWED_IMAGE_MIME_TYPES:
            allowed = ", ".join(sorted(ALLOWED_IMAGE_MIME_TYPES))
            raise ValueError(f"Unsupported image mime type '{self.mime_type}'. Allowed: {allowed}")

    @property
    def normalized_mime_type(self) -> str:
        return "image/jpeg" if self.mime_type == "image/jpg" else self.mime_type

    def data_uri(self) -> str:
        return f"data:{self.normalized_mime_type};base64,{self.base64_data}"


@dataclass(frozen=True)
class ClientConfig:
    """Per-process generation settings. Fixed at construction, not per call."""

    model: str = DEFAULT_MODEL
    temperature: float = 0.7
    max_output_tokens: int = 8192
    top_p: float = 0.95
    request_timeout: float = 60.0


class GenerativeClient(ABC):
    """Abstract model boundary. The engine depends ONLY on this interface."""

    config: ClientConfig

    @property
    def model(self) -> str:
        return self.config.model

    @abstractmethod
    async def generate_text(self, prompt: str) -> str:
        """Single text completion."""
        raise NotImplementedError

    @abstractmethod
    async def generate_multimodal(self, prompt: str, images: Sequence[ImageInput]) -> str:
        """Single completion with 1..N images attached ahead of the prompt."""
        raise NotImplementedError

    def with_model(self, model: str) -> "GenerativeClient":
        """Sibling client for another model, sharing the underlying SDK handle."""
        sibling = copy.copy(self)
        sibling.config = dataclasses.replace(self.config, model=model)
        return sibling


def _classify_openai_error(exc: Exception, model: str) -> TransportError:
    """Map an OpenAI SDK exception to a structured TransportError."""
    if isinstance(exc, openai.APITimeoutError):
        return TransportError(f"Request to {model} timed out", kind="timeout", model=model)
    if isinstance(exc, openai.APIConnectionError):
        return TransportError(f"Connection error calling {model}: {exc}", kind="network", model=model)
    if isinstance(exc, openai.NotFoundError):
        return ModelUnsupportedError(f"Model {model} not available: {exc}", model=model, status_code=404)
    if isinstance(exc, openai.APIStatusError):
        return TransportError(
            f"{model} returned HTTP {exc.status_code}: {exc}",
            kind="status",
            model=model,
            status_code=exc.status_code,
        )
    return TransportError(f"Unexpected error calling {model}: {exc}", kind="network", model=model)


def _classify_anthropic_error(exc: Exception, model: str) -> TransportError:
    """Map an Anthropic SDK exception to a structured TransportError."""
    if isinstance(exc, anthropic.APITimeoutError):
        return TransportError(f"Request to {model} timed out", kind="timeout", model=model)
    if isinstance(exc, anthropic.APIConnectionError):
        return TransportError(f"Connection error calling {model}: {exc}", kind="network", model=model)
    if isinstance(exc, anthropic.NotFoundError):
        return ModelUnsupportedError(f"Model {model} not available: {exc}", model=model, status_code=404)
    if isinstance(exc, anthropic.APIStatusError):
        return TransportError(
            f"{model} returned HTTP {exc.status_code}: {exc}",
            kind="status",
            model=model,
            status_code=exc.status_code,
        )
    return TransportError(f"Unexpected error calling {model}: {exc}", kind="network", model=model)


class OpenAICompatibleClient(GenerativeClient):
    """Chat completions against an OpenAI-compatible endpoint."""

    def __init__(
        self,
        api_key: str | None,
        config: ClientConfig | None = None,
        base_url: str | None = GEMINI_OPENAI_BASE_URL,
    ):
        if not api_key:
            raise EnvironmentError(
                "No API key configured. Set GEMINI_API_KEY (or OPENAI_API_KEY) in your .env file "
                "or export it as an environment variable."
            )
        self.config = config or ClientConfig()
        self.base_url = base_url
        self.client = openai.AsyncOpenAI(
            api_key=api_key,
            base_url=base_url,
            timeout=self.config.request_timeout,
            max_retries=0,
        )

    async def _complete(self, content) -> str:
        model = self.config.model
        try:
            response = await self.client.chat.completions.create(
                model=model,
                messages=[{"role": "user", "content": content}],
                temperature=self.config.temperature,
                top_p=self.config.top_p,
                max_tokens=self.config.max_output_tokens,
            )
        except openai.OpenAIError as exc:
            raise _classify_openai_error(exc, model) from exc

        if not response.choices:
            raise TransportError(f"{model} returned no choices", kind="empty_response", model=model)
        choice = response.choices[0]
        if choice.finish_reason == "content_filter":
            raise TransportError(
                f"{model} rejected the request (content filter)", kind="content_rejected", model=model
            )
        text = choice.message.content
        if not text:
            raise TransportError(f"{model} returned an empty completion", kind="empty_response", model=model)
        return text

    async def generate_text(self, prompt: str) -> str:
        return await self._complete(prompt)

    async def generate_multimodal(self, prompt: str, images: Sequence[ImageInput]) -> str:
        if not images:
            raise ValueError("generate_multimodal requires at least one image")
        content = [
            {"type": "image_url", "image_url": {"url": image.data_uri()}}
            for image in images
        ]
        content.append({"type": "text", "text": prompt})
        return await self._complete(content)


class AnthropicClient(GenerativeClient):
    """Claude via the Anthropic Messages API."""

    def __init__(self, api_key: str | None, config: ClientConfig | None = None):
        if not api_key:
            raise EnvironmentError(
                "ANTHROPIC_API_KEY not set. Add it to your .env file or export it as an environment variable."
            )
        self.config = config or ClientConfig(model="claude-sonnet-4-5")
        self.client = anthropic.AsyncAnthropic(
            api_key=api_key,
            timeout=self.config.request_timeout,
            max_retries=0,
        )

    async def _complete(self, content) -> str:
        model = self.config.model
        try:
            response = await self.client.messages.create(
                model=model,
                max_tokens=self.config.max_output_tokens,
                temperature=self.config.temperature,
                messages=[{"role": "user", "content": content}],
            )
        except anthropic.AnthropicError as exc:
            raise _classify_anthropic_error(exc, model) from exc

        if response.stop_reason == "refusal":
            raise TransportError(f"{model} refused the request", kind="content_rejected", model=model)
        text_parts = [block.text for block in response.content if block.type == "text"]
        text = "\n".join(text_parts)
        if not text:
            raise TransportError(f"{model} returned an empty completion", kind="empty_response", model=model)
        return text

    async def generate_text(self, prompt: str) -> str:
        return await self._complete(prompt)

    async def generate_multimodal(self, prompt: str, images: Sequence[ImageInput]) -> str:
        if not images:
            raise ValueError("generate_multimodal requires at least one image")
        content = [
            {
                "type": "image",
                "source": {
                    "type": "base64",
                    "media_type": image.normalized_mime_type,
                    "data": image.base64_data,
                },
            }
            for image in images
        ]
        content.append({"type": "text", "text": prompt})
        return await self._complete(content)


def create_client(settings) -> GenerativeClient:
    """Factory: pick the client for ``settings.provider``."""
    config = ClientConfig(
        model=settings.primary_model,
        temperature=settings.temperature,
        max_output_tokens=settings.max_output_tokens,
        top_p=settings.top_p,
        request_timeout=settings.attempt_timeout,
    )
    if settings.provider == "anthropic":
        return AnthropicClient(api_key=settings.api_key, config=config)
    if settings.provider == "openai":
        return OpenAICompatibleClient(
            api_key=settings.api_key,
            config=config,
            base_url=settings.base_url or GEMINI_OPENAI_BASE_URL,
        )
    raise ValueError(f"Unknown provider '{settings.provider}'. Available: anthropic, openai")
