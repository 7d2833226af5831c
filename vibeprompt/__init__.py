"""vibeprompt: reliable structured JSON generation from hosted language models."""

__version__ = "0.1.0"

from .app import build_service, close_service
from .engine import GenerationOutcome, GenerationSuccess, StructuredGenerationEngine
from .errors import (
    CacheUnavailableError,
    GenerationExhaustedError,
    ModelUnsupportedError,
    ParseError,
    TransportError,
    ValidationError,
    VibePromptError,
)
from .prompt_formatter import PromptExample, PromptSpec, create_prompt_template, format_prompt
from .service import GenerationMeta, GenerationResponse, GenerationService

__all__ = [
    "__version__",
    "build_service",
    "close_service",
    "CacheUnavailableError",
    "GenerationExhaustedError",
    "GenerationMeta",
    "GenerationOutcome",
    "GenerationResponse",
    "GenerationService",
    "GenerationSuccess",
    "ModelUnsupportedError",
    "ParseError",
    "PromptExample",
    "PromptSpec",
    "StructuredGenerationEngine",
    "TransportError",
    "ValidationError",
    "VibePromptError",
    "create_prompt_template",
    "format_prompt",
]
