"""Composition root: wire settings into a ready GenerationService."""

import logging

from .cache import create_cache
from .config import Settings, load_settings
from .engine import StructuredGenerationEngine
from .llm_clients import create_client
from .log import configure_logging
from .service import GenerationService

logger = logging.getLogger(__name__)


def build_service(settings: Settings | None = None, setup_logging: bool = True) -> GenerationService:
    """Construct client, engine and cache once and return the service."""
    if settings is None:
        settings = load_settings()
    if setup_logging:
        configure_logging(settings.log_level)

    client = create_client(settings)
    engine = StructuredGenerationEngine(
        client,
        max_attempts=settings.max_attempts,
        base_delay=settings.base_delay,
        max_delay=settings.max_delay,
        attempt_timeout=settings.attempt_timeout,
    )
    cache = create_cache(settings.cache_url)
    logger.info(
        "Generation service ready: provider=%s models=%s cache=%s",
        settings.provider,
        ",".join(settings.models),
        type(cache).__name__,
    )
    return GenerationService(
        engine,
        cache=cache,
        default_ttl=settings.cache_ttl,
        models=settings.models,
    )


async def close_service(service: GenerationService) -> None:
    await service.cache.close()
