"""Dependency injection container."""
from typing import Any, Optional

from dependency_injector import containers, providers

from .auth import Credentials
from .client import RainyClient
from .core.logger import LoggerService
from .core.settings import Settings
from .errors import ErrorClassifier
from .limits import RateLimiter, create_rate_limiter
from .retry import RetryConfig, RetryPolicy
from .transport import RequestDispatcher, StreamDecoder


def get_rate_limiter(settings: Settings) -> Optional[RateLimiter]:
    """Return the configured rate limiter or None when REQUESTS_PER_MINUTE is unset."""
    if not settings.REQUESTS_PER_MINUTE:
        return None
    return create_rate_limiter(
        settings.RATE_LIMIT_STRATEGY, settings.REQUESTS_PER_MINUTE
    )


class Container(containers.DeclarativeContainer):
    """SDK container."""

    # Settings
    settings = providers.Singleton(Settings)

    # Core services
    logger = providers.Singleton(LoggerService, settings_instance=settings)

    credentials = providers.Singleton(Credentials.from_settings, settings=settings)
    classifier = providers.Singleton(ErrorClassifier)

    retry_config = providers.Singleton(RetryConfig.from_settings, settings=settings)
    retry_policy = providers.Singleton(
        lambda config, service: RetryPolicy(
            config, logger=service.get_logger("rainy_sdk.retry")
        ),
        config=retry_config,
        service=logger,
    )

    # None when REQUESTS_PER_MINUTE is unset
    rate_limiter = providers.Singleton(get_rate_limiter, settings=settings)

    decoder = providers.Singleton(
        lambda classifier, service: StreamDecoder(
            classifier, logger=service.get_logger("rainy_sdk.transport.stream")
        ),
        classifier=classifier,
        service=logger,
    )

    dispatcher = providers.Singleton(
        RequestDispatcher,
        credentials=credentials,
        logger=logger,
        classifier=classifier,
        retry_policy=retry_policy,
        rate_limiter=rate_limiter,
        decoder=decoder,
    )

    client = providers.Factory(
        RainyClient,
        settings=settings,
        logger=logger,
        dispatcher=dispatcher,
    )


def create_client(settings: Optional[Settings] = None, **overrides: Any) -> RainyClient:
    """Build a client from a fresh container.

    Args:
        settings: Base settings; read from the environment if omitted
        **overrides: Settings fields to override, e.g. ``API_KEY="ra-..."``

    Returns:
        Configured client

    Raises:
        AuthenticationError: If the API key is missing or malformed
        InvalidRequestError: If the base URL is invalid
    """
    if settings is None:
        settings = Settings(**overrides)
    elif overrides:
        settings = settings.model_copy(update=overrides)

    container = Container()
    container.settings.override(providers.Object(settings))
    return container.client()
