"""Sentry integration for error tracking."""
from __future__ import annotations

import logging

import sentry_sdk
from sentry_sdk.integrations.logging import LoggingIntegration

logger = logging.getLogger(__name__)


def init_sentry(
    dsn: str | None,
    environment: str = "production",
    enable_logging: bool = True,
    sample_rate: float = 1.0,
    traces_sample_rate: float = 0.0,
) -> bool:
    """Initialize Sentry error tracking.

    Args:
        dsn: Project DSN; tracking stays off when empty
        environment: Environment name (production, staging, development)
        enable_logging: Forward ERROR log records as Sentry events
        sample_rate: Error sampling rate (1.0 = 100%)
        traces_sample_rate: Performance tracing rate

    Returns:
        True if Sentry was initialized
    """
    if not dsn:
        logger.info("SENTRY_DSN not set - error tracking disabled")
        return False

    integrations = []
    if enable_logging:
        integrations.append(
            LoggingIntegration(
                level=logging.INFO,  # breadcrumbs
                event_level=logging.ERROR,
            )
        )

    try:
        sentry_sdk.init(
            dsn=dsn,
            environment=environment,
            integrations=integrations,
            sample_rate=sample_rate,
            traces_sample_rate=traces_sample_rate,
            send_default_pii=False,
        )
    except Exception as e:
        logger.warning(f"Sentry initialization failed: {e}")
        return False

    logger.info(f"Sentry initialized (environment={environment})")
    return True
