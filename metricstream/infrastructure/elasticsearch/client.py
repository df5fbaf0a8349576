from __future__ import annotations

from elasticsearch import AsyncElasticsearch
from metricstream.core.config import Settings
from metricstream.core.logger import get_logger
from metricstream.domain.errors import ConfigurationError
from metricstream.utils.retry import retry_async

logger = get_logger("metricstream.elasticsearch")


def create_client(settings: Settings) -> AsyncElasticsearch:
    if not settings.elasticsearch_url:
        raise ConfigurationError("ELASTICSEARCH_URL must be set")
    return AsyncElasticsearch(
        settings.elasticsearch_url,
        request_timeout=settings.elasticsearch_request_timeout_seconds,
    )


async def wait_for_backend(client: AsyncElasticsearch, retries: int) -> bool:
    """Ping the cluster with backoff.

    Returns False instead of raising when the cluster stays unreachable: the
    service still starts and snapshot ticks fail until it recovers.
    """

    async def _ping():
        if not await client.ping():
            raise ConnectionError("elasticsearch ping returned false")
        return True

    async def _on_retry(attempt: int, exc: BaseException, sleep_for: float):
        logger.warning(
            "elasticsearch_connect_retry",
            extra={
                "attempt": attempt,
                "error": str(exc),
                "sleep_for": round(sleep_for, 2),
            },
        )

    try:
        await retry_async(
            _ping,
            retries=max(retries, 1),
            base_delay=0.5,
            max_delay=8.0,
            jitter=0.2,
            on_retry=_on_retry,
        )
    except ConnectionError as e:
        logger.error("elasticsearch_unreachable", extra={"error": str(e)})
        return False
    logger.info("elasticsearch_connected")
    return True
