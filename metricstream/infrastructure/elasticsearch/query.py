from __future__ import annotations

import time
from typing import Any, Callable, Dict

from elastic_transport import ObjectApiResponse, TransportError
from elasticsearch import ApiError, AsyncElasticsearch
from metricstream.core.logger import get_logger
from metricstream.domain.errors import BackendQueryFailed
from metricstream.metrics import (
    BACKEND_QUERIES_TOTAL,
    BACKEND_QUERY_FAILURES_TOTAL,
    BACKEND_QUERY_LATENCY_SECONDS,
)

logger = get_logger("metricstream.query")

RequestFactory = Callable[[int], Dict[str, Any]]


class WindowedAggregateQuery:
    """One time-windowed search against the metricbeat index.

    The request body comes from `request_factory(window_seconds)`; the response
    must contain `required_section` ("aggregations" or "hits") or the query is
    treated as failed. Errors are raised as `BackendQueryFailed` and never
    retried here.
    """

    def __init__(
        self,
        client: AsyncElasticsearch,
        index: str,
        window_seconds: int,
        request_factory: RequestFactory,
        required_section: str = "aggregations",
    ):
        self.client = client
        self.index = index
        self.window_seconds = window_seconds
        self.request_factory = request_factory
        self.required_section = required_section

    def build_request(self) -> Dict[str, Any]:
        return self.request_factory(self.window_seconds)

    async def execute(self) -> Dict[str, Any]:
        BACKEND_QUERIES_TOTAL.inc()
        started = time.perf_counter()
        try:
            response = await self.client.search(
                index=self.index, **self.build_request()
            )
        except (ApiError, TransportError) as e:
            BACKEND_QUERY_FAILURES_TOTAL.inc()
            logger.warning(
                "backend_query_failed",
                extra={"index": self.index, "error": str(e)},
            )
            raise BackendQueryFailed(f"search on '{self.index}' failed: {e}") from e
        finally:
            BACKEND_QUERY_LATENCY_SECONDS.observe(time.perf_counter() - started)

        body = response.body if isinstance(response, ObjectApiResponse) else response
        if not isinstance(body, dict) or not isinstance(
            body.get(self.required_section), dict
        ):
            BACKEND_QUERY_FAILURES_TOTAL.inc()
            logger.warning(
                "backend_response_malformed",
                extra={"index": self.index, "missing": self.required_section},
            )
            raise BackendQueryFailed(
                f"response from '{self.index}' has no '{self.required_section}'"
            )
        return body
