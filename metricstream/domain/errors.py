class MetricstreamError(Exception):
    """Base class for service errors."""


class ConfigurationError(MetricstreamError):
    pass


class BackendQueryFailed(MetricstreamError):
    """The search backend could not answer a snapshot query.

    Fails the snapshot of one tick only; callers of the pull query see it,
    push subscribers skip that tick.
    """


class AggregationFieldMissing(MetricstreamError, KeyError):
    """An expected aggregation is absent from a backend response."""

    def __init__(self, name: str):
        super().__init__(name)
        self.name = name

    def __str__(self) -> str:
        return f"aggregation '{self.name}' missing from response"
