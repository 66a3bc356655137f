"""Exceptions raised by the forecast phases."""


class ForecastError(Exception):
    """Base class for failures that abort a whole forecast phase."""


class AggregationError(ForecastError):
    """Claim rows could not be reduced into payout summaries."""


class ClusteringError(ForecastError):
    """Payout summaries could not be clustered."""


class PredictionError(ForecastError):
    """A prediction could not be computed for some policy/month."""
