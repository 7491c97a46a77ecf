# deal_scout/errors.py

"""Exception hierarchy shared by the retrieval pipeline."""


class DealScoutError(Exception):
    """Base class for every failure the pipeline reports to its caller."""


class ConfigurationError(DealScoutError):
    """Missing keyword or relay key, unknown source, unusable source."""


class UpstreamError(DealScoutError):
    """An upstream fetch returned a non-2xx status or an empty body."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        snippet: str = "",
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.snippet = snippet


class NoProductsError(DealScoutError):
    """Nothing could be extracted from any fetched page or feed."""
