"""Domain exceptions for Movie Explorer."""


class CatalogError(Exception):
    """Base class for all catalog failures."""


class ConfigurationError(CatalogError):
    """Raised at startup when required configuration is missing or invalid."""


class ValidationError(CatalogError):
    """Caller supplied a missing or invalid parameter.

    Raised before anything is sent to TMDB.
    """


class UpstreamError(CatalogError):
    """TMDB returned a non-2xx status, the call failed, or the body was unusable."""

    def __init__(
        self,
        endpoint: str,
        message: str,
        status_code: int | None = None,
        original_exception: Exception | None = None,
    ):
        super().__init__(f"Failed to fetch data from TMDB ({endpoint}): {message}")
        self.endpoint = endpoint
        self.message = message
        self.status_code = status_code
        self.original_exception = original_exception


class PartialFailure(CatalogError):
    """A secondary fetch failed while the primary one succeeded."""

    def __init__(self, feature: str, cause: Exception):
        super().__init__(f"{feature} unavailable: {cause}")
        self.feature = feature
        self.cause = cause
