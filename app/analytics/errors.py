class AnalyticsError(Exception):
    pass


class NoLogStoreError(AnalyticsError):
    """Raised when labels are requested but no log store is configured."""


class SampleNotFoundError(AnalyticsError, LookupError):
    pass


class ModelConfigurationError(AnalyticsError):
    pass
