class CostReportError(Exception):
    """Base class for errors raised by the cost report pipeline."""


class ConfigurationError(CostReportError):
    """Invalid trigger input, missing environment or malformed secret.

    Aborts the run; the caller decides whether to re-invoke.
    """


class SecretFetchError(ConfigurationError):
    pass
