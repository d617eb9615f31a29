"""Errors raised by socket-table providers."""


class ProviderError(Exception):
    """Base class for failures to obtain a socket table."""


class ProviderUnavailable(ProviderError):
    """The provider could not be invoked at all (missing binary, no permission)."""


class ProviderExecutionFailure(ProviderError):
    """The provider ran but reported a failure."""
