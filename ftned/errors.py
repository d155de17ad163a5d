"""FTNed error types."""


class FtnedError(Exception):
    """Base class for FTNed errors."""


class ConfigError(FtnedError):
    """Malformed or missing required configuration."""


class DatabaseConnectionError(FtnedError):
    """The backing message database cannot be reached."""


class InvalidAddressError(FtnedError, ValueError):
    """An FTN address string could not be parsed."""


class NoRouteError(FtnedError, LookupError):
    """No link or routing rule matches a netmail destination."""
