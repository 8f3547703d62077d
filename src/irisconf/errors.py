"""
Error types for the Iris configuration library.

All errors raised while loading, parsing, or reading a configuration derive
from ConfigurationError so callers can catch them generically or by kind.
"""


class ConfigurationError(Exception):
    """Raised when configuration loading, parsing, or access fails."""
    pass


class LoadError(ConfigurationError):
    """Raised when the configuration source cannot be read."""
    pass


class EmptyConfigError(ConfigurationError):
    """Raised when a configuration has no lines left after stripping comments."""
    pass


class InvalidConfigError(ConfigurationError):
    """Raised when the configuration text violates the grammar."""
    pass


class CoercionError(ConfigurationError, ValueError):
    """Raised when a value token cannot be interpreted as the requested type."""
    
    def __init__(self, token: str, target: str):
        super().__init__(f"cannot interpret '{token}' as {target}")
        self.token = token
        self.target = target


class NoValuesError(ConfigurationError, LookupError):
    """Raised when cycling through a key that holds no values."""
    pass
