"""
Iris - Configuration Library

Reads a compact, line-oriented configuration format of headers, keys and
space-separated values into a queryable tree, with programmatic defaults
filling in whatever the file leaves out.
"""

from .config import (
    ConfigParser,
    ConfigParseResult,
    IrisBuilder,
    from_path,
    from_source,
    from_stream,
    from_uri,
    load_config,
    merge_defaults,
    validate_config_file,
)
from .errors import (
    CoercionError,
    ConfigurationError,
    EmptyConfigError,
    InvalidConfigError,
    LoadError,
    NoValuesError,
)
from .models import Header, IrisConfig, Key, Value

__version__ = "0.1.0"
__author__ = "Iris Team"

__all__ = [
    'ConfigParser',
    'ConfigParseResult',
    'IrisBuilder',
    'from_path',
    'from_source',
    'from_stream',
    'from_uri',
    'load_config',
    'merge_defaults',
    'validate_config_file',
    'CoercionError',
    'ConfigurationError',
    'EmptyConfigError',
    'InvalidConfigError',
    'LoadError',
    'NoValuesError',
    'Header',
    'IrisConfig',
    'Key',
    'Value',
]
