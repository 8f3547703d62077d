"""
Configuration loading package for Iris.

This package provides the line parser and the builder that merges
programmatic defaults into parsed configurations.
"""

from .parser import (
    ConfigParser,
    ConfigParseResult,
    load_config,
    validate_config_file
)
from .builder import (
    IrisBuilder,
    merge_defaults,
    from_path,
    from_source,
    from_stream,
    from_uri
)

__all__ = [
    'ConfigParser',
    'ConfigParseResult',
    'load_config',
    'validate_config_file',
    'IrisBuilder',
    'merge_defaults',
    'from_path',
    'from_source',
    'from_stream',
    'from_uri'
]
