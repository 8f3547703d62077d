"""
Builder for loading a configuration with programmatic defaults.

A builder is created for a configuration source, collects default
(header, key, values) entries, and on build() parses the source and fills in
whatever the file left out. Values present in the file always win.
"""

import os
import yaml
from pathlib import Path
from typing import Any, Dict, Iterable, Mapping, TextIO, Tuple, Union
from urllib.parse import urlparse
from urllib.request import url2pathname
import logging

from ..errors import InvalidConfigError, LoadError
from ..models.config import Header, IrisConfig, Key, ValueLike, to_value
from .parser import ConfigParser, ConfigParseResult


logger = logging.getLogger(__name__)

Source = Union[str, os.PathLike, TextIO]


def merge_defaults(config: IrisConfig, defaults: Iterable[Header]) -> int:
    """
    Fill a parsed configuration with default headers.

    A header missing from the config is installed whole. For a header that
    exists, each missing key is installed, and a key that exists without
    values receives the default values. Keys that already have values are
    left untouched.

    Defaults are copied before installation, so the same default headers can
    be merged into several configurations.

    Args:
        config: Parsed configuration to update in place
        defaults: Default headers to merge

    Returns:
        Number of headers and keys that were filled in
    """
    filled = 0

    for default_header in defaults:
        header = config.get_header(default_header.name)
        if header is None:
            config.add_header(default_header.model_copy(deep=True))
            logger.debug(f"Installed default header '{default_header.name}'")
            filled += 1
            continue

        for default_key in default_header.keys():
            key = header.get_key(default_key.name)
            if key is None:
                header.add_key(default_key.model_copy(deep=True))
                logger.debug(f"Installed default key '{default_header.name}.{default_key.name}'")
                filled += 1
            elif not key.has_values():
                for value in default_key.values():
                    key.add_value(value)
                logger.debug(f"Filled empty key '{default_header.name}.{default_key.name}'")
                filled += 1

    return filled


def _to_token(value: Any, header: str, key: str) -> str:
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if value is None or not isinstance(value, (str, int, float)):
        raise InvalidConfigError(
            f"default value for '{header}.{key}' must be a scalar, got {type(value).__name__}"
        )
    return str(value)


class IrisBuilder:
    """
    Collects defaults for a configuration source and builds the config.

    Example:
        config = (
            from_source("server.cp")
            .define("server", "bind", "0.0.0.0", "80")
            .build()
        )
    """

    def __init__(self, source: Source, *, strict_mode: bool = False, encoding: str = 'utf-8'):
        """
        Initialize the builder.

        Args:
            source: Path of the configuration file, or an opened text stream
            strict_mode: If True, parse warnings are raised as errors
            encoding: Text encoding used when reading files
        """
        if isinstance(source, (str, os.PathLike)):
            source = Path(source)
        self.source = source
        self.strict_mode = strict_mode
        self.encoding = encoding
        self._headers: Dict[str, Header] = {}
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    def define(self, header: Union[Header, str], key: Union[Key, str], *values: ValueLike) -> 'IrisBuilder':
        """
        Register default values for a header and key.

        When a default key of the same name is already registered under the
        header, the values are appended to that registered key and the key
        argument is not used. Otherwise the values are appended to the key
        argument, which is then registered.

        Args:
            header: Default header, or its name
            key: Default key, or its name
            *values: Default values, as Value objects or raw tokens

        Returns:
            This builder
        """
        if isinstance(header, str):
            header = Header(header)
        if isinstance(key, str):
            key = Key(key)
        values = tuple(to_value(value) for value in values)

        registered = self._headers.get(header.name)
        if registered is not None:
            existing = registered.get_key(key.name)
            if existing is not None:
                for value in values:
                    existing.add_value(value)
            else:
                for value in values:
                    key.add_value(value)
                registered.add_key(key)
        else:
            for value in values:
                key.add_value(value)
            header.add_key(key)
            self._headers[header.name] = header

        return self

    def define_mapping(self, defaults: Mapping[str, Mapping[str, Any]]) -> 'IrisBuilder':
        """
        Register defaults from nested mappings of header to key to values.

        A key mapped to a list gets one value per item; a scalar becomes a
        single value and None registers the key without values.

        Args:
            defaults: Mapping of header name to a mapping of key name to values

        Returns:
            This builder

        Raises:
            InvalidConfigError: If a header does not map to a mapping of keys,
                or a value is None or not a scalar
        """
        for header_name, keys in defaults.items():
            if keys is None:
                self.logger.debug(f"No default keys given for header '{header_name}'")
                continue
            if not isinstance(keys, Mapping):
                raise InvalidConfigError(
                    f"defaults for header '{header_name}' must be a mapping of keys, "
                    f"got {type(keys).__name__}"
                )

            for key_name, raw in keys.items():
                if raw is None:
                    raw = []
                elif not isinstance(raw, (list, tuple)):
                    raw = [raw]
                tokens = [_to_token(item, header_name, key_name) for item in raw]
                self.define(str(header_name), str(key_name), *tokens)

        return self

    def defaults_from_yaml(self, defaults_path: Union[str, Path]) -> 'IrisBuilder':
        """
        Register defaults read from a YAML document.

        The document must be a mapping in the shape accepted by
        define_mapping(). An empty document registers nothing.

        Args:
            defaults_path: Path to the YAML file

        Returns:
            This builder

        Raises:
            LoadError: If the file cannot be read, is not valid YAML, or is not
                a mapping
            InvalidConfigError: If the mapping holds values that are not scalars
        """
        defaults_path = Path(defaults_path)
        try:
            with open(defaults_path, 'r', encoding=self.encoding) as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise LoadError(f"Invalid YAML syntax in {defaults_path}: {e}") from e
        except (OSError, UnicodeDecodeError) as e:
            raise LoadError(f"could not load defaults file '{defaults_path.name}'") from e

        if data is None:
            self.logger.warning(f"Defaults file is empty: {defaults_path}")
            return self

        if not isinstance(data, dict):
            raise LoadError(f"Defaults file must contain a YAML mapping, got {type(data).__name__}")

        return self.define_mapping(data)

    def headers(self) -> Tuple[Header, ...]:
        """Get the registered default headers."""
        return tuple(self._headers.values())

    def build_result(self) -> ConfigParseResult:
        """
        Parse the source and merge the registered defaults.

        Returns:
            ConfigParseResult with the merged configuration

        Raises:
            ConfigurationError: If the source cannot be loaded or parsed
        """
        parser = ConfigParser(strict_mode=self.strict_mode, encoding=self.encoding)
        if isinstance(self.source, Path):
            result = parser.load_config(self.source)
        else:
            result = parser.read_stream(self.source)

        if not self._headers:
            return result

        filled = merge_defaults(result.config, self._headers.values())
        result.defaults_applied = filled > 0
        self.logger.debug(f"Defaults filled {filled} headers or keys")
        return result

    def build(self) -> IrisConfig:
        """
        Parse the source and merge the registered defaults.

        Returns:
            The merged configuration

        Raises:
            ConfigurationError: If the source cannot be loaded or parsed
        """
        return self.build_result().config

    def __str__(self) -> str:
        name = self.source if isinstance(self.source, Path) else getattr(self.source, 'name', '<stream>')
        return f"IrisBuilder(source={name}, defaults={len(self._headers)})"


def from_path(path: Union[str, os.PathLike], **options: Any) -> IrisBuilder:
    """Create a builder for a file name or path."""
    return IrisBuilder(Path(path), **options)


def from_uri(uri: str, **options: Any) -> IrisBuilder:
    """
    Create a builder for a ``file:`` URI.

    Raises:
        LoadError: If the URI does not identify a local file
    """
    parsed = urlparse(uri)
    if parsed.scheme != 'file':
        raise LoadError(f"could not load config file '{uri}': only file URIs are supported")
    if parsed.netloc not in ('', 'localhost'):
        raise LoadError(f"could not load config file '{uri}': URI has an authority component")

    return from_path(url2pathname(parsed.path), **options)


def from_stream(stream: TextIO, **options: Any) -> IrisBuilder:
    """Create a builder that reads an already opened text stream."""
    return IrisBuilder(stream, **options)


def from_source(source: Source, **options: Any) -> IrisBuilder:
    """
    Create a builder for any supported source.

    Strings starting with ``file:`` are treated as URIs, other strings and
    path objects as file paths, and objects with a ``read`` method as opened
    text streams.

    Args:
        source: File name, path, file URI, or opened text stream
        **options: Builder options (strict_mode, encoding)

    Returns:
        A new builder for the source
    """
    if isinstance(source, str) and source.startswith('file:'):
        return from_uri(source, **options)
    if isinstance(source, (str, os.PathLike)):
        return from_path(source, **options)
    if hasattr(source, 'read'):
        return from_stream(source, **options)

    raise TypeError(f"Unsupported configuration source: {type(source).__name__}")
