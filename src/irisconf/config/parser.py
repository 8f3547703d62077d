"""
Line-oriented configuration parser for the Iris configuration library.

This module reads configuration files made of header lines (``name:``) and
key lines (``key value value ...``), drops comments and blank lines, and
builds an IrisConfig tree. It reports grammar violations as typed errors and
collects non-fatal warnings that strict mode turns into errors.
"""

from pathlib import Path
from typing import Iterable, List, Optional, TextIO, Tuple, Union
import logging
from dataclasses import dataclass, field

from ..errors import (
    ConfigurationError,
    EmptyConfigError,
    InvalidConfigError,
    LoadError,
)
from ..models.config import Header, IrisConfig, Key, Value


logger = logging.getLogger(__name__)

COMMENT_PREFIX = '#'
HEADER_SUFFIX = ':'
TOKEN_SEPARATOR = ' '


@dataclass
class ConfigParseResult:
    """
    Result of configuration parsing operation.

    Attributes:
        config: The parsed configuration tree
        warnings: List of non-fatal warnings
        config_path: Path to the configuration file used (None for streams)
        defaults_applied: Whether builder defaults filled anything in
    """
    config: IrisConfig
    warnings: List[str] = field(default_factory=list)
    config_path: Optional[Path] = None
    defaults_applied: bool = False


class ConfigParser:
    """
    Parser for the header/key/value configuration format.

    Lines whose first character is ``#`` and empty lines are ignored. The
    remaining lines are trimmed; a line ending in ``:`` opens a header and
    every other line is a key followed by space-separated value tokens.
    """

    def __init__(self, strict_mode: bool = False, encoding: str = 'utf-8'):
        """
        Initialize the configuration parser.

        Args:
            strict_mode: If True, treat warnings as errors
            encoding: Text encoding used when reading files
        """
        self.strict_mode = strict_mode
        self.encoding = encoding
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    def load_config(self, config_path: Union[str, Path]) -> ConfigParseResult:
        """
        Load and parse a configuration file.

        The file is read completely and closed before parsing starts.

        Args:
            config_path: Path to the configuration file

        Returns:
            ConfigParseResult containing the parsed configuration and warnings

        Raises:
            LoadError: If the file cannot be read
            EmptyConfigError: If no lines remain after stripping
            InvalidConfigError: If the file violates the grammar
        """
        config_path = Path(config_path)
        try:
            lines = self._read_file(config_path)
            result = self.parse_lines(lines, source_name=config_path.name)
            result.config_path = config_path

            self.logger.info(f"Configuration loaded successfully from {config_path}")
            return result

        except Exception as e:
            if isinstance(e, ConfigurationError):
                raise
            else:
                raise ConfigurationError(f"Failed to load configuration: {e}") from e

    def read_stream(self, stream: TextIO, source_name: Optional[str] = None) -> ConfigParseResult:
        """
        Parse configuration text from an already opened stream.

        The stream is read to the end but left open; closing it is up to the
        caller that opened it.

        Args:
            stream: Text stream to read lines from
            source_name: Name used in messages (defaults to the stream's name)

        Returns:
            ConfigParseResult containing the parsed configuration and warnings
        """
        if source_name is None:
            source_name = str(getattr(stream, 'name', '<stream>'))

        try:
            lines = [line.rstrip('\r\n') for line in stream]
        except (OSError, UnicodeDecodeError) as e:
            raise LoadError(f"could not load config file '{source_name}'") from e

        return self.parse_lines(lines, source_name=source_name)

    def _read_file(self, file_path: Path) -> List[str]:
        """
        Read all raw lines of a file without line terminators.

        Raises:
            LoadError: If the file cannot be opened, read, or decoded
        """
        try:
            with open(file_path, 'r', encoding=self.encoding) as f:
                return [line.rstrip('\r\n') for line in f]
        except (OSError, UnicodeDecodeError) as e:
            raise LoadError(f"could not load config file '{file_path.name}'") from e

    @staticmethod
    def prefilter(lines: Iterable[str]) -> List[Tuple[int, str]]:
        """
        Drop comment and blank lines and trim the rest.

        Comment detection looks only at the first character of the untrimmed
        line, so an indented ``#`` is not a comment.

        Args:
            lines: Raw lines without terminators

        Returns:
            List of (1-based line number, trimmed line) pairs
        """
        kept = []
        dropped = 0
        for number, line in enumerate(lines, start=1):
            if not line or line.startswith(COMMENT_PREFIX):
                dropped += 1
                continue
            trimmed = line.strip()
            if not trimmed:
                dropped += 1
                continue
            kept.append((number, trimmed))

        logger.debug(f"Kept {len(kept)} lines, dropped {dropped} comment or blank lines")
        return kept

    def parse_lines(self, lines: Iterable[str], source_name: Optional[str] = None) -> ConfigParseResult:
        """
        Parse raw configuration lines into a configuration tree.

        Args:
            lines: Raw lines without terminators
            source_name: Name of the source used in messages

        Returns:
            ConfigParseResult containing the parsed configuration and warnings

        Raises:
            EmptyConfigError: If no lines remain after stripping
            InvalidConfigError: If a key line precedes the first header, or if
                strict mode is on and warnings were produced
        """
        name = source_name or '<memory>'
        entries = self.prefilter(lines)
        if not entries:
            raise EmptyConfigError(f"config file {name} is empty")

        config = IrisConfig(source=source_name)
        warnings: List[str] = []
        current: Optional[Header] = None
        current_line = 0

        for number, line in entries:
            if line.endswith(HEADER_SUFFIX):
                if current is not None:
                    self._commit(config, current, current_line, warnings)

                raw_name = line[:-len(HEADER_SUFFIX)]
                current = Header(raw_name.rstrip())
                current_line = number
                if current.name != raw_name:
                    warnings.append(
                        f"line {number}: whitespace before ':' dropped from header '{current.name}'"
                    )
                if not current.name:
                    warnings.append(f"line {number}: header with empty name")
                continue

            if current is None:
                raise InvalidConfigError(
                    f"at least one header at the top is needed (line {number} in {name})"
                )

            key = self._parse_key_line(line)
            if '' in key.tokens():
                warnings.append(
                    f"line {number}: key '{key.name}' has empty values from consecutive spaces"
                )
            if current.has_key(key.name):
                warnings.append(
                    f"line {number}: key '{key.name}' in header '{current.name}' "
                    f"replaces an earlier definition"
                )
            current.add_key(key)

        if current is not None:
            self._commit(config, current, current_line, warnings)

        for warning in warnings:
            self.logger.warning(f"{name}: {warning}")

        if self.strict_mode and warnings:
            raise InvalidConfigError(f"Configuration warnings in strict mode: {'; '.join(warnings)}")

        return ConfigParseResult(config=config, warnings=warnings)

    @staticmethod
    def _parse_key_line(line: str) -> Key:
        """Split a key line on single spaces into a key and its values."""
        name, *tokens = line.split(TOKEN_SEPARATOR)
        return Key(name, [Value(token) for token in tokens])

    def _commit(self, config: IrisConfig, header: Header, line: int, warnings: List[str]) -> None:
        """Store a finished header, replacing any earlier header of the same name."""
        if config.has_header(header.name):
            warnings.append(
                f"line {line}: header '{header.name}' replaces an earlier definition"
            )
        config.add_header(header)
        self.logger.debug(f"Committed header '{header.name}' with {len(header)} keys")

    def validate_config_file(self, config_path: Union[str, Path]) -> List[str]:
        """
        Validate a configuration file without returning its contents.

        Args:
            config_path: Path to configuration file

        Returns:
            List of validation errors (empty if valid)
        """
        errors = []

        try:
            self.load_config(config_path)
        except ConfigurationError as e:
            errors.append(str(e))

        return errors


def load_config(config_path: Union[str, Path], strict_mode: bool = False) -> ConfigParseResult:
    """
    Convenience function to load configuration.

    Args:
        config_path: Path to configuration file
        strict_mode: Whether to treat warnings as errors

    Returns:
        ConfigParseResult containing parsed configuration

    Raises:
        ConfigurationError: If configuration cannot be loaded or is invalid
    """
    parser = ConfigParser(strict_mode=strict_mode)
    return parser.load_config(config_path)


def validate_config_file(config_path: Union[str, Path], strict_mode: bool = False) -> List[str]:
    """
    Convenience function to validate a configuration file.

    Args:
        config_path: Path to configuration file
        strict_mode: Whether warnings count as errors

    Returns:
        List of validation errors (empty if valid)
    """
    parser = ConfigParser(strict_mode=strict_mode)
    return parser.validate_config_file(config_path)
