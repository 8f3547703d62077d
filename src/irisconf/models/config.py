"""
Configuration tree models for the Iris configuration library.

This module defines the in-memory tree produced by the parser: a config owns
headers, each header owns keys addressed by name, and each key owns an ordered
list of values. Values are raw text tokens interpreted on demand.
"""

import math
import re
import struct
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr

from ..errors import CoercionError, NoValuesError


INT_MIN, INT_MAX = -(2 ** 31), 2 ** 31 - 1
LONG_MIN, LONG_MAX = -(2 ** 63), 2 ** 63 - 1

_INTEGER_RE = re.compile(r"[+-]?[0-9]+")
_DECIMAL_RE = re.compile(r"[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?|[+-]?(?:NaN|Infinity)")


class Value(BaseModel):
    """
    A single text token from a key line.

    The token is stored verbatim and only interpreted when one of the typed
    accessors is called, so a value that is never read as a number never
    fails to parse.

    Attributes:
        token: The raw text token
    """

    model_config = ConfigDict(frozen=True)

    token: str = Field(..., description="Raw text token")

    def __init__(self, token: str, **data: Any) -> None:
        super().__init__(token=token, **data)

    def as_string(self) -> str:
        return self.token

    def as_int(self) -> int:
        """Interpret the token as a 32-bit signed decimal integer."""
        return self._as_integer(INT_MIN, INT_MAX, "int")

    def as_long(self) -> int:
        """Interpret the token as a 64-bit signed decimal integer."""
        return self._as_integer(LONG_MIN, LONG_MAX, "long")

    def as_double(self) -> float:
        """Interpret the token as a double precision float."""
        return self._as_decimal("double")

    def as_float(self) -> float:
        """Interpret the token as a float rounded to single precision."""
        number = self._as_decimal("float")
        try:
            return struct.unpack('f', struct.pack('f', number))[0]
        except OverflowError:
            # Out of single precision range
            return math.copysign(math.inf, number)

    def as_boolean(self) -> bool:
        """
        Interpret the token as a boolean.

        Only ``true`` (any case) is truthy; every other token is ``False``
        rather than an error.
        """
        return self.token.lower() == "true"

    def _as_decimal(self, target: str) -> float:
        # Only NaN and Infinity are accepted as spelled words
        if not _DECIMAL_RE.fullmatch(self.token):
            raise CoercionError(self.token, target)
        return float(self.token)

    def _as_integer(self, lower: int, upper: int, target: str) -> int:
        if not _INTEGER_RE.fullmatch(self.token):
            raise CoercionError(self.token, target)

        number = int(self.token)
        if number < lower or number > upper:
            raise CoercionError(self.token, target)
        return number

    def __str__(self) -> str:
        return self.token


ValueLike = Union[Value, str]


def to_value(value: ValueLike) -> Value:
    """Wrap a plain string in a Value; pass Values through unchanged."""
    if isinstance(value, Value):
        return value
    return Value(value)


class Key(BaseModel):
    """
    A named, ordered collection of values with a round-robin cursor.

    Values may only be appended. The cursor starts before the first value and
    is advanced by next(), wrapping back to the first value after the last.

    Attributes:
        name: Key name as it appears at the start of a key line
    """

    name: str = Field(..., min_length=1, description="Key name")

    _values: List[Value] = PrivateAttr(default_factory=list)
    _cursor: int = PrivateAttr(default=-1)

    def __init__(self, name: str, values: Optional[Iterable[ValueLike]] = None, **data: Any) -> None:
        super().__init__(name=name, **data)
        for value in values or ():
            self.add_value(value)

    def add_value(self, value: ValueLike) -> None:
        self._values.append(to_value(value))

    def has_values(self) -> bool:
        return len(self._values) > 0

    def get_value(self, index: int) -> Value:
        """
        Get the value at a position.

        Args:
            index: Zero-based position of the value

        Returns:
            The value at that position

        Raises:
            IndexError: If index is outside [0, number of values)
        """
        if index < 0 or index >= len(self._values):
            raise IndexError(
                f"value index {index} out of range for key '{self.name}' "
                f"with {len(self._values)} values"
            )
        return self._values[index]

    def values(self) -> Tuple[Value, ...]:
        """Get all values in insertion order."""
        return tuple(self._values)

    def tokens(self) -> List[str]:
        """Get the raw tokens of all values in insertion order."""
        return [value.token for value in self._values]

    def next(self) -> Value:
        """
        Advance the cursor and return the value it lands on.

        Successive calls cycle through the values in order indefinitely.

        Raises:
            NoValuesError: If the key has no values
        """
        if not self._values:
            raise NoValuesError(f"key '{self.name}' has no values")

        self._cursor += 1
        if self._cursor >= len(self._values):
            self._cursor = 0
        return self._values[self._cursor]

    def reset(self) -> None:
        """Move the cursor back to its initial position."""
        self._cursor = -1

    def next_string(self) -> str:
        return self.next().as_string()

    def next_int(self) -> int:
        return self.next().as_int()

    def next_long(self) -> int:
        return self.next().as_long()

    def next_double(self) -> float:
        return self.next().as_double()

    def next_float(self) -> float:
        return self.next().as_float()

    def next_boolean(self) -> bool:
        return self.next().as_boolean()

    def __len__(self) -> int:
        return len(self._values)


class Header(BaseModel):
    """
    A named section holding keys addressed by name.

    Key names are unique within a header; adding a key with an existing name
    replaces the earlier key.

    Attributes:
        name: Header name (the header line without its trailing colon)
    """

    name: str = Field(..., description="Header name")

    _keys: Dict[str, Key] = PrivateAttr(default_factory=dict)

    def __init__(self, name: str, keys: Optional[Iterable[Key]] = None, **data: Any) -> None:
        super().__init__(name=name, **data)
        for key in keys or ():
            self.add_key(key)

    def add_key(self, key: Key) -> None:
        self._keys[key.name] = key

    def has_key(self, name: str) -> bool:
        return name in self._keys

    def get_key(self, name: str) -> Optional[Key]:
        """Get a key by name, or None if the header has no such key."""
        return self._keys.get(name)

    def keys(self) -> Tuple[Key, ...]:
        """Get all keys of this header. Order carries no meaning."""
        return tuple(self._keys.values())

    def to_dict(self) -> Dict[str, List[str]]:
        """Convert to a mapping of key name to raw value tokens."""
        return {name: key.tokens() for name, key in self._keys.items()}

    def __len__(self) -> int:
        return len(self._keys)


class IrisConfig(BaseModel):
    """
    Root of a parsed configuration.

    Holds headers addressed by name. Lookups for missing headers or keys
    return None rather than raising.

    Attributes:
        source: Name of the file the configuration was read from, if any
    """

    source: Optional[str] = Field(None, description="Name of the source file")

    _headers: Dict[str, Header] = PrivateAttr(default_factory=dict)

    def add_header(self, header: Header) -> None:
        self._headers[header.name] = header

    def has_header(self, name: str) -> bool:
        return name in self._headers

    def has_header_and_key(self, header: str, key: str) -> bool:
        """Check that a header exists and contains the given key."""
        return header in self._headers and self._headers[header].has_key(key)

    def get_header(self, name: str) -> Optional[Header]:
        return self._headers.get(name)

    def headers(self) -> Tuple[Header, ...]:
        return tuple(self._headers.values())

    def get_key(self, header: str, key: str) -> Optional[Key]:
        """Get a key by header and key name, or None if either is missing."""
        found = self._headers.get(header)
        if found is None:
            return None
        return found.get_key(key)

    def get_values(self, header: str, key: str) -> Tuple[Value, ...]:
        """Get the values of a key, or an empty tuple if it is missing."""
        found = self.get_key(header, key)
        if found is None:
            return ()
        return found.values()

    def to_dict(self) -> Dict[str, Dict[str, List[str]]]:
        """Convert to nested mappings of header name to key name to raw tokens."""
        return {name: header.to_dict() for name, header in self._headers.items()}

    def __str__(self) -> str:
        """String representation of the configuration."""
        key_count = sum(len(header) for header in self._headers.values())
        return (
            f"IrisConfig(source={self.source or '<memory>'}, "
            f"headers={len(self._headers)}, keys={key_count})"
        )
