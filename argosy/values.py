"""
Argosy value cells.

A value cell is a thin, typed accessor over storage the caller owns. Binding
never hands typed objects around: every value arrives as raw text and the cell
is the only place where that text is parsed.

Capabilities
- set(raw): parse raw text and replace the referenced storage. On failure a
  ValueError with a descriptive message is raised and the storage is left
  untouched (parsing always completes before the single write).
- str(cell): render the current stored value as text.
- flag(): only on FlagValue subclasses; the raw text used when an option is
  present without a value (e.g. "true" for BoolValue).

Storage
- Value(target, key): reads/writes `target[key]` when target is a mutable
  mapping, `getattr(target, key)` / `setattr(target, key, ...)` otherwise.
- Value(): the cell keeps a private slot of its own.
- Value(..., default=x): writes x into the storage at construction time.
- cell.value always reflects the storage; a cell never caches it.
- cell.stored tells written storage apart from the zero value reported for it.

Catalogue
- BoolValue, DateValue, DurationValue, Float32Value, Float64Value, IntValue,
  IPValue, StringValue, URLValue.

Adding a kind
    >>> class PathValue(Value):
    ...     def parse(self, raw, /):
    ...         return pathlib.Path(raw)
"""
import datetime
import ipaddress
import math
import re
import struct
import urllib.parse
from abc import ABC, abstractmethod
from collections.abc import MutableMapping
from fractions import Fraction

from .utils import Unset


class Value(ABC):
    """
    Abstract value cell: a settable, stringifiable typed slot over caller storage.

    Subclasses implement parse() (raw text → typed value, raising ValueError)
    and may override render() (typed value → text) and __default__ (the zero
    value reported for storage that was never written).
    """
    __default__ = None

    def __init__(self, target=Unset, key=Unset, /, *, default=Unset):
        if target is Unset:
            target, key = {}, "value"
        elif key is Unset:
            raise TypeError(f"{type(self).__name__}() requires a key when a target is given")
        elif not isinstance(target, MutableMapping) and not isinstance(key, str):
            raise TypeError(f"{type(self).__name__}() attribute key must be a string")
        self._target = target
        self._key = key
        if default is not Unset:
            self._store(default)

    def _store(self, value):
        if isinstance(self._target, MutableMapping):
            self._target[self._key] = value
        else:
            setattr(self._target, self._key, value)

    @property
    def value(self):
        if isinstance(self._target, MutableMapping):
            return self._target.get(self._key, self.__default__)
        return getattr(self._target, self._key, self.__default__)

    @property
    def stored(self):
        """True once the storage holds a value (written by default= or set())."""
        if isinstance(self._target, MutableMapping):
            return self._key in self._target
        return hasattr(self._target, self._key)

    @abstractmethod
    def parse(self, raw, /):
        """Convert raw text into the typed value; raise ValueError when it is not acceptable."""

    def render(self, value, /):
        return "" if value is None else str(value)

    def set(self, raw, /):
        if not isinstance(raw, str):
            raise TypeError(f"{type(self).__name__}.set() argument must be a string")
        # parse fully before touching the storage
        self._store(self.parse(raw))

    def __str__(self):
        return self.render(self.value)

    def __repr__(self):
        return f"{type(self).__name__}({self.value!r})"


class FlagValue(Value):
    """A value cell that can stand alone as a flag (present without a value)."""

    @abstractmethod
    def flag(self):
        """Raw text assigned when the option is given without a value."""


def supports_flag(cell, /):
    return isinstance(cell, FlagValue) or callable(getattr(cell, "flag", None))


def _strict(raw, kind, /):
    # Python's numeric constructors tolerate surrounding whitespace; the grammar does not.
    if not raw or raw != raw.strip():
        raise ValueError(f"invalid {kind} syntax: {raw!r}")
    return raw


class BoolValue(FlagValue):
    __default__ = False

    TRUTHY = frozenset({"1", "t", "T", "TRUE", "true", "True"})
    FALSY = frozenset({"0", "f", "F", "FALSE", "false", "False"})

    def parse(self, raw, /):
        if raw in self.TRUTHY:
            return True
        if raw in self.FALSY:
            return False
        raise ValueError(f"invalid boolean syntax: {raw!r}")

    def render(self, value, /):
        return "true" if value else "false"

    def flag(self):
        return "true"


class DateValue(Value):
    """Calendar day (no time-of-day), written YYYY-MM-DD."""
    __default__ = datetime.date.min

    def parse(self, raw, /):
        if not re.fullmatch(r"\d{4}-\d{2}-\d{2}", raw, re.ASCII):
            raise ValueError(f"invalid date {raw!r}: expected YYYY-MM-DD")
        try:
            return datetime.date.fromisoformat(raw)
        except ValueError as exception:
            raise ValueError(f"invalid date {raw!r}: {exception}") from None

    def render(self, value, /):
        return value.isoformat()


_UNITS = {
    "ns": Fraction(1),
    "us": Fraction(1_000),
    "µs": Fraction(1_000),  # U+00B5 micro sign
    "μs": Fraction(1_000),  # U+03BC greek mu
    "ms": Fraction(1_000_000),
    "s": Fraction(1_000_000_000),
    "m": Fraction(60_000_000_000),
    "h": Fraction(3_600_000_000_000),
}
_SEGMENT = re.compile(r"(\d*)(?:\.(\d*))?(ns|us|µs|μs|ms|s|m|h)", re.ASCII)
_NANOSECONDS = 2 ** 63


def _fraction(number, scale, /):
    """Render number/scale with the fractional part trimmed of trailing zeros."""
    whole, rest = divmod(number, scale)
    if not rest:
        return str(whole)
    digits = len(str(scale)) - 1
    return f"{whole}.{rest:0{digits}d}".rstrip("0")


class DurationValue(Value):
    """
    Signed elapsed time stored as datetime.timedelta.

    Grammar: an optional sign followed by one or more decimal numbers with a unit
    suffix ("300ms", "-1.5h", "2h45m"); valid units are ns, us (or µs), ms, s, m, h.
    A bare "0" is accepted. Magnitudes are limited to ±2^63 nanoseconds and the
    result is rounded to timedelta's microsecond resolution.
    """
    __default__ = datetime.timedelta(0)

    def parse(self, raw, /):
        text = raw
        sign = 1
        if text[:1] in ("-", "+"):
            sign = -1 if text[0] == "-" else 1
            text = text[1:]
        if text == "0":
            return datetime.timedelta(0)
        if not text:
            raise ValueError(f"invalid duration {raw!r}")

        total = Fraction(0)
        position = 0
        while position < len(text):
            match = _SEGMENT.match(text, position)
            if not match or not (match[1] or match[2]):
                raise ValueError(f"invalid duration {raw!r}")
            number = Fraction(int(match[1] or "0"))
            if match[2]:
                number += Fraction(int(match[2]), 10 ** len(match[2]))
            total += number * _UNITS[match[3]]
            position = match.end()

        if total >= _NANOSECONDS + (sign < 0):
            raise ValueError(f"invalid duration {raw!r}: out of range")
        return datetime.timedelta(microseconds=round(sign * total / 1000))

    def render(self, value, /):
        nanoseconds = value // datetime.timedelta(microseconds=1) * 1000
        if nanoseconds == 0:
            return "0s"
        sign = "-" if nanoseconds < 0 else ""
        magnitude = abs(nanoseconds)

        if magnitude < 1_000:
            return f"{sign}{magnitude}ns"
        if magnitude < 1_000_000:
            return f"{sign}{_fraction(magnitude, 1_000)}µs"
        if magnitude < 1_000_000_000:
            return f"{sign}{_fraction(magnitude, 1_000_000)}ms"

        hours, magnitude = divmod(magnitude, 3_600_000_000_000)
        minutes, magnitude = divmod(magnitude, 60_000_000_000)
        text = _fraction(magnitude, 1_000_000_000) + "s"
        if hours or minutes:
            text = f"{minutes}m" + text
        if hours:
            text = f"{hours}h" + text
        return sign + text


def _shortest(value, roundtrip, /):
    """Shortest %g rendering that parses back to the same value."""
    if math.isnan(value) or math.isinf(value):
        return repr(value)
    for precision in range(1, 18):
        text = "%.*g" % (precision, value)
        if roundtrip(float(text)) == value:
            return text
    return repr(value)


_HEXFLOAT = re.compile(r"[+-]?0[xX](?:[0-9a-fA-F]+(?:\.[0-9a-fA-F]*)?|\.[0-9a-fA-F]+)[pP][+-]?[0-9]+")


def _float(raw, kind, /):
    # ASCII only; hexadecimal mantissas need a binary exponent ("0x1p-2")
    if not _strict(raw, kind).isascii():
        raise ValueError(f"invalid {kind} syntax: {raw!r}")
    if _HEXFLOAT.fullmatch(raw):
        return float.fromhex(raw)
    return float(raw)


def _single(value, /):
    return struct.unpack("<f", struct.pack("<f", value))[0]


class Float32Value(Value):
    """IEEE 754 single precision; values are rounded on set and overflow is rejected."""
    __default__ = 0.0

    def parse(self, raw, /):
        try:
            return _single(_float(raw, "float32"))
        except ValueError:
            raise ValueError(f"invalid float32 syntax: {raw!r}") from None
        except OverflowError:
            raise ValueError(f"float32 value out of range: {raw!r}") from None

    def render(self, value, /):
        return _shortest(value, _single)


class Float64Value(Value):
    __default__ = 0.0

    def parse(self, raw, /):
        try:
            number = _float(raw, "float64")
        except ValueError:
            raise ValueError(f"invalid float64 syntax: {raw!r}") from None
        except OverflowError:
            raise ValueError(f"float64 value out of range: {raw!r}") from None
        if math.isinf(number) and not re.search(r"inf", raw, re.IGNORECASE):
            raise ValueError(f"float64 value out of range: {raw!r}")
        return number

    def render(self, value, /):
        return _shortest(value, float)


class IntValue(Value):
    """
    64-bit signed integer.

    Base prefixes follow the usual literal rules: 0x/0X hexadecimal, 0o/0O and a
    bare leading zero octal, 0b/0B binary; underscores may separate digits.
    Only ASCII digits are accepted.
    """
    __default__ = 0

    MIN = -2 ** 63
    MAX = 2 ** 63 - 1

    def parse(self, raw, /):
        if not _strict(raw, "integer").isascii():
            raise ValueError(f"invalid integer syntax: {raw!r}")
        try:
            if match := re.fullmatch(r"([+-]?)0(_?[0-7]+(?:_[0-7]+)*)", raw, re.ASCII):
                number = int(match[1] + match[2].lstrip("_"), 8)
            else:
                number = int(raw, 0)
        except ValueError:
            raise ValueError(f"invalid integer syntax: {raw!r}") from None
        if not self.MIN <= number <= self.MAX:
            raise ValueError(f"integer value out of range: {raw!r}")
        return number


class IPValue(Value):
    """IPv4 or IPv6 address (ipaddress.IPv4Address / IPv6Address)."""

    def parse(self, raw, /):
        try:
            return ipaddress.ip_address(raw)
        except ValueError:
            raise ValueError(f"invalid IP address format {raw!r}") from None


class StringValue(Value):
    __default__ = ""

    def parse(self, raw, /):
        return raw


class URLValue(Value):
    """
    URL or relative reference, stored as urllib.parse.SplitResult.

    Rejected: control characters, malformed percent escapes, non-numeric or
    out-of-range ports, a leading ':' (missing scheme) and a colon in the first
    path segment of a scheme-less reference.
    """
    __default__ = urllib.parse.urlsplit("")

    def parse(self, raw, /):
        if any(ord(char) < 0x20 or ord(char) == 0x7F for char in raw):
            raise ValueError(f"invalid URL {raw!r}: invalid control character")
        if raw.startswith(":"):
            raise ValueError(f"invalid URL {raw!r}: missing protocol scheme")
        if match := re.search(r"%(?![0-9A-Fa-f]{2})", raw):
            raise ValueError(f"invalid URL {raw!r}: invalid escape {raw[match.start():match.start() + 3]!r}")
        try:
            result = urllib.parse.urlsplit(raw)
            result.port  # NOQA: B-018, validates the port lazily parsed by urlsplit
        except ValueError as exception:
            raise ValueError(f"invalid URL {raw!r}: {exception}") from None
        if not result.scheme and not result.netloc and ":" in result.path.split("/", 1)[0]:
            raise ValueError(f"invalid URL {raw!r}: first path segment in URL cannot contain colon")
        return result

    def render(self, value, /):
        return value.geturl()


__all__ = (
    # Abstractions
    "Value",
    "FlagValue",
    "supports_flag",

    # Catalogue
    "BoolValue",
    "DateValue",
    "DurationValue",
    "Float32Value",
    "Float64Value",
    "IntValue",
    "IPValue",
    "StringValue",
    "URLValue",
)
