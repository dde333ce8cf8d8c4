"""Selector parsing and normalization for hostcast.

Turns a loose ``key:value`` expression into the canonical mapping the
inventory client sends to the asset API:
- Reserved API parameters are matched case-insensitively and rewritten
  to their canonical spelling (status, createdAfter, ...)
- Attribute names written in ALL CAPS are kept as written
- Any other attribute name is lowercased
- Date parameters and capacity attributes are normalized

Examples:
    >>> normalize(parse_selector("Status:maintenance pool:web"))
    {'status': 'maintenance', 'size': 3000, 'pool': 'web', 'operation': 'and'}

    >>> normalize({"MEMORY_SIZE_TOTAL": "64gb"}, defaults={})
    {'MEMORY_SIZE_TOTAL': 68719476736, 'operation': 'and'}
"""

import re
import shlex
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Mapping

from .errors import SelectorSyntaxError
from .types import Selector

# Uppercase name -> canonical query parameter of the asset API
RESERVED_FIELDS = {
    "TAG": "tag",
    "TYPE": "type",
    "STATUS": "status",
    "STATE": "state",
    "ATTRIBUTE": "attribute",
    "CREATEDAFTER": "createdAfter",
    "CREATEDBEFORE": "createdBefore",
    "UPDATEDAFTER": "updatedAfter",
    "UPDATEDBEFORE": "updatedBefore",
    "OPERATION": "operation",
    "SIZE": "size",
    "PAGE": "page",
    "SORT": "sort",
    "SORTFIELD": "sortField",
    "DETAILS": "details",
    "QUERY": "query",
    "REMOTELOOKUP": "remoteLookup",
}

DATE_FIELDS = {"createdAfter", "createdBefore", "updatedAfter", "updatedBefore"}

# Matched against the uppercased key
CAPACITY_FIELDS = {"MEMORY_SIZE_TOTAL", "DISK_STORAGE_TOTAL"}

DEFAULT_OPERATION = "and"
DEFAULT_SELECTOR: Selector = {"status": "allocated", "size": 3000}

DATE_FORMAT = "%Y-%m-%dT%H:%M:%S"
_INPUT_DATE_FORMATS = (
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%d %H:%M",
    "%Y/%m/%d %H:%M:%S",
    "%Y/%m/%d",
)

_SIZE_UNITS = {
    "": 1,
    "B": 1,
    "K": 1024,
    "M": 1024**2,
    "G": 1024**3,
    "T": 1024**4,
    "P": 1024**5,
}
_SIZE_PATTERN = re.compile(r"^(\d+(?:\.\d+)?)\s*([KMGTP]?)(?:I?B)?$")


@dataclass(frozen=True)
class Reserved:
    """Key is a reserved API parameter; ``name`` is its canonical spelling."""

    name: str


@dataclass(frozen=True)
class ExplicitCase:
    """Key was written in ALL CAPS and is kept exactly."""

    name: str


@dataclass(frozen=True)
class Generic:
    """Free-form attribute key, lowercased."""

    name: str


KeyClass = Reserved | ExplicitCase | Generic


def classify_key(key: str) -> KeyClass:
    """Decide how a selector key is routed.

    Args:
        key: Key as typed by the caller

    Returns:
        Reserved, ExplicitCase or Generic carrying the key to use

    Example:
        >>> classify_key("createdafter")
        Reserved(name='createdAfter')
        >>> classify_key("HOSTNAME")
        ExplicitCase(name='HOSTNAME')
        >>> classify_key("Pool")
        Generic(name='pool')
    """
    upper = key.upper()
    if upper in RESERVED_FIELDS:
        return Reserved(RESERVED_FIELDS[upper])
    if key == upper:
        return ExplicitCase(key)
    return Generic(key.lower())


def parse_size(value: Any) -> int | None:
    """Parse a human capacity like '500gb' or '1.5 TiB' into bytes.

    Units are binary (1kb = 1024 bytes). Bare numbers are bytes.

    Returns:
        Byte count, or None if the value is not a size expression
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    match = _SIZE_PATTERN.match(str(value).strip().upper())
    if not match:
        return None
    number, unit = match.groups()
    return int(float(number) * _SIZE_UNITS[unit])


def _as_utc(value: datetime) -> datetime:
    """Shift an offset-aware datetime to UTC; naive ones are left alone."""
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc)


def normalize_date(value: Any) -> Any:
    """Format a date-ish value as the API's ``YYYY-MM-DDTHH:MM:SS``.

    Accepts ISO dates and datetimes, a few common spellings and epoch
    seconds. Values with a UTC offset are converted to UTC first.
    Anything else is returned unchanged for the API to reject.
    """
    if isinstance(value, datetime):
        return _as_utc(value).strftime(DATE_FORMAT)

    text = str(value).strip()
    try:
        return _as_utc(datetime.fromisoformat(text)).strftime(DATE_FORMAT)
    except ValueError:
        pass

    if text.isdigit():
        return datetime.fromtimestamp(int(text), tz=timezone.utc).strftime(DATE_FORMAT)

    for fmt in _INPUT_DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).strftime(DATE_FORMAT)
        except ValueError:
            continue
    return value


def parse_selector(expression: str | None) -> dict[str, str]:
    """Split a selector expression into raw key/value tokens.

    Tokens are whitespace separated ``key:value`` pairs; values may be
    quoted and may contain further colons.

    Raises:
        SelectorSyntaxError: If a token has no ``:`` or an empty key

    Example:
        >>> parse_selector("status:allocated 'nodeclass:web tier'")
        {'status': 'allocated', 'nodeclass': 'web tier'}
    """
    if not expression:
        return {}

    try:
        tokens = shlex.split(expression)
    except ValueError as e:
        raise SelectorSyntaxError(f"Failed to parse selector: {e}") from e

    result: dict[str, str] = {}
    for token in tokens:
        key, sep, value = token.partition(":")
        if not sep or not key:
            raise SelectorSyntaxError(
                f"Invalid selector token: '{token}'. Expected key:value format."
            )
        result[key] = value
    return result


def normalize(
    raw: Mapping[str, Any],
    defaults: Mapping[str, Any] | None = None,
) -> Selector:
    """Canonicalize raw selector tokens for the inventory client.

    Args:
        raw: Caller-supplied key/value tokens (any key casing)
        defaults: Values applied unless the caller sets the same field;
            ``DEFAULT_SELECTOR`` when None

    Returns:
        New mapping of canonical key -> value, defaults first, then caller
        keys in the order given, ``operation`` last when defaulted
    """
    if defaults is None:
        defaults = DEFAULT_SELECTOR

    selector: Selector = {}
    for key, value in [*defaults.items(), *raw.items()]:
        canonical, normalized = _route(key, value)
        selector[canonical] = normalized

    selector.setdefault("operation", DEFAULT_OPERATION)
    return selector


def _route(key: str, value: Any) -> tuple[str, Any]:
    """Canonical key and normalized value for one token."""
    kind = classify_key(key)
    if isinstance(kind, Reserved):
        if kind.name in DATE_FIELDS:
            value = normalize_date(value)
        return kind.name, value

    if key.upper() in CAPACITY_FIELDS:
        size = parse_size(value)
        if size is not None:
            value = size
    return kind.name, value
