"""Decode JSON-lines event files into typed chain events.

Each line is one JSON object with a `kind` field naming an `EventKind` value
plus the fields of the matching event dataclass. Integer fields accept JSON
numbers, decimal strings and `0x`-prefixed hex strings, since 256-bit values
do not survive every JSON producer as numbers.
"""

from __future__ import annotations

import dataclasses
import json
from functools import lru_cache
from pathlib import Path
from typing import Any, Iterator, get_args, get_type_hints

from hook_indexer.domain import EVENT_TYPES, ChainEvent, EventKind


class EventDecodeError(ValueError):
    """Raised when an event payload cannot be decoded.

    Attributes:
        line_number: One-based source line, when decoding from a file.
    """

    def __init__(self, message: str, line_number: int | None = None):
        prefix = "" if line_number is None else f"line {line_number}: "
        super().__init__(f"{prefix}{message}")
        self.line_number = line_number


def job_decode_event(payload: dict[str, Any]) -> ChainEvent:
    """Decode one event payload object.

    Args:
        payload: JSON object with `kind` and event fields.

    Returns:
        ChainEvent: Typed event instance.

    Raises:
        EventDecodeError: Raised when the kind is unknown or a field is missing, unknown or mistyped.
    """

    if not isinstance(payload, dict):
        raise EventDecodeError("event payload must be a JSON object")

    raw_kind = payload.get("kind")
    try:
        kind = EventKind(raw_kind)
    except ValueError as error:
        raise EventDecodeError(f"unknown event kind: {raw_kind!r}") from error

    event_type = EVENT_TYPES[kind]
    field_types = _job_event_field_types(event_type)

    unknown_field_names = sorted(set(payload) - set(field_types) - {"kind"})
    if unknown_field_names:
        raise EventDecodeError(f"{kind.value} has unknown fields: {', '.join(unknown_field_names)}")

    decoded_fields: dict[str, Any] = {}
    for field_name, (field_type, optional, has_default) in field_types.items():
        if field_name not in payload:
            if has_default:
                continue
            raise EventDecodeError(f"{kind.value} is missing field: {field_name}")
        decoded_fields[field_name] = _job_decode_field_value(
            kind, field_name, payload[field_name], field_type, optional
        )

    return event_type(**decoded_fields)


def job_read_events_jsonl(events_file_path: Path) -> Iterator[ChainEvent]:
    """Yield decoded events from a JSON-lines file, skipping blank lines.

    Args:
        events_file_path: Path of the JSON-lines file.

    Returns:
        Iterator[ChainEvent]: Events in file order.

    Raises:
        EventDecodeError: Raised with the line number of the first bad line.
        OSError: Raised when the file cannot be read.
    """

    with Path(events_file_path).open("r", encoding="utf-8") as events_file:
        for line_number, line in enumerate(events_file, start=1):
            stripped_line = line.strip()
            if not stripped_line:
                continue
            try:
                payload = json.loads(stripped_line)
            except json.JSONDecodeError as error:
                raise EventDecodeError("line is not valid JSON", line_number=line_number) from error
            try:
                yield job_decode_event(payload)
            except EventDecodeError as error:
                raise EventDecodeError(str(error), line_number=line_number) from error


@lru_cache(maxsize=None)
def _job_event_field_types(event_type: type) -> dict[str, tuple[type, bool, bool]]:
    type_hints = get_type_hints(event_type)
    field_types: dict[str, tuple[type, bool, bool]] = {}
    for field in dataclasses.fields(event_type):
        hint = type_hints[field.name]
        optional = type(None) in get_args(hint)
        if optional:
            hint = next(arg for arg in get_args(hint) if arg is not type(None))
        has_default = field.default is not dataclasses.MISSING
        field_types[field.name] = (hint, optional, has_default)
    return field_types


def _job_decode_field_value(kind: EventKind, field_name: str, value: Any, field_type: type, optional: bool) -> Any:
    if value is None:
        if optional:
            return None
        raise EventDecodeError(f"{kind.value}.{field_name} must not be null")

    if field_type is int:
        return _job_decode_int(kind, field_name, value)

    if not isinstance(value, str) or not value.strip():
        raise EventDecodeError(f"{kind.value}.{field_name} must be a non-empty string")
    return value.strip()


def _job_decode_int(kind: EventKind, field_name: str, value: Any) -> int:
    if isinstance(value, bool):
        raise EventDecodeError(f"{kind.value}.{field_name} must be an integer")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        normalized_value = value.strip()
        try:
            if normalized_value.lower().startswith(("0x", "-0x")):
                return int(normalized_value, 16)
            return int(normalized_value)
        except ValueError as error:
            raise EventDecodeError(f"{kind.value}.{field_name} must be an integer string") from error
    raise EventDecodeError(f"{kind.value}.{field_name} must be an integer")


__all__ = ["EventDecodeError", "job_decode_event", "job_read_events_jsonl"]
