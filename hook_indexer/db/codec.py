"""JSON payload codec for entity dataclasses.

Decimal fields are stored as strings so fixed-point values survive the round
trip exactly; integers are stored as JSON numbers of arbitrary size.
"""

from __future__ import annotations

import dataclasses
import json
from decimal import Decimal
from functools import lru_cache
from typing import Any, get_type_hints

from hook_indexer.domain import ENTITY_TYPES, EntityKind


def db_entity_validate_key(kind: EntityKind, entity_id: str) -> tuple[EntityKind, str]:
    """Validate and normalize one entity key.

    Args:
        kind: Entity kind.
        entity_id: Entity identifier.

    Returns:
        tuple[EntityKind, str]: Normalized key.

    Raises:
        ValueError: Raised when the kind is unknown or the id is blank.
    """

    if not isinstance(kind, EntityKind):
        raise ValueError("kind must be an EntityKind")
    if not isinstance(entity_id, str):
        raise ValueError("entity_id must be a string")
    normalized_entity_id = entity_id.strip()
    if not normalized_entity_id:
        raise ValueError("entity_id must not be blank")
    return kind, normalized_entity_id


def db_entity_validate_type(kind: EntityKind, entity: Any) -> None:
    """Reject entities whose type does not match the registered type for `kind`.

    Raises:
        ValueError: Raised when the entity type is wrong.
    """

    expected_type = ENTITY_TYPES[kind]
    if not isinstance(entity, expected_type):
        raise ValueError(f"{kind.value} entity must be {expected_type.__name__}, got {type(entity).__name__}")


def db_entity_encode(entity: Any) -> str:
    """Encode one entity dataclass into a JSON payload string."""

    return json.dumps(dataclasses.asdict(entity), default=_db_codec_default, sort_keys=True)


def db_entity_decode(kind: EntityKind, payload: str) -> Any:
    """Decode one JSON payload string into the entity registered for `kind`.

    Args:
        kind: Entity kind selecting the target dataclass.
        payload: JSON payload produced by `db_entity_encode`.

    Returns:
        Any: Decoded entity instance.

    Raises:
        ValueError: Raised when the payload is malformed.
    """

    entity_type = ENTITY_TYPES[kind]
    try:
        raw_fields = json.loads(payload)
    except json.JSONDecodeError as error:
        raise ValueError(f"{kind.value} payload is not valid JSON") from error
    if not isinstance(raw_fields, dict):
        raise ValueError(f"{kind.value} payload must be a JSON object")

    decimal_field_names = _db_codec_decimal_fields(entity_type)
    decoded_fields = {
        name: (Decimal(value) if name in decimal_field_names and value is not None else value)
        for name, value in raw_fields.items()
    }
    try:
        return entity_type(**decoded_fields)
    except TypeError as error:
        raise ValueError(f"{kind.value} payload fields do not match {entity_type.__name__}") from error


def _db_codec_default(value: Any) -> Any:
    if isinstance(value, Decimal):
        return str(value)
    raise TypeError(f"unsupported payload value type: {type(value).__name__}")


@lru_cache(maxsize=None)
def _db_codec_decimal_fields(entity_type: type) -> frozenset[str]:
    type_hints = get_type_hints(entity_type)
    return frozenset(name for name, hint in type_hints.items() if hint is Decimal)


__all__ = [
    "db_entity_decode",
    "db_entity_encode",
    "db_entity_validate_key",
    "db_entity_validate_type",
]
