"""Cursor encoding for keyset pagination.

A cursor is URL-safe base64 (padding stripped) over compact JSON:

    {"position":[["createdAt",{"$date":"2024-01-01T00:00:00+00:00"}],["_id",42]]}

JSON scalars are stored as-is. Values JSON cannot represent exactly are
wrapped in a single-key tag object so they decode back to the same type.

The codec preserves value type as well as value. 1, 1.0 and True compare
equal in Python but are distinct positions with distinct cursors, and so are
Decimal("1.0") and Decimal("1.00"). Two cursors are equal exactly when their
positions hold the same values of the same types.
"""

import base64
import json
import logging
import math
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, List, Tuple
from uuid import UUID

from pydantic import BaseModel, Field

from ..errors.problem_details import InvalidCursorError, InvalidParametersError
from ..models import Position


logger = logging.getLogger(__name__)


class CursorPayload(BaseModel):
    """Wire structure of a decoded cursor."""
    
    position: List[Tuple[str, Any]] = Field(min_length=1, description="Ordered (field, value) pairs")


def _encode_value(value: Any) -> Any:
    if value is None or isinstance(value, (bool, str)):
        return value
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if math.isnan(value) or math.isinf(value):
            raise InvalidParametersError(f"Sort value {value!r} is not totally orderable")
        return value
    if isinstance(value, datetime):
        return {"$date": value.isoformat()}
    if isinstance(value, date):
        return {"$day": value.isoformat()}
    if isinstance(value, UUID):
        return {"$uuid": str(value)}
    if isinstance(value, Decimal):
        if not value.is_finite():
            raise InvalidParametersError(f"Sort value {value!r} is not totally orderable")
        return {"$decimal": str(value)}
    if isinstance(value, bytes):
        return {"$binary": base64.b64encode(value).decode("ascii")}
    raise InvalidParametersError(
        f"Sort value of type {type(value).__name__} cannot be encoded in a cursor"
    )


_TAG_DECODERS = {
    "$date": datetime.fromisoformat,
    "$day": date.fromisoformat,
    "$uuid": UUID,
    "$decimal": Decimal,
    "$binary": lambda text: base64.b64decode(text.encode("ascii"), validate=True),
}


def _decode_value(value: Any) -> Any:
    if isinstance(value, dict):
        if len(value) != 1:
            raise ValueError(f"Malformed tagged value: {value!r}")
        tag, text = next(iter(value.items()))
        decoder = _TAG_DECODERS.get(tag)
        if decoder is None or not isinstance(text, str):
            raise ValueError(f"Unknown value tag: {tag!r}")
        try:
            return decoder(text)
        except InvalidOperation as e:
            raise ValueError(f"Malformed decimal: {text!r}") from e
    if isinstance(value, list):
        raise ValueError("Arrays are not valid sort values")
    return value


def encode_cursor(position: Position) -> str:
    """Encode a position into an opaque cursor.
    
    Args:
        position: Position of a document in the active sort
        
    Returns:
        URL-safe base64 string without padding
        
    Raises:
        InvalidParametersError: If a value cannot be represented in a cursor
    """
    payload = {
        "position": [[name, _encode_value(value)] for name, value in position.entries]
    }
    cursor_json = json.dumps(payload, separators=(",", ":"), sort_keys=True, allow_nan=False)
    encoded = base64.urlsafe_b64encode(cursor_json.encode("utf-8")).decode("ascii")
    return encoded.rstrip("=")


def decode_cursor(cursor: str) -> Position:
    """Decode an opaque cursor back into a position.
    
    Args:
        cursor: Cursor previously produced by encode_cursor
        
    Returns:
        Decoded position
        
    Raises:
        InvalidCursorError: If the cursor is empty or malformed
    """
    if not cursor:
        raise InvalidCursorError("Empty cursor provided")
    
    try:
        padded = cursor + "=" * (-len(cursor) % 4)
        cursor_bytes = base64.b64decode(padded.encode("ascii"), altchars=b"-_", validate=True)
        cursor_dict = json.loads(cursor_bytes.decode("utf-8"))
        payload = CursorPayload.model_validate(cursor_dict)
        entries = [(name, _decode_value(value)) for name, value in payload.position]
    except (ValueError, TypeError) as e:
        logger.info(f"Rejected malformed cursor: {e}")
        raise InvalidCursorError(f"Invalid cursor format: {e}")
    
    return Position(entries=entries)
