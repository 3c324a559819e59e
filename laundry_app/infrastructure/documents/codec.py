"""JSON encoding for stored documents. Datetimes survive the round trip as tagged objects."""

import json
from datetime import datetime
from typing import Any, Dict

_DATETIME_TAG = "$datetime"


def _default(value: Any) -> Any:
    if isinstance(value, datetime):
        return {_DATETIME_TAG: value.isoformat()}
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def _object_hook(obj: Dict[str, Any]) -> Any:
    if len(obj) == 1 and _DATETIME_TAG in obj:
        return datetime.fromisoformat(obj[_DATETIME_TAG])
    return obj


def encode_document(data: Dict[str, Any]) -> str:
    return json.dumps(data, default=_default)


def decode_document(raw: str) -> Dict[str, Any]:
    return json.loads(raw, object_hook=_object_hook)
