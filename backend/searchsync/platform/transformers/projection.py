"""Field projection: shape raw source data into index-friendly values.

Source stores hand back native types (datetimes, geo points, document references).
The index only understands JSON, so values are mapped recursively:

- datetimes -> epoch seconds (int)
- geo points (``latitude``/``longitude`` attributes) -> ``[lat, lng]``
- document references (``path`` attribute) -> the referenced path
"""

from datetime import date, datetime, timezone
from typing import Any, Dict, Iterable, Mapping


def project_fields(data: Mapping[str, Any], fields: Iterable[str]) -> Dict[str, Any]:
    """Keep only the listed top-level fields.

    Args:
        data: Raw source data
        fields: Field names to keep; empty keeps everything

    Returns:
        A new dict; listed fields missing from ``data`` are simply omitted
    """
    fields = tuple(fields)
    if not fields:
        return dict(data)
    return {name: data[name] for name in fields if name in data}


def map_value(value: Any) -> Any:
    """Convert one source value into a JSON-compatible value."""
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return int(value.timestamp())
    if isinstance(value, date):
        return int(datetime(value.year, value.month, value.day, tzinfo=timezone.utc).timestamp())
    if isinstance(value, Mapping):
        return {str(k): map_value(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [map_value(v) for v in value]
    if hasattr(value, "latitude") and hasattr(value, "longitude"):
        return [value.latitude, value.longitude]
    if not isinstance(value, (str, bytes)) and isinstance(getattr(value, "path", None), str):
        return value.path
    return value


def flatten_document(data: Mapping[str, Any], separator: str = ".") -> Dict[str, Any]:
    """Flatten nested mappings into dotted keys. Lists are kept as values.

    Example:
        ``{"a": {"b": 1}, "c": [1, 2]}`` -> ``{"a.b": 1, "c": [1, 2]}``
    """
    flat: Dict[str, Any] = {}

    def _walk(prefix: str, value: Any) -> None:
        if isinstance(value, Mapping) and value:
            for key, child in value.items():
                _walk(f"{prefix}{separator}{key}" if prefix else str(key), child)
        else:
            flat[prefix] = value

    for key, value in data.items():
        _walk(str(key), value)
    return flat


def shape_fields(
    data: Mapping[str, Any], fields: Iterable[str], flatten: bool = False
) -> Dict[str, Any]:
    """Project, map and optionally flatten source data in one step."""
    mapped = {key: map_value(value) for key, value in project_fields(data, fields).items()}
    return flatten_document(mapped) if flatten else mapped
