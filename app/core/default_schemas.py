"""
Default Schema Catalog.
Static seed data describing the initial schema of each built-in record type.
"""

from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Tuple
import copy

# (form_id, form_title) of every record type each tenant gets out of the box
BUILT_IN_FORMS: Tuple[Tuple[str, str], ...] = (
    ("activities", "Activities"),
    ("clients", "Clients"),
)

# Seed used when a record type has no catalog entry
MINIMAL_SCHEMA: Mapping[str, Any] = MappingProxyType({
    "properties": MappingProxyType({
        "id": MappingProxyType({"type": "string", "title": "ID"}),
        "name": MappingProxyType({"type": "string", "title": "Name"}),
    }),
    "required": ("id", "name"),
})

DEFAULT_SCHEMAS: Dict[str, Dict[str, Any]] = {
    "activities": {
        "properties": {
            "id": {"type": "string", "title": "ID"},
            "name": {"type": "string", "title": "Name"},
            "type": {
                "type": "string",
                "title": "Activity Type",
                "enum": ["call", "meeting", "email", "task"],
                "default": "task"
            },
            "status": {
                "type": "string",
                "title": "Status",
                "enum": ["planned", "in_progress", "completed", "cancelled"],
                "default": "planned"
            },
            "description": {"type": "string", "title": "Description"},
            "dueDate": {"type": "date", "title": "Due Date", "format": "date"},
            "ownerId": {"type": "string", "title": "Owner ID"},
        },
        "required": ["id", "name", "type"],
    },
    "clients": {
        "properties": {
            "id": {"type": "string", "title": "ID"},
            "name": {"type": "string", "title": "Name"},
            "websiteUrl": {"type": "string", "title": "Website"},
            "email": {"type": "email", "title": "Email", "format": "email"},
            "primaryPhone": {"type": "phone", "title": "Primary Phone", "format": "phone"},
            "industry": {"type": "string", "title": "Industry"},
            "currency": {"type": "currency", "title": "Currency", "format": "currency"},
            "description": {"type": "string", "title": "Description"},
        },
        "required": ["id", "name"],
    },
}


def _freeze(value: Any) -> Any:
    if isinstance(value, Mapping):
        return MappingProxyType({k: _freeze(v) for k, v in value.items()})
    if isinstance(value, (list, tuple)):
        return tuple(_freeze(v) for v in value)
    return value


def _thaw(value: Any) -> Any:
    if isinstance(value, Mapping):
        return {k: _thaw(v) for k, v in value.items()}
    if isinstance(value, tuple):
        return [_thaw(v) for v in value]
    return copy.copy(value)


class DefaultSchemaCatalog:
    """
    Immutable lookup of seed schemas by record-type key.

    Entries are frozen on construction; every lookup hands out a fresh
    mutable copy so callers can never alter the catalog.
    """

    def __init__(self, schemas: Optional[Mapping[str, Mapping[str, Any]]] = None):
        source = DEFAULT_SCHEMAS if schemas is None else schemas
        self._schemas = MappingProxyType({
            key.lower(): _freeze(value) for key, value in source.items()
        })

    def lookup(self, record_type: str) -> Optional[Dict[str, Any]]:
        """
        Get the seed schema for a record type.

        Args:
            record_type: Record-type key (case-insensitive)

        Returns:
            Dictionary with `properties` and `required`, or None if the
            catalog has no entry for the key
        """
        entry = self._schemas.get((record_type or "").lower())
        if entry is None:
            return None
        return {
            "properties": _thaw(entry.get("properties", {})),
            "required": _thaw(entry.get("required", ())),
        }

    def keys(self) -> List[str]:
        return sorted(self._schemas.keys())

    def __contains__(self, record_type: str) -> bool:
        return (record_type or "").lower() in self._schemas


def minimal_schema() -> Dict[str, Any]:
    """Return a mutable copy of the fallback `{id, name}` schema."""
    return {
        "properties": _thaw(MINIMAL_SCHEMA["properties"]),
        "required": _thaw(MINIMAL_SCHEMA["required"]),
    }


default_catalog = DefaultSchemaCatalog()
