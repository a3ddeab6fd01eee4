"""
Domain models for record-type schemas and form registrations.
"""

from typing import Dict, List, Any, Iterable, Mapping, Optional, Tuple
from datetime import datetime
import logging

logger = logging.getLogger(__name__)

# Requested field types that carry a semantic format hint
FORMAT_TYPES = ("email", "phone", "currency", "date")

SELECT_TYPE = "select"

FORM_TYPE_DEFAULT = "default"
FORM_TYPE_CUSTOM = "custom"


def _unique(values: Optional[Iterable[Any]]) -> List[Any]:
    """Drop repeated options, keeping the first occurrence of each."""
    result: List[Any] = []
    for value in values or []:
        if value not in result:
            result.append(value)
    return result


class FieldDefinition:
    """Represents a single property of a record-type schema."""

    def __init__(
            self,
            type: str,
            title: str,
            format: Optional[str] = None,
            enum: Optional[List[str]] = None,
            default: Optional[str] = None
        ):
            self.type = type
            self.title = title
            self.format = format
            # An empty enumeration means "no enumeration"
            self.enum = _unique(enum) or None
            self.default = default

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "FieldDefinition":
        """Build a definition from a stored or catalog property."""
        return cls(
            type=data.get("type") or "string",
            title=data.get("title") or "",
            format=data.get("format") or None,
            enum=data.get("enum") if isinstance(data.get("enum"), (list, tuple)) else None,
            default=data.get("default") or None
        )

    @classmethod
    def from_request(
        cls,
        field_type: str,
        title: str,
        enum: Optional[List[str]] = None,
        default: Optional[str] = None
    ) -> "FieldDefinition":
        """
        Build the stored definition for a user-requested field.

        `select` is stored as a string with its options as the enumeration,
        format-bearing types keep their type and gain a matching format.

        Args:
            field_type: Type tag as chosen by the user
            title: Display label
            enum: Options for select fields
            default: Optional default value

        Returns:
            Definition ready to be persisted
        """
        if field_type == SELECT_TYPE:
            return cls(type="string", title=title, enum=enum, default=default)
        if field_type in FORMAT_TYPES:
            return cls(type=field_type, title=title, format=field_type, default=default)
        return cls(type=field_type, title=title, default=default)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the JSON-Schema property shape, omitting unset attributes."""
        result: Dict[str, Any] = {"type": self.type, "title": self.title}
        if self.format:
            result["format"] = self.format
        if self.enum:
            result["enum"] = list(self.enum)
        if self.default:
            result["default"] = self.default
        return result

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, FieldDefinition):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __repr__(self) -> str:
        return f"FieldDefinition({self.to_dict()!r})"


def normalize_properties(properties: Mapping[str, Any]) -> Dict[str, Dict[str, Any]]:
    """
    Normalize a property mapping to plain JSON-Schema dictionaries.

    Accepts either FieldDefinition values or raw dictionaries (legacy rows),
    drops empty field names and strips empty enumerations. Values that are
    neither are skipped, so one corrupt property never hides the rest.
    """
    normalized: Dict[str, Dict[str, Any]] = {}
    if not isinstance(properties, Mapping):
        logger.warning(f"Ignoring schema properties of type {type(properties).__name__}")
        return normalized
    for name, value in properties.items():
        if not name:
            continue
        if isinstance(value, FieldDefinition):
            normalized[name] = value.to_dict()
        elif isinstance(value, Mapping):
            normalized[name] = FieldDefinition.from_dict(value).to_dict()
        else:
            logger.warning(f"Skipping malformed property '{name}' of type {type(value).__name__}")
    return normalized


def normalize_required(required: Iterable[str], property_names: Iterable[str]) -> List[str]:
    """Deduplicate required names, keep their order, drop names without a property."""
    known = set(property_names)
    result: List[str] = []
    for name in required or []:
        if isinstance(name, str) and name in known and name not in result:
            result.append(name)
    return result


def normalize_schema(
    properties: Mapping[str, Any],
    required: Iterable[str]
) -> Tuple[Dict[str, Dict[str, Any]], List[str]]:
    """Apply the normalization rules to a whole schema document."""
    clean_properties = normalize_properties(properties)
    return clean_properties, normalize_required(required, clean_properties.keys())


class RecordSchema:
    """Persisted field schema for one (tenant, record type) pair."""

    def __init__(
        self,
        tenant_id: str,
        record_type: str,
        properties: Mapping[str, Any],
        required: Iterable[str],
        version: int = 1,
        created_at: Optional[datetime] = None,
        updated_at: Optional[datetime] = None
    ):
        self.tenant_id = tenant_id
        self.record_type = record_type
        self.properties, self.required = normalize_schema(properties, required)
        self.version = version
        self.created_at = created_at
        self.updated_at = updated_at

    def to_json_schema(self) -> Dict[str, Any]:
        """Return the schema in the shape served to callers."""
        return {
            "type": "object",
            "properties": {name: dict(prop) for name, prop in self.properties.items()},
            "required": list(self.required)
        }


class FormDefinition:
    """A record type registered for a tenant."""

    def __init__(
        self,
        tenant_id: str,
        form_id: str,
        form_title: str,
        type: str = FORM_TYPE_DEFAULT,
        integration_key: Optional[str] = None,
        created_at: Optional[datetime] = None,
        updated_at: Optional[datetime] = None
    ):
        self.tenant_id = tenant_id
        self.form_id = form_id
        self.form_title = form_title
        self.type = type
        self.integration_key = integration_key
        self.created_at = created_at
        self.updated_at = updated_at

    @property
    def is_custom(self) -> bool:
        return self.type == FORM_TYPE_CUSTOM


def sort_forms(forms: Iterable[FormDefinition]) -> List[FormDefinition]:
    """Order registrations default-first, then by title."""
    return sorted(
        forms,
        key=lambda f: (0 if f.type == FORM_TYPE_DEFAULT else 1, f.form_title or "")
    )
