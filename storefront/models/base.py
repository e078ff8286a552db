"""Base model for JSON:API resources"""

from typing import Any, Optional

from pydantic import AliasChoices, AliasGenerator, BaseModel, ConfigDict
from pydantic.alias_generators import to_camel, to_snake


def camel_or_snake(name: str) -> AliasChoices:
    """Read an attribute by its camelCase key first, then its snake_case key"""
    camel = to_camel(name)
    if camel == name:
        return AliasChoices(name)
    return AliasChoices(camel, name)


def to_amount(value: Any) -> float:
    """Amounts default to 0 when absent or null"""
    if value is None or value == "":
        return 0.0
    return float(value)


def to_id(value: Any) -> Optional[str]:
    """Ids arrive as numbers or strings; keep them as strings"""
    if value is None or value == "":
        return None
    return str(value)


class ApiModel(BaseModel):
    """
    Canonical shape of a backend record.

    Every field accepts either casing from the backend, so the rest of the
    package only ever sees snake_case attributes.
    """

    model_config = ConfigDict(
        alias_generator=AliasGenerator(validation_alias=camel_or_snake),
        populate_by_name=True,
        extra="ignore",
    )

    @classmethod
    def flatten(cls, record: dict[str, Any]) -> dict[str, Any]:
        """Merge a JSON:API envelope into a flat attribute dict"""
        if not isinstance(record, dict):
            raise TypeError(f"Expected a resource object, got {type(record).__name__}")

        attributes = record.get("attributes")
        if isinstance(attributes, dict):
            data = dict(attributes)
        else:
            data = {k: v for k, v in record.items() if k not in ("type", "relationships", "links")}

        if record.get("id") is not None:
            data["id"] = record["id"]

        # Relationship ids fill in <name>Id when the attribute is missing
        relationships = record.get("relationships") or {}
        for name, relationship in relationships.items():
            related = relationship.get("data") if isinstance(relationship, dict) else None
            if isinstance(related, dict) and related.get("id") is not None:
                key = f"{name}Id"
                if key not in data and f"{to_snake(name)}_id" not in data:
                    data[key] = related["id"]

        return data

    @classmethod
    def from_api(cls, record: dict[str, Any]):
        """Normalize a raw API record into this model"""
        return cls.model_validate(cls.flatten(record))
