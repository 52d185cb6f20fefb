"""Read-only mapping helpers for the frozen models."""

from types import MappingProxyType
from typing import Any, Mapping


def freeze_mapping(value: Mapping) -> Mapping:
    """Read-only view of a mapping; nested mappings are frozen too."""
    return MappingProxyType({
        key: freeze_mapping(item) if isinstance(item, Mapping) else item
        for key, item in value.items()
    })


def thaw_mapping(value: Mapping) -> dict:
    """Plain dict copy of a (possibly frozen) mapping, for serialization."""
    return {
        key: thaw_mapping(item) if isinstance(item, Mapping) else item
        for key, item in value.items()
    }


def freeze_validator(value: Any) -> Any:
    return freeze_mapping(value) if isinstance(value, Mapping) else value
