"""Helpers shared by the DTO models"""

from dataclasses import asdict, fields
from enum import Enum
from typing import Any, Dict, Type, TypeVar

T = TypeVar("T")


def drop_none(obj: Any) -> Dict[str, Any]:
    """Convert a dataclass to a wire dict, skipping None fields"""
    result = {}
    for key, value in asdict(obj).items():
        if value is None:
            continue
        if isinstance(value, Enum):
            value = value.value
        result[key] = value
    return result


def known_fields(cls: Type[T], data: Dict[str, Any]) -> Dict[str, Any]:
    """Keep only the keys the dataclass declares (the Agent may add new ones)"""
    names = {f.name for f in fields(cls)}
    return {k: v for k, v in data.items() if k in names}
