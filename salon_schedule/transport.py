"""Mapping of raw API payloads into domain records.

The appointment and employee endpoints answer either with a bare list or
with an envelope ({"items": [...]} or {"data": [...]}). Records that cannot
be mapped at all are skipped and logged; they never break the grid.
"""
from typing import Any, List, Type, TypeVar

from pydantic import BaseModel, ValidationError

from salon_schedule.logging_config import get_logger
from salon_schedule.models import Appointment, Resource, ServiceOffering

logger = get_logger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


def to_array(raw: Any) -> List[Any]:
    """
    Unwrap a list response.

    Example:
        >>> to_array({"items": [1, 2]})
        [1, 2]
        >>> to_array(None)
        []
    """
    if isinstance(raw, list):
        return raw
    if isinstance(raw, dict):
        for key in ("items", "data"):
            if isinstance(raw.get(key), list):
                return raw[key]
    return []


def _parse_records(raw: Any, model: Type[ModelT], kind: str) -> List[ModelT]:
    records = []
    for position, item in enumerate(to_array(raw)):
        if isinstance(item, model):
            records.append(item)
            continue
        if not isinstance(item, dict):
            logger.warning("record_skipped", kind=kind, position=position, reason="not an object")
            continue
        try:
            records.append(model.model_validate(item))
        except ValidationError as e:
            logger.warning(
                "record_skipped",
                kind=kind,
                position=position,
                record_id=item.get("id"),
                errors=e.error_count(),
            )
    return records


def parse_resources(raw: Any) -> List[Resource]:
    """Map an employee list response to resources."""
    return _parse_records(raw, Resource, "resource")


def parse_services(raw: Any) -> List[ServiceOffering]:
    """Map a service catalog response to service offerings."""
    return _parse_records(raw, ServiceOffering, "service")


def parse_appointments(raw: Any) -> List[Appointment]:
    """Map an appointment list response to appointments."""
    return _parse_records(raw, Appointment, "appointment")
