"""Duration and price totals for a selection of services."""
from datetime import datetime, timedelta
from typing import Any, Dict, Iterable, Mapping, NamedTuple, Sequence, Union

from salon_schedule import config
from salon_schedule.models import Number, ServiceOffering
from salon_schedule.timegrid import parse_hhmm
from salon_schedule.transport import parse_services

# Fixed day used for wall-clock arithmetic in derive_end_time
REFERENCE_DATE = datetime(2000, 1, 1)

# Price totals are money: keep cents, drop float noise
PRICE_DECIMALS = 2

CatalogEntry = Union[ServiceOffering, Mapping[str, Any]]


class ServiceTotals(NamedTuple):
    """Aggregate of a service selection."""
    total_minutes: Number
    total_price: Number


def build_catalog(catalog: Iterable[CatalogEntry]) -> Dict[str, ServiceOffering]:
    """
    Index a service catalog by id.

    Plain dict entries are validated into ServiceOffering; entries that
    cannot be mapped are skipped with a warning and behave like an unknown
    id. When two entries share an id the first one wins.
    """
    by_id: Dict[str, ServiceOffering] = {}
    for service in parse_services(list(catalog)):
        by_id.setdefault(service.id, service)
    return by_id


def aggregate(
    selected_service_ids: Sequence[str],
    catalog: Union[Iterable[CatalogEntry], Mapping[str, ServiceOffering]],
    default_minutes: Number = config.DEFAULT_DURATION_MINUTES
) -> ServiceTotals:
    """
    Sum duration and price of the selected services.

    Every occurrence of an id is counted. Unknown ids are skipped. A service
    without a numeric duration counts as `default_minutes` (30), without a
    numeric price as 0. A zero duration total floors to `default_minutes`;
    the price total is never floored, only rounded to cents.

    Example:
        >>> aggregate([], [])
        ServiceTotals(total_minutes=30, total_price=0)
    """
    by_id = catalog if isinstance(catalog, Mapping) else build_catalog(catalog)

    minutes: Number = 0
    price: Number = 0
    for service_id in selected_service_ids:
        service = by_id.get(service_id)
        if service is None:
            continue
        minutes += default_minutes if service.duration_minutes is None else service.duration_minutes
        price += service.effective_price

    if minutes == 0:
        minutes = default_minutes
    return ServiceTotals(total_minutes=minutes, total_price=round(price, PRICE_DECIMALS))


def derive_end_time(start_hhmm: str, total_minutes: Number) -> str:
    """
    Add a duration to a wall-clock HH:MM value.

    Crossing midnight wraps around ("23:45" + 30 -> "00:15"); appointments
    are same-day, so the date part is dropped on purpose.

    Raises:
        ValueError: If start_hhmm is not a valid HH:MM
    """
    start = REFERENCE_DATE + timedelta(minutes=parse_hhmm(start_hhmm))
    end = start + timedelta(minutes=total_minutes)
    return end.strftime(config.TIME_FORMAT)


def format_price(value: Number) -> str:
    """Render a price for a form field: whole numbers without decimals."""
    if isinstance(value, float):
        value = round(value, PRICE_DECIMALS)
        if value.is_integer():
            return str(int(value))
    return str(value)
