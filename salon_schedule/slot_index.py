"""Appointment lookup by (resource, bucket) cell.

Appointments are bucketed by start time only. A long appointment still
occupies a single cell; the renderer makes it taller. Nothing here detects
overlaps: concurrent appointments in one cell simply stack.
"""
from typing import Dict, Iterable, List, Optional, Tuple

from salon_schedule.logging_config import get_logger
from salon_schedule.models import Appointment, Resource
from salon_schedule.timegrid import minutes_since_midnight

logger = get_logger(__name__)

CellKey = Tuple[str, int]


def cell_key(resource_id: str, minute: int) -> str:
    """String form of a cell key, e.g. "emp-1|570"."""
    return f"{resource_id}|{minute}"


class SlotIndex:
    """
    Appointments grouped into grid cells.

    Rebuilt wholesale on every appointment-list change. Appointments with
    no resource are kept aside in `unassigned` instead of being placed on
    the grid.
    """

    def __init__(
        self,
        cells: Dict[CellKey, Tuple[Appointment, ...]],
        unassigned: Tuple[Appointment, ...],
        resource_ids: Tuple[str, ...] = ()
    ):
        self._cells = cells
        self.unassigned = unassigned
        self.resource_ids = resource_ids

    @classmethod
    def build(
        cls,
        appointments: Iterable[Appointment],
        resources: Optional[Iterable[Resource]] = None
    ) -> "SlotIndex":
        """
        Index appointments by (resource_id, start minute).

        Args:
            appointments: Appointments of one day
            resources: Roster shown on the grid (column order)

        Returns:
            SlotIndex
        """
        grouped: Dict[CellKey, List[Appointment]] = {}
        unassigned: List[Appointment] = []

        for appointment in appointments:
            if not appointment.resource_id:
                unassigned.append(appointment)
                continue
            key = (appointment.resource_id, minutes_since_midnight(appointment.start_time))
            grouped.setdefault(key, []).append(appointment)

        # Stable sort keeps insertion order for equal starts
        cells = {
            key: tuple(sorted(items, key=lambda a: a.start_time))
            for key, items in grouped.items()
        }
        resource_ids = tuple(r.id for r in resources) if resources is not None else ()

        logger.debug(
            "slot_index_built",
            cells=len(cells),
            unassigned=len(unassigned),
            resources=len(resource_ids),
        )
        return cls(cells, tuple(unassigned), resource_ids)

    def lookup(self, resource_id: str, minute: int) -> Tuple[Appointment, ...]:
        """Appointments starting in a cell; empty tuple for an empty cell."""
        return self._cells.get((resource_id, minute), ())

    def count_for(self, resource_id: str) -> int:
        """Number of indexed appointments of one resource."""
        return sum(len(items) for (rid, _), items in self._cells.items() if rid == resource_id)

    @property
    def cells_by_key(self) -> Dict[str, Tuple[Appointment, ...]]:
        """Cells keyed by "{resource_id}|{minute}"."""
        return {cell_key(rid, minute): items for (rid, minute), items in self._cells.items()}

    def __len__(self) -> int:
        return sum(len(items) for items in self._cells.values())

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SlotIndex):
            return NotImplemented
        return (
            self._cells == other._cells
            and self.unassigned == other.unassigned
            and self.resource_ids == other.resource_ids
        )
