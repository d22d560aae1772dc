"""
Rack U-slot allocation.

Pure functions over a rack capacity and its current occupants. Nothing here
touches the database; ``EquipmentService`` loads the rows and persists only
after ``check_placement`` reports ``ok``.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, List, Optional, Protocol

from rackplan.lib.errors import ConflictError, OutOfRangeError
from rackplan.lib.geometry import intervals_overlap, u_range_end


class Occupant(Protocol):
    """Anything with an id and a vertical slot range (ORM ``Equipment`` rows qualify)."""
    id: Any
    start_u: int
    height_u: int


@dataclass(frozen=True)
class SlotRange:
    start: int
    end: int

    @property
    def size(self) -> int:
        return self.end - self.start + 1


class PlacementStatus(str, Enum):
    OK = "ok"
    CONFLICT = "conflict"
    OUT_OF_RANGE = "out_of_range"


class OutOfRangeReason(str, Enum):
    BELOW_RACK = "below rack"
    NON_POSITIVE_HEIGHT = "non-positive height"
    EXCEEDS_CAPACITY = "exceeds capacity"


@dataclass
class Placement:
    status: PlacementStatus
    start_u: int
    height_u: int
    total_u: int
    reason: Optional[OutOfRangeReason] = None
    conflict: Optional[Any] = None
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.status == PlacementStatus.OK

    @property
    def end_u(self) -> int:
        return u_range_end(self.start_u, self.height_u)

    @property
    def conflict_range(self) -> Optional[SlotRange]:
        if self.conflict is None:
            return None
        return occupied_range(self.conflict)

    def raise_for_status(self) -> None:
        """Turn a rejected placement into the matching domain error."""
        if self.status == PlacementStatus.OUT_OF_RANGE:
            raise OutOfRangeError(
                self.message,
                reason=self.reason.value,
                total_u=self.total_u,
                end_u=self.end_u,
            )
        if self.status == PlacementStatus.CONFLICT:
            rng = self.conflict_range
            raise ConflictError(
                self.message,
                details={
                    "equipment_id": str(self.conflict.id),
                    "equipment_name": getattr(self.conflict, "name", None),
                    "start_u": rng.start,
                    "end_u": rng.end,
                },
            )


def occupied_range(occupant: Occupant) -> SlotRange:
    return SlotRange(occupant.start_u, u_range_end(occupant.start_u, occupant.height_u))


def _label(occupant: Occupant) -> str:
    return getattr(occupant, "name", None) or str(occupant.id)


def check_placement(
    total_u: int,
    occupants: Iterable[Occupant],
    start_u: int,
    height_u: int,
    exclude_id: Any = None,
) -> Placement:
    """
    Validate ``[start_u, start_u + height_u - 1]`` against a rack.

    Range checks run before any overlap test. Among overlapping occupants
    the one with the lowest ``start_u`` is reported.
    """
    end_u = u_range_end(start_u, height_u)

    def out_of_range(reason: OutOfRangeReason, message: str) -> Placement:
        return Placement(
            status=PlacementStatus.OUT_OF_RANGE,
            start_u=start_u,
            height_u=height_u,
            total_u=total_u,
            reason=reason,
            message=message,
        )

    if start_u < 1:
        return out_of_range(
            OutOfRangeReason.BELOW_RACK,
            f"Start U must be at least 1 (got {start_u})",
        )
    if height_u < 1:
        return out_of_range(
            OutOfRangeReason.NON_POSITIVE_HEIGHT,
            f"Height must be at least 1U (got {height_u})",
        )
    if end_u > total_u:
        return out_of_range(
            OutOfRangeReason.EXCEEDS_CAPACITY,
            f"Equipment exceeds rack capacity (rack total U: {total_u}, equipment end U: {end_u})",
        )

    candidates = sorted(
        (o for o in occupants if exclude_id is None or o.id != exclude_id),
        key=lambda o: o.start_u,
    )
    for other in candidates:
        rng = occupied_range(other)
        if intervals_overlap(start_u, end_u, rng.start, rng.end):
            return Placement(
                status=PlacementStatus.CONFLICT,
                start_u=start_u,
                height_u=height_u,
                total_u=total_u,
                conflict=other,
                message=(
                    f"U slot already occupied by {_label(other)} "
                    f"({rng.start}U~{rng.end}U)"
                ),
            )

    return Placement(
        status=PlacementStatus.OK,
        start_u=start_u,
        height_u=height_u,
        total_u=total_u,
    )


def free_ranges(total_u: int, occupants: Iterable[Occupant]) -> List[SlotRange]:
    """Maximal runs of unoccupied U, ascending."""
    # index 0 unused so slot u lives at occupied[u]
    occupied = [False] * (total_u + 1)
    for occupant in occupants:
        rng = occupied_range(occupant)
        for u in range(max(1, rng.start), min(total_u, rng.end) + 1):
            occupied[u] = True

    ranges: List[SlotRange] = []
    run_start: Optional[int] = None
    for u in range(1, total_u + 1):
        if not occupied[u]:
            if run_start is None:
                run_start = u
        elif run_start is not None:
            ranges.append(SlotRange(run_start, u - 1))
            run_start = None

    if run_start is not None:
        ranges.append(SlotRange(run_start, total_u))

    return ranges


def highest_occupied_u(occupants: Iterable[Occupant]) -> int:
    """Top-most occupied slot, 0 for an empty rack."""
    return max((occupied_range(o).end for o in occupants), default=0)
