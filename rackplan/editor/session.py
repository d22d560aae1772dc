"""
Editor Session

In-memory editing of one floor plan between two saves. Every completed edit
records exactly one history snapshot; a drag gesture records one snapshot
when it ends, not per pointer move. Nothing here talks to the database:
``build_bulk_request`` produces the payload for
``FloorPlanService.bulk_update`` and ``mark_saved`` adopts the reloaded plan.
"""
import copy
import itertools
import logging
from typing import Any, Dict, Iterable, List, Optional, Tuple

from pydantic import ValidationError

from rackplan.editor.history import EditorHistory
from rackplan.editor.state import (
    EditorElement,
    EditorRack,
    TEMP_PREFIX,
    editable_fields,
)
from rackplan.lib.config import settings
from rackplan.lib.errors import ConflictError, NotFoundError
from rackplan.lib.geometry import Point, pixel_offset_to_u, snap_to_grid
from rackplan.schemas.floor_plan import BulkUpdateRequest, FloorPlanDetailResponse
from rackplan.schemas.floor_plan_element import decode_properties, encode_properties

logger = logging.getLogger(__name__)

PLAN_SETTINGS = ("canvas_width", "canvas_height", "grid_size", "major_grid_size", "background_color")


class _Drag:
    def __init__(self, keys: List[str], start: Point, origin: Dict[str, Any]):
        self.keys = keys
        self.start = start
        self.origin = origin
        self.moved = False


class EditorSession:
    """Working state, history and save diff for one floor plan."""

    def __init__(
        self,
        detail: FloorPlanDetailResponse,
        grid_snap: bool = True,
        history_limit: Optional[int] = None,
    ):
        self.grid_snap = grid_snap
        self.history = EditorHistory(history_limit)
        self._temp_keys = itertools.count(1)
        self._drag: Optional[_Drag] = None
        self.load(detail)

    @classmethod
    def from_detail(cls, detail: FloorPlanDetailResponse, **kwargs) -> "EditorSession":
        return cls(detail, **kwargs)

    def load(self, detail: FloorPlanDetailResponse) -> None:
        """Replace all state with a plan fetched from the server."""
        self.floor_plan_id = detail.id
        self.version = detail.version
        self.plan_settings = {name: getattr(detail, name) for name in PLAN_SETTINGS}
        self.elements = [EditorElement.from_response(e) for e in detail.elements]
        self.racks = [EditorRack.from_response(r) for r in detail.racks]

        self._saved_settings = dict(self.plan_settings)
        self._saved_elements = {e.key: copy.deepcopy(e) for e in self.elements}
        self._saved_racks = {r.key: copy.deepcopy(r) for r in self.racks}

        self._drag = None
        self.history.reset(self.elements, self.racks)

    # ============================================
    # HELPERS
    # ============================================

    @property
    def grid_size(self) -> int:
        return self.plan_settings["grid_size"]

    def snap(self, x: float, y: float) -> Point:
        return snap_to_grid(x, y, self.grid_size, self.grid_snap)

    def get_element(self, key: str) -> EditorElement:
        for element in self.elements:
            if element.key == key:
                return element
        raise NotFoundError("Floor plan element", key)

    def get_rack(self, key: str) -> EditorRack:
        for rack in self.racks:
            if rack.key == key:
                return rack
        raise NotFoundError("Rack", key)

    def _find(self, key: str):
        for item in self.elements + self.racks:
            if item.key == key:
                return item
        raise NotFoundError("Item", key)

    def _ensure_rack_name_free(self, name: str, exclude_key: Optional[str] = None) -> None:
        for rack in self.racks:
            if rack.name == name and rack.key != exclude_key:
                raise ConflictError(
                    f"Rack name '{name}' already exists on this floor plan",
                    details={"rack_key": rack.key, "name": name},
                )

    def _new_key(self) -> str:
        return f"{TEMP_PREFIX}{next(self._temp_keys)}"

    def _record(self) -> None:
        self.history.push(self.elements, self.racks)

    def slot_at(self, rack_key: str, offset_y: float) -> int:
        """U index under a vertical pixel offset in the rack elevation view."""
        rack = self.get_rack(rack_key)
        return pixel_offset_to_u(offset_y, rack.total_u, settings.rack_u_height_px)

    # ============================================
    # EDITS
    # ============================================

    def add_element(
        self,
        element_type: str,
        properties: Dict[str, Any],
        z_index: int = 0,
        is_visible: bool = True,
    ) -> EditorElement:
        element = EditorElement(
            key=self._new_key(),
            element_type=element_type,
            properties=copy.deepcopy(properties),
            z_index=z_index,
            is_visible=is_visible,
        )
        self.elements.append(element)
        self._record()
        return element

    def update_element(self, key: str, **changes) -> EditorElement:
        element = self.get_element(key)
        unknown = set(changes) - editable_fields(element)
        if unknown:
            raise ValueError(f"Unknown element fields: {sorted(unknown)}")
        for name, value in changes.items():
            setattr(element, name, copy.deepcopy(value))
        self._record()
        return element

    def add_rack(
        self,
        name: str,
        x: float,
        y: float,
        width: Optional[float] = None,
        height: Optional[float] = None,
        rotation: Optional[int] = None,
        total_u: Optional[int] = None,
        code: Optional[str] = None,
        description: Optional[str] = None,
    ) -> EditorRack:
        """Place a new rack with its top-left corner on the grid."""
        self._ensure_rack_name_free(name)
        px, py = self.snap(x, y)
        rack = EditorRack(
            key=self._new_key(),
            name=name,
            code=code,
            position_x=px,
            position_y=py,
            width=width if width is not None else settings.default_rack_width,
            height=height if height is not None else settings.default_rack_height,
            rotation=rotation if rotation is not None else settings.default_rack_rotation,
            total_u=total_u if total_u is not None else settings.default_rack_total_u,
            description=description,
        )
        self.racks.append(rack)
        self._record()
        return rack

    def update_rack(self, key: str, **changes) -> EditorRack:
        rack = self.get_rack(key)
        unknown = set(changes) - editable_fields(rack)
        if unknown:
            raise ValueError(f"Unknown rack fields: {sorted(unknown)}")
        if "name" in changes and changes["name"] != rack.name:
            self._ensure_rack_name_free(changes["name"], exclude_key=key)
        for name, value in changes.items():
            setattr(rack, name, value)
        self._record()
        return rack

    def delete_selection(self, keys: Iterable[str]) -> int:
        """Remove the selected elements and racks. Returns how many went."""
        selected = set(keys)
        before = len(self.elements) + len(self.racks)
        self.elements = [e for e in self.elements if e.key not in selected]
        self.racks = [r for r in self.racks if r.key not in selected]
        removed = before - len(self.elements) - len(self.racks)
        if removed:
            self._record()
        return removed

    def update_settings(self, **changes) -> None:
        """Change plan-level settings. Not part of the undo history."""
        unknown = set(changes) - set(PLAN_SETTINGS)
        if unknown:
            raise ValueError(f"Unknown floor plan settings: {sorted(unknown)}")
        self.plan_settings.update(changes)

    # ============================================
    # DRAG GESTURE
    # ============================================

    def begin_drag(self, keys: Iterable[str], x: float, y: float) -> None:
        keys = list(keys)
        origin = {key: copy.deepcopy(self._find(key)) for key in keys}
        self._drag = _Drag(keys, (x, y), origin)

    def drag_to(self, x: float, y: float) -> None:
        """Move the dragged items live. History is untouched until end_drag."""
        if self._drag is None:
            return
        dx = x - self._drag.start[0]
        dy = y - self._drag.start[1]
        for key in self._drag.keys:
            origin = self._drag.origin[key]
            item = self._find(key)
            if isinstance(item, EditorRack):
                item.position_x, item.position_y = self.snap(
                    origin.position_x + dx, origin.position_y + dy
                )
            else:
                item.properties = self._moved_properties(origin, dx, dy)
        self._drag.moved = True

    def end_drag(self) -> bool:
        """Finish the gesture; records one snapshot if anything moved."""
        drag, self._drag = self._drag, None
        if drag is None or not drag.moved:
            return False
        if all(self._find(key) == drag.origin[key] for key in drag.keys):
            return False
        self._record()
        return True

    def cancel_drag(self) -> None:
        """Put dragged items back where the gesture started."""
        drag, self._drag = self._drag, None
        if drag is None:
            return
        for key, origin in drag.origin.items():
            item = self._find(key)
            if isinstance(item, EditorRack):
                item.position_x, item.position_y = origin.position_x, origin.position_y
            else:
                item.properties = copy.deepcopy(origin.properties)

    def _moved_properties(self, origin: EditorElement, dx: float, dy: float) -> Dict[str, Any]:
        """
        Translate an element so its anchor lands on the grid.

        Walls anchor on their first point, positioned types on (x, y).
        Unknown types move only if they carry numeric x/y; otherwise they
        stay where they are.
        """
        properties = copy.deepcopy(origin.properties)
        try:
            decoded = decode_properties(origin.element_type, properties)
        except ValidationError:
            logger.debug("Element %s has a malformed %s payload", origin.key, origin.element_type)
            decoded = properties

        if isinstance(decoded, dict):
            x, y = decoded.get("x"), decoded.get("y")
            if not _is_number(x) or not _is_number(y):
                return properties
            properties["x"], properties["y"] = self.snap(x + dx, y + dy)
            return properties

        ax, ay = decoded.anchor()
        nx, ny = self.snap(ax + dx, ay + dy)
        moved = encode_properties(decoded.translated(nx - ax, ny - ay))
        for name in ("points", "x", "y"):
            if name in moved:
                properties[name] = moved[name]
        return properties

    # ============================================
    # UNDO / REDO
    # ============================================

    def undo(self) -> bool:
        entry = self.history.undo()
        if entry is None:
            return False
        self.elements, self.racks = entry.elements, entry.racks
        self._drag = None
        return True

    def redo(self) -> bool:
        entry = self.history.redo()
        if entry is None:
            return False
        self.elements, self.racks = entry.elements, entry.racks
        self._drag = None
        return True

    # ============================================
    # SAVE
    # ============================================

    def build_bulk_request(self) -> BulkUpdateRequest:
        """
        Diff the working state against the last saved state.

        New items go out without an id, changed items with theirs, and
        saved items no longer present become deletions. The request carries
        the loaded version so a concurrent save is rejected.
        """
        elements, deleted_elements = _diff(self.elements, self._saved_elements)
        racks, deleted_racks = _diff(self.racks, self._saved_racks)

        payload: Dict[str, Any] = {
            "elements": [e.to_edit() for e in elements],
            "racks": [r.to_edit() for r in racks],
            "deleted_element_ids": deleted_elements,
            "deleted_rack_ids": deleted_racks,
            "expected_version": self.version,
        }
        for name, value in self.plan_settings.items():
            if value != self._saved_settings.get(name):
                payload[name] = value
        return BulkUpdateRequest(**payload)

    @property
    def is_dirty(self) -> bool:
        request = self.build_bulk_request()
        return bool(
            request.elements
            or request.racks
            or request.deleted_element_ids
            or request.deleted_rack_ids
            or request.settings_changes()
        )

    def mark_saved(self, detail: FloorPlanDetailResponse) -> None:
        """Adopt the plan as reloaded after a successful save; history restarts."""
        logger.debug("Floor plan %s saved, version %s -> %s", detail.id, self.version, detail.version)
        self.load(detail)


def _diff(items: List[Any], saved: Dict[str, Any]) -> Tuple[List[Any], List[Any]]:
    present = {item.key for item in items}
    changed = [item for item in items if item.is_new or saved.get(item.key) != item]
    deleted = [s.id for key, s in saved.items() if key not in present]
    return changed, deleted


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)
