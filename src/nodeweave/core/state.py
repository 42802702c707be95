"""
Graph State - Persistent, cross-frame editor state.

Everything the editor must remember between frames lives here, keyed by
caller-supplied ids:
- Node positions (canvas space), depth order and draggable flags
- Pan offset and zoom factor
- Node and link selection
- The in-progress gesture (pending link or drag)

GraphState is a plain container. It does no validation beyond clamping
zoom and creates node positions on first read.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum, auto
from typing import Iterable

from nodeweave.core.declarations import LinkId, NodeId, PinId
from nodeweave.core.geometry import Vec2


class InteractionMode(Enum):
    """The single active state of the interaction state machine."""
    IDLE = auto()
    DRAGGING_NODE = auto()
    DRAGGING_LINK = auto()
    BOX_SELECTING = auto()
    PANNING_CANVAS = auto()


class DragKind(Enum):
    NODE = auto()
    BOX_SELECT = auto()
    PAN = auto()


@dataclass(frozen=True)
class PendingLink:
    """A link being dragged out of `start_pin`; `pointer` is in screen space."""
    start_pin: PinId
    pointer: Vec2


@dataclass(frozen=True)
class DragState:
    """
    An in-progress drag gesture (screen space).

    `moved` turns True once the pointer has travelled past the drag
    threshold; node drags only move nodes after that.
    """
    kind: DragKind
    origin: Vec2
    last_pos: Vec2
    moved: bool = False


_DRAG_MODES = {
    DragKind.NODE: InteractionMode.DRAGGING_NODE,
    DragKind.BOX_SELECT: InteractionMode.BOX_SELECTING,
    DragKind.PAN: InteractionMode.PANNING_CANVAS,
}


class GraphState:
    """
    Persistent store for one editor instance.

    Node positions are created with a default on first access and then
    live until remove_node() is called, regardless of whether the node is
    declared in later frames.
    """

    def __init__(
        self,
        zoom_min: float = 0.25,
        zoom_max: float = 4.0,
        default_origin: Vec2 = Vec2(100.0, 100.0),
        cascade_offset: Vec2 = Vec2(40.0, 40.0),
    ):
        self.zoom_min = zoom_min
        self.zoom_max = zoom_max
        self.default_origin = default_origin
        self.cascade_offset = cascade_offset

        self._positions: dict[NodeId, Vec2] = {}
        self._depth_order: list[NodeId] = []
        self._draggable: dict[NodeId, bool] = {}
        self._last_placed: NodeId | None = None

        self._pan = Vec2()
        self._zoom = 1.0

        # Ordered sets (dict keys keep selection order)
        self._selected_nodes: dict[NodeId, None] = {}
        self._selected_links: dict[LinkId, None] = {}

        self._pending_link: PendingLink | None = None
        self._drag: DragState | None = None

    # --- Positions ---

    def position_of(self, node_id: NodeId, default: Vec2 | None = None) -> Vec2:
        """
        Get a node's canvas position, creating it on first access.

        `default` is only used when the node has never been seen; otherwise
        the next slot of the placement cascade is used.
        """
        position = self._positions.get(node_id)
        if position is None:
            position = default if default is not None else self._next_default_position()
            self._positions[node_id] = position
            self._depth_order.append(node_id)
            self._last_placed = node_id
        return position

    def _next_default_position(self) -> Vec2:
        if self._last_placed is None:
            return self.default_origin
        return self._positions[self._last_placed] + self.cascade_offset

    def has_position(self, node_id: NodeId) -> bool:
        return node_id in self._positions

    def set_position(self, node_id: NodeId, position: Vec2) -> None:
        if node_id not in self._positions:
            self.position_of(node_id, position)
        self._positions[node_id] = position

    def move_node(self, node_id: NodeId, delta: Vec2) -> None:
        self._positions[node_id] = self.position_of(node_id) + delta

    @property
    def positions(self) -> dict[NodeId, Vec2]:
        """All known positions (copy)."""
        return self._positions.copy()

    def remove_node(self, node_id: NodeId) -> bool:
        """
        Purge every entry held for a node.

        Returns True if the node was known.
        """
        known = self._positions.pop(node_id, None) is not None
        self._selected_nodes.pop(node_id, None)
        self._draggable.pop(node_id, None)
        if node_id in self._depth_order:
            self._depth_order.remove(node_id)
        if self._last_placed == node_id:
            self._last_placed = next(reversed(self._positions), None)
        return known

    # --- Draggable flags ---

    def set_draggable(self, node_id: NodeId, draggable: bool) -> None:
        self.position_of(node_id)
        self._draggable[node_id] = draggable

    def is_draggable(self, node_id: NodeId) -> bool:
        return self._draggable.get(node_id, True)

    # --- Depth order ---

    @property
    def depth_order(self) -> list[NodeId]:
        """Node ids from bottom-most to top-most (copy)."""
        return self._depth_order.copy()

    def raise_nodes(self, node_ids: Iterable[NodeId]) -> None:
        """Move the given nodes to the top, keeping their relative order."""
        to_raise = set(node_ids)
        if not to_raise:
            return
        kept = [nid for nid in self._depth_order if nid not in to_raise]
        raised = [nid for nid in self._depth_order if nid in to_raise]
        self._depth_order = kept + raised

    # --- Transform ---

    @property
    def pan(self) -> Vec2:
        return self._pan

    @pan.setter
    def pan(self, value: Vec2) -> None:
        self._pan = value

    @property
    def zoom(self) -> float:
        return self._zoom

    @zoom.setter
    def zoom(self, value: float) -> None:
        self._zoom = max(self.zoom_min, min(self.zoom_max, float(value)))

    def zoom_about(self, anchor: Vec2, factor: float) -> None:
        """
        Zoom keeping the canvas point under `anchor` fixed.

        `anchor` is in editor space (screen relative to the canvas corner).
        """
        canvas_point = (anchor - self._pan) / self._zoom
        self.zoom = self._zoom * factor
        self._pan = anchor - canvas_point * self._zoom

    # --- Selection ---

    @property
    def selected_nodes(self) -> tuple[NodeId, ...]:
        return tuple(self._selected_nodes)

    @property
    def selected_links(self) -> tuple[LinkId, ...]:
        return tuple(self._selected_links)

    def is_node_selected(self, node_id: NodeId) -> bool:
        return node_id in self._selected_nodes

    def is_link_selected(self, link_id: LinkId) -> bool:
        return link_id in self._selected_links

    def select_nodes(self, node_ids: Iterable[NodeId], additive: bool = False) -> None:
        if not additive:
            self._selected_nodes.clear()
        for node_id in node_ids:
            self._selected_nodes[node_id] = None

    def deselect_nodes(self, node_ids: Iterable[NodeId]) -> None:
        for node_id in node_ids:
            self._selected_nodes.pop(node_id, None)

    def select_links(self, link_ids: Iterable[LinkId], additive: bool = False) -> None:
        if not additive:
            self._selected_links.clear()
        for link_id in link_ids:
            self._selected_links[link_id] = None

    def deselect_links(self, link_ids: Iterable[LinkId]) -> None:
        for link_id in link_ids:
            self._selected_links.pop(link_id, None)

    def clear_node_selection(self) -> None:
        self._selected_nodes.clear()

    def clear_link_selection(self) -> None:
        self._selected_links.clear()

    def clear_selection(self) -> None:
        self.clear_node_selection()
        self.clear_link_selection()

    # --- Interaction payloads ---

    @property
    def pending_link(self) -> PendingLink | None:
        return self._pending_link

    @property
    def drag(self) -> DragState | None:
        return self._drag

    @property
    def mode(self) -> InteractionMode:
        """The active interaction mode, derived from the stored gesture."""
        if self._pending_link is not None:
            return InteractionMode.DRAGGING_LINK
        if self._drag is not None:
            return _DRAG_MODES[self._drag.kind]
        return InteractionMode.IDLE

    def begin_link(self, start_pin: PinId, pointer: Vec2) -> None:
        self._drag = None
        self._pending_link = PendingLink(start_pin, pointer)

    def update_link(self, pointer: Vec2) -> None:
        if self._pending_link is not None:
            self._pending_link = replace(self._pending_link, pointer=pointer)

    def begin_drag(self, kind: DragKind, origin: Vec2) -> None:
        self._pending_link = None
        self._drag = DragState(kind, origin, origin)

    def update_drag(self, last_pos: Vec2, moved: bool | None = None) -> None:
        if self._drag is None:
            return
        if moved is None:
            moved = self._drag.moved
        self._drag = replace(self._drag, last_pos=last_pos, moved=moved)

    def end_interaction(self) -> None:
        self._pending_link = None
        self._drag = None

    # --- Bulk restore ---

    def restore(self, positions: dict[NodeId, Vec2], pan: Vec2, zoom: float) -> None:
        """
        Replace positions and transform, e.g. after loading saved state.

        Nodes absent from `positions` are forgotten. Surviving nodes keep
        their depth order; new ones are stacked above them.
        """
        self._positions = dict(positions)
        kept = [nid for nid in self._depth_order if nid in self._positions]
        self._depth_order = kept + [nid for nid in self._positions if nid not in kept]
        self._selected_nodes = {
            nid: None for nid in self._selected_nodes if nid in self._positions
        }
        self._draggable = {
            nid: flag for nid, flag in self._draggable.items() if nid in self._positions
        }
        self._last_placed = next(reversed(self._positions), None)
        self._pan = pan
        self.zoom = zoom
