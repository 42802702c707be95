"""
Interaction Engine - Hover resolution and the gesture state machine.

Each frame the engine:
1. Derives press/release edges from the previous frame's buttons
2. Resolves what the pointer hovers (pin > node > link)
3. Starts, advances or finishes the current gesture
4. Reports changes as events

Only the gesture payloads live in GraphState; hover is recomputed from
scratch every frame.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from nodeweave.core.declarations import AttributeFlags, AttributeKind, LinkId, NodeId, PinId
from nodeweave.core.events import (
    EditorEvent,
    HoveredLinkChanged,
    HoveredNodeChanged,
    HoveredPinChanged,
    LinkCreated,
    LinkDestroyed,
    LinkSelectionChanged,
    LinkStarted,
    NodeDeletionRequested,
    NodeSelectionChanged,
    NodesMoved,
)
from nodeweave.core.frame import AttributeLayout, FrameGeometry
from nodeweave.core.geometry import CanvasTransform, Rect, Vec2
from nodeweave.core.input import FrameInput, PointerButton
from nodeweave.core.links import LinkCurve
from nodeweave.core.settings import EditorSettings
from nodeweave.core.state import DragKind, GraphState, InteractionMode
from nodeweave.core.style import Style


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Hover:
    """What the pointer is over this frame."""
    pin: PinId | None = None
    node: NodeId | None = None
    link: LinkId | None = None


@dataclass(frozen=True)
class InteractionResult:
    """Outcome of one engine step."""
    events: tuple[EditorEvent, ...] = ()
    hover: Hover = field(default_factory=Hover)
    mode: InteractionMode = InteractionMode.IDLE
    box_rect: Rect | None = None             # Screen space
    pending_curve: LinkCurve | None = None   # Canvas space


def resolve_hover(geometry: FrameGeometry, point: Vec2, zoom: float, style: Style) -> Hover:
    """
    Resolve the hovered pin, node and link for a canvas-space point.

    A pin is only hoverable when no node above its owner covers its anchor.
    """
    depth = {node_id: index for index, node_id in enumerate(geometry.nodes)}
    stacked = list(geometry.nodes.values())

    def occluded(attribute: AttributeLayout) -> bool:
        owner_depth = depth.get(attribute.node_id, -1)
        return any(
            layout.rect.contains(attribute.anchor)
            for layout in stacked[owner_depth + 1:]
        )

    pin = None
    best = style.pin_hover_radius / zoom
    for pin_id, attribute in geometry.attributes.items():
        if attribute.anchor is None:
            continue
        distance = attribute.anchor.distance(point)
        if distance <= best and not occluded(attribute):
            pin = pin_id
            best = distance

    if pin is not None:
        attached = geometry.links_at_pin(pin)
        return Hover(pin=pin, link=attached[0] if attached else None)

    node = geometry.node_at(point)
    if node is not None:
        return Hover(node=node)

    link = None
    threshold = style.link_hover_distance / zoom
    for link_id, layout in geometry.links.items():
        distance = layout.curve.hit_distance(point, threshold)
        if distance is not None and distance < threshold:
            link = link_id
            threshold = distance
    return Hover(link=link)


class InteractionEngine:
    """
    Drives GraphState from per-frame input.

    The engine keeps the few facts needed to detect edges and changes
    (previous buttons, pointer and hover); everything else is in GraphState.
    """

    def __init__(self, state: GraphState, style: Style, settings: EditorSettings):
        self.state = state
        self.style = style
        self.settings = settings

        self._prev_buttons: frozenset[PointerButton] = frozenset()
        self._last_pointer: Vec2 | None = None
        self._hover = Hover()
        self._pan_trigger: PointerButton | None = None
        # A delete request waits until no gesture is running
        self._delete_requested = False

    def reset(self) -> None:
        """Abort the current gesture."""
        self.state.end_interaction()
        self._pan_trigger = None

    def process(
        self,
        geometry: FrameGeometry,
        frame_input: FrameInput,
        canvas_rect: Rect,
    ) -> InteractionResult:
        state = self.state
        events: list[EditorEvent] = []

        prev_nodes = state.selected_nodes
        prev_links = state.selected_links
        # Links only exist for the frame that declares them
        state.deselect_links([lid for lid in prev_links if lid not in geometry.links])

        pointer = frame_input.pointer
        inside = pointer is not None and canvas_rect.contains(pointer)
        if pointer is None:
            pointer = self._last_pointer
        else:
            self._last_pointer = pointer

        pressed = frame_input.buttons - self._prev_buttons
        self._prev_buttons = frame_input.buttons

        transform = self._transform(canvas_rect)
        hover = Hover()
        if inside:
            hover = resolve_hover(geometry, transform.screen_to_canvas(pointer), state.zoom, self.style)

        mode = state.mode
        if mode is InteractionMode.IDLE:
            self._idle(geometry, frame_input, pointer, inside, pressed, hover, transform, events)
        elif mode is InteractionMode.DRAGGING_NODE:
            self._drag_nodes(frame_input, pointer, events)
        elif mode is InteractionMode.DRAGGING_LINK:
            self._drag_link(geometry, frame_input, pointer, hover, events)
        elif mode is InteractionMode.BOX_SELECTING:
            self._box_select(geometry, frame_input, pointer, transform)
        elif mode is InteractionMode.PANNING_CANVAS:
            self._pan(frame_input, pointer)

        if frame_input.delete_pressed:
            self._delete_requested = True
        if self._delete_requested and state.mode is InteractionMode.IDLE:
            self._delete_requested = False
            events.extend(self._deletion_events(geometry))

        # Pan or zoom may have changed this frame
        transform = self._transform(canvas_rect)

        if state.selected_nodes != prev_nodes:
            events.append(NodeSelectionChanged(state.selected_nodes))
        if state.selected_links != prev_links:
            events.append(LinkSelectionChanged(state.selected_links))
        events.extend(self._hover_events(hover))

        box_rect = None
        drag = state.drag
        if drag is not None and drag.kind is DragKind.BOX_SELECT and pointer is not None:
            box_rect = Rect.from_points(drag.origin, pointer)

        return InteractionResult(
            events=tuple(events),
            hover=hover,
            mode=state.mode,
            box_rect=box_rect,
            pending_curve=self._pending_curve(geometry, hover, transform),
        )

    def _transform(self, canvas_rect: Rect) -> CanvasTransform:
        return CanvasTransform(canvas_rect.min, self.state.pan, self.state.zoom)

    # --- IDLE ---

    def _idle(
        self,
        geometry: FrameGeometry,
        frame_input: FrameInput,
        pointer: Vec2 | None,
        inside: bool,
        pressed: frozenset[PointerButton],
        hover: Hover,
        transform: CanvasTransform,
        events: list[EditorEvent],
    ) -> None:
        state = self.state
        settings = self.settings

        if not inside:
            return

        if frame_input.scroll:
            factor = settings.zoom_step ** frame_input.scroll
            state.zoom_about(transform.screen_to_editor(pointer), factor)

        over_nothing = hover.pin is None and hover.node is None and hover.link is None
        primary = PointerButton.PRIMARY in pressed
        if over_nothing:
            if settings.pan_button is not None and settings.pan_button in pressed:
                self._pan_trigger = settings.pan_button
                state.begin_drag(DragKind.PAN, pointer)
                return
            if primary and frame_input.has_modifier(settings.pan_modifier):
                self._pan_trigger = PointerButton.PRIMARY
                state.begin_drag(DragKind.PAN, pointer)
                return

        if not primary:
            return

        additive = frame_input.has_modifier(settings.additive_modifier)
        if hover.pin is not None:
            self._press_pin(geometry, hover.pin, pointer, events)
        elif hover.node is not None:
            self._press_node(hover.node, additive, pointer)
        elif hover.link is not None:
            canvas_pointer = transform.screen_to_canvas(pointer)
            if frame_input.has_modifier(settings.link_detach_modifier):
                self._detach_link(geometry, hover.link, canvas_pointer, pointer, events)
            else:
                state.select_links([hover.link], additive)
                if not additive:
                    state.clear_node_selection()
        else:
            state.begin_drag(DragKind.BOX_SELECT, pointer)

    def _press_pin(
        self,
        geometry: FrameGeometry,
        pin_id: PinId,
        pointer: Vec2,
        events: list[EditorEvent],
    ) -> None:
        attribute = geometry.attributes[pin_id]
        attached = geometry.links_at_pin(pin_id)
        if attribute.flags & AttributeFlags.DETACH_ON_DRAG and attached:
            link = geometry.links[attached[0]]
            events.append(LinkDestroyed(link.id))
            other = link.end if link.start == pin_id else link.start
            self.state.begin_link(other, pointer)
            events.append(LinkStarted(other))
            return
        self.state.begin_link(pin_id, pointer)
        events.append(LinkStarted(pin_id))

    def _press_node(self, node_id: NodeId, additive: bool, pointer: Vec2) -> None:
        state = self.state
        if additive:
            state.select_nodes([node_id], additive=True)
        elif not state.is_node_selected(node_id):
            state.select_nodes([node_id])
            state.clear_link_selection()
        state.raise_nodes([node_id])
        state.begin_drag(DragKind.NODE, pointer)

    def _detach_link(
        self,
        geometry: FrameGeometry,
        link_id: LinkId,
        canvas_pointer: Vec2,
        pointer: Vec2,
        events: list[EditorEvent],
    ) -> None:
        link = geometry.links[link_id]
        start_anchor = geometry.attributes[link.start].anchor
        end_anchor = geometry.attributes[link.end].anchor
        # The pin nearest the pointer is the one being pulled off
        if start_anchor.distance_sq(canvas_pointer) < end_anchor.distance_sq(canvas_pointer):
            kept = link.end
        else:
            kept = link.start
        events.append(LinkDestroyed(link_id))
        self.state.begin_link(kept, pointer)
        events.append(LinkStarted(kept))

    # --- DRAGGING_NODE ---

    def _drag_nodes(
        self,
        frame_input: FrameInput,
        pointer: Vec2 | None,
        events: list[EditorEvent],
    ) -> None:
        state = self.state
        drag = state.drag
        movable = [nid for nid in state.selected_nodes if state.is_draggable(nid)]

        if frame_input.pointer is not None and pointer is not None:
            if not drag.moved:
                if pointer.distance(drag.origin) >= self.settings.drag_threshold:
                    self._move(movable, pointer - drag.origin)
                    state.update_drag(pointer, moved=True)
            elif pointer != drag.last_pos:
                self._move(movable, pointer - drag.last_pos)
                state.update_drag(pointer)

        if not frame_input.is_down(PointerButton.PRIMARY):
            if state.drag.moved and movable:
                events.append(NodesMoved(tuple(movable)))
            state.end_interaction()

    def _move(self, node_ids: list[NodeId], screen_delta: Vec2) -> None:
        delta = screen_delta / self.state.zoom
        for node_id in node_ids:
            self.state.move_node(node_id, delta)

    # --- DRAGGING_LINK ---

    def _drag_link(
        self,
        geometry: FrameGeometry,
        frame_input: FrameInput,
        pointer: Vec2 | None,
        hover: Hover,
        events: list[EditorEvent],
    ) -> None:
        state = self.state
        pending = state.pending_link
        if pending.start_pin not in geometry.attributes:
            logger.debug("Start pin %s vanished; dropping pending link", pending.start_pin)
            state.end_interaction()
            return

        if pointer is not None:
            state.update_link(pointer)

        start = geometry.attributes[pending.start_pin]
        target = geometry.attributes.get(hover.pin) if hover.pin is not None else None
        snapped = target is not None and self.can_link(geometry, start, target)
        released = not frame_input.is_down(PointerButton.PRIMARY)

        if snapped and (released or target.flags & AttributeFlags.CREATE_ON_SNAP):
            output, input_ = (start, target) if start.kind is AttributeKind.OUTPUT else (target, start)
            events.append(LinkCreated(output.id, input_.id, output.node_id, input_.node_id))
            state.end_interaction()
        elif released:
            state.end_interaction()

    @staticmethod
    def can_link(geometry: FrameGeometry, start: AttributeLayout, end: AttributeLayout) -> bool:
        """Whether the editor may create a link between two pins."""
        if start.id == end.id or start.node_id == end.node_id:
            return False
        if not (start.is_connectable and end.is_connectable):
            return False
        if start.kind is end.kind:
            return False
        return geometry.find_link(start.id, end.id) is None

    def _pending_curve(
        self,
        geometry: FrameGeometry,
        hover: Hover,
        transform: CanvasTransform,
    ) -> LinkCurve | None:
        pending = self.state.pending_link
        if pending is None:
            return None
        start = geometry.attributes.get(pending.start_pin)
        if start is None:
            return None

        end_point = transform.screen_to_canvas(pending.pointer)
        target = geometry.attributes.get(hover.pin) if hover.pin is not None else None
        if target is not None and self.can_link(geometry, start, target):
            end_point = target.anchor

        if start.kind is AttributeKind.INPUT:
            return LinkCurve.build(end_point, start.anchor, self.style)
        return LinkCurve.build(start.anchor, end_point, self.style)

    # --- BOX_SELECTING ---

    def _box_select(
        self,
        geometry: FrameGeometry,
        frame_input: FrameInput,
        pointer: Vec2 | None,
        transform: CanvasTransform,
    ) -> None:
        state = self.state
        if frame_input.pointer is not None and pointer is not None:
            state.update_drag(pointer)

        if frame_input.is_down(PointerButton.PRIMARY):
            return

        drag = state.drag
        box = transform.rect_to_canvas(Rect.from_points(drag.origin, drag.last_pos))
        additive = frame_input.has_modifier(self.settings.additive_modifier)

        nodes = [nid for nid, layout in geometry.nodes.items() if layout.rect.intersects(box)]
        links = [lid for lid, layout in geometry.links.items() if layout.curve.overlaps_rect(box)]
        state.select_nodes(nodes, additive)
        state.select_links(links, additive)
        state.raise_nodes(nodes)
        state.end_interaction()

    # --- PANNING_CANVAS ---

    def _pan(self, frame_input: FrameInput, pointer: Vec2 | None) -> None:
        state = self.state
        drag = state.drag
        if frame_input.pointer is not None and pointer is not None:
            state.pan = state.pan + (pointer - drag.last_pos)
            state.update_drag(pointer, moved=True)

        if self._pan_trigger is None or not frame_input.is_down(self._pan_trigger):
            self._pan_trigger = None
            state.end_interaction()

    # --- Delete ---

    def _deletion_events(self, geometry: FrameGeometry) -> list[EditorEvent]:
        """Links first, then nodes; only for items declared this frame."""
        events: list[EditorEvent] = [
            LinkDestroyed(link_id)
            for link_id in self.state.selected_links
            if link_id in geometry.links
        ]
        events.extend(
            NodeDeletionRequested(node_id)
            for node_id in self.state.selected_nodes
            if node_id in geometry.nodes
        )
        return events

    # --- Hover ---

    def _hover_events(self, hover: Hover) -> list[EditorEvent]:
        previous = self._hover
        self._hover = hover
        events: list[EditorEvent] = []
        if hover.node != previous.node:
            events.append(HoveredNodeChanged(hover.node))
        if hover.link != previous.link:
            events.append(HoveredLinkChanged(hover.link))
        if hover.pin != previous.pin:
            events.append(HoveredPinChanged(hover.pin))
        return events
