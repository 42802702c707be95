"""
Node Editor - The per-frame entry point.

A NodeEditor owns one GraphState and runs a frame end to end:
declarations -> FrameBuilder -> InteractionEngine -> FrameResult.
Several editors can live side by side; nothing is global.

Example:
    editor = NodeEditor()
    result = editor.show(nodes, links, frame_input, canvas_rect)
    for event in result.links_created():
        links.append((next_id(), event.start, event.end))
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Iterable, TypeVar

from nodeweave.core.declarations import LinkDecl, LinkId, NodeDecl, NodeId, PinId
from nodeweave.core.events import EditorEvent, LinkCreated, LinkDestroyed
from nodeweave.core.frame import Diagnostic, FrameBuilder, FrameGeometry, MeasureFn
from nodeweave.core.geometry import CanvasTransform, Rect, Vec2
from nodeweave.core.input import FrameInput
from nodeweave.core.interaction import InteractionEngine
from nodeweave.core.links import LinkCurve
from nodeweave.core.persistence import load_state, save_state
from nodeweave.core.settings import EditorSettings
from nodeweave.core.state import GraphState, InteractionMode
from nodeweave.core.style import Style


E = TypeVar("E", bound=EditorEvent)

# Margin (canvas units) kept around the nodes by frame_all()
FRAME_ALL_PADDING = 50.0


class CoordinateSpace(Enum):
    """Coordinate systems accepted by the position accessors."""
    CANVAS = "canvas"
    SCREEN = "screen"
    EDITOR = "editor"    # Screen space relative to the canvas corner


@dataclass(frozen=True)
class FrameResult:
    """Everything one frame produced."""
    events: tuple[EditorEvent, ...]
    geometry: FrameGeometry
    transform: CanvasTransform
    mode: InteractionMode = InteractionMode.IDLE
    hovered_node: NodeId | None = None
    hovered_pin: PinId | None = None
    hovered_link: LinkId | None = None
    box_rect: Rect | None = None
    pending_curve: LinkCurve | None = None
    selected_nodes: tuple[NodeId, ...] = ()
    selected_links: tuple[LinkId, ...] = ()
    diagnostics: tuple[Diagnostic, ...] = ()

    def events_of(self, event_type: type[E]) -> list[E]:
        return [e for e in self.events if isinstance(e, event_type)]

    def links_created(self) -> list[LinkCreated]:
        return self.events_of(LinkCreated)

    def links_destroyed(self) -> list[LinkDestroyed]:
        return self.events_of(LinkDestroyed)


class NodeEditor:
    """
    One node editor instance.

    Args:
        style: Layout metrics and colours (defaults to the dark theme)
        settings: Input bindings and zoom bounds
    """

    def __init__(self, style: Style | None = None, settings: EditorSettings | None = None):
        self.style = style or Style()
        self.settings = settings or EditorSettings()
        self.state = GraphState(
            zoom_min=self.settings.zoom_min,
            zoom_max=self.settings.zoom_max,
            default_origin=self.style.default_origin,
            cascade_offset=self.style.cascade_offset,
        )
        self._builder = FrameBuilder(self.style)
        self._engine = InteractionEngine(self.state, self.style, self.settings)
        self._canvas_rect = Rect(Vec2(), Vec2())
        self._last_geometry: FrameGeometry | None = None

    # --- Frame ---

    def show(
        self,
        nodes: Iterable[NodeDecl],
        links: Iterable[LinkDecl | tuple],
        frame_input: FrameInput,
        canvas_rect: Rect,
        measure: MeasureFn | None = None,
    ) -> FrameResult:
        """
        Run one frame.

        Args:
            nodes: Node declarations for this frame
            links: LinkDecl values or (id, start, end) tuples
            frame_input: Input snapshot for this frame
            canvas_rect: Canvas area in screen space
            measure: Content measurement (usually Painter.measure)
        """
        link_decls = [
            link if isinstance(link, LinkDecl) else LinkDecl.from_tuple(link)
            for link in links
        ]
        self._canvas_rect = canvas_rect

        geometry = self._builder.build(
            nodes, link_decls, self.state, self.transform(), measure,
        )
        outcome = self._engine.process(geometry, frame_input, canvas_rect)
        self._last_geometry = geometry

        return FrameResult(
            events=outcome.events,
            geometry=geometry,
            transform=self.transform(),
            mode=outcome.mode,
            hovered_node=outcome.hover.node,
            hovered_pin=outcome.hover.pin,
            hovered_link=outcome.hover.link,
            box_rect=outcome.box_rect,
            pending_curve=outcome.pending_curve,
            selected_nodes=self.state.selected_nodes,
            selected_links=self.state.selected_links,
            diagnostics=geometry.diagnostics,
        )

    def transform(self, canvas_rect: Rect | None = None) -> CanvasTransform:
        rect = canvas_rect or self._canvas_rect
        return CanvasTransform(rect.min, self.state.pan, self.state.zoom)

    # --- Nodes ---

    def set_node_position(
        self,
        node_id: int,
        position: Vec2,
        space: CoordinateSpace = CoordinateSpace.CANVAS,
    ) -> None:
        self.state.set_position(NodeId(node_id), self._to_canvas(position, space))

    def node_position(
        self,
        node_id: int,
        space: CoordinateSpace = CoordinateSpace.CANVAS,
    ) -> Vec2:
        """Position of a node's top-left corner (created on first access)."""
        position = self.state.position_of(NodeId(node_id))
        transform = self.transform()
        if space is CoordinateSpace.SCREEN:
            return transform.canvas_to_screen(position)
        if space is CoordinateSpace.EDITOR:
            return transform.screen_to_editor(transform.canvas_to_screen(position))
        return position

    def _to_canvas(self, position: Vec2, space: CoordinateSpace) -> Vec2:
        transform = self.transform()
        if space is CoordinateSpace.SCREEN:
            return transform.screen_to_canvas(position)
        if space is CoordinateSpace.EDITOR:
            return transform.screen_to_canvas(transform.editor_to_screen(position))
        return position

    def set_node_draggable(self, node_id: int, draggable: bool) -> None:
        self.state.set_draggable(NodeId(node_id), draggable)

    def remove_node(self, node_id: int) -> bool:
        """Forget a node's position, selection, depth slot and flags."""
        return self.state.remove_node(NodeId(node_id))

    def cancel_interaction(self) -> None:
        """Abort the current gesture without emitting events."""
        self._engine.reset()

    def frame_all(self, canvas_rect: Rect | None = None) -> None:
        """Adjust pan and zoom so every known node is visible."""
        rect = canvas_rect or self._canvas_rect
        positions = self.state.positions
        if not positions or rect.width <= 0 or rect.height <= 0:
            return

        bounds = None
        for node_id, position in positions.items():
            node_rect = Rect(position, position)
            if self._last_geometry is not None and node_id in self._last_geometry.nodes:
                node_rect = Rect.from_min_size(position, self._last_geometry.nodes[node_id].rect.size)
            bounds = node_rect if bounds is None else bounds.union(node_rect)
        bounds = bounds.expand(FRAME_ALL_PADDING)

        # Calculate zoom to fit
        self.state.zoom = min(rect.width / bounds.width, rect.height / bounds.height, 1.0)
        zoom = self.state.zoom

        # Center
        center = bounds.center
        self.state.pan = Vec2(
            rect.width / 2 - center.x * zoom,
            rect.height / 2 - center.y * zoom,
        )

    # --- Persistence ---

    def save_state(self, path: Path) -> Path:
        return save_state(self.state, path)

    def load_state(self, path: Path) -> None:
        load_state(self.state, path)
