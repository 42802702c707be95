"""
Frame Builder - Turns one frame's declarations into canvas-space geometry.

The builder is the only place where declarations meet GraphState:
- Unseen node ids get a position (and a depth slot) on first sighting
- Node rectangles are laid out from title + stacked attribute rows
- Pin anchors sit on the left (inputs) or right (outputs) border
- Links between known, connectable pins get a bezier curve

Duplicate ids are resolved first-wins. The dropped declarations are
reported as Diagnostic entries rather than raised, so a caller bug never
takes the whole editor down mid-frame.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable

from nodeweave.core.declarations import (
    AttributeDecl,
    AttributeFlags,
    AttributeKind,
    LinkArgs,
    LinkDecl,
    LinkId,
    NodeArgs,
    NodeDecl,
    NodeId,
    PinArgs,
    PinId,
    PinShape,
)
from nodeweave.core.geometry import CanvasTransform, Rect, Size2D, Vec2
from nodeweave.core.links import LinkCurve
from nodeweave.core.state import GraphState
from nodeweave.core.style import Style


logger = logging.getLogger(__name__)

# Measures opaque content; None means "cannot measure"
MeasureFn = Callable[[Any], "Size2D | None"]


@dataclass(frozen=True)
class Diagnostic:
    """A non-fatal problem found while building a frame."""
    kind: str       # "duplicate_node", "duplicate_pin", "duplicate_link"
    id: int
    message: str


@dataclass(frozen=True)
class AttributeLayout:
    """Computed layout of one attribute row (canvas space)."""
    id: PinId
    node_id: NodeId
    kind: AttributeKind
    rect: Rect
    anchor: Vec2 | None
    args: PinArgs = field(default_factory=PinArgs)
    content: Any = None

    @property
    def shape(self) -> PinShape:
        return self.args.shape

    @property
    def flags(self) -> AttributeFlags:
        return self.args.flags

    @property
    def is_connectable(self) -> bool:
        return self.kind.is_connectable


@dataclass(frozen=True)
class NodeLayout:
    """Computed layout of one node (canvas space)."""
    id: NodeId
    rect: Rect
    title_rect: Rect | None = None          # Title bar, full node width
    title_content_rect: Rect | None = None
    title: Any = None
    attributes: tuple[PinId, ...] = ()
    args: NodeArgs = field(default_factory=NodeArgs)


@dataclass(frozen=True)
class LinkLayout:
    id: LinkId
    start: PinId
    end: PinId
    start_node: NodeId
    end_node: NodeId
    curve: LinkCurve
    args: LinkArgs = field(default_factory=LinkArgs)


@dataclass
class FrameGeometry:
    """
    Everything laid out for one frame.

    `nodes` iterates bottom-most to top-most (depth order).
    """
    nodes: dict[NodeId, NodeLayout] = field(default_factory=dict)
    attributes: dict[PinId, AttributeLayout] = field(default_factory=dict)
    links: dict[LinkId, LinkLayout] = field(default_factory=dict)
    diagnostics: tuple[Diagnostic, ...] = ()

    def node_at(self, point: Vec2) -> NodeId | None:
        """Topmost node containing `point` (canvas space)."""
        for node_id in reversed(self.nodes):
            if self.nodes[node_id].rect.contains(point):
                return node_id
        return None

    def links_at_pin(self, pin_id: PinId) -> list[LinkId]:
        return [
            link_id for link_id, link in self.links.items()
            if pin_id in (link.start, link.end)
        ]

    def find_link(self, a: PinId, b: PinId) -> LinkId | None:
        """Link joining pins a and b in either direction."""
        for link_id, link in self.links.items():
            if {link.start, link.end} == {a, b}:
                return link_id
        return None

    def bounds(self) -> Rect | None:
        rect = None
        for layout in self.nodes.values():
            rect = layout.rect if rect is None else rect.union(layout.rect)
        return rect


class FrameBuilder:
    """Lays out declarations against a GraphState."""

    def __init__(self, style: Style):
        self.style = style

    def build(
        self,
        nodes: Iterable[NodeDecl],
        links: Iterable[LinkDecl],
        state: GraphState,
        transform: CanvasTransform | None = None,
        measure: MeasureFn | None = None,
    ) -> FrameGeometry:
        """
        Build frame geometry.

        Args:
            nodes: Node declarations in declaration order
            links: Link declarations
            state: Persistent state; positions are created for unseen nodes
            transform: Used to convert a first-seen node's screen origin
            measure: Content measurement supplied by the painter
        """
        transform = transform or CanvasTransform(pan=state.pan, zoom=state.zoom)
        diagnostics: list[Diagnostic] = []
        node_layouts: dict[NodeId, NodeLayout] = {}
        attributes: dict[PinId, AttributeLayout] = {}

        for decl in nodes:
            if decl.id in node_layouts:
                diagnostics.append(self._report(
                    "duplicate_node", decl.id,
                    f"Node id {decl.id} declared more than once; keeping the first",
                ))
                continue

            default = transform.screen_to_canvas(decl.origin) if decl.origin is not None else None
            position = state.position_of(decl.id, default)
            layout, node_attributes = self._layout_node(
                decl, position, attributes, diagnostics, measure,
            )
            node_layouts[decl.id] = layout
            for attribute in node_attributes:
                attributes[attribute.id] = attribute

        # Reorder by depth so iteration matches draw and hit order
        ordered = {
            node_id: node_layouts[node_id]
            for node_id in state.depth_order
            if node_id in node_layouts
        }

        link_layouts: dict[LinkId, LinkLayout] = {}
        for link in links:
            if link.id in link_layouts:
                diagnostics.append(self._report(
                    "duplicate_link", link.id,
                    f"Link id {link.id} declared more than once; keeping the first",
                ))
                continue

            start = attributes.get(link.start)
            end = attributes.get(link.end)
            if start is None or end is None or start.anchor is None or end.anchor is None:
                logger.debug(
                    "Skipping link %s: pins %s -> %s are not connectable this frame",
                    link.id, link.start, link.end,
                )
                continue

            link_layouts[link.id] = LinkLayout(
                id=link.id,
                start=link.start,
                end=link.end,
                start_node=start.node_id,
                end_node=end.node_id,
                curve=LinkCurve.build(start.anchor, end.anchor, self.style),
                args=link.args,
            )

        return FrameGeometry(
            nodes=ordered,
            attributes=attributes,
            links=link_layouts,
            diagnostics=tuple(diagnostics),
        )

    def _layout_node(
        self,
        decl: NodeDecl,
        position: Vec2,
        known_pins: dict[PinId, AttributeLayout],
        diagnostics: list[Diagnostic],
        measure: MeasureFn | None,
    ) -> tuple[NodeLayout, list[AttributeLayout]]:
        style = self.style
        padding = decl.args.padding or style.node_padding
        left = position.x + padding.x
        cursor_y = position.y + padding.y
        content_width = 0.0

        title_content = None
        if decl.title is not None:
            size = self._measure(decl.title, decl.title_size, measure)
            title_content = Rect.from_min_size(Vec2(left, cursor_y), size)
            content_width = size.width
            cursor_y += size.height + padding.y

        rows: list[tuple[AttributeDecl, Rect]] = []
        seen_here: set[PinId] = set()
        for attribute in decl.attributes:
            if attribute.id in known_pins or attribute.id in seen_here:
                diagnostics.append(self._report(
                    "duplicate_pin", attribute.id,
                    f"Pin id {attribute.id} on node {decl.id} already declared; dropping it",
                ))
                continue
            seen_here.add(attribute.id)

            if rows:
                cursor_y += style.attribute_spacing
            size = self._measure(attribute.content, attribute.size, measure)
            rows.append((attribute, Rect.from_min_size(Vec2(left, cursor_y), size)))
            content_width = max(content_width, size.width)
            cursor_y += size.height

        width = max(content_width + 2.0 * padding.x, style.node_min_width)
        height = cursor_y + padding.y - position.y
        rect = Rect.from_min_size(position, Size2D(width, height))

        title_rect = None
        if title_content is not None:
            title_rect = Rect(
                Vec2(rect.left, title_content.top - padding.y),
                Vec2(rect.right, title_content.bottom + padding.y),
            )

        layouts = [
            AttributeLayout(
                id=attribute.id,
                node_id=decl.id,
                kind=attribute.kind,
                rect=row_rect,
                anchor=self._anchor(attribute.kind, rect, row_rect),
                args=attribute.args,
                content=attribute.content,
            )
            for attribute, row_rect in rows
        ]
        node = NodeLayout(
            id=decl.id,
            rect=rect,
            title_rect=title_rect,
            title_content_rect=title_content,
            title=decl.title,
            attributes=tuple(a.id for a in layouts),
            args=decl.args,
        )
        return node, layouts

    def _anchor(self, kind: AttributeKind, node_rect: Rect, row: Rect) -> Vec2 | None:
        y = row.center.y
        if kind is AttributeKind.INPUT:
            return Vec2(node_rect.left - self.style.pin_offset, y)
        if kind is AttributeKind.OUTPUT:
            return Vec2(node_rect.right + self.style.pin_offset, y)
        return None

    def _measure(self, content: Any, explicit: Size2D | None, measure: MeasureFn | None) -> Size2D:
        if explicit is not None:
            return explicit
        if content is not None and measure is not None:
            size = measure(content)
            if size is not None:
                return size
        return self.style.default_content_size

    def _report(self, kind: str, item_id: int, message: str) -> Diagnostic:
        logger.warning(message)
        return Diagnostic(kind, item_id, message)
