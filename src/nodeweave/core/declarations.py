"""
Declarations - What the caller re-declares every frame.

This module defines the plain descriptor types consumed by the frame
builder:
- NodeDecl: A node with its title and ordered attributes
- AttributeDecl: A connection point (input/output pin) or static row
- LinkDecl: An existing link between two pins

Content values (titles, attribute bodies) are opaque to the core: they are
handed to the painter for measurement and drawing and never interpreted.

NodeBuilder is a convenience layer for constructing NodeDecl values
fluently; the core only ever sees the resulting descriptors.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, IntFlag
from typing import Any, NewType

from nodeweave.core.geometry import Size2D, Vec2
from nodeweave.core.style import Color


# Caller-supplied identifiers, stable across frames
NodeId = NewType("NodeId", int)
PinId = NewType("PinId", int)
LinkId = NewType("LinkId", int)


class AttributeKind(Enum):
    """Kind of a node attribute."""
    INPUT = "input"
    OUTPUT = "output"
    STATIC = "static"   # Not connectable

    @property
    def is_connectable(self) -> bool:
        return self is not AttributeKind.STATIC


class PinShape(Enum):
    """Shape of a pin marker. Only affects rendering."""
    CIRCLE = "circle"
    CIRCLE_FILLED = "circle_filled"
    TRIANGLE = "triangle"
    TRIANGLE_FILLED = "triangle_filled"
    QUAD = "quad"
    QUAD_FILLED = "quad_filled"


class AttributeFlags(IntFlag):
    """Controls the way attribute pins behave."""
    NONE = 0
    # Pressing a pin that already has a link detaches that link instead
    # of starting a new one. Requires handling LinkDestroyed events.
    DETACH_ON_DRAG = 1 << 0
    # A pending link dropped onto this pin is created as soon as it snaps,
    # without waiting for the button release.
    CREATE_ON_SNAP = 1 << 1


@dataclass(frozen=True)
class NodeArgs:
    """Per-node style overrides. Fields left as None use the editor style."""
    background: Color | None = None
    background_hovered: Color | None = None
    background_selected: Color | None = None
    outline: Color | None = None
    titlebar: Color | None = None
    titlebar_hovered: Color | None = None
    titlebar_selected: Color | None = None
    corner_rounding: float | None = None
    padding: Vec2 | None = None
    border_thickness: float | None = None


@dataclass(frozen=True)
class PinArgs:
    """Per-pin visual parameters."""
    shape: PinShape = PinShape.CIRCLE_FILLED
    flags: AttributeFlags = AttributeFlags.NONE
    background: Color | None = None
    hovered: Color | None = None


@dataclass(frozen=True)
class LinkArgs:
    """Per-link style parameters. Fields left as None use the editor style."""
    base: Color | None = None
    hovered: Color | None = None
    selected: Color | None = None
    thickness: float | None = None


@dataclass(frozen=True)
class AttributeDecl:
    """
    One attribute row of a node.

    `size`, when given, overrides content measurement.
    """
    id: PinId
    kind: AttributeKind
    content: Any = None
    args: PinArgs = field(default_factory=PinArgs)
    size: Size2D | None = None

    @property
    def shape(self) -> PinShape:
        return self.args.shape

    @property
    def flags(self) -> AttributeFlags:
        return self.args.flags


@dataclass(frozen=True)
class NodeDecl:
    """
    One node as declared for the current frame.

    `origin` is a screen-space position used only the first time the node
    id is seen; afterwards the stored canvas position wins.
    """
    id: NodeId
    title: Any = None
    attributes: tuple[AttributeDecl, ...] = ()
    origin: Vec2 | None = None
    args: NodeArgs = field(default_factory=NodeArgs)
    title_size: Size2D | None = None


@dataclass(frozen=True)
class LinkDecl:
    """An existing link, owned by the caller."""
    id: LinkId
    start: PinId
    end: PinId
    args: LinkArgs = field(default_factory=LinkArgs)

    @classmethod
    def from_tuple(cls, item: tuple) -> LinkDecl:
        """Accept `(id, start, end)` or `(id, start, end, args)` tuples."""
        if len(item) == 3:
            link_id, start, end = item
            return cls(LinkId(link_id), PinId(start), PinId(end))
        link_id, start, end, args = item
        return cls(LinkId(link_id), PinId(start), PinId(end), args)


class NodeBuilder:
    """
    Fluent construction of a NodeDecl.

    Example:
        node = (
            NodeBuilder(0)
            .with_title("Example Node A")
            .with_input_attribute(0, "Input")
            .with_static_attribute(1, "Can't connect to me")
            .with_output_attribute(2, "Output")
            .build()
        )
    """

    def __init__(self, node_id: int, args: NodeArgs | None = None):
        self._id = NodeId(node_id)
        self._args = args or NodeArgs()
        self._title: Any = None
        self._title_size: Size2D | None = None
        self._origin: Vec2 | None = None
        self._attributes: list[AttributeDecl] = []

    @property
    def id(self) -> NodeId:
        return self._id

    def with_title(self, content: Any, size: Size2D | None = None) -> NodeBuilder:
        self._title = content
        self._title_size = size
        return self

    def with_origin(self, origin: Vec2) -> NodeBuilder:
        """Screen-space position used when the node is first created."""
        self._origin = origin
        return self

    def with_input_attribute(
        self,
        pin_id: int,
        content: Any = None,
        args: PinArgs | None = None,
        size: Size2D | None = None,
    ) -> NodeBuilder:
        return self._add(pin_id, AttributeKind.INPUT, content, args, size)

    def with_output_attribute(
        self,
        pin_id: int,
        content: Any = None,
        args: PinArgs | None = None,
        size: Size2D | None = None,
    ) -> NodeBuilder:
        return self._add(pin_id, AttributeKind.OUTPUT, content, args, size)

    def with_static_attribute(
        self,
        attribute_id: int,
        content: Any = None,
        size: Size2D | None = None,
    ) -> NodeBuilder:
        return self._add(attribute_id, AttributeKind.STATIC, content, None, size)

    def _add(
        self,
        pin_id: int,
        kind: AttributeKind,
        content: Any,
        args: PinArgs | None,
        size: Size2D | None,
    ) -> NodeBuilder:
        self._attributes.append(
            AttributeDecl(PinId(pin_id), kind, content, args or PinArgs(), size)
        )
        return self

    def build(self) -> NodeDecl:
        return NodeDecl(
            id=self._id,
            title=self._title,
            attributes=tuple(self._attributes),
            origin=self._origin,
            args=self._args,
            title_size=self._title_size,
        )
