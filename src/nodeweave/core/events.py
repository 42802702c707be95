"""
Editor Events - What a frame reports back to the caller.

Events are requests and notifications only: the editor never edits the
caller's node or link collections. A caller reacts to LinkCreated by
appending a link, to LinkDestroyed by removing one, and so on.
"""

from __future__ import annotations

from dataclasses import dataclass

from nodeweave.core.declarations import LinkId, NodeId, PinId


@dataclass(frozen=True)
class EditorEvent:
    """Base class for all events produced by a frame."""


@dataclass(frozen=True)
class LinkCreated(EditorEvent):
    """The user connected two pins. `start` is the output, `end` the input."""
    start: PinId
    end: PinId
    start_node: NodeId
    end_node: NodeId


@dataclass(frozen=True)
class LinkStarted(EditorEvent):
    """A pending link began from `pin`. Nothing is created until LinkCreated."""
    pin: PinId


@dataclass(frozen=True)
class LinkDestroyed(EditorEvent):
    """The user deleted or detached a link."""
    id: LinkId


@dataclass(frozen=True)
class NodeSelectionChanged(EditorEvent):
    node_ids: tuple[NodeId, ...]


@dataclass(frozen=True)
class LinkSelectionChanged(EditorEvent):
    link_ids: tuple[LinkId, ...]


@dataclass(frozen=True)
class HoveredNodeChanged(EditorEvent):
    id: NodeId | None


@dataclass(frozen=True)
class HoveredLinkChanged(EditorEvent):
    id: LinkId | None


@dataclass(frozen=True)
class HoveredPinChanged(EditorEvent):
    id: PinId | None


@dataclass(frozen=True)
class NodesMoved(EditorEvent):
    """A node drag finished after moving the given nodes."""
    node_ids: tuple[NodeId, ...]


@dataclass(frozen=True)
class NodeDeletionRequested(EditorEvent):
    """The user asked to delete a node; the caller decides."""
    id: NodeId
