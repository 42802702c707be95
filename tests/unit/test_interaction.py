"""
Tests for the interaction engine, driven through NodeEditor frames.
"""

import pytest

from nodeweave.core.declarations import AttributeFlags, NodeBuilder, PinArgs
from nodeweave.core.editor import NodeEditor
from nodeweave.core.events import (
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
from nodeweave.core.geometry import Rect, Vec2
from nodeweave.core.input import FrameInput, Modifiers, PointerButton
from nodeweave.core.settings import EditorSettings
from nodeweave.core.state import InteractionMode


CANVAS = Rect(Vec2(0, 0), Vec2(800, 600))
PRIMARY = PointerButton.PRIMARY

# Anchors with the default style: node 1 at (0, 0), node 3 at (300, 0)
OUT_2 = (96, 43)
IN_5 = (300, 43)
LINK_MID = (198, 43)


def graph(detach_pin_5=False, snap_pin_5=False):
    flags = AttributeFlags.NONE
    if detach_pin_5:
        flags |= AttributeFlags.DETACH_ON_DRAG
    if snap_pin_5:
        flags |= AttributeFlags.CREATE_ON_SNAP
    pin_5_args = PinArgs(flags=flags) if flags else None
    return [
        NodeBuilder(1).with_title("A").with_output_attribute(2, "out").build(),
        NodeBuilder(3).with_title("B").with_input_attribute(5, "in", pin_5_args).build(),
    ]


@pytest.fixture
def editor():
    editor = NodeEditor()
    editor.set_node_position(1, Vec2(0, 0))
    editor.set_node_position(3, Vec2(300, 0))
    return editor


def run(editor, nodes, links, *frames):
    """Run several frames and return all results."""
    return [editor.show(nodes, links, frame, CANVAS) for frame in frames]


def events(results, event_type):
    return [e for r in results for e in r.events_of(event_type)]


class TestLinkCreation:
    """Tests for dragging links between pins."""

    def test_output_to_input(self, editor):
        results = run(
            editor, graph(), [],
            FrameInput.at(*OUT_2, PRIMARY),
            FrameInput.at(*IN_5, PRIMARY),
            FrameInput.at(*IN_5),
        )

        assert results[0].mode is InteractionMode.DRAGGING_LINK
        assert results[-1].links_created() == [LinkCreated(2, 5, 1, 3)]
        assert results[-1].mode is InteractionMode.IDLE

    def test_input_to_output_is_reordered(self, editor):
        results = run(
            editor, graph(), [],
            FrameInput.at(*IN_5, PRIMARY),
            FrameInput.at(*OUT_2, PRIMARY),
            FrameInput.at(*OUT_2),
        )
        assert results[-1].links_created() == [LinkCreated(2, 5, 1, 3)]

    def test_same_kind_never_links(self, editor):
        nodes = graph() + [NodeBuilder(4).with_title("C").with_input_attribute(6, "in").build()]
        editor.set_node_position(4, Vec2(300, 200))
        in_6 = (300, 243)

        results = run(
            editor, nodes, [],
            FrameInput.at(*IN_5, PRIMARY),
            FrameInput.at(*in_6, PRIMARY),
            FrameInput.at(*in_6),
        )
        assert events(results, LinkCreated) == []

    def test_same_node_never_links(self, editor):
        nodes = [
            NodeBuilder(1).with_title("A").with_input_attribute(0, "in").with_output_attribute(2, "out").build(),
        ]
        out_2 = (96, 65)
        in_0 = (0, 43)

        results = run(
            editor, nodes, [],
            FrameInput.at(*out_2, PRIMARY),
            FrameInput.at(*in_0, PRIMARY),
            FrameInput.at(*in_0),
        )
        assert events(results, LinkCreated) == []

    def test_duplicate_link_rejected(self, editor):
        results = run(
            editor, graph(), [(7, 2, 5)],
            FrameInput.at(*OUT_2, PRIMARY),
            FrameInput.at(*IN_5, PRIMARY),
            FrameInput.at(*IN_5),
        )
        assert events(results, LinkCreated) == []

    def test_release_over_empty_canvas_emits_nothing(self, editor):
        results = run(
            editor, graph(), [],
            FrameInput.at(*OUT_2, PRIMARY),
            FrameInput.at(500, 400, PRIMARY),
            FrameInput.at(500, 400),
        )
        assert results[-1].events == ()
        assert results[-1].mode is InteractionMode.IDLE

    def test_pending_curve_follows_pointer(self, editor):
        results = run(
            editor, graph(), [],
            FrameInput.at(*OUT_2, PRIMARY),
            FrameInput.at(500, 400, PRIMARY),
        )
        curve = results[-1].pending_curve
        assert curve.p0 == Vec2(*OUT_2)
        assert curve.p3 == Vec2(500, 400)

    def test_pending_curve_snaps_to_valid_pin(self, editor):
        results = run(
            editor, graph(), [],
            FrameInput.at(*OUT_2, PRIMARY),
            FrameInput.at(305, 47, PRIMARY),
        )
        assert results[-1].pending_curve.p3 == Vec2(*IN_5)

    def test_create_on_snap_without_release(self, editor):
        results = run(
            editor, graph(snap_pin_5=True), [],
            FrameInput.at(*OUT_2, PRIMARY),
            FrameInput.at(*IN_5, PRIMARY),
            FrameInput.at(*IN_5),
        )

        assert results[1].links_created() == [LinkCreated(2, 5, 1, 3)]
        assert results[1].mode is InteractionMode.IDLE
        assert results[2].links_created() == []

    def test_snap_without_flag_waits_for_release(self, editor):
        results = run(
            editor, graph(), [],
            FrameInput.at(*OUT_2, PRIMARY),
            FrameInput.at(*IN_5, PRIMARY),
        )
        assert results[-1].links_created() == []
        assert results[-1].mode is InteractionMode.DRAGGING_LINK

    def test_link_started_reports_start_pin(self, editor):
        results = run(
            editor, graph(), [],
            FrameInput.at(*OUT_2, PRIMARY),
            FrameInput.at(400, 300, PRIMARY),
            FrameInput.at(400, 300),
        )
        assert events(results, LinkStarted) == [LinkStarted(2)]
        assert events(results, LinkCreated) == []

    def test_cancel_interaction(self, editor):
        run(editor, graph(), [], FrameInput.at(*OUT_2, PRIMARY))
        editor.cancel_interaction()
        results = run(editor, graph(), [], FrameInput.at(*IN_5))
        assert results[-1].mode is InteractionMode.IDLE
        assert events(results, LinkCreated) == []


class TestLinkLifecycle:
    """Create, select and delete a link across frames."""

    def test_create_select_delete(self, editor):
        links = []
        results = run(
            editor, graph(), links,
            FrameInput.at(*OUT_2, PRIMARY),
            FrameInput.at(*IN_5, PRIMARY),
            FrameInput.at(*IN_5),
        )
        created = results[-1].links_created()
        assert created == [LinkCreated(2, 5, 1, 3)]
        links.append((7, created[0].start, created[0].end))

        results = run(
            editor, graph(), links,
            FrameInput.at(*LINK_MID, PRIMARY),
            FrameInput.at(*LINK_MID, delete_pressed=True),
        )

        assert results[0].selected_links == (7,)
        assert results[-1].links_destroyed() == [LinkDestroyed(7)]

    def test_link_selection_pruned_when_undeclared(self, editor):
        results = run(editor, graph(), [(7, 2, 5)], FrameInput.at(*LINK_MID, PRIMARY))
        assert results[-1].selected_links == (7,)

        results = run(editor, graph(), [], FrameInput.at(*LINK_MID))
        assert results[-1].selected_links == ()
        assert LinkSelectionChanged(()) in results[-1].events

    def test_detach_with_modifier(self, editor):
        near_end = editor.show(graph(), [(7, 2, 5)], FrameInput(), CANVAS).geometry.links[7].curve.point_at(0.9)

        results = run(
            editor, graph(), [(7, 2, 5)],
            FrameInput.at(near_end.x, near_end.y, PRIMARY, modifiers=Modifiers.ALT),
        )

        assert results[-1].links_destroyed() == [LinkDestroyed(7)]
        assert results[-1].mode is InteractionMode.DRAGGING_LINK
        assert editor.state.pending_link.start_pin == 2

    def test_detach_on_drag_pin(self, editor):
        results = run(
            editor, graph(detach_pin_5=True), [(7, 2, 5)],
            FrameInput.at(*IN_5, PRIMARY),
        )
        assert results[-1].links_destroyed() == [LinkDestroyed(7)]
        assert results[-1].events_of(LinkStarted) == [LinkStarted(2)]
        assert editor.state.pending_link.start_pin == 2

    def test_pin_without_detach_flag_starts_new_link(self, editor):
        results = run(editor, graph(), [(7, 2, 5)], FrameInput.at(*IN_5, PRIMARY))
        assert results[-1].links_destroyed() == []
        assert editor.state.pending_link.start_pin == 5


class TestNodeDragging:
    """Tests for moving nodes."""

    def test_drag_scales_by_zoom(self, editor):
        editor.state.zoom = 2.0
        d = Vec2(40, 20)

        results = run(
            editor, graph(), [],
            FrameInput.at(50, 30, PRIMARY),
            FrameInput.at(50 + d.x, 30 + d.y, PRIMARY),
            FrameInput.at(50 + d.x, 30 + d.y),
        )

        position = editor.node_position(1)
        assert position.x == pytest.approx(d.x / 2)
        assert position.y == pytest.approx(d.y / 2)
        assert results[-1].events_of(NodesMoved) == [NodesMoved((1,))]

        run(editor, graph(), [], FrameInput.at(50 + d.x, 30 + d.y))
        assert editor.node_position(1) == position

    def test_drag_in_several_steps(self, editor):
        run(
            editor, graph(), [],
            FrameInput.at(50, 20, PRIMARY),
            FrameInput.at(60, 20, PRIMARY),
            FrameInput.at(75, 35, PRIMARY),
            FrameInput.at(75, 35),
        )
        assert editor.node_position(1) == Vec2(25, 15)

    def test_small_movement_is_a_click(self, editor):
        results = run(
            editor, graph(), [],
            FrameInput.at(50, 20, PRIMARY),
            FrameInput.at(51, 21, PRIMARY),
            FrameInput.at(51, 21),
        )
        assert editor.node_position(1) == Vec2(0, 0)
        assert events(results, NodesMoved) == []
        assert editor.state.selected_nodes == (1,)

    def test_press_selects_and_raises(self, editor):
        results = run(editor, graph(), [], FrameInput.at(50, 20, PRIMARY))
        assert results[0].events_of(NodeSelectionChanged) == [NodeSelectionChanged((1,))]
        assert editor.state.depth_order[-1] == 1

    def test_group_drag(self, editor):
        editor.state.select_nodes([1, 3])
        run(
            editor, graph(), [],
            FrameInput.at(50, 20, PRIMARY),
            FrameInput.at(60, 30, PRIMARY),
            FrameInput.at(60, 30),
        )
        assert editor.node_position(1) == Vec2(10, 10)
        assert editor.node_position(3) == Vec2(310, 10)

    def test_non_draggable_node_stays(self, editor):
        editor.set_node_draggable(1, False)
        results = run(
            editor, graph(), [],
            FrameInput.at(50, 20, PRIMARY),
            FrameInput.at(90, 60, PRIMARY),
            FrameInput.at(90, 60),
        )
        assert editor.node_position(1) == Vec2(0, 0)
        assert events(results, NodesMoved) == []


class TestBoxSelection:
    """Tests for rubber-band selection."""

    @pytest.fixture
    def boxed(self):
        editor = NodeEditor()
        for node_id, position in ((1, Vec2(50, 50)), (2, Vec2(300, 50)), (3, Vec2(50, 300))):
            editor.set_node_position(node_id, position)
        nodes = [NodeBuilder(i).with_title(str(i)).build() for i in (1, 2, 3)]
        return editor, nodes

    def test_replace(self, boxed):
        editor, nodes = boxed
        editor.state.select_nodes([3])

        results = run(
            editor, nodes, [],
            FrameInput.at(20, 20, PRIMARY),
            FrameInput.at(450, 150, PRIMARY),
            FrameInput.at(450, 150),
        )

        assert results[1].mode is InteractionMode.BOX_SELECTING
        assert results[1].box_rect == Rect(Vec2(20, 20), Vec2(450, 150))
        assert set(editor.state.selected_nodes) == {1, 2}
        assert results[-1].box_rect is None

    def test_additive(self, boxed):
        editor, nodes = boxed
        run(editor, nodes, [], FrameInput.at(60, 310, PRIMARY), FrameInput.at(60, 310))
        assert editor.state.selected_nodes == (3,)

        ctrl = Modifiers.CTRL
        run(
            editor, nodes, [],
            FrameInput.at(20, 20, PRIMARY, modifiers=ctrl),
            FrameInput.at(450, 150, PRIMARY, modifiers=ctrl),
            FrameInput.at(450, 150, modifiers=ctrl),
        )
        assert set(editor.state.selected_nodes) == {1, 2, 3}

    def test_click_on_empty_canvas_clears_selection(self, boxed):
        editor, nodes = boxed
        editor.state.select_nodes([1])
        run(editor, nodes, [], FrameInput.at(700, 500, PRIMARY), FrameInput.at(700, 500))
        assert editor.state.selected_nodes == ()

    def test_box_selects_links(self, editor):
        run(
            editor, graph(), [(7, 2, 5)],
            FrameInput.at(180, 0, PRIMARY),
            FrameInput.at(220, 100, PRIMARY),
            FrameInput.at(220, 100),
        )
        assert editor.state.selected_links == (7,)
        assert editor.state.selected_nodes == ()


class TestCanvasNavigation:
    """Tests for pan and zoom gestures."""

    def test_middle_button_pans(self, editor):
        results = run(
            editor, graph(), [],
            FrameInput.at(500, 500, PointerButton.MIDDLE),
            FrameInput.at(520, 510, PointerButton.MIDDLE),
            FrameInput.at(520, 510),
        )
        assert results[0].mode is InteractionMode.PANNING_CANVAS
        assert editor.state.pan == Vec2(20, 10)
        assert results[-1].mode is InteractionMode.IDLE

    def test_pan_modifier_with_primary(self):
        editor = NodeEditor(settings=EditorSettings(pan_modifier=Modifiers.SHIFT))
        shift = Modifiers.SHIFT
        run(
            editor, [], [],
            FrameInput.at(100, 100, PRIMARY, modifiers=shift),
            FrameInput.at(90, 130, PRIMARY, modifiers=shift),
            FrameInput.at(90, 130),
        )
        assert editor.state.pan == Vec2(-10, 30)

    def test_scroll_zooms_about_pointer(self, editor):
        result = run(editor, graph(), [], FrameInput.at(500, 300, scroll=1))[-1]

        assert editor.state.zoom == pytest.approx(1.1)
        under_pointer = result.transform.screen_to_canvas(Vec2(500, 300))
        assert under_pointer.x == pytest.approx(500)
        assert under_pointer.y == pytest.approx(300)

    def test_zoom_clamped_to_settings(self, editor):
        editor.state.zoom = 0.1
        assert editor.state.zoom == 0.25


class TestPointerOutsideCanvas:
    """Tests for gestures started outside the canvas."""

    def test_press_outside_does_nothing(self, editor):
        results = run(editor, graph(), [], FrameInput.at(900, 50, PRIMARY))
        assert results[0].mode is InteractionMode.IDLE
        assert results[0].events == ()

    def test_unknown_pointer_keeps_drag(self, editor):
        run(editor, graph(), [], FrameInput.at(50, 20, PRIMARY), FrameInput.at(70, 20, PRIMARY))
        results = run(editor, graph(), [], FrameInput(buttons=frozenset({PRIMARY})))
        assert results[0].mode is InteractionMode.DRAGGING_NODE
        assert editor.node_position(1) == Vec2(20, 0)


class TestDeletionAndHover:
    """Tests for delete requests and hover events."""

    def test_delete_requests_node_deletion(self, editor):
        results = run(
            editor, graph(), [(7, 2, 5)],
            FrameInput.at(50, 20, PRIMARY),
            FrameInput.at(50, 20, delete_pressed=True),
        )
        assert results[-1].events_of(NodeDeletionRequested) == [NodeDeletionRequested(1)]
        assert results[-1].links_destroyed() == []
        # Nothing is removed by the editor itself
        assert editor.state.has_position(1)

    def test_delete_during_drag_waits_for_release(self, editor):
        results = run(
            editor, graph(), [],
            FrameInput.at(50, 20, PRIMARY),
            FrameInput.at(50, 20, PRIMARY, delete_pressed=True),
            FrameInput.at(50, 20),
        )
        assert results[1].events_of(NodeDeletionRequested) == []
        assert results[2].events_of(NodeDeletionRequested) == [NodeDeletionRequested(1)]

    def test_delete_ignores_undeclared_selection(self, editor):
        editor.state.select_nodes([42])
        results = run(editor, graph(), [], FrameInput.at(700, 500, delete_pressed=True))
        assert results[-1].events_of(NodeDeletionRequested) == []

    def test_hover_events_only_on_change(self, editor):
        results = run(
            editor, graph(), [],
            FrameInput.at(50, 20),
            FrameInput.at(52, 20),
            FrameInput.at(*OUT_2),
        )
        assert results[0].events_of(HoveredNodeChanged) == [HoveredNodeChanged(1)]
        assert results[1].events == ()
        assert results[2].events_of(HoveredPinChanged) == [HoveredPinChanged(2)]
        assert results[2].events_of(HoveredNodeChanged) == [HoveredNodeChanged(None)]

    def test_hovered_pin_marks_attached_link(self, editor):
        result = run(editor, graph(), [(7, 2, 5)], FrameInput.at(*OUT_2))[-1]
        assert result.hovered_pin == 2
        assert result.hovered_link == 7
        assert result.hovered_node is None

    def test_occluded_pin_is_not_hovered(self, editor):
        nodes = graph() + [NodeBuilder(9).with_title("cover").build()]
        editor.set_node_position(9, Vec2(80, 30))
        result = run(editor, nodes, [], FrameInput.at(*OUT_2))[-1]
        assert result.hovered_pin is None
        assert result.hovered_node == 9
