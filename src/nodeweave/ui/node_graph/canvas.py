"""
Node Editor Canvas - Qt host widget for a NodeEditor.

The widget samples Qt input into FrameInput snapshots, runs one editor
frame per paint, draws it with QPainter and re-emits the frame's events
as Qt signals. The caller keeps owning nodes and links: it supplies them
through a source callable and reacts to the signals.

Example:
    canvas = NodeEditorCanvas(lambda: (graph.nodes(), graph.links()))
    canvas.link_created.connect(graph.on_link_created)
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Callable, Iterable, Iterator, Sequence

from PySide6.QtWidgets import QWidget
from PySide6.QtCore import Qt, Signal, QPointF, QRectF
from PySide6.QtGui import (
    QPainter,
    QPen,
    QBrush,
    QColor,
    QFont,
    QFontMetricsF,
    QPainterPath,
    QPolygonF,
    QMouseEvent,
    QWheelEvent,
    QKeyEvent,
    QPaintEvent,
)

from nodeweave.core.declarations import LinkDecl, NodeDecl
from nodeweave.core.editor import FrameResult, NodeEditor
from nodeweave.core.events import (
    HoveredLinkChanged,
    HoveredNodeChanged,
    HoveredPinChanged,
    LinkCreated,
    LinkDestroyed,
    LinkStarted,
    LinkSelectionChanged,
    NodeDeletionRequested,
    NodeSelectionChanged,
    NodesMoved,
)
from nodeweave.core.geometry import Rect, Size2D, Vec2
from nodeweave.core.input import FrameInput, Modifiers, PointerButton
from nodeweave.core.style import Color
from nodeweave.ui.painter import FramePainter


GraphSource = Callable[[], tuple[Iterable[NodeDecl], Iterable[LinkDecl | tuple]]]

# One notch on a standard mouse wheel
WHEEL_STEP = 120.0

_BUTTON_MAP = {
    Qt.MouseButton.LeftButton: PointerButton.PRIMARY,
    Qt.MouseButton.RightButton: PointerButton.SECONDARY,
    Qt.MouseButton.MiddleButton: PointerButton.MIDDLE,
}

_MODIFIER_MAP = {
    Qt.KeyboardModifier.ShiftModifier: Modifiers.SHIFT,
    Qt.KeyboardModifier.ControlModifier: Modifiers.CTRL,
    Qt.KeyboardModifier.AltModifier: Modifiers.ALT,
    Qt.KeyboardModifier.MetaModifier: Modifiers.COMMAND,
}


def buttons_from_qt(buttons: Qt.MouseButton) -> frozenset[PointerButton]:
    """Convert Qt's held-button flags to pointer buttons."""
    return frozenset(
        pointer for qt_button, pointer in _BUTTON_MAP.items() if buttons & qt_button
    )


def modifiers_from_qt(modifiers: Qt.KeyboardModifier) -> Modifiers:
    result = Modifiers.NONE
    for qt_modifier, modifier in _MODIFIER_MAP.items():
        if modifiers & qt_modifier:
            result |= modifier
    return result


def _qcolor(color: Color) -> QColor:
    return QColor(*color)


def _qpoint(p: Vec2) -> QPointF:
    return QPointF(p.x, p.y)


def _qrect(rect: Rect) -> QRectF:
    return QRectF(rect.left, rect.top, rect.width, rect.height)


class QtPainter:
    """
    Painter implementation on top of a QPainter.

    Strings are measured and drawn with the given font. Any other content
    may provide `measure(painter) -> Size2D` and `draw(painter, rect, zoom)`.
    """

    def __init__(
        self,
        painter: QPainter,
        font: QFont | None = None,
        text_color: Color = (230, 230, 230, 255),
    ):
        self._painter = painter
        self._font = font or QFont("Inter", 10)
        self._text_color = text_color

    @property
    def qpainter(self) -> QPainter:
        return self._painter

    def measure(self, content: Any) -> Size2D | None:
        if isinstance(content, str):
            metrics = QFontMetricsF(self._font)
            return Size2D(metrics.horizontalAdvance(content), metrics.height())
        measure = getattr(content, "measure", None)
        if callable(measure):
            return measure(self)
        return None

    def draw_content(self, content: Any, rect: Rect, zoom: float) -> None:
        if isinstance(content, str):
            painter = self._painter
            painter.save()
            font = QFont(self._font)
            font.setPointSizeF(max(1.0, self._font.pointSizeF() * zoom))
            painter.setFont(font)
            painter.setPen(_qcolor(self._text_color))
            painter.drawText(
                _qrect(rect),
                Qt.AlignmentFlag.AlignLeft | Qt.AlignmentFlag.AlignVCenter,
                content,
            )
            painter.restore()
            return
        draw = getattr(content, "draw", None)
        if callable(draw):
            draw(self, rect, zoom)

    def line(self, a: Vec2, b: Vec2, color: Color, thickness: float) -> None:
        self._painter.setPen(QPen(_qcolor(color), thickness))
        self._painter.drawLine(_qpoint(a), _qpoint(b))

    def bezier(self, p0: Vec2, p1: Vec2, p2: Vec2, p3: Vec2, color: Color, thickness: float) -> None:
        path = QPainterPath()
        path.moveTo(_qpoint(p0))
        path.cubicTo(_qpoint(p1), _qpoint(p2), _qpoint(p3))

        self._painter.setPen(QPen(_qcolor(color), thickness))
        self._painter.setBrush(Qt.BrushStyle.NoBrush)
        self._painter.drawPath(path)

    def fill_rect(self, rect: Rect, color: Color, rounding: float = 0.0) -> None:
        if rounding <= 0:
            self._painter.fillRect(_qrect(rect), _qcolor(color))
            return
        path = QPainterPath()
        path.addRoundedRect(_qrect(rect), rounding, rounding)
        self._painter.fillPath(path, _qcolor(color))

    def stroke_rect(self, rect: Rect, color: Color, thickness: float, rounding: float = 0.0) -> None:
        self._painter.setPen(QPen(_qcolor(color), thickness))
        self._painter.setBrush(Qt.BrushStyle.NoBrush)
        self._painter.drawRoundedRect(_qrect(rect), rounding, rounding)

    def fill_circle(self, center: Vec2, radius: float, color: Color) -> None:
        self._painter.setPen(Qt.PenStyle.NoPen)
        self._painter.setBrush(QBrush(_qcolor(color)))
        self._painter.drawEllipse(_qpoint(center), radius, radius)

    def stroke_circle(self, center: Vec2, radius: float, color: Color, thickness: float) -> None:
        self._painter.setPen(QPen(_qcolor(color), thickness))
        self._painter.setBrush(Qt.BrushStyle.NoBrush)
        self._painter.drawEllipse(_qpoint(center), radius, radius)

    def polygon(self, points: Sequence[Vec2], color: Color, filled: bool, thickness: float = 1.0) -> None:
        if filled:
            self._painter.setPen(Qt.PenStyle.NoPen)
            self._painter.setBrush(QBrush(_qcolor(color)))
        else:
            self._painter.setPen(QPen(_qcolor(color), thickness))
            self._painter.setBrush(Qt.BrushStyle.NoBrush)
        self._painter.drawPolygon(QPolygonF([_qpoint(p) for p in points]))

    @contextmanager
    def clip(self, rect: Rect) -> Iterator[None]:
        self._painter.save()
        self._painter.setClipRect(_qrect(rect))
        try:
            yield
        finally:
            self._painter.restore()


class NodeEditorCanvas(QWidget):
    """
    Canvas widget running a NodeEditor.

    Signals:
        link_created: A link was drawn (LinkCreated)
        link_destroyed: A link was deleted or detached (LinkId)
        link_started: A pending link began from a pin (PinId)
        node_selection_changed: Selected nodes changed (tuple of NodeId)
        link_selection_changed: Selected links changed (tuple of LinkId)
        node_hovered / link_hovered / pin_hovered: Hover changed (id or None)
        nodes_moved: A node drag finished (tuple of NodeId)
        node_deletion_requested: User asked to delete a node (NodeId)
        frame_finished: Emitted after every frame (FrameResult)
    """

    # Signals
    link_created = Signal(object)  # LinkCreated
    link_destroyed = Signal(object)  # LinkId
    link_started = Signal(object)  # PinId
    node_selection_changed = Signal(object)  # tuple[NodeId, ...]
    link_selection_changed = Signal(object)  # tuple[LinkId, ...]
    node_hovered = Signal(object)  # NodeId or None
    link_hovered = Signal(object)  # LinkId or None
    pin_hovered = Signal(object)  # PinId or None
    nodes_moved = Signal(object)  # tuple[NodeId, ...]
    node_deletion_requested = Signal(object)  # NodeId
    frame_finished = Signal(object)  # FrameResult

    def __init__(
        self,
        source: GraphSource,
        editor: NodeEditor | None = None,
        parent: QWidget | None = None,
    ):
        super().__init__(parent)

        # Enable mouse tracking for hover effects
        self.setMouseTracking(True)
        self.setFocusPolicy(Qt.FocusPolicy.StrongFocus)

        self._source = source
        self.editor = editor or NodeEditor()
        self._frame_painter = FramePainter(self.editor.style)
        self._font = QFont("Inter", 10)

        # Input accumulated between frames
        self._pointer: Vec2 | None = None
        self._buttons: frozenset[PointerButton] = frozenset()
        self._modifiers = Modifiers.NONE
        self._delete_pending = False
        self._scroll = 0.0

        self._last_result: FrameResult | None = None

        # Set minimum size
        self.setMinimumSize(400, 300)

    # --- Public API ---

    @property
    def last_result(self) -> FrameResult | None:
        return self._last_result

    def canvas_rect(self) -> Rect:
        return Rect(Vec2(0.0, 0.0), Vec2(float(self.width()), float(self.height())))

    def frame_all(self) -> None:
        """Adjust view to show all nodes."""
        self.editor.frame_all(self.canvas_rect())
        self.update()

    # --- Rendering ---

    def _take_input(self) -> FrameInput:
        frame_input = FrameInput(
            pointer=self._pointer,
            buttons=self._buttons,
            modifiers=self._modifiers,
            delete_pressed=self._delete_pending,
            scroll=self._scroll,
        )
        self._delete_pending = False
        self._scroll = 0.0
        return frame_input

    def paintEvent(self, event: QPaintEvent) -> None:
        """Run and render one editor frame."""
        painter = QPainter(self)
        painter.setRenderHint(QPainter.RenderHint.Antialiasing)
        qt_painter = QtPainter(painter, self._font)

        nodes, links = self._source()
        canvas_rect = self.canvas_rect()
        result = self.editor.show(nodes, links, self._take_input(), canvas_rect, qt_painter.measure)
        self._frame_painter.paint(qt_painter, result, canvas_rect)

        painter.end()

        self._last_result = result
        self._dispatch(result)

    def _dispatch(self, result: FrameResult) -> None:
        for event in result.events:
            if isinstance(event, LinkCreated):
                self.link_created.emit(event)
            elif isinstance(event, LinkDestroyed):
                self.link_destroyed.emit(event.id)
            elif isinstance(event, LinkStarted):
                self.link_started.emit(event.pin)
            elif isinstance(event, NodeSelectionChanged):
                self.node_selection_changed.emit(event.node_ids)
            elif isinstance(event, LinkSelectionChanged):
                self.link_selection_changed.emit(event.link_ids)
            elif isinstance(event, HoveredNodeChanged):
                self.node_hovered.emit(event.id)
            elif isinstance(event, HoveredLinkChanged):
                self.link_hovered.emit(event.id)
            elif isinstance(event, HoveredPinChanged):
                self.pin_hovered.emit(event.id)
            elif isinstance(event, NodesMoved):
                self.nodes_moved.emit(event.node_ids)
            elif isinstance(event, NodeDeletionRequested):
                self.node_deletion_requested.emit(event.id)
        self.frame_finished.emit(result)

        # Let the next frame pick up whatever the caller changed
        if result.events:
            self.update()

    # --- Mouse Events ---

    def _sample(self, event: QMouseEvent) -> None:
        pos = event.position()
        self._pointer = Vec2(pos.x(), pos.y())
        self._buttons = buttons_from_qt(event.buttons())
        self._modifiers = modifiers_from_qt(event.modifiers())

    def mousePressEvent(self, event: QMouseEvent) -> None:
        """Handle mouse press."""
        self._sample(event)
        # Paint now so the press is seen before a possible release
        self.repaint()

    def mouseMoveEvent(self, event: QMouseEvent) -> None:
        """Handle mouse move."""
        self._sample(event)
        self.update()

    def mouseReleaseEvent(self, event: QMouseEvent) -> None:
        """Handle mouse release."""
        self._sample(event)
        self.repaint()

    def leaveEvent(self, event) -> None:
        self._pointer = None
        self.update()
        super().leaveEvent(event)

    def wheelEvent(self, event: QWheelEvent) -> None:
        """Handle mouse wheel for zooming."""
        pos = event.position()
        self._pointer = Vec2(pos.x(), pos.y())
        self._scroll += event.angleDelta().y() / WHEEL_STEP
        self.update()

    # --- Keyboard Events ---

    def keyPressEvent(self, event: QKeyEvent) -> None:
        """Handle key press."""
        self._modifiers = modifiers_from_qt(event.modifiers())
        if event.key() == Qt.Key.Key_Delete or event.key() == Qt.Key.Key_Backspace:
            self._delete_pending = True
            self.update()
        elif event.key() == Qt.Key.Key_F:
            # Frame all
            self.frame_all()
        elif event.key() == Qt.Key.Key_Escape:
            # Cancel current operation
            self.editor.cancel_interaction()
            self.update()

        super().keyPressEvent(event)

    def keyReleaseEvent(self, event: QKeyEvent) -> None:
        self._modifiers = modifiers_from_qt(event.modifiers())
        super().keyReleaseEvent(event)
