"""Pointer and wheel state machine for the mindmap canvas.

One input stream drives three gestures: dragging a node, panning the canvas,
and zooming. Handlers are synchronous and run to completion; the controller
writes only to the session it owns (view transform, offsets, selection, hover).
"""

import math
from dataclasses import dataclass
from enum import Enum

from loguru import logger

from mindmap_canvas.config import CLICK_THRESHOLD, WHEEL_ZOOM_IN_FACTOR, WHEEL_ZOOM_OUT_FACTOR
from mindmap_canvas.session import MindmapSession


class InteractionState(Enum):
    IDLE = "idle"
    PANNING_CANVAS = "panning_canvas"
    DRAGGING_NODE = "dragging_node"


@dataclass(frozen=True)
class PointerDown:
    """Pointer pressed at a screen position.

    node_id is the node surface under the pointer when the renderer already
    knows it; otherwise the controller hit-tests the current layout.
    on_canvas is False for presses outside the drawing area (toolbars etc.).
    """

    x: float
    y: float
    node_id: str | None = None
    on_canvas: bool = True


@dataclass(frozen=True)
class PointerMove:
    x: float
    y: float


@dataclass(frozen=True)
class PointerUp:
    x: float
    y: float


@dataclass(frozen=True)
class Wheel:
    delta_x: float
    delta_y: float
    zoom_modifier: bool = False


@dataclass(frozen=True)
class PointerEnter:
    node_id: str


@dataclass(frozen=True)
class PointerLeave:
    node_id: str


Event = PointerDown | PointerMove | PointerUp | Wheel | PointerEnter | PointerLeave


class InteractionController:
    """Route pointer and wheel events to pan, zoom, node drag or selection."""

    def __init__(
        self,
        session: MindmapSession,
        *,
        click_threshold: float = CLICK_THRESHOLD,
        wheel_zoom_in: float = WHEEL_ZOOM_IN_FACTOR,
        wheel_zoom_out: float = WHEEL_ZOOM_OUT_FACTOR,
    ) -> None:
        self.session = session
        self.click_threshold = click_threshold
        self.wheel_zoom_in = wheel_zoom_in
        self.wheel_zoom_out = wheel_zoom_out

        self.state = InteractionState.IDLE
        self.drag_node_id: str | None = None
        # Screen position where the current press started.
        self._press = (0.0, 0.0)
        # Last screen position already folded into the dragged node's offset.
        self._last = (0.0, 0.0)
        # Pointer minus pan at the start of a canvas pan.
        self._anchor = (0.0, 0.0)
        self._dragged = False

    def handle(self, event: Event) -> None:
        if isinstance(event, PointerDown):
            self.pointer_down(event.x, event.y, node_id=event.node_id, on_canvas=event.on_canvas)
        elif isinstance(event, PointerMove):
            self.pointer_move(event.x, event.y)
        elif isinstance(event, PointerUp):
            self.pointer_up(event.x, event.y)
        elif isinstance(event, Wheel):
            self.wheel(event.delta_x, event.delta_y, zoom_modifier=event.zoom_modifier)
        elif isinstance(event, PointerEnter):
            self.pointer_enter(event.node_id)
        elif isinstance(event, PointerLeave):
            self.pointer_leave(event.node_id)
        else:
            msg = f"Unknown event: {event!r}"
            raise TypeError(msg)

    def pointer_down(
        self, x: float, y: float, *, node_id: str | None = None, on_canvas: bool = True
    ) -> None:
        if node_id is None and on_canvas:
            hit = self.session.layout.node_at(*self.session.view.to_world(x, y))
            node_id = hit.id if hit is not None else None

        if node_id is not None:
            self.state = InteractionState.DRAGGING_NODE
            self.drag_node_id = node_id
            self._press = self._last = (x, y)
            self._dragged = False
        elif on_canvas:
            view = self.session.view
            self.state = InteractionState.PANNING_CANVAS
            self._anchor = (x - view.pan_x, y - view.pan_y)

    def pointer_move(self, x: float, y: float) -> None:
        if self.state is InteractionState.DRAGGING_NODE and self.drag_node_id is not None:
            if not self._dragged:
                travel = math.hypot(x - self._press[0], y - self._press[1])
                if travel < self.click_threshold:
                    return
                self._dragged = True
                logger.debug("Dragging {}", self.drag_node_id)
            dx, dy = self.session.view.screen_delta_to_world(x - self._last[0], y - self._last[1])
            self.session.nudge_node(self.drag_node_id, dx, dy)
            self._last = (x, y)
        elif self.state is InteractionState.PANNING_CANVAS:
            self.session.view.set_pan(x - self._anchor[0], y - self._anchor[1])

    def pointer_up(self, x: float | None = None, y: float | None = None) -> None:
        """End any gesture. A node press that never became a drag selects the node."""
        if x is not None and y is not None:
            self.pointer_move(x, y)
        if self.state is InteractionState.DRAGGING_NODE and not self._dragged:
            self.session.select(self.drag_node_id)
        self.state = InteractionState.IDLE
        self.drag_node_id = None
        self._dragged = False

    def wheel(self, delta_x: float, delta_y: float, *, zoom_modifier: bool = False) -> None:
        """Zoom with the modifier held, otherwise pan along both axes."""
        view = self.session.view
        if zoom_modifier:
            if delta_y < 0:
                view.zoom_by(self.wheel_zoom_in)
            elif delta_y > 0:
                view.zoom_by(self.wheel_zoom_out)
        else:
            view.pan(-delta_x, -delta_y)

    def pointer_enter(self, node_id: str) -> None:
        self.session.hover(node_id)

    def pointer_leave(self, node_id: str) -> None:
        if self.session.hovered_id == node_id:
            self.session.hover(None)

    # Toolbar actions.

    def zoom_in(self) -> None:
        self.session.view.zoom_in()

    def zoom_out(self) -> None:
        self.session.view.zoom_out()

    def reset_view(self) -> None:
        self.session.reset_view()
