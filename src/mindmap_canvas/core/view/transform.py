"""Pan/zoom state mapping world coordinates to screen coordinates."""

from dataclasses import dataclass

from mindmap_canvas.config import (
    DEFAULT_SCALE,
    MAX_SCALE,
    MIN_SCALE,
    RESET_TOP_ANCHOR,
    ZOOM_IN_FACTOR,
    ZOOM_OUT_FACTOR,
)


@dataclass(frozen=True)
class ViewConfig:
    """Zoom limits and reset behavior."""

    default_scale: float = DEFAULT_SCALE
    min_scale: float = MIN_SCALE
    max_scale: float = MAX_SCALE
    zoom_in_factor: float = ZOOM_IN_FACTOR
    zoom_out_factor: float = ZOOM_OUT_FACTOR
    top_anchor: float | None = RESET_TOP_ANCHOR


DEFAULT_VIEW = ViewConfig()


class ViewTransform:
    """Pan offset and zoom scale of the canvas.

    screen = world * scale + pan. Pan is unbounded; scale is clamped to the
    configured range on every change.
    """

    def __init__(
        self,
        *,
        pan_x: float = 0.0,
        pan_y: float = 0.0,
        scale: float | None = None,
        config: ViewConfig = DEFAULT_VIEW,
    ) -> None:
        self.config = config
        self.pan_x = pan_x
        self.pan_y = pan_y
        self.scale = self._clamp(config.default_scale if scale is None else scale)

    def __repr__(self) -> str:
        return f"ViewTransform(pan_x={self.pan_x!r}, pan_y={self.pan_y!r}, scale={self.scale!r})"

    def _clamp(self, scale: float) -> float:
        return min(max(scale, self.config.min_scale), self.config.max_scale)

    def zoom_by(self, factor: float) -> None:
        self.scale = self._clamp(self.scale * factor)

    def zoom_in(self) -> None:
        self.zoom_by(self.config.zoom_in_factor)

    def zoom_out(self) -> None:
        self.zoom_by(self.config.zoom_out_factor)

    def pan(self, dx: float, dy: float) -> None:
        self.pan_x += dx
        self.pan_y += dy

    def set_pan(self, x: float, y: float) -> None:
        self.pan_x = x
        self.pan_y = y

    def reset(self, width: float, height: float) -> None:
        """Restore the default scale and re-anchor pan to the container.

        The size must be the container's current one; it may have changed
        since the last reset.
        """
        self.scale = self._clamp(self.config.default_scale)
        top = self.config.top_anchor
        self.set_pan(width / 2, height / 2 if top is None else top)

    def to_screen(self, world_x: float, world_y: float) -> tuple[float, float]:
        return world_x * self.scale + self.pan_x, world_y * self.scale + self.pan_y

    def to_world(self, screen_x: float, screen_y: float) -> tuple[float, float]:
        return (screen_x - self.pan_x) / self.scale, (screen_y - self.pan_y) / self.scale

    def screen_delta_to_world(self, dx: float, dy: float) -> tuple[float, float]:
        """Convert a pointer movement to world units. Pan does not affect deltas."""
        return dx / self.scale, dy / self.scale
