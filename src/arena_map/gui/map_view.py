"""
map_view.py

Passive visualization component for rendering a Map.

GUI Layer
---------
This module:
- Never modifies the map
- Only reads control points, markers, the sampled curve and query results

It renders:
- Control polygon segments, with the segment nearest the cursor highlighted
- Sampled curve
- Control-point handles, with the grabbable handle highlighted
- Auxiliary markers

World -> Screen transformation:
    screen_x = (x * pixels_per_unit * zoom) + offset_x
    screen_y = (-y * pixels_per_unit * zoom) + offset_y
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Tuple

import numpy as np
from numpy.typing import ArrayLike, NDArray
import pygame

from arena_map.core.spatial_query import Handle, HandleKind
from arena_map.editor.map import Map


FloatArray = NDArray[np.float64]
Color = Tuple[int, int, int]


# ================================================================
# CONFIGURATION
# ================================================================


@dataclass(frozen=True)
class MapViewConfig:
    """
    Rendering configuration for MapView.

    Parameters
    ----------
    curve_color : Color | None
        Curve color; None hides the curve.
    segment_color : Color | None
        Control polygon color; None hides the segments.
    closest_segment_color : Color
        Color of the segment nearest the cursor.
    handle_color : Color | None
        Control point color; None hides idle handles.
    hovered_handle_color : Color
        Color of the handle within grab range.
    marker_color : Color
        Auxiliary marker color.
    handle_radius : int
        Handle circle radius in pixels.
    curve_resolution : int
        Curve samples per control point.
    grab_radius : float
        Grab tolerance in pixels; divided by zoom for world distances.
    pixels_per_unit : float
        Scale factor from world units to screen pixels.
    """

    curve_color: Optional[Color] = (255, 255, 0)
    segment_color: Optional[Color] = (51, 51, 51)
    closest_segment_color: Color = (0, 0, 255)
    handle_color: Optional[Color] = (255, 255, 255)
    hovered_handle_color: Color = (0, 255, 0)
    marker_color: Color = (255, 128, 0)
    handle_radius: int = 4
    curve_resolution: int = 100
    grab_radius: float = 12.0
    pixels_per_unit: float = 1.0


# ================================================================
# MAP VIEW
# ================================================================


class MapView:
    """
    Passive renderer for Map.

    Parameters
    ----------
    map_ : Map
        Map to draw; read only.
    config : MapViewConfig | None
        Optional rendering configuration.
    screen_offset_px : tuple[int, int]
        Pixel position of the world origin.
    """

    def __init__(
        self,
        map_: Map,
        config: MapViewConfig | None = None,
        screen_offset_px: Tuple[int, int] = (0, 0),
    ) -> None:
        self._map: Map = map_
        self._config: MapViewConfig = config or MapViewConfig()
        self._offset_px: Tuple[int, int] = screen_offset_px

    @property
    def config(self) -> MapViewConfig:
        return self._config

    # ------------------------------------------------------------
    # Coordinate transforms
    # ------------------------------------------------------------

    def world_to_screen(self, points_world: ArrayLike, zoom: float = 1.0) -> List[Tuple[int, int]]:
        """
        Convert world coordinates of shape (N, 2) to pygame pixel tuples.
        """
        pts = np.asarray(points_world, dtype=np.float64).reshape(-1, 2)
        ppu = self._config.pixels_per_unit * zoom
        ox, oy = self._offset_px
        return [(int(x * ppu + ox), int(-y * ppu + oy)) for x, y in pts]

    def screen_to_world(self, pos_px: Tuple[int, int], zoom: float = 1.0) -> FloatArray:
        ppu = self._config.pixels_per_unit * zoom
        ox, oy = self._offset_px
        return np.array([(pos_px[0] - ox) / ppu, -(pos_px[1] - oy) / ppu], dtype=np.float64)

    def grab_radius_world(self, zoom: float = 1.0) -> float:
        """
        Grab tolerance in world units for the given zoom.
        """
        return self._config.grab_radius / (self._config.pixels_per_unit * zoom)

    def hovered_handle(self, cursor_world: Optional[ArrayLike], zoom: float = 1.0) -> Handle:
        if cursor_world is None:
            return Handle.none()
        return self._map.interactable_handle(cursor_world, self.grab_radius_world(zoom))

    # ------------------------------------------------------------
    # Drawing
    # ------------------------------------------------------------

    def draw(
        self,
        surface: pygame.Surface,
        cursor_world: Optional[ArrayLike] = None,
        zoom: float = 1.0,
    ) -> None:
        """
        Draw the map on a pygame surface.

        Parameters
        ----------
        surface : pygame.Surface
            Rendering surface.
        cursor_world : array-like of shape (2,) | None
            Pointer position in world coordinates, if any.
        zoom : float
            Current view zoom.
        """
        cfg = self._config
        points = self._map.control_points()

        if cfg.segment_color is not None:
            pygame.draw.lines(surface, cfg.segment_color, True, self.world_to_screen(points, zoom))

        if cursor_world is not None:
            segment = self._map.closest_segment(cursor_world)
            if segment is not None:
                a, b = self._map.polygon.segment(segment)
                pygame.draw.line(surface, cfg.closest_segment_color, *self.world_to_screen([a, b], zoom))

        if cfg.curve_color is not None:
            samples = self._map.curve.sample_positions(cfg.curve_resolution * len(points))
            pygame.draw.lines(surface, cfg.curve_color, False, self.world_to_screen(samples, zoom))

        hovered = self.hovered_handle(cursor_world, zoom)

        for i, center in enumerate(self.world_to_screen(points, zoom)):
            if hovered == Handle(HandleKind.CONTROL_POINT, i):
                color: Optional[Color] = cfg.hovered_handle_color
            else:
                color = cfg.handle_color
            if color is not None:
                pygame.draw.circle(surface, color, center, cfg.handle_radius, 1)

        for i, center in enumerate(self.world_to_screen(self._map.markers(), zoom)):
            if hovered == Handle(HandleKind.MARKER, i):
                color = cfg.hovered_handle_color
            else:
                color = cfg.marker_color
            pygame.draw.circle(surface, color, center, cfg.handle_radius)
