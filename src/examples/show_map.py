"""
show_map.py

Runnable demo that draws a map and moves entities along its curve.

This module:
- Belongs outside the architecture layers (example/demo)
- Does not edit the map
- Highlights the segment and handle under the mouse cursor

Run with:
    python -m examples.show_map [path/to/map.json]
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
import sys
from typing import Tuple

import pygame

from arena_map.editor.map import Map
from arena_map.gui.map_view import MapView
from arena_map.persistence.schema_codec import SchemaCodec
from arena_map.simulation.timeline import TimelinePosition, TimelineSampler
from arena_map.utils.logging_config import setup_logging


Color = Tuple[int, int, int]


@dataclass(frozen=True)
class WindowConfig:
    """
    Window configuration.

    Parameters
    ----------
    width : int
        Window width in pixels.
    height : int
        Window height in pixels.
    background_color : Color
        Background RGB color.
    fps : int
        Target frames per second.
    entities : int
        Number of entities spread evenly along the curve.
    """
    width: int = 800
    height: int = 800
    background_color: Color = (0, 0, 0)
    fps: int = 60
    entities: int = 6


def load_map(argv: list[str]) -> Map:
    if len(argv) > 1:
        return SchemaCodec().load_file(argv[1])
    return Map.default()


def main() -> None:
    """
    Entry point for map demo.
    """
    setup_logging(logging.INFO)
    config = WindowConfig()
    map_ = load_map(sys.argv)

    pygame.init()
    screen = pygame.display.set_mode((config.width, config.height))
    pygame.display.set_caption("Map Demo")
    clock = pygame.time.Clock()

    view = MapView(map_, screen_offset_px=(config.width // 2, config.height // 2))

    sampler = TimelineSampler()
    spacing = map_.curve.domain_end / config.entities
    for i in range(config.entities):
        sampler.track(i, TimelinePosition(t=i * spacing, speed=1.0))

    running = True
    while running:
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                running = False

        dt = clock.tick(config.fps) / 1000.0
        positions = sampler.tick(map_.curve, dt)
        cursor = view.screen_to_world(pygame.mouse.get_pos())

        screen.fill(config.background_color)
        view.draw(screen, cursor_world=cursor)
        for center in view.world_to_screen(list(positions.values())):
            pygame.draw.circle(screen, (255, 0, 0), center, 6)
        pygame.display.flip()

    pygame.quit()


if __name__ == "__main__":
    main()
