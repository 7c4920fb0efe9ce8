from __future__ import annotations

from typing import List, Optional, Tuple

import pygame

from blockfall.game import COLORS, BlockfallGame, RunMode


CONTROLS = [
    "Enter: start",
    "Left/Right: move",
    "Up: rotate",
    "Down (hold): soft drop",
    "Space: hard drop",
    "P: pause / resume",
    "R: restart",
    "Esc: quit",
]


def _color_for_value(v: int) -> Tuple[int, int, int]:
    color = COLORS[abs(v)] if 0 < abs(v) < len(COLORS) else None
    return color or (200, 200, 200)


class Renderer:
    def __init__(self, cell_size: int = 28, margin: int = 20, panel_width: int = 220) -> None:
        self.cell_size = cell_size
        self.margin = margin
        self.panel_width = panel_width
        self._font: Optional[pygame.font.Font] = None
        self._big_font: Optional[pygame.font.Font] = None

    def window_size(self, game: BlockfallGame) -> Tuple[int, int]:
        board_w = game.grid.width * self.cell_size
        board_h = game.grid.height * self.cell_size
        return board_w + self.panel_width + self.margin * 3, board_h + self.margin * 2

    def _fonts(self) -> Tuple[pygame.font.Font, pygame.font.Font]:
        if self._font is None or self._big_font is None:
            self._font = pygame.font.SysFont(None, 24)
            self._big_font = pygame.font.SysFont(None, 40)
        return self._font, self._big_font

    def _grid_surface(self, game: BlockfallGame) -> pygame.Surface:
        w, h = game.grid.width, game.grid.height
        surf = pygame.Surface((w * self.cell_size, h * self.cell_size))
        surf.fill((20, 20, 26))

        def draw_cell(x: int, y: int, color_index: int) -> None:
            if not color_index:
                return
            rect = pygame.Rect(
                x * self.cell_size,
                y * self.cell_size,
                self.cell_size - 1,
                self.cell_size - 1,
            )
            pygame.draw.rect(surf, _color_for_value(color_index), rect)
            pygame.draw.rect(surf, (255, 255, 255), rect, 1)

        game.visit_cells(draw_cell)
        return surf

    def _panel_lines(self, game: BlockfallGame) -> List[str]:
        mode = {
            RunMode.IDLE: "Press Enter",
            RunMode.RUNNING: "Fast" if game.accelerated else "Running",
            RunMode.PAUSED: "Paused",
            RunMode.GAME_OVER: "Game over",
        }[game.run_mode]
        return [f"Score: {game.score}", f"Time: {game.elapsed_seconds}s", mode, ""] + CONTROLS

    def draw(self, screen: pygame.Surface, game: BlockfallGame) -> None:
        font, big_font = self._fonts()
        screen.fill((10, 10, 14))
        screen.blit(self._grid_surface(game), (self.margin, self.margin))

        x_text = self.margin * 2 + game.grid.width * self.cell_size
        for i, txt in enumerate(self._panel_lines(game)):
            img = font.render(txt, True, (230, 230, 230))
            screen.blit(img, (x_text, self.margin + i * 24))

        if game.game_over:
            text = big_font.render(f"Game Over! Score: {game.score}", True, (255, 100, 100))
            board_center = (self.margin + game.grid.width * self.cell_size // 2, screen.get_height() // 2)
            screen.blit(text, text.get_rect(center=board_center))
        pygame.display.flip()
