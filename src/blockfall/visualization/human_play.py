from __future__ import annotations

import argparse
import logging
from typing import Dict, Optional

import pygame

from blockfall.game import Action, BlockfallGame, GameConfig, PygameScheduler
from .renderer import Renderer


logger = logging.getLogger(__name__)

KEY_TO_ACTION: Dict[int, Action] = {
    pygame.K_LEFT: Action.MOVE_LEFT,
    pygame.K_RIGHT: Action.MOVE_RIGHT,
    pygame.K_UP: Action.ROTATE_CW,
    pygame.K_DOWN: Action.SOFT_DROP_START,
    pygame.K_SPACE: Action.HARD_DROP,
    pygame.K_RETURN: Action.START,
    pygame.K_p: Action.TOGGLE_PAUSE,
    pygame.K_r: Action.RESTART,
}

KEYUP_TO_ACTION: Dict[int, Action] = {
    pygame.K_DOWN: Action.SOFT_DROP_STOP,
}


def run(seed: Optional[int] = None, cell_size: int = 28) -> None:
    pygame.init()
    try:
        clock = pygame.time.Clock()
        scheduler = PygameScheduler()
        game = BlockfallGame(GameConfig(random_seed=seed), scheduler=scheduler)
        game.add_game_over_listener(lambda score: logger.info("final score %d", score))
        renderer = Renderer(cell_size=cell_size)

        screen = pygame.display.set_mode(renderer.window_size(game))
        pygame.display.set_caption("Blockfall")

        running = True
        while running:
            # Timer events and key presses share this queue, so they never interleave
            for event in pygame.event.get():
                if scheduler.dispatch(event):
                    continue
                if event.type == pygame.QUIT:
                    running = False
                elif event.type == pygame.KEYDOWN:
                    if event.key == pygame.K_ESCAPE:
                        running = False
                    else:
                        action = KEY_TO_ACTION.get(event.key)
                        if action is not None:
                            game.handle(action)
                elif event.type == pygame.KEYUP:
                    action = KEYUP_TO_ACTION.get(event.key)
                    if action is not None:
                        game.handle(action)

            renderer.draw(screen, game)
            clock.tick(60)
    finally:
        pygame.quit()


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Play Blockfall")
    p.add_argument("--seed", type=int, default=None, help="Seed for the piece generator")
    p.add_argument("--cell-size", type=int, default=28)
    p.add_argument("--log-level", default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    return p


def main() -> None:
    args = build_parser().parse_args()
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s [%(levelname)8s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    run(seed=args.seed, cell_size=args.cell_size)


if __name__ == "__main__":  # pragma: no cover
    main()
