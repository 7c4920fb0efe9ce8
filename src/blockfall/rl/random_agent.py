from __future__ import annotations

import argparse
import logging

import gymnasium as gym

import blockfall.env  # noqa: F401


logger = logging.getLogger(__name__)


def run_random(steps: int = 200, seed: int | None = None) -> float:
    env = gym.make("Blockfall-10x20-v0")
    obs, info = env.reset(seed=seed)
    env.action_space.seed(seed)
    total_reward = 0.0
    for _ in range(steps):
        action = env.action_space.sample()
        obs, reward, terminated, truncated, info = env.step(action)
        total_reward += float(reward)
        if terminated or truncated:
            logger.info("episode finished: score %d, %d lines", info["score"], info["lines_cleared_total"])
            obs, info = env.reset()
    env.close()
    logger.info("Random agent total reward: %.2f", total_reward)
    return total_reward


def main() -> None:
    p = argparse.ArgumentParser()
    p.add_argument("--steps", type=int, default=200)
    p.add_argument("--seed", type=int, default=None)
    args = p.parse_args()
    logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)8s] %(name)s: %(message)s")
    run_random(args.steps, args.seed)


if __name__ == "__main__":  # pragma: no cover
    main()
