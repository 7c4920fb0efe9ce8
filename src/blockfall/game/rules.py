from __future__ import annotations

from dataclasses import dataclass


@dataclass
class ScoringRules:
    line_clear_points: int = 100

    def score_for_lines(self, lines: int) -> int:
        # Flat rate per row; clearing several rows at once earns no bonus.
        if lines <= 0:
            return 0
        return lines * self.line_clear_points
