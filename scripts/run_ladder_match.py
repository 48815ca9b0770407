#!/usr/bin/env python3
"""Play adjacent skill levels against each other and report win rates.

Usage:
    python scripts/run_ladder_match.py --levels 2-10 --games 20 --board-size 9
"""

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import argparse
import json
import logging

from goai.selfplay import run_ladder_match

logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(message)s')
logger = logging.getLogger(__name__)


def parse_levels(text: str) -> list[int]:
    """Parse "7" or "2-10" into a list of levels."""
    if "-" in text:
        lo, hi = (int(part) for part in text.split("-", 1))
        return list(range(lo, hi + 1))
    return [int(text)]


def main() -> int:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--levels", default="2-10",
                        help="Stronger level(s) to test, e.g. 5 or 2-10")
    parser.add_argument("--games", type=int, default=10)
    parser.add_argument("--board-size", type=int, default=9)
    parser.add_argument("--max-moves", type=int, default=150)
    parser.add_argument("--komi", type=float, default=6.5)
    parser.add_argument("--seed", type=int, default=0)
    parser.add_argument("--json", action="store_true",
                        help="Print results as JSON")
    args = parser.parse_args()

    summary = []
    for level in parse_levels(args.levels):
        result = run_ladder_match(
            level,
            games=args.games,
            board_size=args.board_size,
            max_moves=args.max_moves,
            komi=args.komi,
            seed=args.seed,
        )
        summary.append({
            "strong_level": result.strong_level,
            "weak_level": result.weak_level,
            "wins": result.wins,
            "losses": result.losses,
            "draws": result.draws,
            "win_rate": round(result.win_rate, 3),
            "avg_moves": round(result.avg_moves, 1),
        })
        logger.info(
            "L%d vs L%d: %d-%d-%d (win rate %.1f%%)",
            result.strong_level, result.weak_level,
            result.wins, result.losses, result.draws,
            result.win_rate * 100,
        )

    if args.json:
        print(json.dumps(summary, indent=2))
    else:
        print(f"{'Match':<12} {'W':>4} {'L':>4} {'D':>4} {'Win%':>7}")
        for row in summary:
            match = f"L{row['strong_level']} v L{row['weak_level']}"
            print(f"{match:<12} {row['wins']:>4} {row['losses']:>4} "
                  f"{row['draws']:>4} {row['win_rate'] * 100:>6.1f}%")

    below = [row for row in summary if row["win_rate"] < 0.5]
    return 1 if below else 0


if __name__ == "__main__":
    sys.exit(main())
