from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Optional, Sequence


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Dread Maze - find the exit before it finds you.")
    p.add_argument(
        "config",
        nargs="?",
        default=None,
        help="Optional JSON file merged over the bundled config.json.",
    )
    p.add_argument("--seed", type=int, default=None, help="RNG seed for reproducible mazes.")
    p.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity (default: WARNING).",
    )
    return p.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> None:
    """Entrypoint for running the game from the command line."""
    args = parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    cfg_path = Path(args.config) if args.config else None
    from game import Game  # local import keeps module load side effects minimal

    Game(cfg_path, seed=args.seed).run()


if __name__ == "__main__":
    main()
