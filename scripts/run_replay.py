#!/usr/bin/env python3
"""Replay Hanabi game logs and print one summary line per game."""

import argparse
import json
import logging
import sys
from dotenv import load_dotenv
from pathlib import Path

load_dotenv(Path(__file__).parent.parent / ".env")

from src.hanabi import (
    GameResult,
    HanabiState,
    ReplayEngine,
    TurnLog,
    config_from_env,
    replay_lines,
    summarize_results,
    view_for_player,
)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Replay two-player Hanabi command logs",
    )
    parser.add_argument("input", nargs="?", help="Log file to replay (default: stdin)")
    parser.add_argument("-o", "--output", help="Write result lines to this file (default: stdout)")
    parser.add_argument("--summary", action="store_true", help="Print aggregate metrics after the results")
    parser.add_argument("--trace", action="store_true", help="Log both player views after every turn")
    parser.add_argument("--hand-size", type=int, default=None, help="Cards dealt to each player")
    parser.add_argument("--min-deck-after-drop", type=int, default=None, help="Deck reserve required to drop")
    parser.add_argument("--report-unfinished", action="store_true", default=None, help="Also report games cut off before finishing")
    parser.add_argument("--strict", action="store_true", default=None, help="Stop at the first malformed line")
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose logging")
    parser.add_argument("-q", "--quiet", action="store_true", help="Only log warnings and errors")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    if args.quiet:
        logging.basicConfig(level=logging.WARNING)
    elif args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(asctime)s - %(levelname)s - %(message)s")
    else:
        logging.basicConfig(level=logging.INFO if args.trace else logging.WARNING, format="%(message)s")

    config = config_from_env(
        hand_size=args.hand_size,
        min_deck_after_drop=args.min_deck_after_drop,
        report_unfinished=args.report_unfinished,
        strict=args.strict,
    )

    out = open(args.output, "w") if args.output else sys.stdout
    engine = ReplayEngine(config)

    def emit(result: GameResult) -> None:
        out.write(result.result_line() + "\n")

    def trace(state: HanabiState, turn_log: TurnLog) -> None:
        for idx in range(len(state.hands)):
            logging.info(json.dumps(view_for_player(state, idx), default=str))

    if args.trace:
        engine.on_turn = trace

    try:
        if args.input:
            with open(args.input) as f:
                results = replay_lines(f, config, emit_fn=emit, engine=engine)
        else:
            results = replay_lines(sys.stdin, config, emit_fn=emit, engine=engine)
    finally:
        if out is not sys.stdout:
            out.close()

    if args.summary:
        print(json.dumps(summarize_results(results), indent=2), file=sys.stderr)

    return 0


if __name__ == "__main__":
    sys.exit(main())
