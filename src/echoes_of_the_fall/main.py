"""
Echoes of the Fall: Entry Point

Starts a new game (or resumes a save) and either opens the pygame viewer
or plays a number of turns headless, printing the log as it goes.
"""

import argparse
import sys

from echoes_of_the_fall.config import DEFAULT_SEED, LOG_DIR
from echoes_of_the_fall.core.logger import GameLogger
from echoes_of_the_fall.core.persistence import has_save
from echoes_of_the_fall.engine.game import Game
from echoes_of_the_fall.engine.resources import resource_status


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="echoes", description="Turn-based survival in a procedurally generated wasteland.")
    parser.add_argument("--seed", type=int, default=DEFAULT_SEED, help="World seed")
    parser.add_argument("--turns", type=int, default=0,
                        help="Play N turns headless (no viewer)")
    parser.add_argument("--save", metavar="PATH", help="Save to PATH when done")
    parser.add_argument("--load", metavar="PATH", help="Resume from the save at PATH")
    parser.add_argument("--gui", action="store_true", help="Open the pygame viewer")
    parser.add_argument("--log-dir", default=LOG_DIR, help="Directory for session logs")
    return parser


def print_status(game: Game) -> None:
    state = game.state
    status = resource_status(state)
    print(f"  Turn {state.turn} | Resources: {status['resources']}")
    for unit in state.unit_list:
        print(f"    {unit.name:<8} HP {unit.health:5.1f}  AP {unit.action_points}/"
              f"{unit.max_action_points}  H2O {unit.hydration:5.1f}  FOOD {unit.nutrition:5.1f}"
              f"  RAD {unit.radiation_dose:5.1f} (ARS {unit.ars_stage})")
    print(f"    Raiders: {len(state.enemies)}  Hand: {[c.name for c in state.deck.hand]}")
    for warning in status["warnings"]:
        print(f"    ! {warning}")


def run_headless(game: Game, turns: int) -> None:
    for _ in range(turns):
        if game.state.game_over:
            break
        game.end_turn_requested()
        for message in game.messages():
            print(f"  > {message}")
        print_status(game)


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    print("=" * 50)
    print("  ECHOES OF THE FALL")
    print("  Survive 30 turns in the wasteland")
    print("=" * 50)
    print()

    GameLogger().configure(log_dir=args.log_dir)

    print(f"Generating world (seed {args.seed})...")
    game = Game(seed=args.seed)

    if args.load:
        if has_save(args.load) and game.load(args.load):
            print(f"  Resumed from {args.load} (turn {game.state.turn})")
        else:
            print(f"  Could not load {args.load}. Starting new game.")
    game.messages()
    print_status(game)

    if args.gui:
        from echoes_of_the_fall.gui.viewer import Viewer
        print()
        print("Controls: WASD=Pan, Left-click=Select/Move, Right-click=Deselect,")
        print("          1-9=Context action, Z-M=Play card, Space=End turn, H=Center, ESC=Quit")
        try:
            Viewer(game).run()
        except KeyboardInterrupt:
            print("\n[MAIN] Interrupted.")
    elif args.turns > 0:
        print()
        run_headless(game, args.turns)

    if game.state.game_over:
        print("Victory!" if game.state.victory else "Game over.")

    if args.save:
        path = game.save(args.save)
        print(f"Saved to {path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
