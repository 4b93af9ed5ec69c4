"""
Tombola CLI - Command-line interface for the engine.

Usage:
    tombola simulate [--players N] [--seed S]   Play one in-memory round
    tombola config                             Show effective settings
"""

import argparse
import sys

from .config import configure_logging, get_settings


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Tombola - Multi-session Bingo coordination engine",
        prog="tombola",
    )
    parser.add_argument("--log-level", default=None, help="Logging level (default from settings)")
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Simulate command
    simulate_parser = subparsers.add_parser("simulate", help="Play one in-memory round")
    simulate_parser.add_argument("--players", type=int, default=4, help="Number of players")
    simulate_parser.add_argument("--seed", default=None, help="Entropy seed")
    simulate_parser.add_argument("--max-draws", type=int, default=2000, help="Give up after this many draws")
    simulate_parser.add_argument("--games", type=int, default=1, help="Number of rounds under the same id")

    # Config command
    subparsers.add_parser("config", help="Show effective settings")

    args = parser.parse_args(argv)

    settings = get_settings()
    configure_logging(args.log_level or settings.log_level)

    if args.command == "simulate":
        return cmd_simulate(args)
    elif args.command == "config":
        return cmd_config(args)
    else:
        parser.print_help()
        return 1


def cmd_simulate(args):
    """Run rounds start to finish, printing the outcome of each."""
    from .collaborators import InMemoryLedger, SeededEntropySource
    from .orchestrator import Orchestrator

    settings = get_settings()
    if args.players < 1:
        print("Error: need at least one player")
        return 1

    orchestrator = Orchestrator(
        ledger=InMemoryLedger(default_balance=settings.entry_fee * args.games),
        entropy=SeededEntropySource(seed=args.seed or settings.entropy_seed),
        administrator=settings.administrator,
        config=settings.game_config(),
    )
    admin = settings.administrator
    config = orchestrator.get_config()
    players = [f"player_{i + 1}" for i in range(args.players)]

    now = 0.0
    game = orchestrator.create_game(admin, now)
    print(f"Game {game.game_id} created")

    for round_index in range(args.games):
        if round_index > 0:
            game = orchestrator.reset(admin, game.game_id, now)
            print(f"Game {game.game_id} reset for round {game.round_number}")

        for player in players:
            orchestrator.join(game.game_id, player, now)
        print(f"Round {round_index + 1}: {len(players)} players, pot {config.entry_fee * len(players)}")

        outcome = None
        for _ in range(args.max_draws):
            orchestrator.draw(admin, game.game_id, now)
            now += config.turn_window
            outcome = orchestrator.declare_winner(admin, game.game_id)
            if outcome.declared:
                break

        draws = orchestrator.drawn_numbers(game.game_id)
        if outcome is None or not outcome.declared:
            print(f"No winner after {len(draws)} draws")
            return 1
        print(f"Winner: {outcome.winner} after {len(draws)} draws, paid {outcome.pot_paid}")

    return 0


def cmd_config(args):
    """Print effective settings."""
    settings = get_settings()
    for key, value in settings.model_dump().items():
        print(f"{key}: {value}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
