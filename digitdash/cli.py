"""
Digit Dash CLI - Command-line interface for the engine.

Usage:
    digitdash play <identifier>    Play in the terminal
    digitdash serve                Run the HTTP API with uvicorn
"""

import argparse
import os
import sys

from .engine_core.state import Difficulty, GameStatus
from .engine_core.sequence import DigitStatus, digit_status, format_time
from .engine_core.config import RuleConfig
from .engine_core.randomness import RandomSource
from .engine_core.effects import describe_power_up
from .session.controller import SessionController, HIDDEN_DIGIT
from .logging_config import configure_logging

HELP_TEXT = """\
How to play:
  Rearrange the digits on the board until they match the target.
  Swap a tile with its neighbour above, below, left or right.
  Correct tiles are marked *, locked tiles are marked #.

Commands:
  m A B      swap positions A and B (or just: A B)
  p N        use the power-up in slot N
  moves      list the swaps available right now
  n          next level (after solving)
  r          reset
  start ID   start a new puzzle from an identifier
  h          open or close this help
  q          quit"""


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Digit Dash - Roguelike Number Puzzle",
        prog="digitdash",
    )
    parser.add_argument("--log-level", default=None, help="Logging level (default from DIGITDASH_LOG_LEVEL)")
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Play command
    play_parser = subparsers.add_parser("play", help="Play in the terminal")
    play_parser.add_argument("identifier", help="Numeric identifier, at least 8 digits")
    play_parser.add_argument(
        "--difficulty",
        choices=[d.value for d in Difficulty],
        default=Difficulty.EASY.value,
        help="Starting difficulty",
    )
    play_parser.add_argument("--seed", type=int, default=None, help="Seed for a reproducible game")
    play_parser.add_argument("--columns", type=int, default=3, help="Board width for adjacency")

    # Serve command
    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API")
    serve_parser.add_argument("--host", default="127.0.0.1", help="Bind address")
    serve_parser.add_argument("--port", type=int, default=8000, help="Bind port")

    args = parser.parse_args(argv)

    if args.command == "play":
        cmd_play(args)
    elif args.command == "serve":
        cmd_serve(args)
    else:
        parser.print_help()
        sys.exit(1)


def cmd_play(args):
    """Play a puzzle in the terminal."""
    # Engine logs would interleave with the board
    configure_logging(args.log_level or os.getenv("DIGITDASH_LOG_LEVEL", "WARNING"))

    controller = SessionController(
        rng=RandomSource(seed=args.seed),
        config=RuleConfig(grid_columns=args.columns),
    )
    exit_code = run_play(controller, args.identifier, Difficulty(args.difficulty))
    if exit_code:
        sys.exit(exit_code)


def cmd_serve(args):
    """Run the HTTP API."""
    configure_logging(args.log_level)

    try:
        import uvicorn
    except ImportError:
        print("Error: uvicorn not installed. Install with: pip install uvicorn")
        sys.exit(1)

    from .api.app import create_app

    uvicorn.run(create_app(), host=args.host, port=args.port, log_config=None)


def run_play(controller, identifier, difficulty=Difficulty.EASY, input_fn=input, output=print):
    """
    Interactive loop over one controller.

    Returns a process exit code. Input and output are injectable so the
    loop can be driven without a terminal.
    """
    unsubscribe = controller.subscribe(lambda n: output(f"[{n.level.value}] {n.message}"))
    try:
        result = controller.start_game(identifier, difficulty)
        if not result.success:
            return 1

        while True:
            controller.tick()
            output(render(controller))
            try:
                line = input_fn("> ")
            except EOFError:
                break
            # Time spent at the prompt counts, and expired obstacles lift before the command
            controller.tick()
            if not handle_command(controller, line, output):
                break
    finally:
        unsubscribe()
    return 0


def handle_command(controller, line, output=print):
    """Run one line of input. Returns False when the player quits."""
    parts = line.strip().split()
    if not parts:
        return True

    command, rest = parts[0].lower(), parts[1:]
    if command.isdigit():
        command, rest = "m", parts

    try:
        if command in ("q", "quit", "exit"):
            return False
        elif command in ("m", "move"):
            a, b = (int(p) - 1 for p in rest[:2]) if len(rest) >= 2 else (None, None)
            if a is None:
                output("Usage: m A B")
            else:
                play_move(controller, a, b, output)
        elif command in ("p", "power"):
            report(controller.activate_power_up(int(rest[0]) - 1), output)
        elif command in ("n", "next"):
            report(controller.next_level(), output)
        elif command in ("r", "reset"):
            report(controller.reset_game(), output)
        elif command == "start":
            difficulty = Difficulty(rest[1]) if len(rest) > 1 else controller.state.difficulty
            report(controller.start_game(rest[0], difficulty), output)
        elif command in ("h", "help"):
            showing = controller.state.status == GameStatus.SHOWING_HELP
            report(controller.toggle_help(not showing), output)
        elif command == "moves":
            moves = controller.legal_moves()
            output("Swaps: " + (", ".join(f"{a + 1}-{b + 1}" for a, b in moves) or "none"))
        else:
            output(f"Unknown command: {command} (h for help)")
    except (ValueError, IndexError):
        output(f"Could not read: {line.strip()} (h for help)")
    return True


def play_move(controller, a, b, output=print):
    """Swap two positions, holding the player to the interaction mode."""
    if controller.state.status == GameStatus.PLAYING and not controller.is_legal_move(a, b):
        output("Those tiles are not neighbours. Use a Swap power-up to swap any two.")
        return
    report(controller.move(a, b), output)


def report(result, output=print):
    # Notifications reach the player through the subscription
    if not result.success and not result.notifications:
        output(result.error)


def render(controller):
    """Draw the board as text."""
    state = controller.state
    if state.status == GameStatus.SHOWING_HELP:
        return HELP_TEXT
    if not state.has_puzzle:
        return "No puzzle loaded. Type 'start <identifier>' to begin."

    lines = [
        f"Level {state.level} | {state.difficulty.value.title()} | "
        f"Moves {state.move_count} | Time {format_time(state.elapsed_seconds)} | "
        f"{state.correct_positions}/{state.total_positions} correct",
        "Target: " + " ".join(controller.display_target()),
    ]

    sequence = controller.display_sequence()
    cells = []
    for i, digit in enumerate(sequence):
        if i in state.locked_positions:
            marker = "#"
        elif digit != HIDDEN_DIGIT and digit_status(digit, i, state.target_sequence) == DigitStatus.CORRECT:
            marker = "*"
        else:
            marker = " "
        cells.append(f"{i + 1}:{digit}{marker}")

    columns = controller.move_generator.columns
    for start in range(0, len(cells), columns):
        lines.append("  " + "  ".join(cells[start:start + columns]))

    if state.inventory:
        lines.append("Power-ups: " + "  ".join(
            f"{i + 1}) {p.value} - {describe_power_up(p)}" for i, p in enumerate(state.inventory)
        ))
    else:
        lines.append("Power-ups: none")

    if state.active_power_up:
        lines.append(f"Armed: {state.active_power_up.value}")

    remaining = controller.obstacle_seconds_remaining()
    if state.active_obstacle is not None:
        lines.append(f"Obstacle: {state.active_obstacle.value} ({remaining}s left)")

    if state.status == GameStatus.WON:
        lines.append(f"Solved! Score {state.score}. Type 'n' for the next level.")

    return "\n".join(lines)


if __name__ == "__main__":
    main()
