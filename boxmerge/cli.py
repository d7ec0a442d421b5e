"""
Boxmerge CLI - Command-line interface for the engine.

Usage:
    boxmerge play [--size N] [--seed S]     Play in the terminal
    boxmerge serve [--host H] [--port P]    Run the HTTP API
"""

import argparse
import logging
import sys

from .engine_core.grid import Vector
from .engine_core.phase import Phase


KEY_DIRECTIONS = {
    "a": Vector.LEFT,
    "h": Vector.LEFT,
    "d": Vector.RIGHT,
    "l": Vector.RIGHT,
    "w": Vector.UP,
    "k": Vector.UP,
    "s": Vector.DOWN,
    "j": Vector.DOWN,
}


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Boxmerge - Sliding/Merging Puzzle Engine",
        prog="boxmerge",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level",
    )
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Play command
    play_parser = subparsers.add_parser("play", help="Play in the terminal")
    play_parser.add_argument("--size", type=int, default=None, help="Board size")
    play_parser.add_argument("--seed", type=int, default=None, help="Random seed")

    # Serve command
    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API")
    serve_parser.add_argument("--host", default="127.0.0.1", help="Bind address")
    serve_parser.add_argument("--port", type=int, default=8000, help="Port")

    args = parser.parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level))

    if args.command == "play":
        cmd_play(args)
    elif args.command == "serve":
        cmd_serve(args)
    else:
        parser.print_help()
        sys.exit(1)


def render_board(loop) -> str:
    """Text rendering of the board, one row per line."""
    values = loop.state.grid.values()
    width = max((len(str(v)) for row in values for v in row if v), default=1)
    lines = [
        " ".join(str(v).rjust(width) if v else ".".rjust(width) for v in row)
        for row in values
    ]
    return "\n".join(lines)


def finish_animations(loop):
    """
    Stand in for the renderer: report every pending animation as done.

    One completion per visible entity, tagged with the current wait.
    """
    while loop.phase in (Phase.INIT, Phase.ACTIVE, Phase.SPAWN):
        wait_id = loop.wait_id
        for _ in range(len(loop.entities)):
            loop.animation_complete(wait_id)
            if loop.wait_id != wait_id:
                break


def prompt(text: str):
    """Read one line, or None at end of input."""
    try:
        return input(text).strip().lower()
    except EOFError:
        return None


def cmd_play(args):
    """Interactive terminal game."""
    from .config import EngineConfig
    from .session import SessionManager

    config = EngineConfig.from_env()
    manager = SessionManager(config)
    session = manager.create_session(size=args.size, seed=args.seed)
    loop = session.loop

    print("Move with w/a/s/d (or h/j/k/l), r to restart, q to quit.")
    while True:
        finish_animations(loop)
        print()
        print(render_board(loop))
        print(f"Score: {loop.state.score}  Moves: {loop.state.moves}")

        if loop.phase in (Phase.WON, Phase.GAME_OVER):
            banner = "YOU WIN!" if loop.phase == Phase.WON else "GAME OVER!"
            if prompt(f"{banner} Press enter to play again.") is None:
                break
            loop.acknowledge()
            continue

        key = prompt("> ")
        if key is None:
            break

        if key == "q":
            break
        if key == "r":
            loop.restart()
        elif key in KEY_DIRECTIONS:
            loop.move(KEY_DIRECTIONS[key])
        else:
            print(f"Unknown key: {key!r}")

    manager.end_session(session.session_id)


def cmd_serve(args):
    """Run the API with uvicorn."""
    import uvicorn

    uvicorn.run("boxmerge.api.app:app", host=args.host, port=args.port)


if __name__ == "__main__":
    main()
