"""CLI entrypoint for completion-chat."""

from __future__ import annotations

import argparse
from importlib import metadata
from pathlib import Path
from typing import Sequence

from .app import CompletionChatApp
from .config import ensure_config_dir, load_config


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="completion-chat", description="Terminal chat client for a completion API"
    )
    parser.add_argument(
        "--version",
        action="store_true",
        help="Print version and exit",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to a config.toml (default: ~/.config/completion-chat/config.toml)",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> None:
    """Handle CLI flags, load configuration and run the TUI."""

    parser = _build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)

    if args.version:
        try:
            version = metadata.version("completion-chat")
        except metadata.PackageNotFoundError:
            version = "0.0.0"
        print(f"completion-chat {version}")
        return

    if args.config is None:
        ensure_config_dir()
    app = CompletionChatApp(config=load_config(args.config))
    app.run()


if __name__ == "__main__":
    main()
