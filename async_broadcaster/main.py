"""Command line entrypoint to serve the broadcast relay."""

import argparse
from pathlib import Path

import uvicorn

from .app import create_app
from .config import AppConfig, load_app_config, set_config
from .logging import setup_logging


def build_argument_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Async broadcaster relay")
    parser.add_argument("--config", type=Path, default=None, help="Path to a YAML configuration file")
    parser.add_argument("--host", type=str, default=None, help="Override host (defaults to config value)")
    parser.add_argument("--port", type=int, default=None, help="Override port (defaults to config value)")
    return parser


def main(argv: list[str] | None = None) -> None:
    parser = build_argument_parser()
    args = parser.parse_args(argv)

    config = load_app_config(args.config) if args.config else AppConfig()
    set_config(config)
    setup_logging(config.logging)

    app = create_app(config)
    host = args.host or config.server.host
    port = args.port or config.server.port

    uvicorn.run(app, host=host, port=port, log_config=None)


if __name__ == "__main__":
    main()
