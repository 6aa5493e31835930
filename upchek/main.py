"""Entry point for upchek — `upchek` console script."""

from __future__ import annotations

import argparse
import logging

import uvicorn
from rich.console import Console
from rich.panel import Panel

from upchek.api.server import build_engine, create_app
from upchek.config import Settings, parse_peers, settings

console = Console()


def parse_listen(value: str, default_host: str) -> tuple[str, int]:
    """Parse ``host:port`` or ``:port``."""
    host, sep, port = value.rpartition(":")
    if not sep:
        raise argparse.ArgumentTypeError(f"invalid listen address: {value!r}")
    try:
        port_num = int(port)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid port in listen address: {value!r}") from None
    return host.strip("[]") or default_host, port_num


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="upchek — distributed health-check aggregator")
    parser.add_argument("-v", "--verbose", action="store_true", help="verbose output")
    parser.add_argument(
        "-l", "--listen",
        default=f":{settings.port}",
        help="address to listen on (e.g. :8080 or 127.0.0.1:8080)",
    )
    parser.add_argument(
        "-d", "--directory",
        default=settings.scripts_dir,
        help="directory for healthcheck scripts",
    )
    parser.add_argument(
        "-r", "--remote",
        action="append",
        default=[],
        metavar="ADDR",
        help="peer host:port to poll (repeatable or comma-separated)",
    )
    parser.add_argument(
        "-i", "--interval",
        type=float,
        default=settings.interval_seconds,
        help="seconds between check cycles",
    )
    return parser


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        host, port = parse_listen(args.listen, settings.host)
    except argparse.ArgumentTypeError as e:
        parser.error(str(e))

    level = "DEBUG" if args.verbose else settings.log_level
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
    )

    peers = parse_peers(",".join(args.remote)) or settings.peer_addrs
    cfg = Settings(
        host=host,
        port=port,
        scripts_dir=args.directory,
        peers=",".join(peers),
        interval_seconds=args.interval,
        log_level=level,
    )

    console.print(
        Panel.fit(
            f"[bold]upchek[/bold]\n"
            f"Listen:   {cfg.host}:{cfg.port}\n"
            f"Scripts:  {cfg.scripts_dir}\n"
            f"Peers:    {', '.join(cfg.peer_addrs) or '(none)'}\n"
            f"Interval: {cfg.interval_seconds:g}s",
            title="upchek",
            border_style="green",
        )
    )

    app = create_app(build_engine(cfg))
    uvicorn.run(app, host=cfg.host, port=cfg.port, log_level=level.lower())


if __name__ == "__main__":
    main()
