from __future__ import annotations

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Central configuration loaded from environment / .env file.

    Every field can be overridden with an ``UPCHEK_``-prefixed variable,
    e.g. ``UPCHEK_PEERS=node-a:8080,node-b:8080``.
    """

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "env_prefix": "UPCHEK_",
        "extra": "ignore",
    }

    # HTTP listener
    host: str = "0.0.0.0"
    port: int = 8080

    # Directory holding the health-check scripts
    scripts_dir: str = "/etc/upchek"

    # Peers to poll, comma-separated host:port
    peers: str = ""

    # Seconds between local cycles and between peer polls
    interval_seconds: float = 30.0

    # Logging
    log_level: str = "INFO"

    @property
    def peer_addrs(self) -> list[str]:
        return parse_peers(self.peers)


def parse_peers(raw: str | list[str] | tuple[str, ...]) -> list[str]:
    """Split a comma-separated peer list, dropping blanks and duplicates."""
    items = raw.split(",") if isinstance(raw, str) else list(raw)
    seen: dict[str, None] = {}
    for item in items:
        item = item.strip()
        if item:
            seen.setdefault(item, None)
    return list(seen)


settings = Settings()
