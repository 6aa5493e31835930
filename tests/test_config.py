"""Tests for settings and CLI argument handling."""

from __future__ import annotations

import argparse

import pytest

from upchek.config import Settings, parse_peers
from upchek.main import build_parser, parse_listen


class TestSettings:
    def test_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("UPCHEK_PEERS", raising=False)
        cfg = Settings(_env_file=None)
        assert cfg.port == 8080
        assert cfg.interval_seconds == 30.0
        assert cfg.peer_addrs == []

    def test_env_prefix(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("UPCHEK_PEERS", "a:8080, b:8080")
        monkeypatch.setenv("UPCHEK_SCRIPTS_DIR", "/tmp/checks")
        cfg = Settings(_env_file=None)
        assert cfg.peer_addrs == ["a:8080", "b:8080"]
        assert cfg.scripts_dir == "/tmp/checks"

    def test_parse_peers(self) -> None:
        assert parse_peers("a,,b, a ") == ["a", "b"]
        assert parse_peers(["x", " y "]) == ["x", "y"]
        assert parse_peers("") == []


class TestCli:
    def test_parse_listen(self) -> None:
        assert parse_listen(":8080", "0.0.0.0") == ("0.0.0.0", 8080)
        assert parse_listen("127.0.0.1:9000", "0.0.0.0") == ("127.0.0.1", 9000)
        assert parse_listen("[::1]:9000", "0.0.0.0") == ("::1", 9000)

    def test_parse_listen_invalid(self) -> None:
        with pytest.raises(argparse.ArgumentTypeError):
            parse_listen("8080", "0.0.0.0")
        with pytest.raises(argparse.ArgumentTypeError):
            parse_listen("host:http", "0.0.0.0")

    def test_parser_flags(self) -> None:
        args = build_parser().parse_args(
            ["-v", "-l", ":9090", "-d", "/srv/checks", "-r", "a:1", "--remote", "b:2,c:3"],
        )
        assert args.verbose
        assert args.listen == ":9090"
        assert args.directory == "/srv/checks"
        assert parse_peers(",".join(args.remote)) == ["a:1", "b:2", "c:3"]
