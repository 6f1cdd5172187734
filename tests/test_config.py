"""Tests for duet.config — DuetConfig frozen dataclass."""

from pathlib import Path

import pytest

from duet.config import DuetConfig
from duet.units.cell import LoadPolicy


class TestDuetConfig:
    def test_defaults(self) -> None:
        cfg = DuetConfig()

        assert cfg.debug is False
        assert cfg.redirect_root == "/"
        assert cfg.static_url == "/static"
        assert cfg.server_manifest is None
        assert cfg.client_manifest is None
        assert cfg.stylesheet == "main.css"
        assert cfg.scripts == ("main.js",)
        assert cfg.load_timeout == 10.0
        assert cfg.load_retries == 1
        assert cfg.placeholder == ""
        assert cfg.state_id == "duet-state"
        assert cfg.autoescape is True

    def test_override(self) -> None:
        cfg = DuetConfig(debug=True, redirect_root="/login", load_timeout=None)

        assert cfg.debug is True
        assert cfg.redirect_root == "/login"
        assert cfg.load_timeout is None

    def test_frozen(self) -> None:
        cfg = DuetConfig()

        with pytest.raises(AttributeError):
            cfg.debug = True  # type: ignore[misc]

    def test_manifest_as_path(self) -> None:
        cfg = DuetConfig(client_manifest=Path("build/client.json"))
        assert cfg.client_manifest == Path("build/client.json")


class TestLoadPolicy:
    def test_from_config(self) -> None:
        policy = LoadPolicy.from_config(DuetConfig(load_timeout=2.5, load_retries=3, load_retry_delay=0.1))

        assert policy.timeout == 2.5
        assert policy.retries == 3
        assert policy.retry_delay == 0.1

    def test_defaults_match_config(self) -> None:
        assert LoadPolicy() == LoadPolicy.from_config(DuetConfig())
