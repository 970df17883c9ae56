"""
tests/test_config.py — YAML Configuration Loader
=================================================
"""

from __future__ import annotations

import pytest

from boardgame.config import load_config

_YAML = """\
game_name: "The Board Game"
tagline: "Practise governance"
dashboard_port: 9000
admin_emails:
  - "  Chair@Example.org "
"""


class TestLoadConfig:
    def test_reads_values(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text(_YAML, encoding="utf-8")

        cfg = load_config(path)

        assert cfg.game_name == "The Board Game"
        assert cfg.dashboard_port == 9000
        assert cfg.token_ttl_hours == 12

    def test_admin_emails_are_normalised(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text(_YAML, encoding="utf-8")

        cfg = load_config(path)

        assert cfg.admin_emails == frozenset({"chair@example.org"})
        assert cfg.is_admin_email("CHAIR@example.org")
        assert not cfg.is_admin_email("member@example.org")

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError, match="config.yaml.example"):
            load_config(tmp_path / "missing.yaml")

    def test_missing_required_key(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("game_name: x\n", encoding="utf-8")
        with pytest.raises(KeyError):
            load_config(path)
