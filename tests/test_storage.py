"""Tests for settings and registry persistence."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from phppark_common import GlobalSettings, Site, SiteKind, SiteRegistry
from phppark.errors import ParseError
from phppark.services.storage import load_settings, load_sites, save_settings, save_sites


def _registry(count: int) -> SiteRegistry:
    registry = SiteRegistry()
    for i in range(count):
        registry.upsert(
            Site(
                name=f"site-{i}",
                path=Path(f"/home/u/projects/site-{i}"),
                kind=SiteKind.LINK if i % 2 else SiteKind.PARK,
                php_version="8.3" if i == 1 else None,
                secured=i == 2,
            )
        )
    return registry


class TestSitesFile:
    @pytest.mark.parametrize("count", [0, 1, 5])
    def test_round_trip_preserves_sites_and_order(self, tmp_path: Path, count: int):
        path = tmp_path / "sites.json"
        registry = _registry(count)
        save_sites(path, registry)
        loaded = load_sites(path)
        assert loaded == registry
        assert loaded.names() == registry.names()

    def test_missing_file_gives_empty_registry(self, tmp_path: Path):
        assert load_sites(tmp_path / "sites.json").list_sites() == ()

    def test_schema(self, tmp_path: Path):
        path = tmp_path / "sites.json"
        save_sites(path, _registry(2))
        data = json.loads(path.read_text())
        assert data["sites"][0] == {
            "name": "site-0",
            "path": "/home/u/projects/site-0",
            "kind": "park",
            "secured": False,
        }
        assert data["sites"][1]["kind"] == "link"
        assert data["sites"][1]["php_version"] == "8.3"

    def test_malformed_json_raises_parse_error(self, tmp_path: Path):
        path = tmp_path / "sites.json"
        path.write_text("{not json")
        with pytest.raises(ParseError):
            load_sites(path)

    def test_bad_kind_raises_parse_error(self, tmp_path: Path):
        path = tmp_path / "sites.json"
        path.write_text('{"sites": [{"name": "a", "path": "/a", "kind": "mount", "secured": false}]}')
        with pytest.raises(ParseError):
            load_sites(path)

    def test_bad_php_version_raises_parse_error(self, tmp_path: Path):
        path = tmp_path / "sites.json"
        site = {"name": "a", "path": "/a", "kind": "park", "php_version": "8.3.sock;\ninclude x;"}
        path.write_text(json.dumps({"sites": [site]}))
        with pytest.raises(ParseError):
            load_sites(path)

    def test_creates_parent_dirs(self, tmp_path: Path):
        path = tmp_path / "deep" / "nested" / "sites.json"
        save_sites(path, _registry(1))
        assert path.exists()


class TestConfigFile:
    def test_missing_file_gives_defaults(self, tmp_path: Path):
        assert load_settings(tmp_path / "config.yaml") == GlobalSettings()

    def test_round_trip(self, tmp_path: Path):
        path = tmp_path / "config.yaml"
        settings = GlobalSettings(
            default_php="8.3",
            domain="localhost",
            nginx_config_path=Path("/usr/local/etc/nginx/servers"),
            use_https=True,
        )
        save_settings(path, settings)
        assert load_settings(path) == settings
        assert "domain: localhost" in path.read_text()

    def test_partial_file_uses_defaults(self, tmp_path: Path):
        path = tmp_path / "config.yaml"
        path.write_text("domain: dev\n")
        settings = load_settings(path)
        assert settings.domain == "dev"
        assert settings.default_php == "8.2"

    def test_invalid_yaml_raises_parse_error(self, tmp_path: Path):
        path = tmp_path / "config.yaml"
        path.write_text("domain: [unclosed\n")
        with pytest.raises(ParseError):
            load_settings(path)

    def test_bad_default_php_raises_parse_error(self, tmp_path: Path):
        path = tmp_path / "config.yaml"
        path.write_text("default_php: 'latest'\n")
        with pytest.raises(ParseError):
            load_settings(path)

    def test_non_mapping_raises_parse_error(self, tmp_path: Path):
        path = tmp_path / "config.yaml"
        path.write_text("- just\n- a list\n")
        with pytest.raises(ParseError):
            load_settings(path)
