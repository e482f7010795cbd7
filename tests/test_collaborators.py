"""Tests for permission repair, PHP detection and NGINX control."""

from __future__ import annotations

import subprocess
from pathlib import Path
from unittest.mock import call, patch

import pytest

from phppark.errors import ExternalCommandError, NginxConfigError
from phppark.services import nginx, php
from phppark.services.permissions import fix_site_permissions


def _mode(path: Path) -> int:
    return path.stat().st_mode & 0o777


class TestFixPermissions:
    def test_dirs_and_files(self, tmp_path: Path):
        site = tmp_path / "projects" / "blog"
        (site / "public").mkdir(parents=True)
        index = site / "public" / "index.php"
        index.write_text("<?php")
        index.chmod(0o600)
        (site / "public").chmod(0o700)
        (tmp_path / "projects").chmod(0o700)

        fix_site_permissions(site, home=tmp_path)

        assert _mode(site / "public") == 0o755
        assert _mode(index) == 0o644
        assert _mode(tmp_path / "projects") == 0o755

    def test_outside_home_only_touches_site(self, tmp_path: Path):
        site = tmp_path / "srv" / "blog"
        site.mkdir(parents=True)
        (tmp_path / "srv").chmod(0o700)

        fix_site_permissions(site, home=tmp_path / "home")

        assert _mode(site) == 0o755
        assert _mode(tmp_path / "srv") == 0o700

    def test_does_not_follow_symlinked_dirs(self, tmp_path: Path):
        site = tmp_path / "projects" / "blog"
        site.mkdir(parents=True)
        outside = tmp_path / "shared"
        outside.mkdir()
        outside.chmod(0o700)
        (site / "vendor").symlink_to(outside, target_is_directory=True)

        fix_site_permissions(site, home=tmp_path)

        assert _mode(outside) == 0o700
        assert _mode(site) == 0o755


class TestPhp:
    def test_socket_path(self):
        assert php.php_socket_path("8.3") == "/var/run/php/php8.3-fpm.sock"

    def test_is_installed_by_binary(self):
        with patch("phppark.services.php.shell.find_binary", return_value="/usr/sbin/php-fpm8.3"):
            assert php.is_installed("8.3") is True

    def test_not_installed(self):
        with patch("phppark.services.php.shell.find_binary", return_value=None):
            assert php.is_installed("5.6") is False

    def test_install_from_default_repos(self):
        ok = subprocess.CompletedProcess([], 0, "", "")
        with patch("phppark.services.php.shell.run", return_value=ok) as run:
            php.install("8.3")
        first = run.call_args_list[0]
        assert first == call(["apt-get", "install", "-y", "php8.3-fpm"], sudo=True, check=True)
        assert not any("update" in c.args[0] for c in run.call_args_list)

    def test_install_falls_back_to_sury(self):
        ok = subprocess.CompletedProcess([], 0, "jammy\n", "")

        def fake_run(cmd, **kwargs):
            if cmd == ["apt-get", "install", "-y", "php7.4-fpm"] and not fake_run.retried:
                fake_run.retried = True
                raise ExternalCommandError("no candidate", cmd=cmd, returncode=100)
            return ok

        fake_run.retried = False
        with patch("phppark.services.php.shell.run", side_effect=fake_run) as run:
            php.install("7.4")
        commands = [c.args[0] for c in run.call_args_list]
        assert ["lsb_release", "-cs"] in commands
        assert ["apt-get", "update"] in commands
        tee = next(c for c in run.call_args_list if c.args[0][0] == "tee")
        assert "packages.sury.org/php/ jammy main" in tee.kwargs["input"]


class TestNginx:
    def test_reload_validates_first(self):
        ok = subprocess.CompletedProcess([], 0, "", "")
        with patch("phppark.services.nginx.shell.run", return_value=ok) as run:
            nginx.reload()
        assert [c.args[0] for c in run.call_args_list] == [["nginx", "-t"], ["nginx", "-s", "reload"]]

    def test_invalid_config_does_not_reload(self):
        failure = ExternalCommandError("failed", cmd=["nginx", "-t"], returncode=1, stderr="emerg")
        with patch("phppark.services.nginx.shell.run", side_effect=failure) as run:
            with pytest.raises(NginxConfigError) as excinfo:
                nginx.reload()
        assert run.call_count == 1
        assert "emerg" in str(excinfo.value)
