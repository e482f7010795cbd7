"""Tests for the subprocess wrapper."""

from __future__ import annotations

import subprocess
from unittest.mock import patch

import pytest

from phppark.errors import ExternalCommandError, MissingDependencyError, PrivilegeDeniedError
from phppark.services import shell


def _completed(returncode: int = 0, stdout: str = "", stderr: str = ""):
    return subprocess.CompletedProcess([], returncode, stdout, stderr)


class TestRun:
    def test_success_returns_output(self):
        with patch("phppark.services.shell.subprocess.run", return_value=_completed(stdout="ok\n")) as run:
            result = shell.run(["nginx", "-t"])
        assert result.stdout == "ok\n"
        assert run.call_args.args[0] == ["nginx", "-t"]

    def test_sudo_prefix_when_not_root(self):
        with patch("phppark.services.shell._is_root", return_value=False), \
             patch("phppark.services.shell.subprocess.run", return_value=_completed()) as run:
            shell.run(["tee", "/etc/resolver/test"], sudo=True, input="x")
        assert run.call_args.args[0] == ["sudo", "tee", "/etc/resolver/test"]
        assert run.call_args.kwargs["input"] == "x"

    def test_no_sudo_prefix_as_root(self):
        with patch("phppark.services.shell._is_root", return_value=True), \
             patch("phppark.services.shell.subprocess.run", return_value=_completed()) as run:
            shell.run(["nginx", "-s", "reload"], sudo=True)
        assert run.call_args.args[0] == ["nginx", "-s", "reload"]

    def test_nonzero_exit_raises_with_output(self):
        with patch("phppark.services.shell.subprocess.run",
                   return_value=_completed(1, stdout="out", stderr="emerg: bad directive")):
            with pytest.raises(ExternalCommandError) as excinfo:
                shell.run(["nginx", "-t"])
        assert excinfo.value.returncode == 1
        assert excinfo.value.stderr == "emerg: bad directive"
        assert excinfo.value.kind == "ExternalCommandFailed"

    def test_nonzero_exit_without_check(self):
        with patch("phppark.services.shell.subprocess.run", return_value=_completed(3)):
            result = shell.run(["false"], check=False)
        assert result.returncode == 3

    def test_sudo_refusal_is_privilege_denied(self):
        denied = _completed(1, stderr="sudo: 3 incorrect password attempts\n")
        with patch("phppark.services.shell._is_root", return_value=False), \
             patch("phppark.services.shell.subprocess.run", return_value=denied):
            with pytest.raises(PrivilegeDeniedError):
                shell.run(["systemctl", "restart", "dnsmasq"], sudo=True, check=False)

    def test_missing_binary(self):
        with patch("phppark.services.shell.subprocess.run", side_effect=FileNotFoundError):
            with pytest.raises(MissingDependencyError):
                shell.run(["dnsmasq", "--version"])


class TestFindBinary:
    def test_searches_sbin(self):
        with patch("phppark.services.shell.shutil.which", return_value="/usr/sbin/dnsmasq") as which:
            assert shell.find_binary("dnsmasq") == "/usr/sbin/dnsmasq"
        assert "/usr/sbin" in which.call_args.kwargs["path"]
