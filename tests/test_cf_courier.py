"""Tests for the Cloud Foundry CLI courier."""

import os
import subprocess
from pathlib import Path
from unittest.mock import patch

import pytest

from bgdeploy.clients.cf import CloudFoundryCourier
from bgdeploy.config import CloudFoundryConfig
from bgdeploy.core.exceptions import CourierError


def completed(returncode: int = 0, stdout: bytes = b"OK\n", stderr: bytes = b"") -> subprocess.CompletedProcess:
    return subprocess.CompletedProcess(args=[], returncode=returncode, stdout=stdout, stderr=stderr)


@pytest.fixture
def mock_run():
    with patch("bgdeploy.clients.cf.shutil.which", return_value="/usr/local/bin/cf"), \
         patch("bgdeploy.clients.cf.subprocess.run") as run:
        run.return_value = completed()
        yield run


@pytest.fixture
def courier():
    courier = CloudFoundryCourier(CloudFoundryConfig(timeout=30))
    yield courier
    courier.clean_up()


class TestCloudFoundryCourier:
    """Tests for CloudFoundryCourier."""

    def test_login_command(self, courier, mock_run):
        output = courier.login("https://api.example.com", "user", "pass", "org", "space", True)

        assert output == b"OK\n"
        cmd = mock_run.call_args.args[0]
        assert cmd == [
            "/usr/local/bin/cf", "login",
            "-a", "https://api.example.com",
            "-u", "user",
            "-p", "pass",
            "-o", "org",
            "-s", "space",
            "--skip-ssl-validation",
        ]
        assert mock_run.call_args.kwargs["timeout"] == 30

    def test_login_failure_hides_password(self, courier, mock_run):
        mock_run.return_value = completed(1, stdout=b"Authenticating...\n", stderr=b"FAILED\n")

        with pytest.raises(CourierError) as exc_info:
            courier.login("https://api.example.com", "user", "hunter2", "org", "space", False)

        assert "hunter2" not in str(exc_info.value)
        assert exc_info.value.output == b"Authenticating...\nFAILED\n"

    def test_commands_use_isolated_cf_home(self, courier, mock_run):
        courier.rename("foo", "foo-venerable")

        env = mock_run.call_args.kwargs["env"]
        assert env["CF_HOME"] == courier.cf_home
        assert os.path.isdir(courier.cf_home)

    @pytest.mark.parametrize(
        "method,args,expected",
        [
            ("rename", ("foo", "foo-venerable"), ["rename", "foo", "foo-venerable"]),
            ("push", ("foo", "/tmp/app", 3), ["push", "foo", "-p", "/tmp/app", "-i", "3"]),
            ("map_route", ("foo", "example.com"), ["map-route", "foo", "example.com", "--hostname", "foo"]),
            ("logs", ("foo",), ["logs", "foo", "--recent"]),
        ],
    )
    def test_command_arguments(self, courier, mock_run, method, args, expected):
        getattr(courier, method)(*args)

        assert mock_run.call_args.args[0][1:] == expected

    def test_push_runs_inside_app_directory(self, courier, mock_run, tmp_path):
        app_path = str(tmp_path)

        courier.push("foo", app_path, 1)

        assert mock_run.call_args.kwargs["cwd"] == app_path

    def test_push_uses_staged_manifest(self, courier, mock_run, tmp_path, monkeypatch):
        app_dir = tmp_path / "app"
        app_dir.mkdir()
        (app_dir / "manifest.yml").write_text("applications:\n- name: foo\n")
        elsewhere = tmp_path / "elsewhere"
        elsewhere.mkdir()
        (elsewhere / "manifest.yml").write_text("applications:\n- name: other\n")
        monkeypatch.chdir(elsewhere)

        courier.push("foo", str(app_dir), 1)

        cwd = Path(mock_run.call_args.kwargs["cwd"])
        assert cwd == app_dir
        assert "name: foo" in (cwd / "manifest.yml").read_text()

    def test_other_commands_keep_working_directory(self, courier, mock_run):
        courier.rename("foo", "foo-venerable")

        assert mock_run.call_args.kwargs["cwd"] is None

    def test_non_zero_exit_raises(self, courier, mock_run):
        mock_run.return_value = completed(1, stdout=b"", stderr=b"App not found")

        with pytest.raises(CourierError) as exc_info:
            courier.push("foo", "/tmp/app", 1)

        assert exc_info.value.output == b"App not found"
        assert "exited with status 1" in str(exc_info.value)

    def test_exists(self, courier, mock_run):
        assert courier.exists("foo") is True
        assert mock_run.call_args.args[0][1:] == ["app", "foo"]

        mock_run.return_value = completed(1)
        assert courier.exists("foo") is False

    def test_delete_existing_app(self, courier, mock_run):
        courier.delete("foo")

        assert mock_run.call_args.args[0][1:] == ["delete", "foo", "-f"]

    def test_delete_missing_app_raises(self, courier, mock_run):
        mock_run.return_value = completed(1)

        with pytest.raises(CourierError):
            courier.delete("foo")

        assert mock_run.call_count == 1

    def test_timeout_raises(self, courier, mock_run):
        mock_run.side_effect = subprocess.TimeoutExpired(cmd="cf push", timeout=30, output=b"partial")

        with pytest.raises(CourierError) as exc_info:
            courier.push("foo", "/tmp/app", 1)

        assert "timed out" in str(exc_info.value)
        assert exc_info.value.output == b"partial"

    def test_missing_cli(self, courier):
        with patch("bgdeploy.clients.cf.shutil.which", return_value=None):
            with pytest.raises(CourierError) as exc_info:
                courier.rename("foo", "bar")

        assert "not found" in str(exc_info.value)

    def test_clean_up_removes_cf_home(self, mock_run):
        courier = CloudFoundryCourier()
        courier.rename("foo", "bar")
        cf_home = courier.cf_home

        courier.clean_up()

        assert not os.path.exists(cf_home)
        courier.clean_up()
