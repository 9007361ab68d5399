"""Tests for the compose-teardown command line."""

from unittest.mock import patch

import pytest
from click.testing import CliRunner

from compose_teardown.cli import cli
from compose_teardown.errors import RuntimeClientError
from compose_teardown.models import VolumeRecord

from .conftest import FakeRuntimeClient, make_container


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def config_path(tmp_path):
    return str(tmp_path / "config.json")


def _invoke(runner, config_path, client, args):
    with patch("compose_teardown.cli.CliRuntimeClient") as mock_client_class:
        mock_client_class.from_config.return_value = client
        return runner.invoke(cli, ["--config", config_path, "down", *args])


class TestDownCommand:
    def test_down_with_explicit_services(self, runner, config_path):
        client = FakeRuntimeClient(
            containers=[
                make_container("service1", "123"),
                make_container("legacy", "555"),
            ]
        )

        result = _invoke(
            runner, config_path, client, ["testproject", "--service", "service1"]
        )

        assert result.exit_code == 0, result.output
        assert [c[1] for c in client.calls_to("remove_container")] == ["123"]
        assert "Orphan containers left in place" in result.output
        assert "torn down" in result.output

    def test_flags_map_to_options(self, runner, config_path):
        client = FakeRuntimeClient(
            containers=[
                make_container("service1", "123", image_name_label=""),
                make_container("legacy", "555"),
            ],
            volumes=[VolumeRecord("testproject_data")],
        )

        result = _invoke(
            runner,
            config_path,
            client,
            [
                "testproject",
                "--service",
                "service1",
                "--remove-orphans",
                "--volumes",
                "--rmi",
                "local",
            ],
        )

        assert result.exit_code == 0, result.output
        assert sorted(client.calls_to("remove_container")) == [
            ("remove_container", "123", True, True),
            ("remove_container", "555", True, True),
        ]
        assert client.calls_to("remove_volume") == [
            ("remove_volume", "testproject_data", True)
        ]
        assert client.calls_to("remove_image") == [
            ("remove_image", "testproject-service1", False)
        ]

    def test_project_name_from_compose_file(self, runner, config_path, tmp_path):
        compose = tmp_path / "compose.yaml"
        compose.write_text("name: Shop\nservices:\n  web: {}\n")
        client = FakeRuntimeClient(containers=[make_container("web", "1", project="shop")])

        result = _invoke(runner, config_path, client, ["-f", str(compose)])

        assert result.exit_code == 0, result.output
        assert "com.docker.compose.project=shop" in client.calls_to(
            "list_containers"
        )[0][1]

    def test_services_with_compose_file_keep_file_project_name(
        self, runner, config_path, tmp_path
    ):
        compose = tmp_path / "compose.yaml"
        compose.write_text("name: Shop\nservices:\n  web: {}\n  worker: {}\n")
        client = FakeRuntimeClient(
            containers=[
                make_container("web", "1", project="shop"),
                make_container("worker", "2", project="shop"),
            ]
        )

        result = _invoke(
            runner, config_path, client, ["-f", str(compose), "--service", "web"]
        )

        assert result.exit_code == 0, result.output
        assert "com.docker.compose.project=shop" in client.calls_to(
            "list_containers"
        )[0][1]
        # --service replaces the declared set, so worker is left as an orphan
        assert [call[1] for call in client.calls_to("remove_container")] == ["1"]

    def test_missing_project_name(self, runner, config_path):
        result = _invoke(runner, config_path, FakeRuntimeClient(), [])

        assert result.exit_code == 2
        assert "No project name" in result.output

    def test_failures_exit_non_zero(self, runner, config_path):
        client = FakeRuntimeClient(containers=[make_container("service1", "123")])
        client.fail_on["remove_container:123"] = RuntimeClientError("device busy")

        result = _invoke(runner, config_path, client, ["testproject"])

        assert result.exit_code == 1
        assert "device busy" in result.output

    def test_discovery_error_exit_non_zero(self, runner, config_path):
        client = FakeRuntimeClient()
        client.fail_on["list_containers"] = RuntimeClientError("daemon down")

        result = _invoke(runner, config_path, client, ["testproject"])

        assert result.exit_code == 1
        assert "daemon down" in result.output

    def test_runtime_option_overrides_config(self, runner, config_path):
        with patch("compose_teardown.cli.CliRuntimeClient") as mock_client_class:
            mock_client_class.from_config.return_value = FakeRuntimeClient()
            result = runner.invoke(
                cli,
                ["--config", config_path, "down", "testproject", "--runtime", "docker"],
            )

        assert result.exit_code == 0, result.output
        config = mock_client_class.from_config.call_args[0][0]
        assert config.runtime == "docker"

    def test_version(self, runner):
        result = runner.invoke(cli, ["--version"])

        assert result.exit_code == 0
        assert "compose-teardown" in result.output
