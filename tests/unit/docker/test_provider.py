"""Tests for the docker CLI provider."""

import json
import subprocess
from unittest.mock import patch

import pytest

from shipyard.docker.config import ExposedPort, StartRequest
from shipyard.docker.exceptions import (
    ContainerNotFoundException,
    ContainerRemoveException,
    ContainerStartupException,
    ContainerStopException,
    DockerException,
    DockerImageException,
)
from shipyard.docker.provider import DockerCliProvider, parse_port_bindings

INSPECT_OUTPUT = [
    {
        "Id": "abc123",
        "NetworkSettings": {
            "Ports": {
                "8080/tcp": [{"HostIp": "0.0.0.0", "HostPort": "1337"}],
                "53/udp": [{"HostIp": "127.0.0.1", "HostPort": "5353"}],
                "9000/tcp": None,
            }
        },
    }
]


def completed(returncode=0, stdout="", stderr=""):
    return subprocess.CompletedProcess(
        args=[], returncode=returncode, stdout=stdout, stderr=stderr
    )


@pytest.fixture
def docker():
    return DockerCliProvider(command_timeout=5)


class TestParsePortBindings:
    """Tests for docker inspect port parsing."""

    def test_parses_bound_ports(self):
        assert parse_port_bindings(INSPECT_OUTPUT[0]) == [
            ExposedPort("tcp/8080", 1337, "0.0.0.0"),
            ExposedPort("udp/53", 5353, "127.0.0.1"),
        ]

    def test_dual_stack_keeps_ipv4_binding(self):
        """Test IPv4 and IPv6 bindings of one port publish a single entry."""
        inspection = {
            "NetworkSettings": {
                "Ports": {
                    "8080/tcp": [
                        {"HostIp": "::", "HostPort": "32768"},
                        {"HostIp": "0.0.0.0", "HostPort": "32768"},
                    ]
                }
            }
        }

        assert parse_port_bindings(inspection) == [ExposedPort("tcp/8080", 32768, "0.0.0.0")]

    def test_ipv6_only_binding_is_kept(self):
        inspection = {
            "NetworkSettings": {"Ports": {"80/tcp": [{"HostIp": "::", "HostPort": "8000"}]}}
        }

        assert parse_port_bindings(inspection) == [ExposedPort("tcp/80", 8000, "::")]

    def test_bindings_without_host_port_are_skipped(self):
        """Test empty or missing HostPort values do not raise."""
        inspection = {
            "NetworkSettings": {
                "Ports": {
                    "80/tcp": [{"HostIp": "0.0.0.0", "HostPort": ""}],
                    "81/tcp": [{"HostIp": "0.0.0.0"}],
                    "82/tcp": [
                        {"HostIp": "0.0.0.0", "HostPort": ""},
                        {"HostIp": "::", "HostPort": "9002"},
                    ],
                }
            }
        }

        assert parse_port_bindings(inspection) == [ExposedPort("tcp/82", 9002, "::")]

    def test_no_network_settings(self):
        assert parse_port_bindings({}) == []
        assert parse_port_bindings({"NetworkSettings": {"Ports": None}}) == []


class TestStartContainer:
    """Tests for start_container."""

    @patch("shipyard.docker.provider.subprocess.run")
    def test_returns_container_id(self, mock_run, docker):
        mock_run.return_value = completed(stdout="Pulling...\nabc123def456\n")

        runtime_id = docker.start_container(StartRequest(image="redis:7"))

        assert runtime_id == "abc123def456"
        args = mock_run.call_args.args[0]
        assert args[:4] == ["docker", "run", "--detach", "--publish-all"]
        assert mock_run.call_args.kwargs["timeout"] == 5

    @patch("shipyard.docker.provider.subprocess.run")
    def test_engine_rejection(self, mock_run, docker):
        mock_run.return_value = completed(
            returncode=125, stderr="Conflict. The container name is already in use"
        )

        with pytest.raises(ContainerStartupException, match="already in use"):
            docker.start_container(StartRequest(image="redis:7"))

    @patch("shipyard.docker.provider.subprocess.run")
    def test_missing_image(self, mock_run, docker):
        mock_run.return_value = completed(
            returncode=125, stderr="Unable to find image 'nope:latest' locally"
        )

        with pytest.raises(DockerImageException):
            docker.start_container(StartRequest(image="nope"))

    @patch("shipyard.docker.provider.subprocess.run")
    def test_timeout(self, mock_run, docker):
        mock_run.side_effect = subprocess.TimeoutExpired(cmd="docker", timeout=5)

        with pytest.raises(DockerException, match="timed out"):
            docker.start_container(StartRequest(image="redis:7"))

    @patch("shipyard.docker.provider.subprocess.run")
    def test_missing_binary(self, mock_run, docker):
        mock_run.side_effect = FileNotFoundError("docker")

        with pytest.raises(DockerException, match="Cannot run docker"):
            docker.start_container(StartRequest(image="redis:7"))


class TestLogs:
    """Tests for get_logs."""

    @patch("shipyard.docker.provider.subprocess.run")
    def test_combines_stdout_and_stderr(self, mock_run, docker):
        mock_run.return_value = completed(stdout="out\n", stderr="err\n")

        assert docker.get_logs("abc") == "out\nerr\n"
        assert mock_run.call_args.args[0] == ["docker", "logs", "abc"]

    @patch("shipyard.docker.provider.subprocess.run")
    def test_empty_logs_are_none(self, mock_run, docker):
        mock_run.return_value = completed()

        assert docker.get_logs("abc") is None

    @patch("shipyard.docker.provider.subprocess.run")
    def test_unknown_container(self, mock_run, docker):
        mock_run.return_value = completed(returncode=1, stderr="No such container: abc")

        with pytest.raises(ContainerNotFoundException):
            docker.get_logs("abc")


class TestExposedPorts:
    """Tests for get_exposed_ports."""

    @patch("shipyard.docker.provider.subprocess.run")
    def test_reads_inspect_output(self, mock_run, docker):
        mock_run.return_value = completed(stdout=json.dumps(INSPECT_OUTPUT))

        ports = docker.get_exposed_ports("abc123")

        assert ExposedPort("tcp/8080", 1337, "0.0.0.0") in ports
        assert mock_run.call_args.args[0] == ["docker", "inspect", "abc123"]

    @patch("shipyard.docker.provider.subprocess.run")
    def test_empty_host_port(self, mock_run, docker):
        """Test a binding docker has not assigned yet is ignored."""
        inspection = [
            {"NetworkSettings": {"Ports": {"80/tcp": [{"HostIp": "", "HostPort": ""}]}}}
        ]
        mock_run.return_value = completed(stdout=json.dumps(inspection))

        assert docker.get_exposed_ports("abc123") == []

    @patch("shipyard.docker.provider.subprocess.run")
    def test_unreadable_output(self, mock_run, docker):
        mock_run.return_value = completed(stdout="not json")

        with pytest.raises(DockerException):
            docker.get_exposed_ports("abc123")

    @patch("shipyard.docker.provider.subprocess.run")
    def test_empty_inspect(self, mock_run, docker):
        mock_run.return_value = completed(stdout="[]")

        with pytest.raises(ContainerNotFoundException):
            docker.get_exposed_ports("abc123")


class TestCleanup:
    """Tests for stop and remove."""

    @patch("shipyard.docker.provider.subprocess.run")
    def test_stop_and_remove(self, mock_run, docker):
        mock_run.return_value = completed(stdout="abc")

        docker.stop_container("abc")
        docker.remove_container("abc")

        calls = [call.args[0] for call in mock_run.call_args_list]
        assert calls == [["docker", "stop", "abc"], ["docker", "rm", "-v", "abc"]]

    @patch("shipyard.docker.provider.subprocess.run")
    def test_stop_failure(self, mock_run, docker):
        mock_run.return_value = completed(returncode=1, stderr="boom")

        with pytest.raises(ContainerStopException):
            docker.stop_container("abc")

    @patch("shipyard.docker.provider.subprocess.run")
    def test_remove_failure(self, mock_run, docker):
        mock_run.return_value = completed(returncode=1, stderr="boom")

        with pytest.raises(ContainerRemoveException):
            docker.remove_container("abc")
