"""Pytest fixtures for bgdeploy tests."""

import io
import os
from typing import Generator
from unittest.mock import MagicMock

import pytest
from click.testing import CliRunner

from bgdeploy.deploy.courier import Courier
from bgdeploy.deploy.executor import DeploymentExecutor
from bgdeploy.deploy.models import DeploymentInfo


@pytest.fixture
def cli_runner() -> CliRunner:
    """Create a Click CLI runner."""
    return CliRunner()


@pytest.fixture
def mock_courier() -> MagicMock:
    """Courier whose commands all succeed and whose app already exists."""
    courier = MagicMock(spec=Courier)
    courier.login.return_value = b"login output"
    courier.rename.return_value = b"rename output"
    courier.push.return_value = b"push output"
    courier.map_route.return_value = b"route output"
    courier.delete.return_value = b"delete output"
    courier.exists.return_value = True
    courier.logs.return_value = b"recent logs"
    courier.clean_up.return_value = None
    return courier


@pytest.fixture
def deployment_info() -> DeploymentInfo:
    """Deployment info for an app called foo."""
    return DeploymentInfo(
        app_name="foo",
        instances=2,
        username="deployer",
        password="s3cret",
        org="my-org",
        space="dev",
        skip_ssl=True,
        domain="apps.example.com",
    )


@pytest.fixture
def executor(mock_courier: MagicMock) -> DeploymentExecutor:
    return DeploymentExecutor(mock_courier)


@pytest.fixture
def out() -> io.BytesIO:
    """Output sink for raw platform output."""
    return io.BytesIO()


@pytest.fixture(autouse=True)
def clean_env() -> Generator[None, None, None]:
    """Clean environment variables before each test."""
    env_vars = [
        "CF_USERNAME",
        "CF_PASSWORD",
        "BGDEPLOY_CONFIG",
    ]

    original = {k: os.environ.get(k) for k in env_vars}

    for k in env_vars:
        os.environ.pop(k, None)

    yield

    for k, v in original.items():
        if v is not None:
            os.environ[k] = v
        else:
            os.environ.pop(k, None)


@pytest.fixture
def temp_config_file(tmp_path):
    """Create a temporary config file."""
    config_content = """
version: "1"
cf:
  binary: cf
environments:
  test:
    name: Test
    domain: test.example.com
    foundations:
      - https://api1.example.com
    instances: 1
  prod:
    name: Prod
    domain: example.com
    foundations:
      - https://api3.example.com
      - https://api4.example.com
    skip_ssl: true
    instances: 4
"""
    config_file = tmp_path / "config.yaml"
    config_file.write_text(config_content)
    return str(config_file)
