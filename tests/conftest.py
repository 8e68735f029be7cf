#tests\conftest.py

"""Pytest configuration and fixtures."""

import pytest
from unittest.mock import MagicMock

import requests

from clickhouse_hosting.application import DistributedApplicationBuilder
from clickhouse_hosting.core.expressions import AllocatedEndpoint, ResolutionContext
from clickhouse_hosting.domain.models import ParameterResource
from clickhouse_hosting.domain.server import ClickHouseServerResource


@pytest.fixture
def builder():
    """Create an empty application builder."""
    return DistributedApplicationBuilder("testapp")


@pytest.fixture
def context():
    """Create an empty resolution context."""
    return ResolutionContext()


@pytest.fixture
def user_parameter():
    return ParameterResource("user", value="clickUser")


@pytest.fixture
def password_parameter():
    return ParameterResource("password", value="p@ssw0rd1", secret=True)


@pytest.fixture
def server(user_parameter, password_parameter):
    """Server with explicit user name and password."""
    return ClickHouseServerResource("clickhouse", user_parameter, password_parameter)


@pytest.fixture
def allocate():
    """Record an allocated http endpoint for a resource."""
    return _allocate


def _allocate(context, resource_name, host="localhost", port=8123):
    context.allocate_endpoint(
        resource_name,
        "http",
        AllocatedEndpoint(host=host, port=port, target_port=8123),
    )


@pytest.fixture
def make_response():
    """Build a fake requests.Response."""
    return _response


def _response(status_code=200, text="Ok."):
    response = MagicMock(spec=requests.Response)
    response.status_code = status_code
    response.text = text
    return response
