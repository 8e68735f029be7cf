#tests\test_admin_client.py

"""Test the administrative HTTP client."""

from unittest.mock import MagicMock

import pytest
import requests

from clickhouse_hosting.core.connection_string import parse_connection_string
from clickhouse_hosting.core.errors import DatabaseCreationError
from clickhouse_hosting.infrastructure.clickhouse.admin_client import (
    ClickHouseAdminClient,
    create_database_statement,
    quote_identifier,
)


@pytest.fixture
def session():
    fake = MagicMock(spec=requests.Session)
    fake.headers = {}
    return fake


class TestStatements:

    def test_create_database_statement(self):
        assert create_database_statement("customers1") == "CREATE DATABASE IF NOT EXISTS `customers1`"

    @pytest.mark.parametrize("identifier, quoted", [
        ("plain", "`plain`"),
        ("with space", "`with space`"),
        ("back`tick", "`back\\`tick`"),
        ("back\\slash", "`back\\\\slash`"),
    ])
    def test_quote_identifier(self, identifier, quoted):
        assert quote_identifier(identifier) == quoted


class TestAdminClient:

    def test_headers_with_password(self, session):
        ClickHouseAdminClient("http://localhost:8123/", "admin", "secret", session=session)

        assert session.headers == {"X-ClickHouse-User": "admin", "X-ClickHouse-Key": "secret"}

    def test_key_header_omitted_without_password(self, session):
        ClickHouseAdminClient("http://localhost:8123", session=session)

        assert session.headers == {"X-ClickHouse-User": "default"}

    def test_from_connection_info(self, session):
        info = parse_connection_string("Host=db;Port=18123;Username=u;Password=p;Database=x")

        client = ClickHouseAdminClient.from_connection_info(info, timeout=3, session=session)

        assert client.base_url == "http://db:18123"
        assert client.timeout == 3
        assert session.headers["X-ClickHouse-Key"] == "p"

    def test_create_database_posts_statement(self, session, make_response):
        session.post.return_value = make_response()
        client = ClickHouseAdminClient("http://localhost:8123/", session=session, timeout=7)

        client.create_database("analytics")

        session.post.assert_called_once_with(
            "http://localhost:8123",
            data=b"CREATE DATABASE IF NOT EXISTS `analytics`",
            timeout=7,
        )

    @pytest.mark.parametrize("status_code", [400, 403, 500])
    def test_non_success_status_raises(self, session, make_response, status_code):
        session.post.return_value = make_response(status_code, "Code: 81. DB::Exception\n")
        client = ClickHouseAdminClient("http://localhost:8123", session=session)

        with pytest.raises(DatabaseCreationError) as exc:
            client.create_database("analytics")

        assert exc.value.database_name == "analytics"
        assert f"[{status_code}] Code: 81. DB::Exception" in str(exc.value)

    @pytest.mark.parametrize("error, message", [
        (requests.exceptions.Timeout(), "timeout after 30s"),
        (requests.exceptions.ConnectionError(), "cannot connect to http://localhost:8123"),
    ])
    def test_transport_errors_raise(self, session, error, message):
        session.post.side_effect = error
        client = ClickHouseAdminClient("http://localhost:8123", session=session)

        with pytest.raises(DatabaseCreationError, match=message):
            client.create_database("analytics")

    @pytest.mark.asyncio
    async def test_create_database_async(self, session, make_response):
        session.post.return_value = make_response()
        client = ClickHouseAdminClient("http://localhost:8123", session=session)

        await client.create_database_async("analytics")

        assert session.post.call_count == 1

    def test_ping(self, session, make_response):
        session.get.return_value = make_response(200, "Ok.\n")
        client = ClickHouseAdminClient("http://localhost:8123", session=session)

        assert client.ping()
        session.get.assert_called_once_with("http://localhost:8123/ping", timeout=5)

    def test_ping_failure(self, session):
        session.get.side_effect = requests.exceptions.ConnectionError()
        client = ClickHouseAdminClient("http://localhost:8123", session=session)

        assert not client.ping()

    def test_context_manager_closes_session(self, session):
        with ClickHouseAdminClient("http://localhost:8123", session=session):
            pass

        session.close.assert_called_once()
