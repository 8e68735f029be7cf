# clickhouse_hosting/infrastructure/clickhouse/admin_client.py
"""Administrative client for a running ClickHouse server's HTTP interface."""

import asyncio
import logging
from typing import Optional

import requests

from clickhouse_hosting.core.connection_string import ClickHouseConnectionInfo
from clickhouse_hosting.core.errors import DatabaseCreationError

logger = logging.getLogger(__name__)


USER_HEADER = "X-ClickHouse-User"
KEY_HEADER = "X-ClickHouse-Key"


def quote_identifier(identifier: str) -> str:
    """Backtick-quote an identifier."""
    escaped = identifier.replace("\\", "\\\\").replace("`", "\\`")
    return f"`{escaped}`"


def create_database_statement(database_name: str) -> str:
    return f"CREATE DATABASE IF NOT EXISTS {quote_identifier(database_name)}"


class ClickHouseAdminClient:
    """Client for administrative statements sent over the HTTP interface."""

    def __init__(
        self,
        base_url: str,
        username: str = "default",
        password: Optional[str] = None,
        timeout: float = 30,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize client.

        Args:
            base_url: Server URL (e.g., "http://localhost:8123")
            username: Sent in the X-ClickHouse-User header
            password: Sent in the X-ClickHouse-Key header, omitted when None
            timeout: Request timeout in seconds
            session: Optional session to reuse
        """
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout

        self._session = session or requests.Session()
        self._session.headers[USER_HEADER] = username
        if password is not None:
            self._session.headers[KEY_HEADER] = password

    @classmethod
    def from_connection_info(
        cls,
        info: ClickHouseConnectionInfo,
        timeout: float = 30,
        session: Optional[requests.Session] = None,
    ) -> "ClickHouseAdminClient":
        return cls(
            base_url=info.base_url,
            username=info.username,
            password=info.password,
            timeout=timeout,
            session=session,
        )

    def ping(self) -> bool:
        """
        Check if the server answers on /ping.

        Returns:
            True if healthy, False otherwise
        """
        try:
            response = self._session.get(f"{self.base_url}/ping", timeout=5)
            return response.status_code == 200
        except requests.exceptions.RequestException as e:
            logger.error(f"Ping failed: {e}")
            return False

    def create_database(self, database_name: str) -> None:
        """
        Create a database unless it already exists.

        Raises:
            DatabaseCreationError: On connection failure or a non-2xx status
        """
        statement = create_database_statement(database_name)

        try:
            response = self._session.post(
                self.base_url,
                data=statement.encode("utf-8"),
                timeout=self.timeout,
            )
        except requests.exceptions.Timeout:
            raise DatabaseCreationError(database_name, f"timeout after {self.timeout}s")
        except requests.exceptions.ConnectionError:
            raise DatabaseCreationError(database_name, f"cannot connect to {self.base_url}")

        if not 200 <= response.status_code < 300:
            raise DatabaseCreationError(
                database_name,
                f"[{response.status_code}] {response.text.strip()}"
            )

    async def create_database_async(self, database_name: str) -> None:
        await asyncio.to_thread(self.create_database, database_name)

    def close(self) -> None:
        self._session.close()

    def __enter__(self) -> "ClickHouseAdminClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
