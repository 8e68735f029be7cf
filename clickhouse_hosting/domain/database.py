# clickhouse_hosting/domain/database.py
"""ClickHouse database resource, a child of a server resource."""

from typing import List

from clickhouse_hosting.core.expressions import ReferenceExpression
from clickhouse_hosting.core.validation import require_non_empty, require_not_none
from clickhouse_hosting.domain.models import (
    ConnectionProperty,
    Resource,
    ResourceWithConnectionString,
    combine_properties,
)
from clickhouse_hosting.domain.server import ClickHouseServerResource


class ClickHouseDatabaseResource(Resource, ResourceWithConnectionString):
    """A database on a ClickHouse server."""

    def __init__(self, name: str, database_name: str, parent: ClickHouseServerResource):
        super().__init__(name)
        self.parent = require_not_none(parent, "parent")
        self.database_name = require_non_empty(database_name, "database_name")

    @property
    def connection_string_expression(self) -> ReferenceExpression:
        return self.parent.build_connection_string(self.database_name)

    def get_connection_properties(self) -> List[ConnectionProperty]:
        return combine_properties(
            self.parent.get_connection_properties(),
            [("DatabaseName", ReferenceExpression.create(self.database_name))],
        )

    def __repr__(self) -> str:
        return (
            f"<ClickHouseDatabaseResource(name={self.name!r}, "
            f"database={self.database_name!r}, parent={self.parent.name!r})>"
        )
