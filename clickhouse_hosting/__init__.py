"""ClickHouse hosting - server and database resources for a distributed application."""

from clickhouse_hosting.application import (
    DistributedApplication,
    DistributedApplicationBuilder,
    ResourceBuilder,
)
from clickhouse_hosting.core.connection_string import (
    ClickHouseConnectionInfo,
    ReferenceExpressionBuilder,
    parse_connection_string,
)
from clickhouse_hosting.core.errors import (
    DatabaseCreationError,
    DistributedApplicationError,
    HostingError,
    ResourceNameConflictError,
    ResourceValidationError,
    UnresolvedReferenceError,
)
from clickhouse_hosting.core.expressions import (
    AllocatedEndpoint,
    EndpointProperty,
    EndpointPropertyRef,
    EndpointReference,
    LiteralRef,
    ParameterRef,
    ReferenceExpression,
    ResolutionContext,
    ValueRef,
)
from clickhouse_hosting.domain.database import ClickHouseDatabaseResource
from clickhouse_hosting.domain.models import ParameterResource
from clickhouse_hosting.domain.server import ClickHouseServerResource
from clickhouse_hosting.extensions import (
    add_clickhouse,
    add_database,
    with_data_bind_mount,
    with_data_volume,
)


__all__ = [
    "AllocatedEndpoint",
    "ClickHouseConnectionInfo",
    "ClickHouseDatabaseResource",
    "ClickHouseServerResource",
    "DatabaseCreationError",
    "DistributedApplication",
    "DistributedApplicationBuilder",
    "DistributedApplicationError",
    "EndpointProperty",
    "EndpointPropertyRef",
    "EndpointReference",
    "HostingError",
    "LiteralRef",
    "ParameterRef",
    "ParameterResource",
    "ReferenceExpression",
    "ReferenceExpressionBuilder",
    "ResolutionContext",
    "ResourceBuilder",
    "ResourceNameConflictError",
    "ResourceValidationError",
    "UnresolvedReferenceError",
    "ValueRef",
    "add_clickhouse",
    "add_database",
    "parse_connection_string",
    "with_data_bind_mount",
    "with_data_volume",
]
