# clickhouse_hosting/extensions.py
"""
Adds ClickHouse resources to an application.

    builder = DistributedApplicationBuilder("shop")
    clickhouse = add_clickhouse(builder, "clickhouse")
    db = add_database(clickhouse, "analytics")
"""

import logging
import re
from typing import Dict, Optional, Union

from clickhouse_hosting.application import DistributedApplicationBuilder, ResourceBuilder
from clickhouse_hosting.core.connection_string import parse_connection_string
from clickhouse_hosting.core.errors import DistributedApplicationError
from clickhouse_hosting.core.events_model import ConnectionStringAvailableEvent, ResourceReadyEvent
from clickhouse_hosting.core.factory import ParameterFactory
from clickhouse_hosting.core.validation import require_non_empty, require_not_none
from clickhouse_hosting.domain.database import ClickHouseDatabaseResource
from clickhouse_hosting.domain.models import EnvironmentValue, ParameterResource
from clickhouse_hosting.domain.server import ClickHouseServerResource
from clickhouse_hosting.domain.templates import CLICKHOUSE_TEMPLATE, PASSWORD_ENV_VAR, USER_ENV_VAR
from clickhouse_hosting.infrastructure.clickhouse import config
from clickhouse_hosting.infrastructure.clickhouse.admin_client import ClickHouseAdminClient

logger = logging.getLogger(__name__)


ParameterInput = Union[ParameterResource, ResourceBuilder, None]


def _parameter(value: ParameterInput) -> Optional[ParameterResource]:
    if isinstance(value, ResourceBuilder):
        return value.resource
    return value


def add_clickhouse(
    builder: DistributedApplicationBuilder,
    name: str,
    port: Optional[int] = None,
    username: ParameterInput = None,
    password: ParameterInput = None,
) -> ResourceBuilder[ClickHouseServerResource]:
    """
    Add a ClickHouse server container to the application.

    Args:
        builder: Application builder
        name: Resource name, also the connection string name for dependents
        port: Host port, None to let the runtime pick one
        username: User name parameter, None for "default"
        password: Password parameter, None to generate "<name>-password"

    Returns:
        Builder for the server resource
    """
    require_not_none(builder, "builder")
    require_non_empty(name, "name")

    settings = config.settings
    template = CLICKHOUSE_TEMPLATE

    password_parameter = _parameter(password) or ParameterFactory.create_default_password(
        f"{name}-password", settings.password_length
    )
    server = ClickHouseServerResource(name, _parameter(username), password_parameter)

    server_builder = builder.add_resource(server)

    connection_string: Optional[str] = None

    async def on_connection_string_available(event: ConnectionStringAvailableEvent) -> None:
        nonlocal connection_string
        connection_string = await server.connection_string_expression.get_value_async(event.context)

        if connection_string is None:
            raise DistributedApplicationError(
                f"ConnectionStringAvailableEvent was published for the '{server.name}' "
                f"resource but the connection string was None."
            )

    async def on_resource_ready(event: ResourceReadyEvent) -> None:
        if connection_string is None:
            raise DistributedApplicationError(
                f"ResourceReadyEvent was published for the '{server.name}' "
                f"resource but the connection string was None."
            )

        info = parse_connection_string(connection_string)

        with ClickHouseAdminClient.from_connection_info(
            info, timeout=settings.admin_timeout_seconds
        ) as client:
            for database_resource_name in server.databases:
                database = builder.find_resource(database_resource_name)
                if isinstance(database, ClickHouseDatabaseResource) and database.parent is server:
                    await _create_database(client, server, database)

    builder.eventing.subscribe(ConnectionStringAvailableEvent, server, on_connection_string_available)
    builder.eventing.subscribe(ResourceReadyEvent, server, on_resource_ready)

    def configure_environment(env: Dict[str, EnvironmentValue]) -> None:
        env[USER_ENV_VAR] = server.username_reference

        if server.password_parameter is not None:
            env[PASSWORD_ENV_VAR] = server.password_parameter.reference

    return (
        server_builder
        .with_endpoint(
            name=ClickHouseServerResource.PRIMARY_ENDPOINT_NAME,
            target_port=template.container_port,
            port=port,
            scheme=template.scheme,
        )
        .with_image(settings.image or template.image, settings.image_tag or template.tag)
        .with_image_registry(settings.image_registry or template.registry)
        .with_environment(configure_environment)
        .with_http_health_check(
            template.health_check.path,
            endpoint_name=ClickHouseServerResource.PRIMARY_ENDPOINT_NAME,
        )
    )


def add_database(
    builder: ResourceBuilder[ClickHouseServerResource],
    name: str,
    database_name: Optional[str] = None,
) -> ResourceBuilder[ClickHouseDatabaseResource]:
    """
    Add a database to a ClickHouse server.

    The database is created on the server once the server is ready.
    database_name defaults to the resource name.
    """
    require_not_none(builder, "builder")
    require_non_empty(name, "name")

    if database_name is None:
        database_name = name

    database = ClickHouseDatabaseResource(name, database_name, builder.resource)

    # Register globally first so a name conflict leaves the server untouched
    database_builder = builder.application_builder.add_resource(database)
    builder.resource.add_database(name, database_name)

    return database_builder


def with_data_volume(
    builder: ResourceBuilder[ClickHouseServerResource],
    name: Optional[str] = None,
    is_read_only: bool = False,
) -> ResourceBuilder[ClickHouseServerResource]:
    """Mount a named volume on the ClickHouse data folder."""
    require_not_none(builder, "builder")

    volume_name = name or generate_volume_name(builder, "data")
    return builder.with_volume(volume_name, CLICKHOUSE_TEMPLATE.data_path, is_read_only)


def with_data_bind_mount(
    builder: ResourceBuilder[ClickHouseServerResource],
    source: str,
    is_read_only: bool = False,
) -> ResourceBuilder[ClickHouseServerResource]:
    """Bind-mount a host directory on the ClickHouse data folder."""
    require_not_none(builder, "builder")
    require_non_empty(source, "source")

    return builder.with_bind_mount(source, CLICKHOUSE_TEMPLATE.data_path, is_read_only)


def generate_volume_name(builder: ResourceBuilder, suffix: str) -> str:
    """"<app>-<resource>-<suffix>", with the app name reduced to [a-z0-9-_.]."""
    app_name = re.sub(r"[^a-z0-9_.-]", "-", builder.application_builder.app_name.lower())
    return f"{app_name}-{builder.resource.name}-{suffix}"


async def _create_database(
    client: ClickHouseAdminClient,
    server: ClickHouseServerResource,
    database: ClickHouseDatabaseResource,
) -> None:
    logger.debug(f"[{server.name}] Creating database '{database.database_name}'")

    try:
        await client.create_database_async(database.database_name)
        logger.debug(f"[{server.name}] Database '{database.database_name}' created successfully")
    except Exception as e:
        # One database failing must not stop the others
        logger.error(
            f"[{server.name}] Failed to create database '{database.database_name}': {e}",
            exc_info=True,
        )
