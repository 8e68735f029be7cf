# clickhouse_hosting/domain/templates/clickhouse.py
"""ClickHouse server container template."""

from clickhouse_hosting.domain.models import ContainerTemplate, HealthCheckAnnotation


USER_ENV_VAR = "CLICKHOUSE_USER"
PASSWORD_ENV_VAR = "CLICKHOUSE_PASSWORD"


CLICKHOUSE_TEMPLATE = ContainerTemplate(
    registry="docker.io",
    image="clickhouse/clickhouse-server",
    tag="latest",

    # Internal port is always the HTTP interface
    container_port=8123,
    scheme="http",

    data_path="/var/lib/clickhouse",

    health_check=HealthCheckAnnotation(
        type="http",
        path="/ping",
        endpoint_name="http",
    ),
)
