# clickhouse_hosting/domain/server.py
"""ClickHouse server resource."""

from types import MappingProxyType
from typing import Dict, List, Mapping, Optional

from clickhouse_hosting.core.connection_string import DEFAULT_USERNAME, ReferenceExpressionBuilder
from clickhouse_hosting.core.expressions import (
    EndpointPropertyRef,
    EndpointReference,
    ReferenceExpression,
)
from clickhouse_hosting.domain.models import (
    ConnectionProperty,
    ContainerResource,
    ParameterResource,
    ResourceWithConnectionString,
)


class ClickHouseServerResource(ContainerResource, ResourceWithConnectionString):
    """
    A ClickHouse server running in a container.

    Args:
        name: Resource name, also the connection string name for dependents
        username: Parameter holding the user name, or None for "default"
        password: Parameter holding the password, or None for no password
    """

    PRIMARY_ENDPOINT_NAME = "http"

    def __init__(
        self,
        name: str,
        username: Optional[ParameterResource] = None,
        password: Optional[ParameterResource] = None,
    ):
        super().__init__(name)
        self.username_parameter = username
        self.password_parameter = password
        self._primary_endpoint: Optional[EndpointReference] = None

        # resource name -> database name, in registration order
        self._databases: Dict[str, str] = {}

    # -------------------------
    # Endpoint
    # -------------------------

    @property
    def primary_endpoint(self) -> EndpointReference:
        if self._primary_endpoint is None:
            self._primary_endpoint = self.get_endpoint(self.PRIMARY_ENDPOINT_NAME)
        return self._primary_endpoint

    @property
    def host(self) -> EndpointPropertyRef:
        return self.primary_endpoint.host

    @property
    def port(self) -> EndpointPropertyRef:
        return self.primary_endpoint.port

    # -------------------------
    # Credentials
    # -------------------------

    @property
    def username_reference(self) -> ReferenceExpression:
        """The user name parameter if one was given, else the literal "default"."""
        if self.username_parameter is not None:
            return ReferenceExpression.create(self.username_parameter.reference)
        return ReferenceExpression.create(DEFAULT_USERNAME)

    # -------------------------
    # Connection string
    # -------------------------

    @property
    def connection_string_expression(self) -> ReferenceExpression:
        return self.build_connection_string()

    def build_connection_string(self, database_name: Optional[str] = None) -> ReferenceExpression:
        builder = ReferenceExpressionBuilder()
        builder.append("Host=", self.host, ";Port=", self.port)

        if self.username_parameter is not None:
            builder.append(";Username=", self.username_parameter.reference)
        else:
            builder.append_literal(f";Username={DEFAULT_USERNAME}")

        if self.password_parameter is not None:
            builder.append(";Password=", self.password_parameter.reference)

        if database_name is not None:
            builder.append_literal(f";Database={database_name}")

        return builder.build()

    def get_connection_properties(self) -> List[ConnectionProperty]:
        properties = [
            ("Host", ReferenceExpression.create(self.host)),
            ("Port", ReferenceExpression.create(self.port)),
            ("Username", self.username_reference),
        ]

        if self.password_parameter is not None:
            properties.append(
                ("Password", ReferenceExpression.create(self.password_parameter.reference))
            )

        return properties

    # -------------------------
    # Child databases
    # -------------------------

    @property
    def databases(self) -> Mapping[str, str]:
        """Resource name -> database name."""
        return MappingProxyType(self._databases)

    def add_database(self, name: str, database_name: str) -> None:
        # First registration wins; a repeated name is ignored here and
        # rejected by the application registry instead.
        if any(existing.casefold() == name.casefold() for existing in self._databases):
            return
        self._databases[name] = database_name
