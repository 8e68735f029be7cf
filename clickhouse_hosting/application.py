# clickhouse_hosting/application.py
"""
Application model - registers resources and drives their lifecycle events.

The builder owns every resource and enforces one global namespace of
resource names. Endpoint allocation is done by the container runtime; it is
recorded here with DistributedApplication.allocate_endpoint.
"""

import logging
from typing import Callable, Dict, Generic, List, Mapping, Optional, Tuple, TypeVar, Union

from clickhouse_hosting.core.errors import ResourceNameConflictError, ResourceValidationError
from clickhouse_hosting.core.events import LifecycleEventing
from clickhouse_hosting.core.events_model import ConnectionStringAvailableEvent, ResourceReadyEvent
from clickhouse_hosting.core.expressions import AllocatedEndpoint, ResolutionContext, ValueRef
from clickhouse_hosting.core.validation import require_non_empty, require_not_none, validate_resource_name
from clickhouse_hosting.domain.models import (
    ContainerImageAnnotation,
    ContainerMountAnnotation,
    ContainerMountType,
    ContainerResource,
    EndpointAnnotation,
    EnvironmentCallbackAnnotation,
    EnvironmentValue,
    HealthCheckAnnotation,
    ParameterResource,
    Resource,
    ResourceWithConnectionString,
)

logger = logging.getLogger(__name__)


R = TypeVar("R", bound=Resource)


class ResourceBuilder(Generic[R]):
    """Fluent configuration of one registered resource."""

    def __init__(self, application_builder: "DistributedApplicationBuilder", resource: R):
        self.application_builder = application_builder
        self.resource = resource

    def with_annotation(self, annotation) -> "ResourceBuilder[R]":
        self.resource.annotations.append(annotation)
        return self

    # -------------------------
    # Endpoints
    # -------------------------

    def with_endpoint(
        self,
        name: str,
        target_port: Optional[int] = None,
        port: Optional[int] = None,
        scheme: str = "http",
        is_external: bool = False,
    ) -> "ResourceBuilder[R]":
        require_non_empty(name, "name")

        if any(e.name == name for e in self.resource.annotations_of(EndpointAnnotation)):
            raise ResourceValidationError(
                "name",
                f"endpoint '{name}' already exists on resource '{self.resource.name}'"
            )

        return self.with_annotation(EndpointAnnotation(
            name=name,
            target_port=target_port,
            port=port,
            scheme=scheme,
            transport=scheme,
            is_external=is_external,
        ))

    # -------------------------
    # Container image
    # -------------------------

    def with_image(self, image: str, tag: str = "latest") -> "ResourceBuilder[R]":
        require_non_empty(image, "image")
        require_non_empty(tag, "tag")

        existing = self.resource.annotations_of(ContainerImageAnnotation)
        if existing:
            existing[-1].image = image
            existing[-1].tag = tag
            return self

        return self.with_annotation(ContainerImageAnnotation(image=image, tag=tag))

    def with_image_registry(self, registry: str) -> "ResourceBuilder[R]":
        require_non_empty(registry, "registry")

        existing = self.resource.annotations_of(ContainerImageAnnotation)
        if not existing:
            raise ResourceValidationError(
                "registry",
                f"resource '{self.resource.name}' has no container image"
            )

        existing[-1].registry = registry
        return self

    # -------------------------
    # Environment
    # -------------------------

    def with_environment(
        self,
        name_or_callback: Union[str, Callable[[Dict[str, EnvironmentValue]], None]],
        value: Optional[EnvironmentValue] = None,
    ) -> "ResourceBuilder[R]":
        if callable(name_or_callback):
            return self.with_annotation(EnvironmentCallbackAnnotation(name_or_callback))

        name = require_non_empty(name_or_callback, "name")
        require_not_none(value, "value")

        def _set(env: Dict[str, EnvironmentValue]) -> None:
            env[name] = value

        return self.with_annotation(EnvironmentCallbackAnnotation(_set))

    # -------------------------
    # Health
    # -------------------------

    def with_http_health_check(
        self,
        path: str = "/",
        endpoint_name: Optional[str] = None,
    ) -> "ResourceBuilder[R]":
        endpoints = self.resource.annotations_of(EndpointAnnotation)
        if endpoint_name is None:
            http = [e for e in endpoints if e.scheme in ("http", "https")]
            if not http:
                raise ResourceValidationError(
                    "endpoint_name",
                    f"resource '{self.resource.name}' has no http endpoint"
                )
            endpoint_name = http[0].name

        return self.with_annotation(HealthCheckAnnotation(
            type="http",
            path=path,
            endpoint_name=endpoint_name,
        ))

    # -------------------------
    # Mounts
    # -------------------------

    def with_volume(self, name: Optional[str], target: str, is_read_only: bool = False) -> "ResourceBuilder[R]":
        require_non_empty(target, "target")
        return self.with_annotation(ContainerMountAnnotation(
            source=name,
            target=target,
            type=ContainerMountType.VOLUME,
            is_read_only=is_read_only,
        ))

    def with_bind_mount(self, source: str, target: str, is_read_only: bool = False) -> "ResourceBuilder[R]":
        require_non_empty(source, "source")
        require_non_empty(target, "target")
        return self.with_annotation(ContainerMountAnnotation(
            source=source,
            target=target,
            type=ContainerMountType.BIND_MOUNT,
            is_read_only=is_read_only,
        ))


class DistributedApplicationBuilder:
    """Collects resources and lifecycle subscriptions before the app is built."""

    def __init__(self, app_name: str = "app", configuration: Optional[Mapping[str, str]] = None):
        """
        Args:
            app_name: Application name, used for generated volume names
            configuration: Parameter values keyed by parameter name
        """
        self.app_name = require_non_empty(app_name, "app_name")
        self.context = ResolutionContext(configuration)
        self.eventing = LifecycleEventing()
        self._resources: List[Resource] = []

    @property
    def resources(self) -> Tuple[Resource, ...]:
        return tuple(self._resources)

    def find_resource(self, name: str) -> Optional[Resource]:
        """Look up a resource by name, ignoring case."""
        for resource in self._resources:
            if resource.name.casefold() == name.casefold():
                return resource
        return None

    def add_resource(self, resource: R) -> ResourceBuilder[R]:
        require_not_none(resource, "resource")
        validate_resource_name(resource.name)

        if self.find_resource(resource.name) is not None:
            raise ResourceNameConflictError(resource.name)

        self._resources.append(resource)
        logger.debug(f"Registered resource {resource!r}")
        return ResourceBuilder(self, resource)

    def create_resource_builder(self, resource: R) -> ResourceBuilder[R]:
        """Builder for a resource that is not (or not yet) part of the model."""
        return ResourceBuilder(self, resource)

    def add_parameter(
        self,
        name: str,
        value: Optional[str] = None,
        secret: bool = False,
    ) -> ResourceBuilder[ParameterResource]:
        return self.add_resource(ParameterResource(name, value=value, secret=secret))

    def build(self) -> "DistributedApplication":
        return DistributedApplication(self)


class DistributedApplication:
    """Built application: resources, allocation state and lifecycle events."""

    def __init__(self, builder: DistributedApplicationBuilder):
        self.app_name = builder.app_name
        self.resources = builder.resources
        self.context = builder.context
        self.eventing = builder.eventing
        self._builder = builder

    def get_resource(self, name: str) -> Optional[Resource]:
        return self._builder.find_resource(name)

    def allocate_endpoint(
        self,
        resource: ContainerResource,
        endpoint_name: str,
        host: str,
        port: Optional[int] = None,
    ) -> AllocatedEndpoint:
        """Record the address the container runtime gave to an endpoint."""
        annotation = resource.find_endpoint(endpoint_name)
        if annotation is None:
            raise ResourceValidationError(
                "endpoint_name",
                f"resource '{resource.name}' has no endpoint '{endpoint_name}'"
            )

        port = port if port is not None else annotation.port
        if port is None:
            raise ResourceValidationError(
                "port",
                f"endpoint '{endpoint_name}' of '{resource.name}' has no fixed port"
            )

        allocated = AllocatedEndpoint(
            host=host,
            port=port,
            scheme=annotation.scheme,
            target_port=annotation.target_port,
        )
        self.context.allocate_endpoint(resource.name, endpoint_name, allocated)

        logger.info(f"[{resource.name}] Endpoint '{endpoint_name}' allocated at {allocated.url}")
        return allocated

    async def start(self) -> None:
        """
        Publish startup events in registration order.

        1. ConnectionStringAvailable for every resource with a connection string
        2. ResourceReady for every resource

        Connection strings that reference endpoints wait for their allocation.
        Any error raised by a subscriber aborts startup.
        """
        logger.info(f"Starting application '{self.app_name}' with {len(self.resources)} resource(s)")

        for resource in self.resources:
            if isinstance(resource, ResourceWithConnectionString):
                await self.eventing.publish(ConnectionStringAvailableEvent(resource, self.context))

        for resource in self.resources:
            await self.eventing.publish(ResourceReadyEvent(resource, self.context))

        logger.info(f"Application '{self.app_name}' started")

    async def get_connection_string(self, name: str) -> Optional[str]:
        resource = self.get_resource(name)
        if not isinstance(resource, ResourceWithConnectionString):
            raise ResourceValidationError("name", f"'{name}' has no connection string")
        return await resource.get_connection_string(self.context)

    def resolve(self, value: ValueRef) -> Optional[str]:
        return value.resolve(self.context)
