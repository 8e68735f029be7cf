#clickhouse_hosting\domain\models.py
"""Application model: resources, parameters and the annotations attached to them."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Tuple, Type, TypeVar, Union

from clickhouse_hosting.core.errors import UnresolvedReferenceError
from clickhouse_hosting.core.expressions import (
    EndpointReference,
    ParameterRef,
    ReferenceExpression,
    ResolutionContext,
    ValueRef,
)
from clickhouse_hosting.core.validation import require_non_empty


A = TypeVar("A")

ConnectionProperty = Tuple[str, ReferenceExpression]


# ============================================
# ENUMS
# ============================================

class ContainerMountType(Enum):
    """Container mount kind."""
    VOLUME = "volume"
    BIND_MOUNT = "bindMount"


# ============================================
# ANNOTATIONS
# ============================================

@dataclass
class EndpointAnnotation:
    """Network endpoint exposed by a resource."""
    name: str
    target_port: Optional[int] = None
    port: Optional[int] = None  # host port, None = allocated dynamically
    scheme: str = "http"
    transport: str = "http"
    protocol: str = "tcp"
    is_external: bool = False


@dataclass
class ContainerImageAnnotation:
    """Container image to run."""
    image: str
    tag: str = "latest"
    registry: Optional[str] = None

    @property
    def full_image(self) -> str:
        if self.registry:
            return f"{self.registry}/{self.image}:{self.tag}"
        return f"{self.image}:{self.tag}"


@dataclass
class HealthCheckAnnotation:
    """Health check configuration."""
    type: str  # "http"
    path: Optional[str] = None
    endpoint_name: Optional[str] = None


@dataclass
class ContainerMountAnnotation:
    """Volume or bind mount into a container."""
    source: Optional[str]
    target: str
    type: ContainerMountType = ContainerMountType.VOLUME
    is_read_only: bool = False


EnvironmentValue = Union[str, ValueRef]


@dataclass
class EnvironmentCallbackAnnotation:
    """Populates environment variables when the container is configured."""
    callback: Callable[[Dict[str, EnvironmentValue]], None]


# ============================================
# RESOURCES
# ============================================

class Resource:
    """Named entity in the application model."""

    def __init__(self, name: str):
        self.name = require_non_empty(name, "name")
        self.annotations: List[Any] = []

    def annotations_of(self, annotation_type: Type[A]) -> List[A]:
        return [a for a in self.annotations if isinstance(a, annotation_type)]

    def __repr__(self) -> str:
        return f"<{type(self).__name__}(name={self.name!r})>"


class ParameterResource(Resource):
    """
    Externally supplied value such as a user name or password.

    Value lookup order when resolving:
        1. configured values passed in by the resolution context
        2. the literal value given at construction
        3. the default generator (called once, then reused)
    """

    def __init__(
        self,
        name: str,
        value: Optional[str] = None,
        secret: bool = False,
        default: Optional[Callable[[], str]] = None,
    ):
        super().__init__(name)
        self.value = value
        self.secret = secret
        self._default = default
        self._generated: Optional[str] = None

    @property
    def has_default(self) -> bool:
        return self._default is not None

    @property
    def reference(self) -> ParameterRef:
        return ParameterRef(self)

    def resolve_value(self, configured: Mapping[str, str]) -> str:
        if self.name in configured:
            return configured[self.name]

        if self.value is not None:
            return self.value

        if self._default is not None:
            if self._generated is None:
                self._generated = self._default()
            return self._generated

        raise UnresolvedReferenceError(f"Parameter resource '{self.name}' has no value")


class ContainerResource(Resource):
    """Resource backed by a container image."""

    @property
    def image(self) -> Optional[ContainerImageAnnotation]:
        images = self.annotations_of(ContainerImageAnnotation)
        return images[-1] if images else None

    @property
    def endpoints(self) -> List[EndpointAnnotation]:
        return self.annotations_of(EndpointAnnotation)

    def find_endpoint(self, endpoint_name: str) -> Optional[EndpointAnnotation]:
        for endpoint in self.endpoints:
            if endpoint.name == endpoint_name:
                return endpoint
        return None

    def get_endpoint(self, endpoint_name: str) -> EndpointReference:
        return EndpointReference(self.name, endpoint_name)

    @property
    def mounts(self) -> List[ContainerMountAnnotation]:
        return self.annotations_of(ContainerMountAnnotation)

    def environment_variables(self) -> Dict[str, EnvironmentValue]:
        """Run every environment callback, in order, into one dict."""
        env: Dict[str, EnvironmentValue] = {}
        for annotation in self.annotations_of(EnvironmentCallbackAnnotation):
            annotation.callback(env)
        return env

    async def resolve_environment(self, context: ResolutionContext) -> Dict[str, str]:
        resolved: Dict[str, str] = {}
        for key, value in self.environment_variables().items():
            if isinstance(value, str):
                resolved[key] = value
            else:
                resolved[key] = await value.resolve_async(context) or ""
        return resolved


class ResourceWithConnectionString(ABC):
    """Resource that other resources can connect to."""

    @property
    @abstractmethod
    def connection_string_expression(self) -> ReferenceExpression:
        pass

    @abstractmethod
    def get_connection_properties(self) -> List[ConnectionProperty]:
        """Ordered (name, expression) pairs describing the connection."""
        pass

    async def get_connection_string(self, context: ResolutionContext) -> Optional[str]:
        return await self.connection_string_expression.get_value_async(context)


def combine_properties(
    base: Iterable[ConnectionProperty],
    extra: Iterable[ConnectionProperty],
) -> List[ConnectionProperty]:
    return list(base) + list(extra)


# ============================================
# TEMPLATES
# ============================================

@dataclass(frozen=True)
class ContainerTemplate:
    """Defaults for running a known server image."""
    registry: str
    image: str
    tag: str

    container_port: int
    scheme: str = "http"

    data_path: Optional[str] = None
    health_check: Optional[HealthCheckAnnotation] = None
