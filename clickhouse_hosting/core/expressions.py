# clickhouse_hosting/core/expressions.py
"""
Deferred values used to compose connection strings.

A value reference yields a string only when resolved against a
ResolutionContext. The context carries the allocation state owned by the
orchestrator (configured parameter values, allocated endpoints); the
references themselves are immutable and never cache what they resolve to.

Every reference also renders a template form that never fails, e.g.
"{clickhouse.bindings.http.host}" or "{clickhouse-password.value}". That form
is what ends up in manifests.
"""

import asyncio
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Dict, Iterator, Mapping, Optional, Tuple, Union

from clickhouse_hosting.core.errors import UnresolvedReferenceError

if TYPE_CHECKING:
    from clickhouse_hosting.domain.models import ParameterResource


# ============================================
# ENDPOINT STATE
# ============================================

class EndpointProperty(Enum):
    """Property of an allocated endpoint, valued by its template key."""
    URL = "url"
    HOST = "host"
    PORT = "port"
    SCHEME = "scheme"
    TARGET_PORT = "targetPort"
    HOST_AND_PORT = "hostAndPort"


@dataclass(frozen=True)
class AllocatedEndpoint:
    """Address handed out by the orchestrator once the container is placed."""
    host: str
    port: int
    scheme: str = "http"
    target_port: Optional[int] = None

    @property
    def url(self) -> str:
        return f"{self.scheme}://{self.host}:{self.port}"


class ResolutionContext:
    """
    Allocation state that value references resolve against.

    Owned by the application; the orchestrator records endpoint allocations
    here and configuration supplies parameter values.
    """

    def __init__(self, parameter_values: Optional[Mapping[str, str]] = None):
        self._parameter_values: Dict[str, str] = dict(parameter_values or {})
        self._endpoints: Dict[Tuple[str, str], AllocatedEndpoint] = {}
        self._signals: Dict[Tuple[str, str], asyncio.Event] = {}

    # -------------------------
    # Parameters
    # -------------------------

    @property
    def parameter_values(self) -> Mapping[str, str]:
        return self._parameter_values

    def set_parameter_value(self, name: str, value: str) -> None:
        self._parameter_values[name] = value

    # -------------------------
    # Endpoints
    # -------------------------

    def allocate_endpoint(
        self,
        resource_name: str,
        endpoint_name: str,
        endpoint: AllocatedEndpoint,
    ) -> None:
        key = (resource_name, endpoint_name)
        self._endpoints[key] = endpoint
        self._signal(key).set()

    def get_allocated_endpoint(
        self,
        resource_name: str,
        endpoint_name: str,
    ) -> Optional[AllocatedEndpoint]:
        return self._endpoints.get((resource_name, endpoint_name))

    async def wait_for_endpoint(self, resource_name: str, endpoint_name: str) -> AllocatedEndpoint:
        """Suspend until the endpoint has been allocated."""
        key = (resource_name, endpoint_name)
        await self._signal(key).wait()
        return self._endpoints[key]

    def _signal(self, key: Tuple[str, str]) -> asyncio.Event:
        if key not in self._signals:
            self._signals[key] = asyncio.Event()
        return self._signals[key]


# ============================================
# VALUE REFERENCES
# ============================================

class ValueRef(ABC):
    """A scalar whose value is only known at a later lifecycle stage."""

    @property
    @abstractmethod
    def value_expression(self) -> str:
        """Template form of the reference."""
        pass

    @abstractmethod
    def resolve(self, context: ResolutionContext) -> Optional[str]:
        """Resolve against the current state of the context."""
        pass

    async def resolve_async(self, context: ResolutionContext) -> Optional[str]:
        return self.resolve(context)

    def iter_references(self) -> Iterator["ValueRef"]:
        yield self


@dataclass(frozen=True)
class LiteralRef(ValueRef):
    text: str

    @property
    def value_expression(self) -> str:
        return self.text

    def resolve(self, context: ResolutionContext) -> str:
        return self.text


@dataclass(frozen=True)
class ParameterRef(ValueRef):
    parameter: "ParameterResource"

    @property
    def value_expression(self) -> str:
        return f"{{{self.parameter.name}.value}}"

    def resolve(self, context: ResolutionContext) -> str:
        return self.parameter.resolve_value(context.parameter_values)


@dataclass(frozen=True)
class EndpointReference:
    """Names one endpoint of one resource; allocation is looked up on demand."""
    resource_name: str
    endpoint_name: str

    def get_property(self, kind: EndpointProperty) -> "EndpointPropertyRef":
        return EndpointPropertyRef(self, kind)

    @property
    def host(self) -> "EndpointPropertyRef":
        return self.get_property(EndpointProperty.HOST)

    @property
    def port(self) -> "EndpointPropertyRef":
        return self.get_property(EndpointProperty.PORT)

    @property
    def url(self) -> "EndpointPropertyRef":
        return self.get_property(EndpointProperty.URL)

    def is_allocated(self, context: ResolutionContext) -> bool:
        return context.get_allocated_endpoint(self.resource_name, self.endpoint_name) is not None


@dataclass(frozen=True)
class EndpointPropertyRef(ValueRef):
    endpoint: EndpointReference
    kind: EndpointProperty

    @property
    def value_expression(self) -> str:
        return (
            f"{{{self.endpoint.resource_name}.bindings."
            f"{self.endpoint.endpoint_name}.{self.kind.value}}}"
        )

    def resolve(self, context: ResolutionContext) -> str:
        allocated = context.get_allocated_endpoint(
            self.endpoint.resource_name, self.endpoint.endpoint_name
        )
        if allocated is None:
            raise UnresolvedReferenceError(
                f"Endpoint '{self.endpoint.endpoint_name}' of resource "
                f"'{self.endpoint.resource_name}' has not been allocated"
            )
        return self._project(allocated)

    async def resolve_async(self, context: ResolutionContext) -> str:
        allocated = await context.wait_for_endpoint(
            self.endpoint.resource_name, self.endpoint.endpoint_name
        )
        return self._project(allocated)

    def _project(self, allocated: AllocatedEndpoint) -> str:
        if self.kind == EndpointProperty.HOST:
            return allocated.host
        if self.kind == EndpointProperty.PORT:
            return str(allocated.port)
        if self.kind == EndpointProperty.SCHEME:
            return allocated.scheme
        if self.kind == EndpointProperty.URL:
            return allocated.url
        if self.kind == EndpointProperty.HOST_AND_PORT:
            return f"{allocated.host}:{allocated.port}"

        if allocated.target_port is None:
            raise UnresolvedReferenceError(
                f"Endpoint '{self.endpoint.endpoint_name}' of resource "
                f"'{self.endpoint.resource_name}' has no target port"
            )
        return str(allocated.target_port)


# ============================================
# EXPRESSIONS
# ============================================

Segment = Union[str, ValueRef]


@dataclass(frozen=True)
class ReferenceExpression(ValueRef):
    """
    Ordered literal and reference segments.

    Segment order is significant: it reproduces the exact output format.
    An expression is itself a reference, so expressions nest. An expression
    with no segments has no value and resolves to None; a nested reference
    resolving to None contributes nothing to the output.
    """
    segments: Tuple[Segment, ...] = ()

    @classmethod
    def create(cls, *parts: Segment) -> "ReferenceExpression":
        return cls(tuple(parts))

    @property
    def value_expression(self) -> str:
        return "".join(
            segment if isinstance(segment, str) else segment.value_expression
            for segment in self.segments
        )

    def resolve(self, context: ResolutionContext) -> Optional[str]:
        if not self.segments:
            return None
        return "".join(
            segment if isinstance(segment, str) else (segment.resolve(context) or "")
            for segment in self.segments
        )

    async def resolve_async(self, context: ResolutionContext) -> Optional[str]:
        if not self.segments:
            return None
        parts = []
        for segment in self.segments:
            if isinstance(segment, str):
                parts.append(segment)
            else:
                parts.append(await segment.resolve_async(context) or "")
        return "".join(parts)

    get_value = resolve
    get_value_async = resolve_async

    def iter_references(self) -> Iterator[ValueRef]:
        """Leaf references, nested expressions flattened."""
        for segment in self.segments:
            if not isinstance(segment, str):
                yield from segment.iter_references()

    def __str__(self) -> str:
        return self.value_expression
