"""Lifecycle events published while the application starts."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import TYPE_CHECKING

from clickhouse_hosting.core.expressions import ResolutionContext

if TYPE_CHECKING:
    from clickhouse_hosting.domain.models import Resource


@dataclass
class LifecycleEvent:
    """Base lifecycle event, scoped to one resource."""

    resource: "Resource"
    context: ResolutionContext
    occurred_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def event_type(self) -> str:
        return EVENT_TYPES[type(self)]


@dataclass
class ConnectionStringAvailableEvent(LifecycleEvent):
    """Endpoints are allocated; the connection string can be resolved."""


@dataclass
class ResourceReadyEvent(LifecycleEvent):
    """The resource is running and healthy."""


EVENT_TYPES = {
    ConnectionStringAvailableEvent: "resource.connection_string_available",
    ResourceReadyEvent: "resource.ready",
}
