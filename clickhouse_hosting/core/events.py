"""Lifecycle event dispatch."""

import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, List, Type

from clickhouse_hosting.core.events_model import EVENT_TYPES, LifecycleEvent


logger = logging.getLogger(__name__)

EventCallback = Callable[[LifecycleEvent], Awaitable[None]]


@dataclass(frozen=True)
class EventSubscription:
    event_type: Type[LifecycleEvent]
    resource_name: str
    callback: EventCallback


class LifecycleEventing:
    """
    Per-resource subscriptions to lifecycle events.

    Callbacks run sequentially in subscription order. Errors raised by a
    callback propagate to the publisher and abort the publish.
    """

    def __init__(self):
        self._subscriptions: List[EventSubscription] = []

    def subscribe(self, event_type: Type[LifecycleEvent], resource, callback: EventCallback) -> EventSubscription:
        if event_type not in EVENT_TYPES:
            raise ValueError(f"Invalid event type: {event_type.__name__}")

        subscription = EventSubscription(event_type, resource.name, callback)
        self._subscriptions.append(subscription)
        return subscription

    def unsubscribe(self, subscription: EventSubscription) -> None:
        self._subscriptions.remove(subscription)

    def subscriptions_for(self, event_type: Type[LifecycleEvent], resource_name: str) -> List[EventSubscription]:
        return [
            s for s in self._subscriptions
            if s.event_type is event_type and s.resource_name == resource_name
        ]

    async def publish(self, event: LifecycleEvent) -> None:
        subscriptions = self.subscriptions_for(type(event), event.resource.name)

        logger.debug(
            f"[EVENT] {event.event_type} | resource={event.resource.name} | "
            f"subscribers={len(subscriptions)}"
        )

        for subscription in subscriptions:
            await subscription.callback(event)
