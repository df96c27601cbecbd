"""Progress events emitted while concealing, and the notifier that fans them out.

Subscribers are either objects with an ``on_notify(event)`` method or plain
callables. They stay registered until ``unsubscribe`` is called. A subscriber
registered with an ``is_alive`` check is dropped the first time the check
returns False.
"""

import abc
import dataclasses
import logging
from typing import Any, Callable, List, Optional, Union

logger = logging.getLogger(__name__)


@dataclasses.dataclass(frozen=True)
class DataWritten:
    amount: int


@dataclasses.dataclass(frozen=True)
class Finished:
    pass


MethodProgressStatus = Union[DataWritten, Finished]


class Observer(abc.ABC):
    @abc.abstractmethod
    def on_notify(self, event: MethodProgressStatus) -> None:
        ...


@dataclasses.dataclass
class _Subscription:
    subscriber: Any
    is_alive: Optional[Callable[[], bool]] = None

    def alive(self) -> bool:
        return self.is_alive is None or bool(self.is_alive())


def _deliver(subscriber: Any, event: MethodProgressStatus) -> None:
    on_notify: Callable[[MethodProgressStatus], None] = getattr(
        subscriber, "on_notify", subscriber
    )
    on_notify(event)


class EventNotifier:
    def __init__(self) -> None:
        self._subscriptions: List[_Subscription] = []

    def subscribe(
        self, subscriber: Any, is_alive: Optional[Callable[[], bool]] = None
    ) -> None:
        if not callable(getattr(subscriber, "on_notify", subscriber)):
            raise TypeError("subscriber must be callable or define on_notify(event)")
        if is_alive is not None and not callable(is_alive):
            raise TypeError("is_alive must be callable")
        self._subscriptions.append(_Subscription(subscriber, is_alive))

    def unsubscribe(self, subscriber: Any) -> None:
        self._subscriptions = [
            sub for sub in self._subscriptions if sub.subscriber != subscriber
        ]

    def count_subscribers(self) -> int:
        return len(self._subscriptions)

    def notify(self, event: MethodProgressStatus) -> None:
        live: List[_Subscription] = []
        for subscription in self._subscriptions:
            if not subscription.alive():
                logger.warning("Stale subscriber detected, clean-up needed")
                continue
            live.append(subscription)
            _deliver(subscription.subscriber, event)
        self._subscriptions = live


__all__ = [
    "DataWritten",
    "EventNotifier",
    "Finished",
    "MethodProgressStatus",
    "Observer",
]
