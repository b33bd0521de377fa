"""
Dependency Injection Container

Holds the service graph built by the application factory so API routes and
Celery tasks resolve the same instances.
"""

import logging
import threading
from typing import Any, Dict, Type, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar('T')


class DependencyNotFoundError(Exception):
    """Raised when attempting to resolve an unregistered dependency."""
    pass


class DependencyContainer:
    """
    Registry of shared service instances keyed by their interface.

    Every service in tempdrop lives as long as the app, so registrations are
    singletons. Tests swap one out with override(). Thread-safe.
    """

    def __init__(self):
        self._services: Dict[Type, Any] = {}
        self._overrides: Dict[Type, Any] = {}
        self._lock = threading.Lock()

    def register_singleton(self, interface: Type[T], implementation: T) -> None:
        """
        Register the instance every resolve(interface) returns.

        Example:
            container.register_singleton(FileRecordRepository, repository)
        """
        with self._lock:
            self._services[interface] = implementation
        logger.debug(f"Registered {interface.__name__} -> {type(implementation).__name__}")

    def override(self, interface: Type[T], implementation: T) -> None:
        """Replace a registration; overrides win over singletons."""
        with self._lock:
            self._overrides[interface] = implementation
        logger.debug(f"Overridden: {interface.__name__}")

    def resolve(self, interface: Type[T]) -> T:
        """
        Resolve a registered service.

        Args:
            interface: The interface or class type to resolve

        Returns:
            The registered instance, or its override

        Raises:
            DependencyNotFoundError: If the interface is not registered
        """
        with self._lock:
            if interface in self._overrides:
                return self._overrides[interface]
            try:
                return self._services[interface]
            except KeyError:
                raise DependencyNotFoundError(
                    f"No registration found for type: {interface.__name__}"
                ) from None

    def setup_event_handlers(self, event_publisher) -> None:
        """
        Subscribe the logging handler to every domain event.

        Args:
            event_publisher: EventPublisher the handler listens on
        """
        from tempdrop.domain.events import DomainEvent
        from tempdrop.infrastructure.event_handlers.logging_handler import LoggingEventHandler

        handler = LoggingEventHandler(logging.getLogger("tempdrop"))
        event_publisher.subscribe(DomainEvent, handler.handle)
        logger.debug("Subscribed LoggingEventHandler to domain events")
