"""In-process cache of fetched route segments keyed by their endpoints."""

import threading

from tourroute.models import EndpointPair, Route


class RouteCache:
    """
    Thread-safe mapping of directed endpoint pairs to fetched routes.

    Entries live for the lifetime of the process: there is no eviction,
    expiry or persistence. Both reads and writes hold the same lock, and the
    critical sections never perform I/O.
    """

    def __init__(self) -> None:
        self._routes: dict[EndpointPair, Route] = {}
        self._lock = threading.Lock()

    def lookup(self, key: EndpointPair) -> Route | None:
        """Return the cached route for ``key``, or None on a miss."""
        with self._lock:
            return self._routes.get(key)

    def store(self, key: EndpointPair, route: Route) -> None:
        """Store ``route`` under ``key``. Last write wins."""
        with self._lock:
            self._routes[key] = route

    def clear(self) -> None:
        with self._lock:
            self._routes.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._routes)

    def __contains__(self, key: EndpointPair) -> bool:
        with self._lock:
            return key in self._routes
