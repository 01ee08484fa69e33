"""Cancellable multi-segment route retrieval.

A retrieval run fetches the segments between consecutive points, strictly in
order, in a background task, and assembles them into one ordered path:

    [p0, waypoints(p0, p1)..., p1, p1, waypoints(p1, p2)..., p2]

Each segment contributes its own start and end, so interior points appear
twice.

Runs never call their consumer directly. When a run's task finishes, its
done-callback posts exactly one RouteOutcome on the orchestrator's delivery
channel, and the consumer's side of the event loop drains that channel with
``dispatch_next()`` / ``dispatch_forever()``.

At most one run is live per target: starting a new run for a target cancels
the previous one first. The replacement's outcome is held back until the
cancelled run has posted its own, so a consumer always sees the newest
result last.
"""

import asyncio
import itertools
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional, Protocol, Sequence

from tourroute.exceptions import RoutingError
from tourroute.models import Point
from tourroute.tools.routing import RoutingClient


logger = logging.getLogger(__name__)


class RouteConsumer(Protocol):
    """Receives the single outcome of a retrieval run."""

    def on_route_ready(self, points: list[Point]) -> None:
        ...

    def on_route_unavailable(self) -> None:
        ...


class RetrievalState(str, Enum):
    """Lifecycle of one retrieval run."""
    IDLE = "idle"
    RUNNING = "running"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    FAILED = "failed"


@dataclass
class RouteOutcome:
    """The one message a run writes to the delivery channel."""
    run: "RouteRetrieval"
    points: Optional[tuple[Point, ...]] = None

    @property
    def run_id(self) -> int:
        return self.run.run_id

    @property
    def target(self) -> str:
        return self.run.target

    @property
    def succeeded(self) -> bool:
        return self.points is not None


class RouteRetrieval:
    """A single run over an ordered list of points."""

    def __init__(
        self,
        run_id: int,
        target: str,
        points: Sequence[Point],
        consumer: RouteConsumer,
        client: RoutingClient,
        use_cache: bool = True,
        predecessor: Optional["RouteRetrieval"] = None,
    ):
        self.run_id = run_id
        self.target = target
        self.points = list(points)
        self.consumer = consumer
        self.client = client
        self.use_cache = use_cache
        self.state = RetrievalState.IDLE
        self._cancelled = False
        self._task: asyncio.Task | None = None
        # cancelled run this one replaced; its outcome must be posted first
        self.predecessor = predecessor
        self.reported = False
        self._followers: list[Callable[[], None]] = []

    def __repr__(self) -> str:
        return f"<RouteRetrieval #{self.run_id} {self.target} {self.state.value}>"

    @property
    def is_live(self) -> bool:
        return self.state is RetrievalState.RUNNING

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def start(self, channel: asyncio.Queue) -> None:
        """Spawn the background task. Must be called from a running event loop."""
        self.state = RetrievalState.RUNNING
        self._task = asyncio.get_running_loop().create_task(
            self._run(), name=f"route-retrieval-{self.run_id}"
        )
        self._task.add_done_callback(lambda task: self._finish(task, channel))

    def complete_empty(self, channel: asyncio.Queue) -> None:
        """Finish without any network access (fewer than two points)."""
        self.state = RetrievalState.COMPLETED
        self._post(channel, RouteOutcome(run=self, points=()))

    def cancel(self) -> None:
        """
        Stop the run. The flag is checked before every segment fetch; a fetch
        already waiting on the network is interrupted through the task.
        """
        if not self.is_live:
            return
        logger.info("Cancelling %r", self)
        self._cancelled = True
        if self._task is not None:
            self._task.cancel()

    async def wait(self) -> None:
        """Wait until the background task has finished, however it ended."""
        if self._task is not None:
            await asyncio.wait({self._task})

    async def _run(self) -> tuple[Point, ...]:
        assembled: list[Point] = []

        for previous, current in zip(self.points, self.points[1:]):
            if self._cancelled:
                raise asyncio.CancelledError()

            route = await self.client.fetch_segment(previous, current, self.use_cache)

            assembled.append(previous)
            assembled.extend(route.waypoints)
            assembled.append(current)

        if not assembled:
            raise RoutingError("No segments to fetch")

        return tuple(assembled)

    def _finish(self, task: asyncio.Task, channel: asyncio.Queue) -> None:
        exc = None if task.cancelled() else task.exception()

        if task.cancelled() or self._cancelled:
            self.state = RetrievalState.CANCELLED
            outcome = RouteOutcome(run=self)
        elif exc is not None:
            self.state = RetrievalState.FAILED
            if isinstance(exc, RoutingError):
                logger.error("Error retrieving route for %r: %s", self, exc)
            else:
                logger.error("Unexpected error retrieving route for %r", self, exc_info=exc)
            outcome = RouteOutcome(run=self)
        else:
            self.state = RetrievalState.COMPLETED
            outcome = RouteOutcome(run=self, points=task.result())
            logger.info("%r assembled %d points", self, len(outcome.points))

        self._post(channel, outcome)

    def _post(self, channel: asyncio.Queue, outcome: RouteOutcome) -> None:
        predecessor = self.predecessor
        if predecessor is not None and not predecessor.reported:
            predecessor._followers.append(lambda: self._post(channel, outcome))
            return

        self.predecessor = None
        channel.put_nowait(outcome)
        self.reported = True

        followers, self._followers = self._followers, []
        for follow in followers:
            follow()


class RouteRetrievalOrchestrator:
    """
    Starts retrieval runs per target and delivers their outcomes.

    Every run ends in exactly one of ``on_route_ready(points)`` or
    ``on_route_unavailable()`` on its consumer. A run that is cancelled,
    or that fails on any segment, is reported as unavailable; partial
    routes are never delivered.
    """

    def __init__(self, client: RoutingClient):
        self.client = client
        self.deliveries: asyncio.Queue = asyncio.Queue()
        self._runs: dict[str, RouteRetrieval] = {}
        self._ids = itertools.count(1)

    def retrieve(
        self,
        target: str,
        points: Sequence[Point],
        consumer: RouteConsumer,
        use_cache: bool = True,
    ) -> RouteRetrieval:
        """
        Start retrieving the route through ``points`` for ``target``.

        Args:
            target: Name of the consumer slot (e.g. the overlay being drawn)
            points: Points the route must pass through, in order
            consumer: Receives the outcome when the delivery channel is drained
            use_cache: Consult and fill the route cache for each segment

        Returns:
            The new run
        """
        previous = self._runs.get(target)
        if previous is not None and previous.is_live:
            previous.cancel()
        else:
            previous = None

        run = RouteRetrieval(
            run_id=next(self._ids),
            target=target,
            points=points,
            consumer=consumer,
            client=self.client,
            use_cache=use_cache,
            predecessor=previous,
        )
        self._runs[target] = run

        if len(run.points) < 2:
            run.complete_empty(self.deliveries)
        else:
            logger.info("Starting %r over %d points", run, len(run.points))
            run.start(self.deliveries)

        return run

    def current(self, target: str) -> RouteRetrieval | None:
        """Most recent run started for ``target``."""
        return self._runs.get(target)

    def cancel(self, target: str) -> None:
        run = self._runs.get(target)
        if run is not None:
            run.cancel()

    def cancel_all(self) -> None:
        for run in self._runs.values():
            run.cancel()

    #----------------
    # Consumer side
    #----------------
    async def dispatch_next(self) -> RouteOutcome:
        """Wait for the next outcome and hand it to its consumer."""
        outcome = await self.deliveries.get()
        self._deliver(outcome)
        return outcome

    def dispatch_pending(self) -> list[RouteOutcome]:
        """Deliver every outcome already waiting, without blocking."""
        delivered = []
        while True:
            try:
                outcome = self.deliveries.get_nowait()
            except asyncio.QueueEmpty:
                break
            self._deliver(outcome)
            delivered.append(outcome)
        return delivered

    async def dispatch_forever(self) -> None:
        while True:
            await self.dispatch_next()

    async def aclose(self) -> None:
        """Cancel all live runs and wait for their tasks to unwind."""
        live = [run for run in self._runs.values() if run.is_live]
        for run in live:
            run.cancel()
        for run in live:
            await run.wait()

    @staticmethod
    def _deliver(outcome: RouteOutcome) -> None:
        consumer = outcome.run.consumer
        if outcome.succeeded:
            consumer.on_route_ready(list(outcome.points))
        else:
            consumer.on_route_unavailable()
