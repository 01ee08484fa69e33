"""Tour planning on top of the retrieval orchestrator.

Keeps two routes up to date for a map view:

- ``tour``: a loop through the selected points of interest, back to the first
- ``to_tour``: from the user's current location to the closest point of interest
"""

import logging
from typing import Optional, Sequence

from tourroute.models import Point, PointOfInterest
from tourroute.utils.geo import find_closest_poi

from .route_retrieval import RouteConsumer, RouteRetrieval, RouteRetrievalOrchestrator


logger = logging.getLogger(__name__)

TOUR_TARGET = "tour"
TO_TOUR_TARGET = "to_tour"


def build_tour_points(pois: Sequence[PointOfInterest]) -> list[Point]:
    """
    Points of a tour through ``pois`` in order.

    With two or more POIs the first one is repeated at the end so the route
    loops around.
    """
    points = [poi.point for poi in pois]
    if len(points) > 1:
        points.append(points[0])
    return points


class TourPlanner:
    """
    Starts the route retrievals for a tour and for the path joining it.

    The selected POIs and the current location are passed in on every
    update; nothing about the selection is remembered between calls.
    """

    def __init__(
        self,
        orchestrator: RouteRetrievalOrchestrator,
        tour_consumer: RouteConsumer,
        to_tour_consumer: RouteConsumer,
    ):
        self.orchestrator = orchestrator
        self.tour_consumer = tour_consumer
        self.to_tour_consumer = to_tour_consumer

    def update(
        self,
        pois: Sequence[PointOfInterest],
        current_location: Optional[Point] = None,
        use_cache: bool = True,
    ) -> dict[str, RouteRetrieval]:
        """
        Refresh both routes for the given selection.

        Args:
            pois: Selected points of interest, in tour order
            current_location: Where the user is, if known
            use_cache: Consult and fill the route cache for the tour segments

        Returns:
            The runs started, keyed by target
        """
        started = {}

        if current_location is not None and pois:
            started[TO_TOUR_TARGET] = self.update_user_location(current_location, pois)

        # Fewer than two POIs still goes through the orchestrator: it replaces
        # any older tour run and completes with an empty route.
        started[TOUR_TARGET] = self.orchestrator.retrieve(
            TOUR_TARGET,
            build_tour_points(pois),
            self.tour_consumer,
            use_cache=use_cache,
        )

        return started

    def update_user_location(
        self,
        current_location: Point,
        pois: Sequence[PointOfInterest],
    ) -> RouteRetrieval:
        """Route from ``current_location`` to the closest of ``pois``."""
        closest = find_closest_poi(current_location, pois)
        logger.info("Closest point of interest: %s", closest.name)

        # not cached: the user's position changes constantly
        return self.orchestrator.retrieve(
            TO_TOUR_TARGET,
            [current_location, closest.point],
            self.to_tour_consumer,
            use_cache=False,
        )
