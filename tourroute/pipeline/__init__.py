"""Route retrieval pipeline for walking tours."""

from .route_retrieval import (
    RetrievalState,
    RouteConsumer,
    RouteOutcome,
    RouteRetrieval,
    RouteRetrievalOrchestrator,
)
from .tour import TourPlanner, build_tour_points

__all__ = [
    "RetrievalState",
    "RouteConsumer",
    "RouteOutcome",
    "RouteRetrieval",
    "RouteRetrievalOrchestrator",
    "TourPlanner",
    "build_tour_points",
]
