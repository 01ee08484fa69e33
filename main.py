"""Command-line entry point for the walking tour router.

Usage:
    python main.py 49.2606,-123.2460 49.2676,-123.2527 49.2665,-123.2552
    python main.py 49.2606,-123.2460 49.2676,-123.2527 --location 49.2640,-123.2500
    python main.py 49.2606,-123.2460 49.2676,-123.2527 --gpx output/tour.gpx
    python main.py 49.2606,-123.2460 49.2676,-123.2527 --no-cache
"""

import argparse
import asyncio
import logging
import sys

from dotenv import load_dotenv
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn

from tourroute.config import settings
from tourroute.models import Point, PointOfInterest
from tourroute.pipeline import RouteRetrievalOrchestrator, TourPlanner
from tourroute.pipeline.tour import TO_TOUR_TARGET, TOUR_TARGET
from tourroute.tools import RoutingClient
from tourroute.utils import create_gpx_track, save_gpx_file


console = Console()


class ConsoleRouteConsumer:
    """Collects the outcome of one target and reports it on the console."""

    def __init__(self, title: str):
        self.title = title
        self.points: list[Point] | None = None
        self.available = False

    def on_route_ready(self, points: list[Point]) -> None:
        self.points = points
        self.available = True
        console.print(f"[green]✓[/green] {self.title}: {len(points)} points")

    def on_route_unavailable(self) -> None:
        self.points = None
        self.available = False
        console.print(f"[red]✗[/red] {self.title}: route service not available")


def parse_point(text: str) -> Point:
    """Parse 'LAT,LON' into a Point."""
    try:
        lat, lon = (float(part) for part in text.split(","))
        return Point(latitude=lat, longitude=lon)
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"expected LAT,LON, got {text!r}") from e


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Walking routes through points of interest")
    parser.add_argument("points", nargs="+", type=parse_point, help="Tour stops as LAT,LON")
    parser.add_argument("--location", type=parse_point, help="Current location as LAT,LON")
    parser.add_argument("--gpx", help="Write the tour route to this GPX file")
    parser.add_argument(
        "--no-cache",
        dest="use_cache",
        action="store_false",
        help="Fetch every tour segment from the routing service",
    )
    return parser


async def plan_tour(
    pois: list[PointOfInterest],
    location: Point | None,
    use_cache: bool = True,
) -> dict[str, ConsoleRouteConsumer]:
    """Run the tour (and path to the tour) retrievals and wait for both outcomes."""
    consumers = {
        TOUR_TARGET: ConsoleRouteConsumer("Tour"),
        TO_TOUR_TARGET: ConsoleRouteConsumer("Path to closest stop"),
    }

    async with RoutingClient() as client:
        orchestrator = RouteRetrievalOrchestrator(client)
        planner = TourPlanner(
            orchestrator,
            tour_consumer=consumers[TOUR_TARGET],
            to_tour_consumer=consumers[TO_TOUR_TARGET],
        )

        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=console,
        ) as progress:
            task = progress.add_task("🗺️ Retrieving walking routes...", total=None)
            started = planner.update(pois, location, use_cache=use_cache)
            for _ in started:
                await orchestrator.dispatch_next()
            progress.remove_task(task)

    return {target: consumers[target] for target in started}


def main():
    """Main entry point."""
    load_dotenv()

    logging.basicConfig(
        level=settings.log_level,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )

    missing = settings.validate_required()
    if missing:
        console.print(Panel(
            "[red]Missing required configuration:[/red]\n" +
            "\n".join(f"  • {m}" for m in missing),
            title="Configuration Error",
            border_style="red",
        ))
        sys.exit(1)

    args = build_parser().parse_args()
    pois = [
        PointOfInterest(name=f"Stop {i}", point=point)
        for i, point in enumerate(args.points, start=1)
    ]

    results = asyncio.run(plan_tour(pois, args.location, use_cache=args.use_cache))

    tour = results.get(TOUR_TARGET)
    if tour is None or not tour.available:
        sys.exit(1)

    if args.gpx and tour.points:
        path = save_gpx_file(
            create_gpx_track("Walking tour", tour.points, stops=pois),
            args.gpx,
        )
        console.print(f"[dim]GPX written to {path}[/dim]")


if __name__ == "__main__":
    main()
