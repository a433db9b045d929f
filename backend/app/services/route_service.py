"""
Route planning service.

Owns every write to routes and stops: creation, stop management,
optimization and the status lifecycles of both.
"""
import logging
import uuid
from datetime import date, datetime, timezone
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.exceptions import (
    InsufficientDataException,
    InvalidStatusTransitionException,
    RouteNotFoundException,
    StopNotFoundException,
    ValidationException,
)
from app.models.route import Route, RouteStatus
from app.models.stop import Stop, StopStatus
from app.services.csv_import import ImportResult, parse_stop_rows, read_rows
from app.services.geocoding import GeocodingClient, geocoding_client
from app.services.reporting.timing import parse_timestamp
from app.services.routing import Coordinate, OptimizationResult, RouteOptimizer, route_optimizer

logger = logging.getLogger(__name__)

MIN_STOPS_FOR_OPTIMIZATION = 2


def _now() -> datetime:
    return datetime.now(timezone.utc)


class RouteService:
    """Route and stop operations bound to one database session."""

    def __init__(self, db: AsyncSession, optimizer: Optional[RouteOptimizer] = None):
        self.db = db
        self.optimizer = optimizer or route_optimizer

    # =========================================================================
    # Loading
    # =========================================================================

    async def get_route(self, route_id: uuid.UUID) -> Route:
        """Get a route with its stops in visit order."""
        result = await self.db.execute(
            select(Route)
            .options(selectinload(Route.stops))
            .where(Route.id == route_id)
            .execution_options(populate_existing=True)
        )
        route = result.scalar_one_or_none()
        if not route:
            raise RouteNotFoundException(str(route_id))
        return route

    async def find_route_for_date(self, user_id: str, route_date: date) -> Optional[Route]:
        result = await self.db.execute(
            select(Route)
            .options(selectinload(Route.stops))
            .where(Route.user_id == user_id, Route.date == route_date)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def get_route_for_date(self, user_id: str, route_date: date) -> Route:
        route = await self.find_route_for_date(user_id, route_date)
        if not route:
            raise RouteNotFoundException(f"{user_id}/{route_date.isoformat()}")
        return route

    async def list_routes(self, user_id: str) -> list[Route]:
        """A user's routes, newest date first."""
        result = await self.db.execute(
            select(Route)
            .options(selectinload(Route.stops))
            .where(Route.user_id == user_id)
            .order_by(Route.date.desc())
        )
        return list(result.scalars().all())

    @staticmethod
    def _find_stop(route: Route, stop_id: uuid.UUID) -> Stop:
        for stop in route.stops:
            if stop.id == stop_id:
                return stop
        raise StopNotFoundException(str(stop_id))

    @staticmethod
    def _renumber(route: Route, ordered: list[Stop]) -> None:
        for index, stop in enumerate(ordered):
            stop.order = index
        route.stops = list(ordered)

    # =========================================================================
    # Routes
    # =========================================================================

    async def create_route(self, user_id: str, route_date: date, name: Optional[str] = None) -> Route:
        """
        Create the user's route for a date.

        Only one route exists per user and date; the existing one is returned
        if present.
        """
        existing = await self.find_route_for_date(user_id, route_date)
        if existing:
            logger.debug(f"Route for {user_id} on {route_date} already exists: {existing.id}")
            return existing

        route = Route(user_id=user_id, date=route_date, name=name, status=RouteStatus.PLANNING)
        self.db.add(route)
        await self.db.commit()
        logger.info(f"Created route {route.id} for {user_id} on {route_date}")
        return await self.get_route(route.id)

    async def update_status(self, route_id: uuid.UUID, status: RouteStatus) -> Route:
        """Move a route through planning -> active -> completed, or cancel it."""
        route = await self.get_route(route_id)

        if not route.status.can_transition_to(status):
            raise InvalidStatusTransitionException("route", route.status.value, status.value)

        route.status = status
        if status == RouteStatus.ACTIVE and route.started_at is None:
            route.started_at = _now()
        elif status == RouteStatus.COMPLETED:
            route.completed_at = _now()

        await self.db.commit()
        logger.info(f"Route {route_id} is now {status.value}")
        return await self.get_route(route_id)

    # =========================================================================
    # Stops
    # =========================================================================

    async def add_stop(
        self,
        route_id: uuid.UUID,
        address: str,
        latitude: float,
        longitude: float,
        name: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> Stop:
        """Append a pending stop at the end of the visit order."""
        route = await self.get_route(route_id)

        stop = Stop(
            address=address,
            name=name,
            latitude=latitude,
            longitude=longitude,
            notes=notes,
            order=len(route.stops),
            status=StopStatus.PENDING,
        )
        route.stops.append(stop)
        await self.db.commit()
        await self.db.refresh(stop)
        return stop

    async def import_stops_csv(
        self,
        route_id: uuid.UUID,
        content: bytes,
        geocoder: Optional[GeocodingClient] = None,
    ) -> ImportResult:
        """
        Append stops read from a CSV with an address column and an optional
        name column.

        Each address goes through the throttled geocoder, so a file takes
        about a second per row. Addresses that cannot be located are reported
        as warnings and skipped.

        Raises:
            RouteNotFoundException: If the route does not exist
            CSVImportError: If the upload is not readable CSV
        """
        await self.get_route(route_id)
        geocoder = geocoder or geocoding_client
        result = ImportResult()

        rows = parse_stop_rows(read_rows(content))
        if not rows:
            result.errors.append('No valid addresses found in CSV. Make sure you have an "address" column.')
            return result

        for row in rows:
            matches = await geocoder.search(row.address, limit=1)
            if not matches:
                result.warnings.append(f'Row {row.line}: Could not geocode "{row.address}"')
                continue
            stop = await self.add_stop(
                route_id,
                address=row.address,
                latitude=matches[0].latitude,
                longitude=matches[0].longitude,
                name=row.name,
            )
            result.created.append(stop)

        if not result.created:
            result.errors.append("No addresses could be geocoded.")

        logger.info(
            f"Imported {len(result.created)} of {len(rows)} stops into route {route_id}",
            extra={"warnings": len(result.warnings)},
        )
        return result

    async def remove_stop(self, route_id: uuid.UUID, stop_id: uuid.UUID) -> Route:
        """Delete a stop and close the gap in the visit order."""
        route = await self.get_route(route_id)
        stop = self._find_stop(route, stop_id)

        remaining = [s for s in route.stops if s.id != stop.id]
        self._renumber(route, remaining)
        await self.db.commit()
        return await self.get_route(route_id)

    async def reorder_stops(self, route_id: uuid.UUID, from_index: int, to_index: int) -> Route:
        """Move the stop at from_index to to_index, shifting the others."""
        route = await self.get_route(route_id)
        stops = list(route.stops)

        if from_index >= len(stops) or to_index >= len(stops):
            raise ValidationException(
                f"Stop index out of range (route has {len(stops)} stops)",
                details={"from_index": from_index, "to_index": to_index, "stops": len(stops)},
            )

        moved = stops.pop(from_index)
        stops.insert(to_index, moved)
        self._renumber(route, stops)
        await self.db.commit()
        return await self.get_route(route_id)

    async def optimize_route(
        self,
        route_id: uuid.UUID,
        start: Optional[Coordinate] = None,
    ) -> tuple[Route, OptimizationResult]:
        """
        Reorder a route's stops into an optimized visit sequence.

        Without `start` the current first stop is the fixed starting point.
        With `start` (e.g. the worker's location) every stop can move.
        """
        route = await self.get_route(route_id)
        stops = list(route.stops)

        if len(stops) < MIN_STOPS_FOR_OPTIMIZATION:
            raise InsufficientDataException("stops", MIN_STOPS_FOR_OPTIMIZATION, len(stops))

        points = [Coordinate(s.latitude, s.longitude) for s in stops]
        if start is not None:
            result = await self.optimizer.optimize_from(start, points)
        else:
            result = await self.optimizer.optimize(points)

        self._renumber(route, [stops[i] for i in result.order])
        route.optimized_order = list(result.order)
        route.total_distance = result.total_distance_m
        route.total_duration = result.total_duration_s

        await self.db.commit()
        logger.info(
            f"Optimized route {route_id} ({result.source}): {len(stops)} stops, "
            f"{result.total_distance_m:.0f} m, {result.total_duration_s:.0f} s"
        )
        return await self.get_route(route_id), result

    # =========================================================================
    # Stop lifecycle
    # =========================================================================

    @staticmethod
    def _transition(stop: Stop, status: StopStatus) -> None:
        if not stop.status.can_transition_to(status):
            raise InvalidStatusTransitionException("stop", stop.status.value, status.value)
        stop.status = status

    async def mark_arrived(
        self,
        route_id: uuid.UUID,
        stop_id: uuid.UUID,
        at: Optional[datetime] = None,
    ) -> Stop:
        route = await self.get_route(route_id)
        stop = self._find_stop(route, stop_id)

        self._transition(stop, StopStatus.IN_PROGRESS)
        stop.arrived_at = parse_timestamp(at) or _now()

        await self.db.commit()
        await self.db.refresh(stop)
        return stop

    async def mark_departed(
        self,
        route_id: uuid.UUID,
        stop_id: uuid.UUID,
        at: Optional[datetime] = None,
    ) -> Stop:
        """Complete a stop. A stop departed without arrival gets arrived_at = departed_at."""
        route = await self.get_route(route_id)
        stop = self._find_stop(route, stop_id)

        departed_at = parse_timestamp(at) or _now()
        arrived_at = parse_timestamp(stop.arrived_at)
        if arrived_at is not None and departed_at < arrived_at:
            raise ValidationException(
                "Departure cannot be earlier than arrival",
                details={"arrived_at": arrived_at.isoformat(), "departed_at": departed_at.isoformat()},
            )

        self._transition(stop, StopStatus.COMPLETED)
        stop.departed_at = departed_at
        if arrived_at is None:
            stop.arrived_at = departed_at

        await self.db.commit()
        await self.db.refresh(stop)
        return stop

    async def mark_skipped(self, route_id: uuid.UUID, stop_id: uuid.UUID) -> Stop:
        route = await self.get_route(route_id)
        stop = self._find_stop(route, stop_id)

        self._transition(stop, StopStatus.SKIPPED)

        await self.db.commit()
        await self.db.refresh(stop)
        return stop
