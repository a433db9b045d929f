"""
Client for an external VROOM / OpenRouteService optimization endpoint.

Features:
- Exponential backoff retry logic
- Configurable timeouts
- Strict validation of the returned visit order
"""
import asyncio
import logging
from typing import Optional

import httpx

from app.core.config import settings
from app.services.routing.geo import Coordinate, path_distance_m
from app.services.routing.nearest_neighbor import OptimizationResult

logger = logging.getLogger(__name__)


class OptimizationServiceError(Exception):
    """Optimization service error."""

    def __init__(self, message: str, code: Optional[int] = None, details: Optional[dict] = None):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(message)


class OptimizationClient:
    """
    Single-vehicle TSP over the VROOM job/vehicle payload.

    Point 0 is the vehicle's start and end; every other point becomes a job
    whose id is its index in the input list.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
        profile: Optional[str] = None,
        timeout_seconds: Optional[float] = None,
        max_retries: Optional[int] = None,
        retry_base_delay: Optional[float] = None,
    ):
        url = base_url if base_url is not None else settings.OPTIMIZATION_URL
        self.base_url = url.rstrip("/") if url else None
        self.api_key = api_key if api_key is not None else settings.OPTIMIZATION_API_KEY
        self.profile = profile or settings.OPTIMIZATION_PROFILE
        self.timeout = httpx.Timeout(
            timeout_seconds if timeout_seconds is not None else settings.OPTIMIZATION_TIMEOUT_SECONDS,
            connect=5.0,
        )
        self.max_retries = max(1, max_retries if max_retries is not None else settings.OPTIMIZATION_MAX_RETRIES)
        self.retry_base_delay = (
            retry_base_delay if retry_base_delay is not None else settings.OPTIMIZATION_RETRY_BASE_DELAY
        )

    @property
    def is_configured(self) -> bool:
        return bool(self.base_url)

    def _headers(self) -> dict:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = self.api_key
        return headers

    def build_request(self, points: list[Coordinate]) -> dict:
        """Build the job/vehicle payload for `points`."""
        start = [points[0].longitude, points[0].latitude]
        return {
            "jobs": [
                {"id": idx, "location": [p.longitude, p.latitude]}
                for idx, p in enumerate(points[1:], start=1)
            ],
            "vehicles": [
                {
                    "id": 1,
                    "profile": self.profile,
                    "start": start,
                    "end": start,
                }
            ],
        }

    def parse_response(self, data: dict, points: list[Coordinate]) -> OptimizationResult:
        """
        Convert a solution payload into an OptimizationResult.

        Raises:
            OptimizationServiceError: If the payload is empty or the job
                sequence is not a permutation of the submitted jobs
        """
        if not isinstance(data, dict):
            raise OptimizationServiceError("Malformed optimization response")

        code = data.get("code", 0)
        if code != 0:
            raise OptimizationServiceError(
                f"Optimization service returned error: {data.get('error', 'unknown error')}",
                code=code,
                details=data,
            )

        routes = data.get("routes") or []
        if not routes:
            raise OptimizationServiceError("No routes returned", details=data)

        route = routes[0]
        steps = route.get("steps") or []
        job_ids = [step.get("job", step.get("id")) for step in steps if step.get("type") == "job"]

        expected = set(range(1, len(points)))
        if len(job_ids) != len(expected) or set(job_ids) != expected:
            raise OptimizationServiceError(
                "Optimization response does not visit every stop exactly once",
                details={"jobs": job_ids, "unassigned": data.get("unassigned", [])},
            )

        order = [0] + job_ids

        distance = route.get("distance")
        if distance is None:
            distance = path_distance_m([points[i] for i in order])
        duration = route.get("duration")
        if duration is None:
            raise OptimizationServiceError("Optimization response has no duration", details=route)

        return OptimizationResult(
            order=order,
            total_distance_m=float(distance),
            total_duration_s=float(duration),
            source="service",
        )

    async def _request_with_retry(self, request_data: dict) -> dict:
        """
        POST the payload with exponential backoff retry.

        Raises:
            OptimizationServiceError: If all retries fail
        """
        last_error: Optional[Exception] = None

        for attempt in range(self.max_retries):
            try:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.post(
                        self.base_url,
                        json=request_data,
                        headers=self._headers(),
                    )
                    response.raise_for_status()
                    return response.json()

            except httpx.HTTPStatusError as e:
                last_error = e
                logger.warning(
                    f"Optimization HTTP error (attempt {attempt + 1}/{self.max_retries}): "
                    f"{e.response.status_code}"
                )
            except httpx.RequestError as e:
                last_error = e
                logger.warning(f"Optimization network error (attempt {attempt + 1}/{self.max_retries}): {e}")
            except ValueError as e:
                last_error = e
                logger.warning(f"Optimization response is not JSON (attempt {attempt + 1}/{self.max_retries}): {e}")

            if attempt < self.max_retries - 1:
                delay = self.retry_base_delay * (2**attempt)
                logger.info(f"Retrying optimization in {delay}s...")
                await asyncio.sleep(delay)

        raise OptimizationServiceError(
            f"Optimization failed after {self.max_retries} attempts: {last_error}"
        )

    async def optimize(self, points: list[Coordinate]) -> OptimizationResult:
        """
        Ask the external service for a visit order.

        Raises:
            OptimizationServiceError: If the service is not configured,
                unreachable, or returns an unusable payload
        """
        if not self.is_configured:
            raise OptimizationServiceError("Optimization service is not configured")

        data = await self._request_with_retry(self.build_request(points))
        return self.parse_response(data, points)

    async def health_check(self) -> bool:
        """Check if the optimization service answers a minimal request."""
        if not self.is_configured:
            return False
        request_data = self.build_request(
            [Coordinate(40.7128, -74.0060), Coordinate(40.7138, -74.0050)]
        )
        try:
            async with httpx.AsyncClient(timeout=httpx.Timeout(10.0)) as client:
                response = await client.post(self.base_url, json=request_data, headers=self._headers())
                response.raise_for_status()
                return response.json().get("code", 0) == 0
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Optimization health check failed: {e}")
            return False


optimization_client = OptimizationClient()
