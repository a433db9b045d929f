"""
Address lookup API routes.
"""
from typing import Optional

from fastapi import APIRouter, Query
from pydantic import BaseModel

from app.services.geocoding import geocoding_client

router = APIRouter(prefix="/geocode", tags=["geocoding"])


class GeocodingResultSchema(BaseModel):
    address: str
    display_name: str
    latitude: float
    longitude: float
    type: Optional[str] = None
    importance: float = 0.0

    class Config:
        from_attributes = True


@router.get("/search", response_model=list[GeocodingResultSchema])
async def search_addresses(
    q: str = Query(..., min_length=1, description="Free-text address"),
    limit: int = Query(5, ge=1, le=20),
) -> list[GeocodingResultSchema]:
    """Search addresses. Returns an empty list when the geocoder is unavailable."""
    results = await geocoding_client.search(q, limit)
    return [GeocodingResultSchema.model_validate(r) for r in results]


@router.get("/reverse", response_model=Optional[GeocodingResultSchema])
async def reverse_geocode(
    lat: float = Query(..., ge=-90, le=90),
    lng: float = Query(..., ge=-180, le=180),
) -> Optional[GeocodingResultSchema]:
    result = await geocoding_client.reverse(lat, lng)
    return GeocodingResultSchema.model_validate(result) if result else None
