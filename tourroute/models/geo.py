"""Geographic value types shared by the routing tools and pipeline."""

from pydantic import BaseModel, Field


class Point(BaseModel):
    """GPS coordinates."""
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)
    
    class Config:
        frozen = True
    
    def as_tuple(self) -> tuple[float, float]:
        return (self.latitude, self.longitude)
    
    @classmethod
    def from_tuple(cls, coords: tuple[float, float]) -> "Point":
        return cls(latitude=coords[0], longitude=coords[1])


class EndpointPair(BaseModel):
    """Directed (start, end) pair used as the route cache key.
    
    (A, B) and (B, A) are different keys.
    """
    start: Point
    end: Point
    
    class Config:
        frozen = True


class Route(BaseModel):
    """Waypoints of one fetched segment, excluding the requested endpoints."""
    waypoints: tuple[Point, ...] = ()
    
    class Config:
        frozen = True
    
    def __len__(self) -> int:
        return len(self.waypoints)


class PointOfInterest(BaseModel):
    """A selectable stop on a walking tour."""
    
    name: str
    point: Point
    description: str | None = None
    
    class Config:
        frozen = True
        json_schema_extra = {
            "example": {
                "name": "Rose Garden",
                "point": {"latitude": 49.2693, "longitude": -123.2559},
                "description": "Terraced garden above the bay",
            }
        }
