"""Configuration management."""

import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, Field


# Load environment variables from .env file
env_path = Path(__file__).parent.parent / ".env"
load_dotenv(env_path)

# YOURS routing API (http://wiki.openstreetmap.org/wiki/YOURS)
DEFAULT_ROUTING_URL = "http://www.yournavigation.org/api/1.0/gosmore.php"


class Settings(BaseModel):
    """Application settings."""
    
    # Routing service
    routing_url: str = Field(
        default_factory=lambda: os.getenv("TOURROUTE_ROUTING_URL", DEFAULT_ROUTING_URL)
    )
    routing_client_name: str | None = Field(
        default_factory=lambda: os.getenv("TOURROUTE_CLIENT_NAME", "tourroute")
    )
    routing_timeout_seconds: float = Field(
        default_factory=lambda: float(os.getenv("TOURROUTE_TIMEOUT_SECONDS", "30"))
    )
    
    # Fixed query options: walking, shortest path. "fastest" gives different
    # routes between the same two points depending on the direction travelled.
    travel_mode: str = "foot"
    route_type_fast: int = 0
    response_format: str = "geojson"
    layer: str = "mapnik"
    
    # Logging
    log_level: str = Field(
        default_factory=lambda: os.getenv("TOURROUTE_LOG_LEVEL", "INFO")
    )
    
    def validate_required(self) -> list[str]:
        """Check for missing required configuration."""
        missing = []
        
        if not self.routing_url:
            missing.append("TOURROUTE_ROUTING_URL")
        if not self.routing_client_name:
            missing.append("TOURROUTE_CLIENT_NAME")
        
        return missing


# Global settings instance
settings = Settings()
