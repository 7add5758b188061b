"""
Geospatial helpers: great-circle distance and the geocoding seam.

Distances are in miles everywhere in this codebase because the discovery
radius filter is expressed in miles.
"""

import logging
import math
import random
from typing import Optional, Tuple

from models import GeocodeResult

logger = logging.getLogger(__name__)

EARTH_RADIUS_MILES = 3958.8

# Uptown Charlotte, the default viewer location.
CHARLOTTE_CENTER: Tuple[float, float] = (35.2271, -80.8431)


def distance_miles(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Haversine distance between two points given in decimal degrees."""

    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    dphi = math.radians(lat2 - lat1)
    dlmb = math.radians(lng2 - lng1)

    a = math.sin(dphi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(dlmb / 2) ** 2
    # a can drift a hair above 1.0 for antipodal points
    return 2 * EARTH_RADIUS_MILES * math.asin(math.sqrt(min(1.0, a)))


class GeocodeFailure(Exception):
    """Raised when an address cannot be turned into coordinates."""


class Geocoder:
    """Address -> coordinates. Implementations live outside the core."""

    def geocode(self, address: str) -> GeocodeResult:
        raise NotImplementedError


class ApproximateGeocoder(Geocoder):
    """Stand-in geocoder: the configured center plus a small random offset.

    Results are flagged `approximation=True`. Nothing in the core relies on
    their accuracy.
    """

    def __init__(
        self,
        center: Tuple[float, float] = CHARLOTTE_CENTER,
        spread: float = 0.1,
        rng: Optional[random.Random] = None,
    ):
        self.center = center
        self.spread = spread
        self.rng = rng or random.Random()

    def geocode(self, address: str) -> GeocodeResult:
        if not address or not address.strip():
            raise GeocodeFailure("Address is required")

        lat = self.center[0] + (self.rng.random() - 0.5) * self.spread
        lng = self.center[1] + (self.rng.random() - 0.5) * self.spread
        logger.debug("Approximated %r to (%.6f, %.6f)", address, lat, lng)
        return GeocodeResult(lat=f"{lat:.6f}", lng=f"{lng:.6f}", approximation=True)
