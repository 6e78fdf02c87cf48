from __future__ import annotations

from typing import Optional

from ..common.geo import haversine_distance
from ..common.numbers import round_half_up
from ..core.exceptions import ValidationError
from ..settings.model import OfficeSettings


def distance_from_office(office: OfficeSettings, latitude: float, longitude: float) -> Optional[float]:
    """Metres between the point and the office, None when no geofence is configured."""
    if not office.geofence_enabled:
        return None
    return haversine_distance(office.latitude, office.longitude, latitude, longitude)


def ensure_within_radius(office: OfficeSettings, latitude: Optional[float], longitude: Optional[float]) -> Optional[float]:
    """Reject coordinates outside the office radius. A point exactly on the radius is inside."""
    if latitude is None or longitude is None:
        raise ValidationError("Location permission is required to check in.")

    distance = distance_from_office(office, latitude, longitude)
    if distance is not None and distance > office.radius_meters:
        raise ValidationError(
            f"You are outside the attendance radius ({round_half_up(distance)}m from the office, "
            f"maximum {round_half_up(office.radius_meters)}m)."
        )
    return distance
