"""
Geodesic helpers for lon/lat positions.
"""

import numpy as np

EARTH_RADIUS_M = 6_371_000.0

Position = tuple[float, float]


def haversine_m(a: Position, b: Position) -> float:
    """Great-circle distance in metres between two (lon, lat) positions."""
    return float(haversine_many(a, np.asarray([b], dtype=float))[0])


def haversine_many(origin: Position, points: np.ndarray) -> np.ndarray:
    """
    Distances in metres from ``origin`` to each row of ``points``.

    Args:
        origin: (lon, lat) in degrees
        points: Array of shape (n, 2) holding (lon, lat) rows in degrees

    Returns:
        Array of shape (n,)
    """
    points = np.asarray(points, dtype=float).reshape(-1, 2)
    lon1, lat1 = np.radians(origin[0]), np.radians(origin[1])
    lon2 = np.radians(points[:, 0])
    lat2 = np.radians(points[:, 1])

    dlon = lon2 - lon1
    dlat = lat2 - lat1
    h = (
        np.sin(dlat / 2.0) ** 2
        + np.cos(lat1) * np.cos(lat2) * np.sin(dlon / 2.0) ** 2
    )
    return 2.0 * EARTH_RADIUS_M * np.arcsin(np.sqrt(np.clip(h, 0.0, 1.0)))


def nearest_index(origin: Position, points: np.ndarray) -> int:
    """Index of the row in ``points`` closest to ``origin``."""
    if len(points) == 0:
        raise ValueError("No candidate positions")
    return int(np.argmin(haversine_many(origin, points)))


def interpolate(a: Position, b: Position, fraction: float) -> Position:
    """Linear interpolation between two positions (short segments only)."""
    fraction = min(max(fraction, 0.0), 1.0)
    return (
        a[0] + (b[0] - a[0]) * fraction,
        a[1] + (b[1] - a[1]) * fraction,
    )
