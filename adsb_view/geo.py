"""
Spherical distance/bearing math and the screen projection around a moving Center.

Positions are (latitude, longitude) in degrees on a sphere of radius EARTH_RADIUS_M.
Screen coordinates are pixels from the surface's top-left corner, y growing downwards.
"""
import collections
from math import radians, sin, cos, atan2, sqrt, floor

import numpy as np

EARTH_RADIUS_M = 6371000.0

Position = collections.namedtuple('Position', ['latitude', 'longitude'])
ScreenPoint = collections.namedtuple('ScreenPoint', ['x', 'y'])


class Center:
    """ Geographic reference of the view: pos is drawn at anchor, scale is pixels per meter. """
    def __init__(self, pos, anchor, scale):
        self.pos = pos
        self.anchor = anchor
        self.scale = scale

    def __repr__(self):
        return f"Center(pos={self.pos}, anchor={self.anchor}, scale={self.scale})"


def distance(a, b):
    """Haversine distance in meters."""
    lat1, lat2 = radians(a.latitude), radians(b.latitude)
    dlat = lat2 - lat1; dlon = radians(b.longitude - a.longitude)
    h = sin(dlat / 2) ** 2 + cos(lat1) * cos(lat2) * sin(dlon / 2) ** 2
    return EARTH_RADIUS_M * 2 * atan2(sqrt(h), sqrt(1 - h))


def bearing(a, b):
    """Initial great-circle bearing from a to b in radians, (-pi, pi], 0 is north."""
    lat1, lat2 = radians(a.latitude), radians(b.latitude)
    dlon = radians(b.longitude - a.longitude)
    y = sin(dlon) * cos(lat2)
    x = cos(lat1) * sin(lat2) - sin(lat1) * cos(lat2) * cos(dlon)
    return atan2(y, x)


def distances_from(origin, positions):
    """Vectorised haversine from origin to every position, as a numpy array of meters."""
    if not positions: return np.zeros(0)
    coords = np.radians(np.array([(p.latitude, p.longitude) for p in positions], dtype=float))
    lat1 = radians(origin.latitude); lon1 = radians(origin.longitude)
    dlat = coords[:, 0] - lat1; dlon = coords[:, 1] - lon1
    h = np.sin(dlat / 2) ** 2 + cos(lat1) * np.cos(coords[:, 0]) * np.sin(dlon / 2) ** 2
    return EARTH_RADIUS_M * 2 * np.arctan2(np.sqrt(h), np.sqrt(1 - h))


def project(center, pos):
    d = distance(center.pos, pos)
    theta = bearing(center.pos, pos)
    dx = d * sin(theta)
    dy = -d * cos(theta)  # north is up
    return ScreenPoint(center.anchor.x + dx * center.scale, center.anchor.y + dy * center.scale)


def visible(center, pos):
    # Anchor sits at the surface midpoint, so the surface spans [0, 2*anchor).
    pt = project(center, pos)
    return 0 <= pt.x < 2 * center.anchor.x and 0 <= pt.y < 2 * center.anchor.y


def recenter(center, width, height):
    center.anchor = ScreenPoint(floor(width / 2), floor(height / 2))


def auto_fit_scale(center, positioned_tracks, surface_width, default_pixels_per_meter, margin_factor):
    """
    Pick the pixels-per-meter value that keeps the farthest positioned track
    (times margin_factor) inside surface_width, store it on center and return it.
    With nothing to fit, fall back to surface_width / default_pixels_per_meter.
    """
    farthest = 0.0
    if positioned_tracks:
        farthest = float(np.max(distances_from(center.pos, [t.pos for t in positioned_tracks])))
    if farthest > 0:
        center.scale = surface_width / (farthest * margin_factor)
    else:
        center.scale = surface_width / default_pixels_per_meter
    return center.scale


SCALE_BAR_STEPS = (1, 2, 5)


def scale_bar(scale, max_px):
    """Longest 1-2-5 series length (meters) whose bar fits in max_px. Returns (meters, pixels)."""
    if scale <= 0 or max_px <= 0: return None
    meters = 1.0; best = None
    while meters * scale <= max_px:
        for step in SCALE_BAR_STEPS:
            length = meters * step
            if length * scale <= max_px: best = length
        meters *= 10
    if best is None: return None
    return best, best * scale
