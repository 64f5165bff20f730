import json
from datetime import datetime, timezone
from math import isfinite

from .geo import Position
from .interaction import InteractionState

MAX_ICAO = 0xFFFFFF


class Track:
    """ One aircraft, keyed by its 24-bit ICAO address. pos is None while the position is unknown. """
    def __init__(self, icao, callsign=None, altitude=None, pos=None, last_contact=None):
        self.icao = icao
        self.callsign = callsign
        self.altitude = altitude
        self.pos = pos
        self.last_contact = last_contact if last_contact is not None else datetime.now(timezone.utc)
        self.screen_pos = None
        self.interaction = InteractionState.IDLE

    def __repr__(self):
        return f"Track(icao={self.icao:06X}, callsign={self.callsign!r}, altitude={self.altitude}, pos={self.pos})"


def parse_icao(value):
    if isinstance(value, bool): return None
    if isinstance(value, int): icao = value
    elif isinstance(value, str):
        try: icao = int(value.strip(), 16)
        except ValueError: return None
    else: return None
    return icao if 0 <= icao <= MAX_ICAO else None


def parse_geo_position(geo):
    """ Returns (ok, Position or None). A present but malformed geoPosition is not ok. """
    if geo is None: return True, None
    if not isinstance(geo, dict): return False, None
    lat, lon = geo.get('latitude'), geo.get('longitude')
    for v in (lat, lon):
        if isinstance(v, bool) or not isinstance(v, (int, float)): return False, None
    if not (-90 <= lat <= 90 and -180 <= lon <= 180): return False, None
    return True, Position(float(lat), float(lon))


def valid_altitude(altitude):
    if altitude is None: return True
    return isinstance(altitude, (int, float)) and not isinstance(altitude, bool) and isfinite(altitude)


def parse_update_line(line):
    """ One line of the JSON feed -> update dict, or None. """
    line = line.strip()
    if not line: return None
    try: data = json.loads(line)
    except ValueError as e:
        print(f"Warning: Dropping malformed feed line ({e}): {line[:80]}")
        return None
    if not isinstance(data, dict):
        print(f"Warning: Dropping feed line that is not an object: {line[:80]}")
        return None
    return data


class TrackStore:
    """
    Tracks in first-seen order. Mutated only from the rendering context; other
    threads hand updates over through a queue.
    """
    def __init__(self):
        self._tracks = {}

    def __len__(self):
        return len(self._tracks)

    def __contains__(self, icao):
        return icao in self._tracks

    def get(self, icao):
        return self._tracks.get(icao)

    def upsert(self, update, now=None):
        """
        Apply one inbound update. Returns the affected Track, or None when the update
        was rejected (bad icao, callsign, altitude or geoPosition); nothing is mutated then.
        """
        if not isinstance(update, dict):
            print(f"Warning: Ignoring update that is not a mapping: {update!r}")
            return None
        icao = parse_icao(update.get('icao'))
        if icao is None:
            print(f"Warning: Ignoring update without a valid icao: {update!r}")
            return None
        ok, pos = parse_geo_position(update.get('geoPosition'))
        if not ok:
            print(f"Warning: Ignoring update for {icao:06X} with malformed geoPosition: {update.get('geoPosition')!r}")
            return None
        callsign, altitude = update.get('callsign'), update.get('altitude')
        if callsign is not None and not isinstance(callsign, str):
            print(f"Warning: Ignoring update for {icao:06X} with malformed callsign: {callsign!r}")
            return None
        if not valid_altitude(altitude):
            print(f"Warning: Ignoring update for {icao:06X} with malformed altitude: {altitude!r}")
            return None
        now = now if now is not None else datetime.now(timezone.utc)
        if isinstance(callsign, str): callsign = callsign.strip()
        track = self._tracks.get(icao)
        if track is None:
            track = Track(icao, callsign, altitude, pos, now)
            self._tracks[icao] = track
            return track
        track.callsign = callsign; track.altitude = altitude
        track.pos = pos  # absent means unknown; never keep the old fix
        track.last_contact = now
        if pos is None:
            track.screen_pos = None
            if track.interaction is not InteractionState.EXPANDED: track.interaction = InteractionState.IDLE
        return track

    def upsert_batch(self, updates, now=None):
        """Apply updates in order; duplicates within the batch resolve last-write-wins."""
        applied = 0
        for update in updates:
            if self.upsert(update, now) is not None: applied += 1
        return applied

    def all(self):
        return list(self._tracks.values())

    def partition_by_position(self):
        positioned, unpositioned = [], []
        for track in self._tracks.values():
            (positioned if track.pos is not None else unpositioned).append(track)
        return positioned, unpositioned
