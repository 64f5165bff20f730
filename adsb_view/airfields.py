import csv
import threading
import traceback

from .geo import Position


class Airfield:
    __slots__ = ('icao', 'position', 'name')

    def __init__(self, icao, lat, lon, name):
        self.icao = icao
        self.position = Position(lat, lon)
        self.name = name

    def __repr__(self):
        return f"Airfield({self.icao!r}, {self.position}, {self.name!r})"


def load_airfields(filename):
    """ Rows of icao,lat,lon,name. Bad rows are skipped; an unreadable file gives []. """
    data = []
    try:
        with open(filename, mode='r', encoding='utf-8', newline='') as f:
            r = csv.DictReader(f); c, s = 0, 0
            for row in r:
                try:
                    icao, lat, lon = (row.get('icao') or '').strip(), float(row['lat']), float(row['lon'])
                    if icao and -90 <= lat <= 90 and -180 <= lon <= 180:
                        data.append(Airfield(icao, lat, lon, (row.get('name') or '').strip())); c += 1
                    else: s += 1
                except (ValueError, TypeError, KeyError): s += 1
        print(f"Loaded {c} airfields from {filename}. Skipped {s} rows.")
        return data
    except FileNotFoundError: print(f"Error: Airfields file not found: {filename}"); return []
    except (OSError, csv.Error, UnicodeDecodeError) as e:
        print(f"Error loading airfields: {e}"); traceback.print_exc(); return []


class AirfieldLoader:
    """
    Loads the reference set on a background thread. The render loop polls
    collect() once per frame; until then the airfield list stays as it was.
    """
    def __init__(self, filename):
        self.filename = filename
        self.result = [None]
        self.thread = None

    def start(self):
        self.result[:] = [None]
        self.thread = threading.Thread(target=self._load_target, daemon=True)
        self.thread.start()
        return self

    def _load_target(self):
        self.result[:] = [load_airfields(self.filename)]

    def done(self):
        return self.thread is not None and not self.thread.is_alive()

    def collect(self):
        """Loaded list once, then None."""
        if not self.done(): return None
        loaded = self.result[0]
        self.result[:] = [None]; self.thread = None
        return loaded
