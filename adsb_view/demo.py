# Built-in traffic around Wellington for running the view without a receiver.

from .geo import Center, Position, ScreenPoint

DEMO_CENTER = Position(-41.294260, 174.776858)

# icao, callsign, altitude ft, lat, lon, (d_alt, d_lat, d_lon) per tick
DEMO_AIRCRAFT = [
    (0x8723C8, "ANZ100", 0, -41.326694, 174.806931, (1, 0.0005, 0.0)),
    (0x8723D8, "ANZ200", 1000, -41.287131, 174.723534, (-1, 0.0, 0.0005)),
    (0x8723B8, "ANZ300", 9500, -41.261161, 174.929136, (0, -0.001, 0.0)),
]
# Reports identity and altitude only, so it only ever appears in the no-position table
DEMO_NO_POSITION = (0x7C1234, "QFA45", 37000)


def create_demo_center(scale):
    return Center(DEMO_CENTER, ScreenPoint(0, 0), scale)


class DemoFeed:
    def __init__(self):
        self.state = [[icao, callsign, alt, lat, lon, step] for icao, callsign, alt, lat, lon, step in DEMO_AIRCRAFT]
        self.ticks = 0

    def next_batch(self):
        """Updates for the next coarse tick. The first batch introduces every aircraft unmoved."""
        if self.ticks > 0:
            for ac in self.state:
                d_alt, d_lat, d_lon = ac[5]
                ac[2] += d_alt; ac[3] += d_lat; ac[4] += d_lon
        self.ticks += 1
        batch = [{'icao': icao, 'callsign': callsign, 'altitude': alt,
                  'geoPosition': {'latitude': lat, 'longitude': lon}}
                 for icao, callsign, alt, lat, lon, _ in self.state]
        icao, callsign, alt = DEMO_NO_POSITION
        batch.append({'icao': icao, 'callsign': callsign, 'altitude': alt})
        return batch
