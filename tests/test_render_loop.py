import queue
from math import degrees

import pygame
import pytest

from adsb_view.airfields import Airfield
from adsb_view.geo import EARTH_RADIUS_M, Center, Position, ScreenPoint
from adsb_view.interaction import InteractionState
from adsb_view.overlays import WHITE
from adsb_view.render_loop import RenderLoop
from adsb_view.tracks import TrackStore

EAST_1000M = {'latitude': 0.0, 'longitude': degrees(1000 / EARTH_RADIUS_M)}


def make_loop(config, fonts, size=(800, 800), **kwargs):
    center = Center(Position(0.0, 0.0), ScreenPoint(0, 0), 1.0)
    return RenderLoop(pygame.Surface(size), center, TrackStore(), config, fonts=fonts, **kwargs)


class StubLoader:
    def __init__(self, airfields):
        self.airfields = airfields

    def collect(self):
        loaded, self.airfields = self.airfields, None
        return loaded


def test_missing_surface_is_fatal(config):
    with pytest.raises(RuntimeError):
        RenderLoop(None, Center(Position(0, 0), ScreenPoint(0, 0), 1.0), TrackStore(), config)


def test_anchor_recentered_on_start(config, fonts):
    loop = make_loop(config, fonts, size=(801, 601))
    assert loop.center.anchor == ScreenPoint(400, 300)


def test_frame_fits_scale_and_projects(config, fonts):
    loop = make_loop(config, fonts)
    loop.store.upsert({'icao': 1, 'callsign': "EAST", 'altitude': 1000, 'geoPosition': EAST_1000M})
    loop.store.upsert({'icao': 2, 'callsign': "NOPOS", 'altitude': 2000})
    loop.render_frame(now_ms=0)
    assert loop.center.scale == pytest.approx(800 / (1000 * config['auto_fit_margin_factor']))
    east = loop.store.get(1)
    assert east.screen_pos.x == pytest.approx(400 + 800 / config['auto_fit_margin_factor'])
    assert east.screen_pos.y == pytest.approx(400)
    assert loop.store.get(2).screen_pos is None


def test_empty_store_uses_default_scale(config, fonts):
    loop = make_loop(config, fonts)
    loop.render_frame(now_ms=0)
    assert loop.center.scale == 800 / config['default_pixels_per_meter']


def test_coarse_tick_applies_batches(config, fonts):
    batches = [[{'icao': 1, 'callsign': "A", 'altitude': 100}], [{'icao': 2, 'callsign': "B", 'altitude': 200}]]
    loop = make_loop(config, fonts, batch_source=lambda: batches.pop(0) if batches else None)
    loop.render_frame(now_ms=0)
    assert len(loop.store) == 1
    loop.render_frame(now_ms=500)
    assert len(loop.store) == 1
    loop.render_frame(now_ms=1000)
    assert len(loop.store) == 2
    loop.render_frame(now_ms=2000)
    assert len(loop.store) == 2


def test_pushed_updates_visible_next_frame(config, fonts):
    inbound = queue.Queue()
    loop = make_loop(config, fonts, inbound=inbound)
    inbound.put({'icao': 7, 'callsign': "PUSH", 'altitude': 300, 'geoPosition': EAST_1000M})
    inbound.put({'callsign': "NO ICAO"})
    assert loop.drain_inbound() == 1
    loop.render_frame(now_ms=0)
    assert loop.store.get(7).screen_pos is not None


def test_malformed_callsign_never_reaches_overlays(config, fonts, capsys):
    inbound = queue.Queue()
    loop = make_loop(config, fonts, inbound=inbound)
    inbound.put({'icao': 8, 'callsign': ["ANZ1"], 'altitude': 300})
    inbound.put({'icao': 9, 'callsign': "OK", 'altitude': "high", 'geoPosition': EAST_1000M})
    inbound.put({'icao': 10, 'callsign': "NOPOS", 'altitude': 300})
    assert loop.drain_inbound() == 1
    loop.render_frame(now_ms=0)
    assert 8 not in loop.store and 9 not in loop.store
    assert "Warning" in capsys.readouterr().out

def test_hover_and_click_through_events(config, fonts):
    loop = make_loop(config, fonts)
    loop.store.upsert({'icao': 1, 'callsign': "EAST", 'altitude': 1000, 'geoPosition': EAST_1000M})
    loop.render_frame(now_ms=0)
    track = loop.store.get(1)
    pos = (round(track.screen_pos.x), round(track.screen_pos.y))

    loop.handle_event(pygame.event.Event(pygame.MOUSEMOTION, pos=pos, rel=(0, 0), buttons=(0, 0, 0)))
    loop.render_frame(now_ms=10)
    assert track.interaction is InteractionState.HOVERING

    loop.handle_event(pygame.event.Event(pygame.MOUSEBUTTONDOWN, pos=pos, button=1))
    assert track.interaction is InteractionState.EXPANDED
    loop.handle_event(pygame.event.Event(pygame.MOUSEBUTTONDOWN, pos=pos, button=1))
    assert track.interaction is InteractionState.SUPPRESSED

    loop.handle_event(pygame.event.Event(pygame.MOUSEMOTION, pos=(0, 0), rel=(0, 0), buttons=(0, 0, 0)))
    loop.render_frame(now_ms=20)
    assert track.interaction is InteractionState.IDLE


def test_click_on_empty_map_is_noop(config, fonts):
    loop = make_loop(config, fonts)
    loop.store.upsert({'icao': 1, 'callsign': "EAST", 'altitude': 1000, 'geoPosition': EAST_1000M})
    loop.render_frame(now_ms=0)
    loop.handle_event(pygame.event.Event(pygame.MOUSEBUTTONDOWN, pos=(5, 5), button=1))
    assert loop.store.get(1).interaction is InteractionState.IDLE


def test_resize_recenters_anchor(config, fonts):
    loop = make_loop(config, fonts)
    loop.handle_event(pygame.event.Event(pygame.VIDEORESIZE, w=1025, h=700, size=(1025, 700)))
    assert loop.center.anchor == ScreenPoint(512, 350)


def test_overlays_only_on_large_surfaces(config, fonts):
    big = make_loop(config, fonts, size=(800, 800))
    big.render_frame(now_ms=0)
    assert big.surface.get_at((10, 10))[:3] == WHITE
    small = make_loop(config, fonts, size=(500, 500))
    small.render_frame(now_ms=0)
    assert small.surface.get_at((10, 10))[:3] == (0, 0, 0)


def test_airfields_replaced_in_place_when_loaded(config, fonts):
    airfields = []
    loop = make_loop(config, fonts, airfields=airfields,
                     airfield_loader=StubLoader([Airfield("NZWN", 0.0, 0.0, "Centre Field")]))
    loop.render_frame(now_ms=0)
    assert loop.poll_airfields()
    assert [a.icao for a in airfields] == ["NZWN"]
    assert not loop.poll_airfields()
    loop.render_frame(now_ms=10)
    assert loop.surface.get_at((400, 400))[:3] == (255, 255, 0)


def test_stop_handle_halts_run(config, fonts):
    config['update_tick_ms'] = 0
    config['fps'] = 1000
    calls = []

    def batch_source():
        calls.append(1)
        if len(calls) == 3: loop.stop()
        return [{'icao': len(calls), 'callsign': "RUN", 'altitude': 0}]

    loop = make_loop(config, fonts, batch_source=batch_source)
    loop.run()
    assert loop.frame_count == 3
    assert not loop.running
    assert len(loop.store) == 3


def test_quit_event_stops(config, fonts):
    loop = make_loop(config, fonts)
    loop.running = True
    loop.handle_event(pygame.event.Event(pygame.QUIT))
    assert not loop.running
