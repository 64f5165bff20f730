"""
Frame-driven orchestration of the radar view.

Everything runs on the thread that owns the pygame window: input events, inbound
updates drained from the queue, airfield loading results and the frame itself are
handled one after another, so the TrackStore and Center need no locking. Each frame:

    1. clear the surface
    2. auto-fit Center.scale to the positioned tracks
    3. scale-reference indicator
    4. reproject every positioned track
    5. draw each positioned track, then update its hover state from the pointer
    6. stats overlay and no-position table (large surfaces only)
    7. airfields inside the view
    8. on the coarse tick, apply the next batch from the batch source
"""
import queue
import time

import pygame

from .common import add_log, format_icao
from .geo import auto_fit_scale, project, recenter, visible
from .interaction import InteractionController
from .overlays import (BLACK, draw_airfield, draw_no_position_table, draw_scale_indicator, draw_stats, draw_track,
                       load_fonts)


class RenderLoop:
    def __init__(self, surface, center, store, config, airfields=None, batch_source=None, inbound=None,
                 airfield_loader=None, fonts=None):
        if surface is None:
            raise RuntimeError("No drawing surface available; cannot start the radar view.")
        self.surface = surface
        self.center = center
        self.store = store
        self.config = config
        self.airfields = airfields if airfields is not None else []
        self.batch_source = batch_source
        self.inbound = inbound
        self.airfield_loader = airfield_loader
        self.font, self.small_font = fonts if fonts is not None else load_fonts()
        self.controller = InteractionController(config['hover_radius_px'])
        self.pointer = None
        self.running = False
        self.frame_count = 0
        self.last_tick_ms = None  # None: the first frame applies a batch straight away
        self.clock = pygame.time.Clock()
        recenter(self.center, *self.surface.get_size())

    def stop(self):
        self.running = False

    # --- Input (between frames) ---
    def handle_event(self, event):
        if event.type == pygame.QUIT: self.stop()
        elif event.type == pygame.KEYDOWN and event.key == pygame.K_ESCAPE: self.stop()
        elif event.type == pygame.MOUSEMOTION: self.pointer = event.pos
        elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
            self.pointer = event.pos
            clicked = self.controller.on_click(self.store.all(), event.pos[0], event.pos[1], self.pointer)
            if clicked is not None: add_log(f"{format_icao(clicked.icao)} panel -> {clicked.interaction.value}")
        elif event.type == pygame.VIDEORESIZE: self.resize(event.w, event.h)

    def resize(self, width, height):
        recenter(self.center, width, height)

    def drain_inbound(self, now=None):
        """Apply every update pushed since the last frame. Returns how many were accepted."""
        if self.inbound is None: return 0
        applied = 0
        while True:
            try: update = self.inbound.get_nowait()
            except queue.Empty: break
            if self.store.upsert(update, now) is not None: applied += 1
        return applied

    def poll_airfields(self):
        if self.airfield_loader is None: return False
        loaded = self.airfield_loader.collect()
        if loaded is None: return False
        self.airfields[:] = loaded
        add_log(f"Airfield set updated ({len(loaded)} airfields).")
        return True

    # --- Frame ---
    def tick_due(self, now_ms):
        if self.last_tick_ms is None or now_ms - self.last_tick_ms >= self.config['update_tick_ms']:
            self.last_tick_ms = now_ms
            return True
        return False

    def apply_next_batch(self):
        if self.batch_source is None: return 0
        batch = self.batch_source()
        if not batch: return 0
        return self.store.upsert_batch(batch)

    def render_frame(self, now_ms=None):
        if now_ms is None: now_ms = time.perf_counter() * 1000.0
        surface = self.surface; width, height = surface.get_size()
        surface.fill(BLACK)
        positioned, unpositioned = self.store.partition_by_position()
        auto_fit_scale(self.center, positioned, width, self.config['default_pixels_per_meter'],
                       self.config['auto_fit_margin_factor'])
        draw_scale_indicator(surface, self.small_font, self.center)
        for track in positioned:
            track.screen_pos = project(self.center, track.pos)
        for track in positioned:
            draw_track(surface, self.font, track, self.controller.is_expanded(track))
            if self.pointer is not None: self.controller.on_pointer_move(track, *self.pointer)
        threshold = self.config['overlay_visibility_threshold']
        if width > threshold and height > threshold:
            draw_stats(surface, self.font, self.store.all())
            draw_no_position_table(surface, self.small_font, unpositioned)
        for airfield in self.airfields:
            if visible(self.center, airfield.position): draw_airfield(surface, self.small_font, airfield, self.center)
        if self.tick_due(now_ms): self.apply_next_batch()
        self.frame_count += 1

    def run(self):
        """Render until stop() is called or the window is closed."""
        self.running = True
        add_log("Render loop started.")
        while self.running:
            for event in pygame.event.get(): self.handle_event(event)
            self.drain_inbound()
            self.poll_airfields()
            if not self.running: break
            self.render_frame()
            if self.surface is pygame.display.get_surface(): pygame.display.flip()
            self.clock.tick(self.config['fps'])
        add_log(f"Render loop stopped after {self.frame_count} frames.")
