"""
Pointer-driven detail-panel state for each track.

A track's panel is either compact (identity + altitude) or expanded. The state is a
single enumerated value so hover and click can never disagree:

    IDLE        pointer away, panel compact
    HOVERING    pointer within the hover radius, panel expanded
    EXPANDED    pinned open by a click, ignores the pointer
    SUPPRESSED  closed by a click while still hovered; stays compact until the pointer leaves

Clicks go to the first track in store order within the hover radius, so when markers
overlap the earliest-seen track wins.
"""
import enum
from math import hypot


class InteractionState(enum.Enum):
    IDLE = "idle"
    HOVERING = "hovering"
    EXPANDED = "expanded"
    SUPPRESSED = "suppressed"


def next_state_on_pointer(state, within_radius):
    if within_radius:
        if state is InteractionState.IDLE: return InteractionState.HOVERING
        return state
    if state in (InteractionState.HOVERING, InteractionState.SUPPRESSED): return InteractionState.IDLE
    return state


def next_state_on_click(state, hovered):
    if state is InteractionState.EXPANDED:
        return InteractionState.SUPPRESSED if hovered else InteractionState.IDLE
    return InteractionState.EXPANDED


def shows_expanded(state):
    return state in (InteractionState.EXPANDED, InteractionState.HOVERING)


class InteractionController:
    def __init__(self, hover_radius_px=8):
        self.hover_radius_px = hover_radius_px

    def pointer_distance(self, track, x, y):
        if track.screen_pos is None: return float('inf')
        return hypot(x - track.screen_pos.x, y - track.screen_pos.y)

    def on_pointer_move(self, track, x, y):
        within = self.pointer_distance(track, x, y) < self.hover_radius_px
        track.interaction = next_state_on_pointer(track.interaction, within)
        return track.interaction

    def on_click(self, tracks, x, y, pointer=None):
        """
        Toggle the first track within the hover radius of (x, y).
        Returns the clicked track, or None when nothing was close enough.
        """
        for track in tracks:
            if self.pointer_distance(track, x, y) < self.hover_radius_px:
                px, py = pointer if pointer is not None else (x, y)
                hovered = self.pointer_distance(track, px, py) < self.hover_radius_px
                track.interaction = next_state_on_click(track.interaction, hovered)
                return track
        return None

    def is_expanded(self, track):
        return shows_expanded(track.interaction)
