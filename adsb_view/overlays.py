"""
Drawing helpers for the radar view. Everything here only reads tracks, airfields
and the Center; no state is changed.
"""
import pygame

from .common import format_icao
from .geo import project, scale_bar

BLACK = (0, 0, 0); WHITE = (255, 255, 255); YELLOW = (255, 255, 0)
LABEL_COLOR = WHITE; AIRFIELD_COLOR = YELLOW; SCALE_BAR_COLOR = (0, 200, 0)

MARKER_RADIUS = 3; AIRFIELD_RADIUS = 4
PANEL_OFFSET_X = 10; PANEL_PADDING = 4; PANEL_LINE_SPACING = 2
COMPACT_PANEL_RISE = 35
OVERLAY_MARGIN = 10
SCALE_BAR_MAX_PX = 150


def load_fonts():
    try: font = pygame.font.SysFont("Consolas", 14); small_font = pygame.font.SysFont("Consolas", 12)
    except (pygame.error, OSError): font = pygame.font.Font(None, 18); small_font = pygame.font.Font(None, 15)
    return font, small_font


def format_altitude(altitude):
    return f"{altitude} ft" if altitude is not None else "--- ft"


def panel_lines(track, expanded):
    if not expanded:
        return [format_icao(track.icao), format_altitude(track.altitude)]
    last_contact = track.last_contact.astimezone().strftime('%H:%M:%S') if track.last_contact else "---"
    lat_lon = f"{track.pos.latitude:.3f}, {track.pos.longitude:.3f}" if track.pos is not None else "---"
    return [
        f"ICAO: {format_icao(track.icao)}",
        f"Callsign: {track.callsign or '---'}",
        f"Altitude: {format_altitude(track.altitude)}",
        f"Last Contact: {last_contact}",
        f"Lat/Lon: {lat_lon}",
    ]


def draw_text_box(surface, font, lines, topleft, color=WHITE):
    line_h = font.get_linesize()
    text_w = max((font.size(line)[0] for line in lines), default=0)
    box = pygame.Rect(topleft[0], topleft[1], text_w + PANEL_PADDING * 2,
                      len(lines) * (line_h + PANEL_LINE_SPACING) + PANEL_PADDING * 2 - PANEL_LINE_SPACING)
    pygame.draw.rect(surface, BLACK, box)
    pygame.draw.rect(surface, color, box, 1)
    y = box.top + PANEL_PADDING
    for line in lines:
        surface.blit(font.render(line, True, color), (box.left + PANEL_PADDING, y)); y += line_h + PANEL_LINE_SPACING
    return box


def draw_track(surface, font, track, expanded):
    """Marker, leader line and detail panel at the track's last projected screen position."""
    sx, sy = track.screen_pos
    pygame.draw.circle(surface, WHITE, (round(sx), round(sy)), MARKER_RADIUS)
    lines = panel_lines(track, expanded)
    box_h = len(lines) * (font.get_linesize() + PANEL_LINE_SPACING) + PANEL_PADDING * 2
    rise = box_h + 5 if expanded else COMPACT_PANEL_RISE
    box_x = sx + PANEL_OFFSET_X; box_y = sy - rise
    pygame.draw.line(surface, WHITE, (sx + 2, sy - 2), (box_x, box_y + box_h / 2))
    return draw_text_box(surface, font, lines, (round(box_x), round(box_y)))


def track_stats(tracks):
    """(count, max altitude, min altitude) over all tracks; altitudes are None when nobody reports one."""
    altitudes = [t.altitude for t in tracks if isinstance(t.altitude, (int, float)) and not isinstance(t.altitude, bool)]
    if not altitudes: return len(tracks), None, None
    return len(tracks), max(altitudes), min(altitudes)


def stats_lines(tracks):
    count, max_alt, min_alt = track_stats(tracks)
    return [f"Aircraft: {count}", f"Max Alt: {format_altitude(max_alt)}", f"Min Alt: {format_altitude(min_alt)}"]


def draw_stats(surface, font, tracks):
    return draw_text_box(surface, font, stats_lines(tracks), (OVERLAY_MARGIN, OVERLAY_MARGIN))


def no_position_rows(tracks):
    return [f"{format_icao(t.icao)}  {(t.callsign or '---'):<8}  {format_altitude(t.altitude)}" for t in tracks]


def draw_no_position_table(surface, font, tracks):
    lines = ["No Position:"] + (no_position_rows(tracks) or [" (None)"])
    text_w = max(font.size(line)[0] for line in lines) + PANEL_PADDING * 2
    x = surface.get_width() - OVERLAY_MARGIN - text_w
    return draw_text_box(surface, font, lines, (x, OVERLAY_MARGIN))


def draw_airfield(surface, font, airfield, center):
    x, y = project(center, airfield.position)
    pt = (round(x), round(y))
    pygame.draw.circle(surface, AIRFIELD_COLOR, pt, AIRFIELD_RADIUS)
    pygame.draw.circle(surface, BLACK, pt, AIRFIELD_RADIUS, 1)
    label = font.render(airfield.icao, True, LABEL_COLOR)
    surface.blit(label, (pt[0] + 6, pt[1] - 6 - label.get_height()))


def format_distance(meters):
    return f"{meters / 1000:g} km" if meters >= 1000 else f"{meters:g} m"


def draw_scale_indicator(surface, font, center):
    bar = scale_bar(center.scale, SCALE_BAR_MAX_PX)
    if bar is None: return None
    meters, px = bar
    x0 = OVERLAY_MARGIN; y0 = surface.get_height() - OVERLAY_MARGIN
    x1 = x0 + round(px)
    pygame.draw.line(surface, SCALE_BAR_COLOR, (x0, y0), (x1, y0))
    pygame.draw.line(surface, SCALE_BAR_COLOR, (x0, y0 - 4), (x0, y0))
    pygame.draw.line(surface, SCALE_BAR_COLOR, (x1, y0 - 4), (x1, y0))
    label = font.render(format_distance(meters), True, SCALE_BAR_COLOR)
    surface.blit(label, (x0, y0 - 6 - label.get_height()))
    return bar
