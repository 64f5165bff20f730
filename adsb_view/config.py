import json
import os
from math import isfinite

from .common import get_application_path

CONFIG_FILENAME = "config.json"

# --- Default Configuration Values ---
DEFAULT_UPDATE_TICK_MS = 1000
DEFAULT_HOVER_RADIUS_PX = 8
# Cold start: scale = surface width / this value (no positioned tracks yet)
DEFAULT_PIXELS_PER_METER = 20000.0
# How much empty margin surrounds the farthest track when auto-fitting
DEFAULT_AUTO_FIT_MARGIN_FACTOR = 2.3
MIN_AUTO_FIT_MARGIN_FACTOR = 2.0; MAX_AUTO_FIT_MARGIN_FACTOR = 2.3
DEFAULT_OVERLAY_VISIBILITY_THRESHOLD = 600
DEFAULT_CENTER_LAT = -41.294260; DEFAULT_CENTER_LON = 174.776858; DEFAULT_CENTER_SCALE = 0.05
DEFAULT_FPS = 60
DEFAULT_HOST = "127.0.0.1"; DEFAULT_PORT = 30047
DEFAULT_LISTENER_RETRY_SEC = 5.0
DEFAULT_AIRFIELDS_CSV = os.path.join("data", "airfields.csv")
DEFAULT_DEMO_MODE = False
DEFAULT_WINDOW_WIDTH = 1000; DEFAULT_WINDOW_HEIGHT = 800

DEFAULT_CONFIG = {
    "update_tick_ms": DEFAULT_UPDATE_TICK_MS, "hover_radius_px": DEFAULT_HOVER_RADIUS_PX,
    "default_pixels_per_meter": DEFAULT_PIXELS_PER_METER,
    "auto_fit_margin_factor": DEFAULT_AUTO_FIT_MARGIN_FACTOR,
    "overlay_visibility_threshold": DEFAULT_OVERLAY_VISIBILITY_THRESHOLD,
    "center_lat": DEFAULT_CENTER_LAT, "center_lon": DEFAULT_CENTER_LON, "center_scale": DEFAULT_CENTER_SCALE,
    "fps": DEFAULT_FPS, "host": DEFAULT_HOST, "port": DEFAULT_PORT,
    "listener_retry_sec": DEFAULT_LISTENER_RETRY_SEC, "airfields_csv": DEFAULT_AIRFIELDS_CSV,
    "demo_mode": DEFAULT_DEMO_MODE,
    "window_width": DEFAULT_WINDOW_WIDTH, "window_height": DEFAULT_WINDOW_HEIGHT,
}

# Keys that must be strictly positive to be usable
POSITIVE_KEYS = ("update_tick_ms", "hover_radius_px", "default_pixels_per_meter", "center_scale", "fps",
                 "window_width", "window_height")


def default_config_path():
    return os.path.join(get_application_path(), CONFIG_FILENAME)


def _value_is_valid(key, default_value, loaded_value):
    if isinstance(default_value, bool): return isinstance(loaded_value, bool)
    if isinstance(default_value, (int, float)):
        if isinstance(loaded_value, bool) or not isinstance(loaded_value, (int, float)): return False
        if not isfinite(loaded_value): return False
        if isinstance(default_value, int) and loaded_value != int(loaded_value): return False
        if key in POSITIVE_KEYS and loaded_value <= 0: return False
        if key == "center_lat" and not -90 <= loaded_value <= 90: return False
        if key == "center_lon" and not -180 <= loaded_value <= 180: return False
        if key == "port" and not 0 < loaded_value < 65536: return False
        return True
    return isinstance(loaded_value, type(default_value))


def load_config(config_path):
    """
    Read config.json and merge it over DEFAULT_CONFIG.
    Unknown keys are ignored; keys with an unusable value keep their default.
    """
    config = DEFAULT_CONFIG.copy()
    try:
        with open(config_path, 'r', encoding='utf-8') as f: loaded_data = json.load(f)
    except FileNotFoundError:
        print(f"Config file not found at {config_path}. Using defaults.")
        return config
    except (OSError, ValueError) as e:
        print(f"Warning: Error reading config file '{config_path}': {e}. Using defaults.")
        return config
    if not isinstance(loaded_data, dict):
        print(f"Warning: Config file '{config_path}' does not hold an object. Using defaults.")
        return config
    print(f"Loaded configuration from {config_path}")
    for key, default_value in DEFAULT_CONFIG.items():
        loaded_value = loaded_data.get(key)
        if loaded_value is None: continue
        if not _value_is_valid(key, default_value, loaded_value):
            print(f"Warning: Invalid value '{loaded_value}' for '{key}' in config. Using default ({default_value}).")
            continue
        if isinstance(default_value, float): loaded_value = float(loaded_value)
        elif isinstance(default_value, int) and not isinstance(default_value, bool): loaded_value = int(loaded_value)
        config[key] = loaded_value
    margin = config["auto_fit_margin_factor"]
    clamped = max(MIN_AUTO_FIT_MARGIN_FACTOR, min(MAX_AUTO_FIT_MARGIN_FACTOR, margin))
    if clamped != margin:
        print(f"Warning: auto_fit_margin_factor {margin} outside [{MIN_AUTO_FIT_MARGIN_FACTOR}, {MAX_AUTO_FIT_MARGIN_FACTOR}]. Using {clamped}.")
        config["auto_fit_margin_factor"] = clamped
    return config


def print_runtime_config(config):
    print("-" * 20 + " Runtime Configuration " + "-" * 20)
    print(f" Center: {config['center_lat']:.6f}, {config['center_lon']:.6f} (cold-start scale {config['center_scale']} px/m)")
    print(f" Update Tick: {config['update_tick_ms']} ms, Frame Cap: {config['fps']} fps")
    print(f" Hover Radius: {config['hover_radius_px']} px, Auto-fit Margin: {config['auto_fit_margin_factor']}")
    if config['demo_mode']: print(" Feed: built-in demo")
    else: print(f" Feed: {config['host']}:{config['port']}")
    print("-" * (42 + len(" Runtime Configuration ")))
