import os
import sys
from datetime import datetime, timezone


def resource_path(relative_path):
    """ Get absolute path to resource, works for dev and PyInstaller (frozen) modes. """
    base_path = getattr(sys, '_MEIPASS', None) or get_application_path()
    return os.path.join(base_path, relative_path)


def get_application_path():
    if getattr(sys, 'frozen', False): return sys._MEIPASS
    return os.path.dirname(os.path.dirname(os.path.abspath(__file__)))


def add_log(msg): print(f"[LOG] {datetime.now(timezone.utc).strftime('%H:%M:%S')} - {msg}")


def format_icao(icao): return f"{icao:06X}"
