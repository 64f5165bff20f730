import os
import queue
import sys
import traceback

import pygame

from .airfields import AirfieldLoader
from .common import add_log, resource_path
from .config import default_config_path, load_config, print_runtime_config
from .demo import DemoFeed, create_demo_center
from .geo import Center, Position, ScreenPoint
from .listener import start_listener_thread
from .render_loop import RenderLoop
from .tracks import TrackStore


def build_center(config):
    if config['demo_mode']: return create_demo_center(config['center_scale'])
    return Center(Position(config['center_lat'], config['center_lon']), ScreenPoint(0, 0), config['center_scale'])


def main():
    config = load_config(default_config_path())
    print_runtime_config(config)
    pygame.init()
    try:
        screen = pygame.display.set_mode((config['window_width'], config['window_height']), pygame.RESIZABLE)
    except pygame.error as e:
        print(f"Fatal: Could not create the display surface: {e}")
        pygame.quit()
        return 1
    pygame.display.set_caption("ADS-B View")

    airfields_path = config['airfields_csv']
    if not os.path.isabs(airfields_path): airfields_path = resource_path(airfields_path)
    loader = AirfieldLoader(airfields_path).start()

    inbound = queue.Queue()
    batch_source = None; listener_thread = None; stop_event = None
    if config['demo_mode']:
        batch_source = DemoFeed().next_batch
        add_log("Running with the built-in demo feed.")
    else:
        listener_thread, stop_event = start_listener_thread(config['host'], config['port'], inbound,
                                                            config['listener_retry_sec'])
    exit_code = 0
    try:
        loop = RenderLoop(screen, build_center(config), TrackStore(), config, batch_source=batch_source,
                          inbound=inbound, airfield_loader=loader)
        loop.run()
    except RuntimeError as e:
        print(f"Fatal: {e}"); exit_code = 1
    except Exception as e:
        print(f"Fatal error in render loop: {e}"); traceback.print_exc(); exit_code = 1
    finally:
        if stop_event is not None: stop_event.set()
        if listener_thread is not None: listener_thread.join(timeout=2.0)
        pygame.quit()
        print("ADS-B View closed.")
    return exit_code


if __name__ == "__main__":
    sys.exit(main())
