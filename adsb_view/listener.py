import socket
import threading

from .tracks import parse_update_line


def read_feed(sock, inbound, stop_event):
    """Split the byte stream into lines and queue every parsed update. Returns when the peer closes."""
    buffer = ''
    while not stop_event.is_set():
        try: data = sock.recv(4096)
        except socket.timeout: continue
        if not data: print("[!] Connection closed by remote host."); return
        buffer += data.decode('utf-8', errors='ignore')
        while '\n' in buffer:
            line, buffer = buffer.split('\n', 1)
            update = parse_update_line(line)
            if update is not None: inbound.put(update)


def start_listener(host, port, inbound, stop_event, retry_sec=5.0):
    """
    Keep a connection to the JSON track feed open until stop_event is set.
    Updates are only queued here; the render loop owns the TrackStore.
    """
    while not stop_event.is_set():
        print(f"[*] Connecting to track feed at {host}:{port}...")
        try:
            with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
                s.settimeout(10.0); s.connect((host, port)); print("[*] Connected to track feed.")
                s.settimeout(1.0)
                read_feed(s, inbound, stop_event)
        except socket.timeout: print("[*] Connection attempt timed out. Retrying...")
        except ConnectionRefusedError: print(f"[*] Connection refused by {host}:{port}. Is the feed running? Retrying...")
        except OSError as e: print(f"[*] OS Error on track feed: {e}. Retrying...")
        if not stop_event.is_set():
            print(f"[*] Waiting {retry_sec:g} seconds before retry...")
            stop_event.wait(retry_sec)
    print("Listener thread exiting.")


def start_listener_thread(host, port, inbound, retry_sec=5.0):
    stop_event = threading.Event()
    thread = threading.Thread(target=start_listener, args=(host, port, inbound, stop_event, retry_sec), daemon=True)
    thread.start()
    return thread, stop_event
