"""
MIDI input transport with automatic reconnection support.

Feeds the engine: each call to poll() drains whatever the open input port has
pending and returns it as packed raw words.
"""
import logging
import time
from typing import Callable, List, Optional, Union

import mido
import pyudev

import monocv.config as config
from monocv.decoder import pack_message

logger = logging.getLogger(__name__)


def initialize_transport(backend: Optional[str] = None) -> bool:
    """
    Load the mido backend. Call once before opening ports; calling it again is safe.

    Args:
        backend: mido backend module name (e.g. 'mido.backends.rtmidi'),
                 None for mido's default or the MIDO_BACKEND environment variable

    Returns:
        True if the backend is loaded, False otherwise
    """
    try:
        if backend and mido.backend.name != backend:
            mido.set_backend(backend, load=True)
        else:
            mido.backend.load()
        logger.info("MIDI backend ready: %s", mido.backend.name)
        return True
    except Exception as e:
        logger.error("Failed to initialize MIDI backend: %s", e)
        return False


class MidiMonitor:
    """
    Monitors a MIDI input with device detection and reconnection.
    """

    def __init__(self,
                 device_keyword: str = config.MIDI_DEVICE_KEYWORD,
                 reconnect_interval: float = config.RECONNECT_INTERVAL,
                 health_check_interval: float = config.HEALTH_CHECK_INTERVAL,
                 enable_hotplug: bool = True):
        """
        Initialize MIDI monitor.

        Args:
            device_keyword: Keyword to match in device name (empty for first device)
            reconnect_interval: Seconds to wait between reconnection attempts
            health_check_interval: Seconds between health checks of connection
            enable_hotplug: If True, watch udev USB events for instant reconnection
        """
        self.device_keyword = device_keyword
        self.reconnect_interval = reconnect_interval
        self.health_check_interval = health_check_interval
        self.inport: Optional[mido.ports.BaseInput] = None
        self.is_connected = False
        self.last_connected_device: Optional[str] = None
        self.last_health_check = 0.0
        self.last_connect_attempt = 0.0
        self.reconnect_attempts = 0

        # USB device monitoring for instant reconnection
        self.monitor: Optional[pyudev.Monitor] = None
        if enable_hotplug:
            try:
                context = pyudev.Context()
                self.monitor = pyudev.Monitor.from_netlink(context)
                self.monitor.filter_by(subsystem='usb')
            except Exception as e:
                logger.warning("USB hotplug monitoring unavailable: %s", e)
                self.monitor = None

        # Callbacks
        self.on_midi_connected: Optional[Callable[[str], None]] = None
        self.on_midi_disconnected: Optional[Callable[[], None]] = None

    def list_ports(self) -> List[str]:
        """Names of the available MIDI inputs, in port index order."""
        try:
            return mido.get_input_names()
        except Exception as e:
            logger.error("Error listing MIDI inputs: %s", e)
            return []

    def port_count(self) -> int:
        return len(self.list_ports())

    def port_name(self, index: int) -> str:
        """Name of the input at index, or an empty string if there is none."""
        ports = self.list_ports()
        if 0 <= index < len(ports):
            return ports[index]
        return ""

    def find_device(self) -> Optional[str]:
        """
        Find MIDI input device matching keyword.

        Returns:
            Device name if found, None otherwise
        """
        ports = self.list_ports()

        if not ports:
            return None

        # If no keyword, skip the "Midi Through" port
        if not self.device_keyword:
            for port in ports:
                if 'Midi Through' not in port:
                    return port
            return None

        for port in ports:
            if self.device_keyword.lower() in port.lower():
                return port

        return None

    def open_port(self, port: Union[int, str, None]) -> bool:
        """
        Open an input port, closing the current one first.

        Args:
            port: Port index, port name, or None / a negative index to only close

        Returns:
            True if a port is open afterwards
        """
        self._close_inport()

        if port is None or (isinstance(port, int) and port < 0):
            self._mark_disconnected()
            return False

        if isinstance(port, int):
            name = self.port_name(port)
            if not name:
                logger.error("No MIDI input at index %s", port)
                self._mark_disconnected()
                return False
        else:
            name = port

        try:
            self.inport = mido.open_input(name)
        except Exception as e:
            logger.error("Failed to open MIDI port %s: %s", name, e)
            self.inport = None
            self._mark_disconnected()
            return False

        logger.info("Connected to MIDI device: %s", name)

        was_connected = self.is_connected
        self.is_connected = True
        self.last_connected_device = name
        self.reconnect_attempts = 0

        if not was_connected and self.on_midi_connected:
            self.on_midi_connected(name)

        return True

    def connect(self) -> bool:
        """
        Connect to the MIDI device matching the keyword.

        Returns:
            True if connected successfully, False otherwise
        """
        port_name = self.find_device()

        if not port_name:
            logger.warning("No MIDI device found")
            self._mark_disconnected()
            return False

        return self.open_port(port_name)

    def disconnect(self):
        """Disconnect from MIDI device."""
        if self.inport:
            self._close_inport()
            logger.info("Disconnected from MIDI device")
        self._mark_disconnected()

    close = disconnect

    def check_device_health(self) -> bool:
        """
        Check if the currently connected device still exists.

        Returns:
            True if device exists and is healthy, False otherwise
        """
        if not self.is_connected or not self.last_connected_device:
            return False

        return self.last_connected_device in self.list_ports()

    def check_usb_events(self):
        """
        Check for USB device add/remove events (non-blocking).
        """
        if not self.monitor:
            return

        device = self.monitor.poll(timeout=0)
        if not device or device.action not in ('add', 'remove'):
            return

        logger.info("USB device %s event detected", device.action)

        if device.action == 'add' and not self.inport:
            self.reconnect_attempts = 0
            # Let the next ensure_connected() retry right away
            self.last_connect_attempt = 0.0
        elif device.action == 'remove' and self.inport:
            # The device might be ours; reconnect will sort it out
            self._drop_connection()

    def ensure_connected(self) -> bool:
        """
        Keep the input connected without blocking.

        Reconnection attempts are spaced by reconnect_interval and the
        connection is health checked every health_check_interval.

        Returns:
            True if an input port is open
        """
        self.check_usb_events()
        now = time.time()

        if not self.inport:
            if now - self.last_connect_attempt < self.reconnect_interval:
                return False
            self.last_connect_attempt = now
            logger.info("Attempting to connect to MIDI device...")
            if not self.connect():
                self.reconnect_attempts += 1
                return False
            return True

        if now - self.last_health_check >= self.health_check_interval:
            self.last_health_check = now
            if not self.check_device_health():
                logger.warning("Device health check failed - device removed")
                self._drop_connection()
                self.last_connect_attempt = now
                return False

        return True

    def poll(self) -> List[int]:
        """
        Drain pending MIDI messages without blocking.

        Returns:
            Raw words in arrival order; empty if nothing is pending or no port is open
        """
        if not self.inport:
            return []

        raws = []
        try:
            for msg in self.inport.iter_pending():
                raw = pack_message(msg)
                if raw is not None:
                    raws.append(raw)
        except Exception as e:
            logger.error("Error reading MIDI: %s", e)
            self._drop_connection()

        return raws

    def _close_inport(self):
        if self.inport:
            try:
                self.inport.close()
            except Exception as e:
                logger.error("Failed to close MIDI port: %s", e)
            finally:
                self.inport = None

    def _drop_connection(self):
        """Forget a port that has gone away."""
        self._close_inport()
        self._mark_disconnected()

    def _mark_disconnected(self):
        was_connected = self.is_connected
        self.is_connected = False
        if was_connected and self.on_midi_disconnected:
            self.on_midi_disconnected()
