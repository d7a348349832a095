"""A push button with single, double and long press detection."""

from __future__ import annotations

import logging
import threading
import time
from typing import Any, Callable

from ledean.commands import Command, button_command
from ledean.storage import JsonStore, StorageError

log = logging.getLogger(__name__)

DEBOUNCE_NS = 50 * 1_000_000

_COLLECTION = "button"
_LOCK_RESOURCE = "isLocked"


class Pin:
    """A GPIO input with no hardware behind it: it never sees an edge."""

    def __init__(self, name: str) -> None:
        self.name = name
        self._idle = threading.Event()

    def wait_for_edge(self, timeout: float | None) -> bool:
        """Wait up to ``timeout`` seconds (forever if None) for an edge."""
        if timeout is not None and timeout < 0:
            timeout = None
        self._idle.wait(timeout)
        return False

    def read(self) -> bool:
        return False


class Button:
    """Turns edges of an input pin into press events.

    Presses can also come from websocket clients through the hub. While the
    button is locked, presses trigger nothing.
    """

    def __init__(
        self,
        store: JsonStore | None,
        gpio: str,
        long_press_ms: int = 1200,
        press_double_timeout: int = 350,
        hub: Any = None,
        *,
        pin: Pin | None = None,
        clock: Callable[[], int] = time.monotonic_ns,
        start: bool = True,
    ) -> None:
        if not gpio:
            raise ValueError("a gpio pin name is required")
        self.store = store
        self.gpio = gpio
        self.long_press_ms = long_press_ms
        self.press_double_timeout = press_double_timeout
        self.hub = hub
        self.pin = pin if pin is not None else Pin(gpio)
        self.is_locked = False
        self._clock = clock
        self._on_single: list[Callable[[], Any]] = []
        self._on_double: list[Callable[[], Any]] = []
        self._on_long: list[Callable[[], Any]] = []

        if store is not None:
            try:
                self.is_locked = bool(store.read(_COLLECTION, _LOCK_RESOURCE))
            except StorageError as exc:
                log.info("%s", exc)

        if hub is not None:
            hub.on_button(self.handle_action)
            hub.append_init_client_cb(self.init_client)

        self.add_on_single(lambda: log.info("PRESS_SINGLE"))
        self.add_on_double(lambda: log.info("PRESS_DOUBLE"))
        self.add_on_long(lambda: log.info("PRESS_LONG"))

        if start:
            threading.Thread(target=self.listen, name=f"button-{gpio}", daemon=True).start()

    def add_on_single(self, callback: Callable[[], Any]) -> None:
        self._on_single.append(callback)

    def add_on_double(self, callback: Callable[[], Any]) -> None:
        self._on_double.append(callback)

    def add_on_long(self, callback: Callable[[], Any]) -> None:
        self._on_long.append(callback)

    def _trigger(self, callbacks: list[Callable[[], Any]]) -> None:
        if self.is_locked:
            return
        for callback in callbacks:
            callback()

    def press_single(self) -> None:
        self._trigger(self._on_single)

    def press_double(self) -> None:
        self._trigger(self._on_double)

    def press_long(self) -> None:
        self._trigger(self._on_long)

    def toggle_lock(self) -> None:
        self.is_locked = not self.is_locked
        if self.store is not None:
            try:
                self.store.write(_COLLECTION, _LOCK_RESOURCE, self.is_locked)
            except StorageError as exc:
                log.warning("could not store button lock: %s", exc)
        self.broadcast_lock()

    def handle_action(self, action: str) -> None:
        """Carry out a button action sent by a client."""
        handlers = {
            "single": self.press_single,
            "double": self.press_double,
            "long": self.press_long,
            "toggleLock": self.toggle_lock,
        }
        handler = handlers.get(action)
        if handler is None:
            log.info("Unknown button action: %s", action)
            return
        handler()

    def lock_command(self) -> Command:
        return button_command("locked" if self.is_locked else "unlocked")

    def broadcast_lock(self) -> None:
        if self.hub is None:
            log.info("no hub")
            return
        self.hub.broadcast(self.lock_command())

    def init_client(self, client: Any) -> None:
        client.send_cmd(self.lock_command())

    def listen(self) -> None:
        """Watch the pin and fire press events; runs until the pin fails."""
        last_action_ns = 0
        while True:
            # a press drives the pin high
            self.pin.wait_for_edge(None)
            if not self.pin.read():
                continue
            rising_ns = self._clock()
            if rising_ns < last_action_ns + DEBOUNCE_NS:
                continue
            self._detect_press(rising_ns)
            last_action_ns = self._clock()

    def _detect_press(self, rising_ns: int) -> None:
        pin = self.pin
        long_timeout = self.long_press_ms / 1000
        double_timeout = self.press_double_timeout / 1000
        while True:
            if not pin.wait_for_edge(long_timeout):
                self.press_long()
                return
            if pin.read():
                continue
            falling_ns = self._clock()
            if falling_ns - rising_ns < DEBOUNCE_NS:
                rising_ns = falling_ns
                continue
            while True:
                if not pin.wait_for_edge(double_timeout):
                    self.press_single()
                    return
                if not pin.read():
                    continue
                rising_ns = self._clock()
                if rising_ns - falling_ns < DEBOUNCE_NS:
                    falling_ns = rising_ns
                    continue
                self.press_double()
                while True:
                    pin.wait_for_edge(None)
                    if pin.read():
                        continue
                    falling_ns = self._clock()
                    if falling_ns - rising_ns < DEBOUNCE_NS:
                        rising_ns = falling_ns
                        continue
                    return