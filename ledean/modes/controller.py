"""Keeps the list of modes, the current one, and starts and stops it."""

from __future__ import annotations

import json
import logging
import random
import threading
from typing import Any

from ledean.commands import (
    Command,
    mode_command,
    mode_limits_command,
    mode_resolver_command,
)
from ledean.display import Display
from ledean.modes.base import Mode
from ledean.modes.emitter import ModeEmitter
from ledean.modes.gradient import ModeGradient
from ledean.modes.running_led import ModeRunningLed
from ledean.modes.solid import ModeSolid
from ledean.modes.solid_rainbow import ModeSolidRainbow
from ledean.modes.spectrum import ModeSpectrum
from ledean.modes.transition_rainbow import ModeTransitionRainbow
from ledean.storage import JsonStore, StorageError

log = logging.getLogger(__name__)

COLLECTION = "modeController"
INDEX_RESOURCE = "modesIndex"
PAUSED_RESOURCE = "isPaused"

ACTION_RANDOMIZE = "randomize"
ACTION_PLAY_PAUSE = "playPause"

CLEAR_INTERVAL_S = 10.0


class ModeController:
    """Owns every mode and switches between them.

    The button and the websocket hub, when given, are wired to the
    controller: a single press moves to the next mode, a double press
    randomizes the current one and a long press starts or stops it.
    """

    def __init__(
        self,
        store: JsonStore | None,
        display: Display,
        button: Any = None,
        hub: Any = None,
        rng: random.Random | None = None,
    ) -> None:
        self.store = store
        self.display = display
        self.button = button
        self.hub = hub
        self.active = False
        self.clear_interval = CLEAR_INTERVAL_S
        self._lock = threading.RLock()
        self._activated = threading.Event()

        self.mode_solid = ModeSolid(store, display, rng)
        self.mode_solid_rainbow = ModeSolidRainbow(store, display, rng)
        self.mode_transition_rainbow = ModeTransitionRainbow(store, display, rng)
        self.mode_running_led = ModeRunningLed(store, display, rng)
        self.mode_emitter = ModeEmitter(store, display, rng)
        self.mode_gradient = ModeGradient(store, display, rng)
        self.mode_spectrum = ModeSpectrum(store, display, rng)
        self.modes: list[Mode] = [
            self.mode_solid,
            self.mode_solid_rainbow,
            self.mode_transition_rainbow,
            self.mode_running_led,
            self.mode_emitter,
            self.mode_gradient,
            self.mode_spectrum,
        ]

        self.index = 0
        stored = self._read(INDEX_RESOURCE)
        if isinstance(stored, int) and not isinstance(stored, bool) and 0 <= stored < len(self.modes):
            self.index = stored
        else:
            self.set_index(0)

        paused = self._read(PAUSED_RESOURCE)
        self.is_paused = paused if isinstance(paused, bool) else False

        self._register_events()

        if hub is not None:
            hub.on_mode_action(self.handle_mode_action)
            hub.on_mode(self._on_mode)
            hub.append_init_client_cb(self.init_client)

    # storage

    def _read(self, resource: str) -> Any:
        if self.store is None:
            return None
        try:
            return self.store.read(COLLECTION, resource)
        except StorageError:
            return None

    def _write(self, resource: str, value: Any) -> None:
        if self.store is None:
            return
        try:
            self.store.write(COLLECTION, resource, value)
        except StorageError as exc:
            log.warning("could not store %s: %s", resource, exc)

    # lookup

    @property
    def current_mode(self) -> Mode:
        return self.modes[self.index]

    def mode_names(self) -> list[str]:
        return [mode.name for mode in self.modes]

    def get_mode(self, name: str) -> Mode:
        """Return the mode called ``name``; raise KeyError if there is none."""
        for mode in self.modes:
            if mode.name == name:
                return mode
        raise KeyError(f"mode '{name}' not found")

    def index_of(self, name: str) -> int:
        """Return the position of the mode called ``name``; raise KeyError if absent."""
        for index, mode in enumerate(self.modes):
            if mode.name == name:
                return index
        raise KeyError(f"mode '{name}' not found")

    # switching

    def set_index(self, index: int) -> None:
        """Make ``index`` the current mode and store it, without activating it."""
        if not 0 <= index < len(self.modes):
            raise IndexError(f"mode index {index} out of range")
        with self._lock:
            self.index = index
        self._write(INDEX_RESOURCE, index)
        log.info("Current mode: %d", index)

    def switch_index(self, index: int) -> None:
        """Change to mode ``index``, keeping it running if the old one ran."""
        with self._lock:
            if self.index == index:
                return
            resume = self.active
            if resume:
                self.deactivate_current_mode()
            self.set_index(index)
            if resume:
                self.activate_current_mode()

    def switch_to(self, name: str) -> None:
        try:
            index = self.index_of(name)
        except KeyError:
            log.info("could not switch to '%s'", name)
            return
        self.switch_index(index)

    def next_mode(self) -> None:
        log.info("nextMode")
        self.switch_index((self.index + 1) % len(self.modes))

    def activate_current_mode(self) -> None:
        with self._lock:
            mode = self.current_mode
            log.debug("Start: `%s` with parameter: `%s`", mode.name, json.dumps(mode.parameter_dict()))
            self.active = True
            self._activated.set()
            mode.activate()
        self.broadcast_current_mode()

    def deactivate_current_mode(self) -> None:
        with self._lock:
            self.active = False
            self._activated.clear()
            self.current_mode.deactivate()

    def randomize_current_mode(self) -> None:
        self.current_mode.randomize()

    # websocket

    def current_mode_command(self) -> Command:
        mode = self.current_mode
        return mode_command(mode.name, mode.parameter_dict())

    def broadcast_current_mode(self) -> None:
        if self.hub is not None:
            self.hub.broadcast(self.current_mode_command())

    def init_client(self, client: Any) -> None:
        """Send a new client the mode names, every mode's limits and the current mode."""
        client.send_cmd(mode_resolver_command(self.mode_names()))
        for mode in self.modes:
            client.send_cmd(mode_limits_command(mode.name, mode.limits_dict()))
        client.send_cmd(self.current_mode_command())

    def handle_mode_action(self, action: str) -> None:
        if action == ACTION_RANDOMIZE:
            self.randomize()
        elif action == ACTION_PLAY_PAUSE:
            self.play_pause()
        else:
            log.info("Unknown mode action: %s", action)

    def handle_mode_update(self, mode_id: str, parameter: Any) -> None:
        """Give the mode ``mode_id`` new parameters and tell every client."""
        try:
            mode = self.get_mode(mode_id)
        except KeyError:
            mode = None
        if mode is not None:
            try:
                mode.try_set_parameter(parameter)
            except ValueError as exc:
                log.info("could not parse %s parameter: %s", mode_id, exc)
                return
            if mode is self.mode_solid:
                self.restart()
        self.broadcast_current_mode()

    def _on_mode(self, mode_id: str, parameter: Any) -> None:
        if parameter is not None:
            self.handle_mode_update(mode_id, parameter)
        self.switch_to(mode_id)

    # running

    def start(self) -> None:
        with self._lock:
            if not self.active:
                log.debug("start")
                self.activate_current_mode()

    def stop(self, clear_screen: bool) -> None:
        with self._lock:
            if not self.active:
                return
            log.debug("stop")
            self.deactivate_current_mode()
        if clear_screen:
            threading.Thread(target=self._clear_while_stopped, name="clear-screen", daemon=True).start()

    def _clear_while_stopped(self) -> None:
        # clears LEDs that were left on by accident until a mode runs again
        while not self._activated.is_set():
            self.display.clear()
            self.display.render()
            self._activated.wait(self.clear_interval)

    def start_stop(self) -> None:
        if self.active:
            self.stop(True)
        else:
            self.start()

    def restart(self) -> None:
        with self._lock:
            if self.active:
                log.debug("restart")
                self.deactivate_current_mode()
                self.activate_current_mode()

    def randomize(self) -> None:
        log.info("Randomize")
        with self._lock:
            resume = self.active
            if resume:
                self.deactivate_current_mode()
            self.randomize_current_mode()
            if resume:
                self.activate_current_mode()

    def play_pause(self) -> None:
        log.info("PlayPause")
        if self.active:
            self.stop(False)
        else:
            self.start()

    def _register_events(self) -> None:
        if self.button is not None:
            self.button.add_on_single(self.next_mode)
            self.button.add_on_double(self.randomize)
            self.button.add_on_long(self.start_stop)