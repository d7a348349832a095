"""Common behaviour of the LED modes: storage, parameters and rendering."""

from __future__ import annotations

import json
import logging
import random
import threading
import time
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, ClassVar, Mapping

from ledean.display import Display
from ledean.storage import JsonStore, StorageError

log = logging.getLogger(__name__)

PARAMETER_RESOURCE = "parameter"


class RenderType(Enum):
    """Static modes draw once; dynamic modes redraw on every frame."""

    STATIC = 0
    DYNAMIC = 1


def _require_mapping(data: Any) -> Mapping[str, Any]:
    if not isinstance(data, Mapping):
        raise ValueError("parameter must be a JSON object")
    return data


def _get_float(data: Mapping[str, Any], key: str, default: float = 0.0) -> float:
    value = data.get(key)
    if value is None:
        return default
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"'{key}' must be a number")
    return float(value)


def _get_uint(data: Mapping[str, Any], key: str, default: int = 0, bits: int = 32) -> int:
    value = data.get(key)
    if value is None:
        return default
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"'{key}' must be an integer")
    if not 0 <= value < 1 << bits:
        raise ValueError(f"'{key}' is out of range for {bits} bits")
    return value


def _get_bool(data: Mapping[str, Any], key: str, default: bool = False) -> bool:
    value = data.get(key)
    if value is None:
        return default
    if not isinstance(value, bool):
        raise ValueError(f"'{key}' must be a boolean")
    return value


class Mode(ABC):
    """A way of filling the display with colours.

    Subclasses set ``parameter_type``, ``parameter`` and ``limits``; the
    parameter and limits objects provide ``to_dict()`` and the parameter type
    a ``from_dict()`` class method.
    """

    parameter_type: ClassVar[type]

    def __init__(
        self,
        store: JsonStore | None,
        display: Display,
        name: str,
        render_type: RenderType,
        rng: random.Random | None = None,
    ) -> None:
        self.store = store
        self.display = display
        self.name = name
        self.render_type = render_type
        self.rng = rng if rng is not None else random.Random()
        self.parameter: Any = None
        self.limits: Any = None
        self._lock = threading.RLock()
        self._stop: threading.Event | None = None
        self._thread: threading.Thread | None = None

    def activate(self) -> None:
        """Draw the mode once, or start redrawing it on every frame."""
        if self.render_type is RenderType.STATIC:
            with self._lock:
                self.calc_display()
                self.display.render()
                self.display.force_leds_changed()
            return
        if self._thread is not None:
            return
        self._stop = threading.Event()
        self._thread = threading.Thread(
            target=self._run, args=(self._stop,), name=f"{self.name}-render", daemon=True
        )
        self._thread.start()

    def deactivate(self) -> None:
        """Stop redrawing a dynamic mode."""
        thread, stop = self._thread, self._stop
        if thread is None or stop is None:
            return
        stop.set()
        if thread is not threading.current_thread():
            thread.join()
        self._thread = None
        self._stop = None

    def _run(self, stop: threading.Event) -> None:
        interval = self.display.refresh_interval_ns / 1_000_000_000
        deadline = time.monotonic() + interval
        while not stop.wait(max(0.0, deadline - time.monotonic())):
            deadline = max(deadline + interval, time.monotonic())
            try:
                with self._lock:
                    self.calc_display()
                    self.display.render()
            except Exception:
                log.exception("rendering %s failed", self.name)
                return

    @abstractmethod
    def calc_display(self) -> None:
        """Compute the next frame and hand it to the display."""

    @abstractmethod
    def randomize(self) -> None:
        """Choose random parameters within the limits and use them."""

    def _apply_parameter(self, parameter: Any) -> None:
        self.parameter = parameter

    def set_parameter(self, parameter: Any) -> None:
        """Use ``parameter`` and store it."""
        with self._lock:
            self._apply_parameter(parameter)
        self._save_parameter()

    def try_set_parameter(self, data: str | bytes | Mapping[str, Any]) -> None:
        """Parse JSON parameters and use them; raise ValueError if invalid."""
        try:
            raw = json.loads(data) if isinstance(data, (str, bytes, bytearray)) else data
            parameter = self.parameter_type.from_dict(raw)
        except ValueError as exc:
            raise ValueError(f"invalid {self.name} parameter: {exc}") from exc
        self.set_parameter(parameter)

    def parameter_dict(self) -> dict:
        return self.parameter.to_dict()

    def limits_dict(self) -> dict:
        return self.limits.to_dict()

    def _save_parameter(self) -> None:
        if self.store is None:
            return
        try:
            self.store.write(self.name, PARAMETER_RESOURCE, self.parameter.to_dict())
        except StorageError as exc:
            log.warning("could not store %s parameter: %s", self.name, exc)

    def _load_parameter(self) -> Any:
        if self.store is None:
            return None
        try:
            return self.parameter_type.from_dict(self.store.read(self.name, PARAMETER_RESOURCE))
        except (StorageError, ValueError):
            return None

    def _restore(self) -> None:
        """Use the stored parameters, or random ones if none are usable."""
        stored = self._load_parameter()
        if stored is not None:
            try:
                with self._lock:
                    self._apply_parameter(stored)
                return
            except ValueError:
                log.info("stored %s parameter is unusable", self.name)
        self.randomize()