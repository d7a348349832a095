"""The LED display: a row of colours mirrored onto several physical rows."""

from __future__ import annotations

import json
import time
from dataclasses import replace
from enum import IntEnum
from typing import Any, Callable, Sequence

from ledean.color import HSV, RGB, SpiOrder
from ledean.commands import leds_command, leds_parameter_command

DISPLAY_UPDATE_DELAY = 0.1  # seconds between LED broadcasts to clients


class LedDevice(IntEnum):
    WS2812 = 0
    APA102 = 1


def led_device_from_name(name: str) -> LedDevice:
    """Return the device named ``name``; unknown names give WS2812."""
    for device in LedDevice:
        if device.name == name:
            return device
    return LedDevice.WS2812


class Display:
    """Holds the LED colours and pushes them to clients and to the strip.

    ``writer`` receives the raw channel bytes on every render; without one,
    rendering only prepares the buffer.
    """

    def __init__(
        self,
        led_count: int,
        led_rows: int = 1,
        reverse_rows: str = "0",
        fps: int = 40,
        order: int = SpiOrder.RGB,
        device: int = LedDevice.WS2812,
        hub: Any = None,
        writer: Callable[[bytes], Any] | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if led_rows <= 0:
            raise ValueError("led_rows must be positive")
        if fps <= 0:
            raise ValueError("fps must be positive")
        self.led_count = led_count
        self.led_rows = led_rows
        self.row_led_count = led_count // led_rows
        self.order = order
        self.device = device
        self.fps = fps
        self.refresh_interval_ns = 1_000_000_000 // fps
        self.reverse_rows = self._parse_reverse_rows(reverse_rows, led_rows)
        self.leds = [RGB() for _ in range(led_count)]
        self.hub = hub
        self.writer = writer
        self.buffer = b""
        self._row = [RGB() for _ in range(self.row_led_count)]
        self._clock = clock
        self._next_update = clock() + DISPLAY_UPDATE_DELAY

        self.clear()
        if hub is not None:
            hub.append_init_client_cb(self.init_client)

    @staticmethod
    def _parse_reverse_rows(raw: str, rows: int) -> list[bool]:
        flags = [False] * rows
        for index, item in enumerate(raw.split(",")):
            if item == "1":
                if index >= rows:
                    raise ValueError(f"reverse row {index} exceeds {rows} rows")
                flags[index] = True
        return flags

    def leds_json(self) -> str:
        return json.dumps([led.to_dict() for led in self.leds], separators=(",", ":"))

    def _apply_row(self) -> None:
        forward = self._row
        backward = forward[::-1]
        n = self.row_led_count
        for r, reverse in enumerate(self.reverse_rows):
            source = backward if reverse else forward
            self.leds[r * n:(r + 1) * n] = [replace(c) for c in source]
        self._leds_changed()

    def _check_row(self, row: Sequence[Any]) -> None:
        if len(row) != self.row_led_count:
            raise ValueError(
                f"row has {len(row)} leds, display rows have {self.row_led_count}"
            )

    def apply_single_row_rgb(self, row: Sequence[RGB]) -> None:
        self._check_row(row)
        self._row = [replace(c) for c in row]
        self._apply_row()

    def apply_single_row_hsv(self, row: Sequence[HSV]) -> None:
        self._check_row(row)
        self._row = [c.to_rgb() for c in row]
        self._apply_row()

    def all_solid(self, rgb: RGB) -> None:
        self._row = [replace(rgb) for _ in range(self.row_led_count)]
        self._apply_row()

    def clear(self) -> None:
        self.all_solid(RGB())
        self.force_leds_changed()

    def _leds_changed(self) -> None:
        now = self._clock()
        if now >= self._next_update:
            self._next_update = now + DISPLAY_UPDATE_DELAY
            self.force_leds_changed()

    def force_leds_changed(self) -> None:
        """Broadcast the current LED colours to all clients."""
        if self.hub is not None:
            self.hub.broadcast(leds_command(self.leds))

    def to_buffer(self) -> bytes:
        return b"".join(led.to_spi(self.order) for led in self.leds)

    def render(self) -> None:
        self.buffer = self.to_buffer()
        if self.writer is not None:
            self.writer(self.buffer)

    def init_client(self, client: Any) -> None:
        """Send the layout and the current colours to a new client."""
        client.send_cmd(leds_parameter_command(self.led_rows, self.led_count))
        client.send_cmd(leds_command(self.leds))