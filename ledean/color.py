"""Colour types for LED strips: RGB, HSV and SPI channel orders."""

from __future__ import annotations

import json
from dataclasses import dataclass
from enum import IntEnum
from typing import Iterable, MutableSequence


class SpiOrder(IntEnum):
    """Order in which the colour channels are sent to the LED device."""

    BGR = 0  # current APA102 order
    BRG = 1  # APA102 order from 2015-2017
    GRB = 2  # APA102 before 2015, also WS2812 144 leds/m
    GBR = 3
    RGB = 4
    RBG = 5


_SPI_CHANNELS = {
    SpiOrder.BGR: ("b", "g", "r"),
    SpiOrder.BRG: ("b", "r", "g"),
    SpiOrder.GRB: ("g", "r", "b"),
    SpiOrder.GBR: ("g", "b", "r"),
    SpiOrder.RGB: ("r", "g", "b"),
    SpiOrder.RBG: ("r", "b", "g"),
}


def order_from_name(name: str) -> SpiOrder:
    """Return the channel order named ``name``; unknown names give RGB."""
    for order in SpiOrder:
        if order.name == name:
            return order
    return SpiOrder.RGB


def _to_byte(value: float) -> int:
    return min(max(int(value), 0), 255)


@dataclass
class RGB:
    """An 8-bit per channel colour."""

    r: int = 0
    g: int = 0
    b: int = 0

    def __str__(self) -> str:
        return json.dumps(self.to_dict(), separators=(",", ":"))

    def to_dict(self) -> dict:
        return {"r": self.r, "g": self.g, "b": self.b}

    def to_hsv(self) -> HSV:
        r = self.r / 255.0
        g = self.g / 255.0
        b = self.b / 255.0
        max_c = max(r, g, b)
        min_c = min(r, g, b)
        saturation = 0.0 if max_c == 0.0 else (max_c - min_c) / max_c
        return HSV(h=_hue(r, g, b, max_c, min_c), s=saturation, v=max_c)

    def to_spi(self, order: int) -> bytes:
        """Return the three channel bytes in the given order."""
        try:
            channels = _SPI_CHANNELS[SpiOrder(order)]
        except ValueError:
            return bytes(3)
        return bytes(getattr(self, channel) for channel in channels)

    def add(self, other: RGB) -> None:
        """Add ``other`` channel-wise, saturating at 255."""
        self.r = min(self.r + other.r, 255)
        self.g = min(self.g + other.g, 255)
        self.b = min(self.b + other.b, 255)

    def sub(self, other: RGB) -> None:
        """Subtract ``other`` channel-wise, saturating at 0."""
        self.r = max(self.r - other.r, 0)
        self.g = max(self.g - other.g, 0)
        self.b = max(self.b - other.b, 0)


def _hue(r: float, g: float, b: float, max_c: float, min_c: float) -> float:
    delta = max_c - min_c
    if delta == 0.0:
        return 0.0
    if max_c == r:
        hue = 60.0 * ((g - b) / delta)
    elif max_c == g:
        hue = 60.0 * (2.0 + (b - r) / delta)
    else:
        hue = 60.0 * (4.0 + (r - g) / delta)
    while hue < 0.0:
        hue += 360.0
    return hue


@dataclass
class HSV:
    """Hue in degrees, saturation and value in 0..1."""

    h: float = 0.0
    s: float = 0.0
    v: float = 0.0

    def to_rgb(self) -> RGB:
        sector = int(self.h / 60.0)
        f = self.h / 60.0 - sector
        p = self.v * (1.0 - self.s)
        q = self.v * (1.0 - self.s * f)
        t = self.v * (1.0 - self.s * (1.0 - f))
        r, g, b = {
            0: (self.v, t, p),
            1: (q, self.v, p),
            2: (p, self.v, t),
            3: (p, q, self.v),
            4: (t, p, self.v),
            5: (self.v, p, q),
        }[sector % 6]
        return RGB(_to_byte(r * 255), _to_byte(g * 255), _to_byte(b * 255))

    def _assign(self, other: HSV) -> None:
        self.h, self.s, self.v = other.h, other.s, other.v

    def add(self, other: HSV) -> None:
        self.add_rgb(other.to_rgb())

    def add_rgb(self, other: RGB) -> None:
        rgb = self.to_rgb()
        rgb.add(other)
        self._assign(rgb.to_hsv())

    def sub(self, other: HSV) -> None:
        self.sub_rgb(other.to_rgb())

    def sub_rgb(self, other: RGB) -> None:
        rgb = self.to_rgb()
        rgb.sub(other)
        self._assign(rgb.to_hsv())


def rgb_list_to_hsv(leds: Iterable[RGB]) -> list[HSV]:
    return [led.to_hsv() for led in leds]


def hsv_list_to_rgb(leds: Iterable[HSV]) -> list[RGB]:
    return [led.to_rgb() for led in leds]


def clear_rgb(leds: MutableSequence[RGB]) -> None:
    """Set every colour in ``leds`` to black, in place."""
    leds[:] = [RGB() for _ in leds]


def clear_hsv(leds: MutableSequence[HSV]) -> None:
    """Set every colour in ``leds`` to black, in place."""
    leds[:] = [HSV() for _ in leds]