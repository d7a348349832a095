"""A rainbow spread over the row, moving along it."""

from __future__ import annotations

import random
from dataclasses import dataclass, replace
from typing import Any

from ledean.color import HSV
from ledean.display import Display
from ledean.modes.base import (
    Mode,
    RenderType,
    _get_bool,
    _get_float,
    _get_uint,
    _require_mapping,
)
from ledean.storage import JsonStore


@dataclass
class TransitionRainbowParameter:
    brightness: float = 0.0
    spectrum: float = 0.0
    round_time_ms: int = 0
    reverse: bool = False

    def to_dict(self) -> dict:
        return {
            "brightness": self.brightness,
            "spectrum": self.spectrum,
            "roundTimeMs": self.round_time_ms,
            "reverse": self.reverse,
        }

    @classmethod
    def from_dict(cls, data: Any) -> TransitionRainbowParameter:
        data = _require_mapping(data)
        return cls(
            brightness=_get_float(data, "brightness"),
            spectrum=_get_float(data, "spectrum"),
            round_time_ms=_get_uint(data, "roundTimeMs"),
            reverse=_get_bool(data, "reverse"),
        )


@dataclass
class TransitionRainbowLimits:
    min_round_time_ms: int = 500
    max_round_time_ms: int = 30000
    min_brightness: float = 0.01
    max_brightness: float = 1.0
    min_spectrum: float = 0.1
    max_spectrum: float = 2.0

    def to_dict(self) -> dict:
        return {
            "minRoundTimeMs": self.min_round_time_ms,
            "maxRoundTimeMs": self.max_round_time_ms,
            "minBrightness": self.min_brightness,
            "maxBrightness": self.max_brightness,
            "minSpectrum": self.min_spectrum,
            "maxSpectrum": self.max_spectrum,
        }


class ModeTransitionRainbow(Mode):
    """Spreads ``spectrum`` times the hue wheel over the row and shifts it."""

    parameter_type = TransitionRainbowParameter

    def __init__(
        self, store: JsonStore | None, display: Display, rng: random.Random | None = None
    ) -> None:
        super().__init__(store, display, "ModeTransitionRainbow", RenderType.DYNAMIC, rng)
        self.limits = TransitionRainbowLimits()
        self.parameter = TransitionRainbowParameter()
        self.leds_hsv = [HSV(0.0, 1.0, 0.0) for _ in range(display.row_led_count)]
        self._hue_step = 0.0
        self._restore()

    def _apply_parameter(self, parameter: TransitionRainbowParameter) -> None:
        if parameter.round_time_ms <= 0:
            raise ValueError("roundTimeMs must be positive")
        self.parameter = replace(parameter)
        self._hue_step = (
            360.0
            / (parameter.round_time_ms / 1000)
            * (self.display.refresh_interval_ns / 1_000_000_000)
        )
        count = len(self.leds_hsv)
        if count == 0:
            return
        first_hue = self.leds_hsv[0].h
        for i, led in enumerate(self.leds_hsv):
            led.h = first_hue + i / count * parameter.spectrum * 360.0
            led.v = parameter.brightness

    def calc_display(self) -> None:
        step = self._hue_step
        for led in self.leds_hsv:
            if self.parameter.reverse:
                led.h -= step
                if led.h < 0.0:
                    led.h += 360.0
            else:
                led.h += step
                if led.h > 360.0:
                    led.h -= 360.0
        self.display.apply_single_row_hsv(self.leds_hsv)

    def set_parameter(self, parameter: TransitionRainbowParameter) -> None:
        if not isinstance(parameter, TransitionRainbowParameter):
            raise TypeError("expected TransitionRainbowParameter")
        super().set_parameter(parameter)

    def randomize(self) -> None:
        limits = self.limits
        rng = self.rng
        self.set_parameter(
            TransitionRainbowParameter(
                round_time_ms=int(rng.random() * (limits.max_round_time_ms - limits.min_round_time_ms))
                + limits.min_round_time_ms,
                brightness=rng.random() * (limits.max_brightness - limits.min_brightness)
                + limits.min_brightness,
                spectrum=rng.random() * (limits.max_spectrum - limits.min_spectrum)
                + limits.min_spectrum,
                reverse=rng.randrange(2) == 1,
            )
        )