"""A light running back and forth along the row, leaving a fading trail."""

from __future__ import annotations

import math
import random
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any

from ledean.color import HSV, RGB
from ledean.display import Display
from ledean.modes.base import Mode, RenderType, _get_float, _require_mapping
from ledean.storage import JsonStore


class RunningLedStyle(str, Enum):
    """How the running light moves between the ends of the row."""

    LINEAR = "linear"
    TRIGONOMETRIC = "trigonometric"


@dataclass
class RunningLedParameter:
    brightness: float = 0.0
    round_time_ms: float = 0.0
    hue_from: float = 0.0
    hue_to: float = 0.0
    fade_pct: float = 0.0
    style: RunningLedStyle = RunningLedStyle.LINEAR

    def to_dict(self) -> dict:
        return {
            "brightness": self.brightness,
            "roundTimeMs": self.round_time_ms,
            "hueFrom": self.hue_from,
            "hueTo": self.hue_to,
            "fadePct": self.fade_pct,
            "style": self.style.value,
        }

    @classmethod
    def from_dict(cls, data: Any) -> RunningLedParameter:
        data = _require_mapping(data)
        raw_style = data.get("style")
        if raw_style is None:
            style = RunningLedStyle.LINEAR
        else:
            try:
                style = RunningLedStyle(raw_style)
            except ValueError:
                raise ValueError(f"unknown style {raw_style!r}") from None
        return cls(
            brightness=_get_float(data, "brightness"),
            round_time_ms=_get_float(data, "roundTimeMs"),
            hue_from=_get_float(data, "hueFrom"),
            hue_to=_get_float(data, "hueTo"),
            fade_pct=_get_float(data, "fadePct"),
            style=style,
        )


@dataclass
class RunningLedLimits:
    min_round_time_ms: int = 1000
    max_round_time_ms: int = 30000
    min_brightness: float = 0.2
    max_brightness: float = 1.0
    min_fade_pct: float = 0.0
    max_fade_pct: float = 1.0

    def to_dict(self) -> dict:
        return {
            "minRoundTimeMs": self.min_round_time_ms,
            "maxRoundTimeMs": self.max_round_time_ms,
            "minBrightness": self.min_brightness,
            "maxBrightness": self.max_brightness,
            "minFadePct": self.min_fade_pct,
            "maxFadePct": self.max_fade_pct,
        }


class ModeRunningLed(Mode):
    """Moves one lit LED once there and back per round time."""

    parameter_type = RunningLedParameter

    def __init__(
        self, store: JsonStore | None, display: Display, rng: random.Random | None = None
    ) -> None:
        super().__init__(store, display, "ModeRunningLed", RenderType.DYNAMIC, rng)
        self.limits = RunningLedLimits()
        self.parameter = RunningLedParameter()
        self.position_deg = 0.0
        self.leds_rgb = [RGB() for _ in range(display.row_led_count)]
        self.activated_leds = [0.0] * display.row_led_count
        self._position_step = 0.0
        self._darken_step = 0.0
        self._lighten_step = 0.0
        self._hue_distance = 0.0
        self._hue_direction = 1.0
        self._restore()

    def _apply_parameter(self, parameter: RunningLedParameter) -> None:
        if parameter.round_time_ms <= 0:
            raise ValueError("roundTimeMs must be positive")
        self.parameter = replace(parameter)
        self._hue_distance = abs(parameter.hue_from - parameter.hue_to)
        self._hue_direction = -1.0 if parameter.hue_from > parameter.hue_to else 1.0
        rounds_s = parameter.round_time_ms / 1000.0
        interval_s = self.display.refresh_interval_ns / 1_000_000_000
        self._position_step = 360.0 / rounds_s * interval_s
        inverse_fade = 1.0 / parameter.fade_pct if parameter.fade_pct != 0 else math.inf
        self._darken_step = inverse_fade / rounds_s * interval_s
        self._lighten_step = (
            2 * parameter.brightness * self.display.row_led_count / rounds_s * interval_s
        )

    def active_led_index(self) -> int:
        """Return the index of the LED the light is currently on."""
        count = len(self.activated_leds)
        if self.parameter.style is RunningLedStyle.LINEAR:
            position = self.position_deg / 180.0
            if position > 1.0:
                position = 2.0 - position
            index = int(position * count)
        elif self.parameter.style is RunningLedStyle.TRIGONOMETRIC:
            index = int(
                ((math.cos(math.radians(self.position_deg + 180.0)) + 1.0) / 2) * count
            )
        else:
            index = 0
        return min(index, count - 1)

    def _step_forward(self) -> None:
        self.position_deg += self._position_step
        if self.position_deg >= 360.0:
            self.position_deg -= 360.0

    def _darken(self, value: float) -> float:
        if value == 0.0:
            return value
        if value <= self._darken_step:
            return 0.0
        return value - self._darken_step

    def calc_display(self) -> None:
        self._step_forward()
        index = self.active_led_index()
        leds = self.activated_leds
        # keep the active LED from being darkened while it lights up
        leds[index] += self._darken_step
        leds = [self._darken(value) for value in leds]
        leds[index] = min(leds[index] + self._lighten_step, 1.0)
        self.activated_leds = leds

        hue_from = self.parameter.hue_from
        span = self._hue_direction * self._hue_distance
        self.leds_rgb = [HSV(hue_from + span * value, 1.0, value).to_rgb() for value in leds]
        self.display.apply_single_row_rgb(self.leds_rgb)

    def set_parameter(self, parameter: RunningLedParameter) -> None:
        if not isinstance(parameter, RunningLedParameter):
            raise TypeError("expected RunningLedParameter")
        super().set_parameter(parameter)

    def randomize(self) -> None:
        limits = self.limits
        rng = self.rng
        self.set_parameter(
            RunningLedParameter(
                brightness=rng.random() * (limits.max_brightness - limits.min_brightness)
                + limits.min_brightness,
                fade_pct=rng.random() * (limits.max_fade_pct - limits.min_fade_pct)
                + limits.min_fade_pct,
                hue_from=rng.random() * 360.0,
                hue_to=rng.random() * 360.0,
                round_time_ms=rng.random() * (limits.max_round_time_ms - limits.min_round_time_ms)
                + limits.min_round_time_ms,
                style=rng.choice(list(RunningLedStyle)),
            )
        )