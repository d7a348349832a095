"""Colour gradients between several slowly wandering hues."""

from __future__ import annotations

import random
from dataclasses import dataclass, replace
from typing import Any

from ledean.color import HSV
from ledean.display import Display
from ledean.modes.base import (
    Mode,
    RenderType,
    _get_float,
    _get_uint,
    _require_mapping,
)
from ledean.storage import JsonStore


@dataclass
class GradientParameter:
    brightness: float = 0.0
    count: int = 0
    round_time_ms: int = 0

    def to_dict(self) -> dict:
        return {
            "brightness": self.brightness,
            "count": self.count,
            "roundTimeMs": self.round_time_ms,
        }

    @classmethod
    def from_dict(cls, data: Any) -> GradientParameter:
        data = _require_mapping(data)
        return cls(
            brightness=_get_float(data, "brightness"),
            count=_get_uint(data, "count"),
            round_time_ms=_get_uint(data, "roundTimeMs"),
        )


@dataclass
class GradientLimits:
    min_round_time_ms: int = 1000
    max_round_time_ms: int = 10000
    min_brightness: float = 0.01
    max_brightness: float = 1.0
    min_count: int = 2
    max_count: int = 6

    def to_dict(self) -> dict:
        return {
            "minRoundTimeMs": self.min_round_time_ms,
            "maxRoundTimeMs": self.max_round_time_ms,
            "minBrightness": self.min_brightness,
            "maxBrightness": self.max_brightness,
            "minCount": self.min_count,
            "maxCount": self.max_count,
        }


@dataclass
class GradientPosition:
    """A hue on the 0..720 scale that travels towards a random target."""

    rng: random.Random
    hue_from_720: float = 0.0
    hue_to_720: float = 0.0
    hue_current_720: float = 0.0
    hue_distance: float = 0.0
    percent: float = 0.0
    percent_step: float = 0.0

    def step_forward(self) -> None:
        self.hue_current_720 = self.hue_from_720 + self.hue_distance * self.percent / 100
        self.percent += self.percent_step
        if self.percent > 100:
            self.percent -= 100
            self.hue_from_720 = self.hue_to_720
            self._new_target()

    def _new_target(self) -> None:
        self.hue_to_720 = self.rng.random() * 720.0
        self.hue_distance = self.hue_to_720 - self.hue_from_720

    def randomize(self) -> None:
        self.percent = self.rng.random() * 100.0
        self.hue_from_720 = self.rng.random() * 720.0
        self._new_target()


class ModeGradient(Mode):
    """Spreads gradients between ``count`` wandering hues over the row."""

    parameter_type = GradientParameter

    def __init__(
        self, store: JsonStore | None, display: Display, rng: random.Random | None = None
    ) -> None:
        super().__init__(store, display, "ModeGradient", RenderType.DYNAMIC, rng)
        self.limits = GradientLimits()
        self.parameter = GradientParameter()
        self.positions = [GradientPosition(self.rng) for _ in range(self.limits.max_count)]
        self.pos_distances = [0.0] * (self.limits.max_count - 1)
        self.leds_hsv = [HSV(0.0, 1.0, 0.0) for _ in range(display.row_led_count)]
        self._restore()

    def _apply_parameter(self, parameter: GradientParameter) -> None:
        if parameter.round_time_ms <= 0:
            raise ValueError("roundTimeMs must be positive")
        if not 1 <= parameter.count <= len(self.positions):
            raise ValueError(f"count must be between 1 and {len(self.positions)}")
        self.parameter = replace(parameter)
        step = (
            100
            / (parameter.round_time_ms / 1000)
            * (self.display.refresh_interval_ns / 1_000_000_000)
        )
        for position in self.positions:
            position.percent_step = step
            position.randomize()
        for led in self.leds_hsv:
            led.v = parameter.brightness

    def _calc_display_without_step(self) -> None:
        segments = self.parameter.count - 1
        count = len(self.leds_hsv)
        for i, led in enumerate(self.leds_hsv):
            absolute = i / count * segments
            index = int(absolute)
            relative = absolute - index
            led.h = self.positions[index].hue_current_720 + self.pos_distances[index] * relative
        self.display.apply_single_row_hsv(self.leds_hsv)

    def calc_display(self) -> None:
        active = self.positions[: self.parameter.count]
        for position in active:
            position.step_forward()
        self.pos_distances[: len(active) - 1] = [
            following.hue_current_720 - current.hue_current_720
            for current, following in zip(active, active[1:])
        ]
        self._calc_display_without_step()

    def set_parameter(self, parameter: GradientParameter) -> None:
        if not isinstance(parameter, GradientParameter):
            raise TypeError("expected GradientParameter")
        super().set_parameter(parameter)

    def randomize(self) -> None:
        limits = self.limits
        rng = self.rng
        self.set_parameter(
            GradientParameter(
                brightness=rng.random() * (limits.max_brightness - limits.min_brightness)
                + limits.min_brightness,
                count=rng.randrange(limits.max_count - limits.min_count) + limits.min_count,
                round_time_ms=int(rng.random() * (limits.max_round_time_ms - limits.min_round_time_ms))
                + limits.min_round_time_ms,
            )
        )