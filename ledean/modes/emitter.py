"""Light pulses and drops emitted at random places along the row."""

from __future__ import annotations

import math
import random
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, MutableSequence

from ledean.color import HSV, clear_hsv
from ledean.display import Display
from ledean.modes.base import (
    Mode,
    RenderType,
    _get_float,
    _get_uint,
    _require_mapping,
)
from ledean.storage import JsonStore

MAX_COOLDOWN = 0.2  # longest pause before an emit starts, as part of its life


class EmitStyle(str, Enum):
    PULSE = "pulse"
    DROP = "drop"


@dataclass
class EmitterParameter:
    emit_count: int = 0
    emit_style: EmitStyle = EmitStyle.PULSE
    min_brightness: float = 0.0
    max_brightness: float = 0.0
    min_emit_lifetime_ms: int = 0
    max_emit_lifetime_ms: int = 0
    wave_speed_fac: float = 0.0
    wave_width_fac: float = 0.0

    def to_dict(self) -> dict:
        return {
            "emitCount": self.emit_count,
            "emitStyle": self.emit_style.value,
            "minBrightness": self.min_brightness,
            "maxBrightness": self.max_brightness,
            "minEmitLifetimeMs": self.min_emit_lifetime_ms,
            "maxEmitLifetimeMs": self.max_emit_lifetime_ms,
            "waveSpeedFac": self.wave_speed_fac,
            "waveWidthFac": self.wave_width_fac,
        }

    @classmethod
    def from_dict(cls, data: Any) -> EmitterParameter:
        data = _require_mapping(data)
        raw_style = data.get("emitStyle")
        if raw_style is None:
            style = EmitStyle.PULSE
        else:
            try:
                style = EmitStyle(raw_style)
            except ValueError:
                raise ValueError(f"unknown emit style {raw_style!r}") from None
        return cls(
            emit_count=_get_uint(data, "emitCount", bits=8),
            emit_style=style,
            min_brightness=_get_float(data, "minBrightness"),
            max_brightness=_get_float(data, "maxBrightness"),
            min_emit_lifetime_ms=_get_uint(data, "minEmitLifetimeMs"),
            max_emit_lifetime_ms=_get_uint(data, "maxEmitLifetimeMs"),
            wave_speed_fac=_get_float(data, "waveSpeedFac"),
            wave_width_fac=_get_float(data, "waveWidthFac"),
        )


@dataclass
class EmitterLimits:
    min_emit_count: int = 1
    max_emit_count: int = 5
    min_emit_lifetime_ms: int = 500
    max_emit_lifetime_ms: int = 7000
    min_brightness: float = 0.01
    max_brightness: float = 1.0

    def to_dict(self) -> dict:
        return {
            "minEmitCount": self.min_emit_count,
            "maxEmitCount": self.max_emit_count,
            "minEmitLifetimeMs": self.min_emit_lifetime_ms,
            "maxEmitLifetimeMs": self.max_emit_lifetime_ms,
            "minBrightness": self.min_brightness,
            "maxBrightness": self.max_brightness,
        }


def _wrap_hue(hue: float) -> float:
    if hue < 0.0:
        hue += 360.0
    if hue > 360.0:
        hue -= 360.0
    return hue


@dataclass
class Emit:
    """One pulse or drop; it starts anew at a random place when it ends."""

    rng: random.Random
    refresh_interval_ns: int
    parameter: EmitterParameter = field(default_factory=EmitterParameter)
    hue_from: float = 0.0
    hue_to: float = 0.0
    brightness: float = 0.0
    lifetime_ms: int = 0
    position_per: float = 0.0
    impact_per: float = 0.0
    progress_per: float = 0.0
    progress_per_step: float = 0.0

    def _spread(self, leds: MutableSequence[HSV], affected: float, hue: float, value: float) -> None:
        start = int(self.position_per * len(leds))
        for i in range(int(affected) + 1):
            rest = min(affected - i, 1.0)
            hsv = HSV(hue, 1.0, rest * value)
            if i == 0:
                leds[start].add(hsv)
                continue
            if start + i < len(leds):
                leds[start + i].add(hsv)
            if start - i >= 0:
                leds[start - i].add(hsv)

    def add_pulse(self, leds: MutableSequence[HSV]) -> None:
        """Add a pulse that swells and shrinks around the emit's position."""
        progress = (math.cos(math.pi + self.progress_per * 2 * math.pi) + 1) / 2
        affected = progress * len(leds) * self.impact_per / 2
        hue = _wrap_hue(self.hue_from + (self.hue_to - self.hue_from) * progress)
        self._spread(leds, affected, hue, self.brightness)

    def add_drop(self, leds: MutableSequence[HSV]) -> None:
        """Add a ring that widens from the emit's position and fades out."""
        hue = _wrap_hue(self.hue_from + (self.hue_to - self.hue_from) * self.progress_per)
        affected = self.progress_per * len(leds)
        self._spread(leds, affected, hue, self.brightness * (1.0 - self.progress_per))

    def step_forward(self) -> None:
        self.progress_per += self.progress_per_step
        if self.progress_per > 1.0:
            self.randomize()

    def _progress_step(self) -> float:
        interval_s = self.refresh_interval_ns / 1_000_000_000
        parameter = self.parameter
        if parameter.emit_style is EmitStyle.PULSE:
            if self.lifetime_ms == 0:
                return math.inf
            return interval_s / (self.lifetime_ms / 1000)
        if parameter.emit_style is EmitStyle.DROP:
            if parameter.wave_speed_fac == 0:
                return math.inf
            return (
                1.0 / parameter.wave_speed_fac
                * self.brightness
                * parameter.wave_width_fac
                * interval_s
            )
        return 1.0

    def randomize(self) -> None:
        rng = self.rng
        parameter = self.parameter
        self.hue_from = rng.random() * 360.0
        self.hue_to = self.hue_from + (rng.random() - 0.5) * 360.0 * 0.5
        self.brightness = parameter.min_brightness + (
            (parameter.max_brightness - parameter.min_brightness) * rng.random()
        )
        self.impact_per = rng.random()
        low, high = parameter.min_emit_lifetime_ms, parameter.max_emit_lifetime_ms
        self.lifetime_ms = low if low >= high else rng.randrange(high - low) + low
        self.position_per = rng.random()
        self.progress_per = -rng.random() * MAX_COOLDOWN
        self.progress_per_step = self._progress_step()


class ModeEmitter(Mode):
    """Shows up to ``emit_count`` emits at once."""

    parameter_type = EmitterParameter

    def __init__(
        self, store: JsonStore | None, display: Display, rng: random.Random | None = None
    ) -> None:
        super().__init__(store, display, "ModeEmitter", RenderType.DYNAMIC, rng)
        self.limits = EmitterLimits()
        self.parameter = EmitterParameter()
        self.leds_hsv = [HSV() for _ in range(display.row_led_count)]
        self.emits = [
            Emit(self.rng, display.refresh_interval_ns, self.parameter)
            for _ in range(self.limits.max_emit_count)
        ]
        self._restore()

    def _apply_parameter(self, parameter: EmitterParameter) -> None:
        if parameter.emit_count > len(self.emits):
            raise ValueError(f"emitCount must be at most {len(self.emits)}")
        if parameter.min_emit_lifetime_ms > parameter.max_emit_lifetime_ms:
            raise ValueError("minEmitLifetimeMs must not exceed maxEmitLifetimeMs")
        self.parameter = replace(parameter)
        for emit in self.emits:
            emit.parameter = self.parameter
        for emit in self.emits[: parameter.emit_count]:
            emit.randomize()

    def calc_display(self) -> None:
        clear_hsv(self.leds_hsv)
        style = self.parameter.emit_style
        for emit in self.emits[: self.parameter.emit_count]:
            emit.step_forward()
            if emit.progress_per < 0:
                continue
            if style is EmitStyle.PULSE:
                emit.add_pulse(self.leds_hsv)
            elif style is EmitStyle.DROP:
                emit.add_drop(self.leds_hsv)
        self.display.apply_single_row_hsv(self.leds_hsv)

    def set_parameter(self, parameter: EmitterParameter) -> None:
        if not isinstance(parameter, EmitterParameter):
            raise TypeError("expected EmitterParameter")
        super().set_parameter(parameter)

    def randomize(self) -> None:
        limits = self.limits
        rng = self.rng
        min_brightness = limits.min_brightness + rng.random() * (
            limits.max_brightness - limits.min_brightness
        )
        min_lifetime = limits.min_emit_lifetime_ms + rng.randrange(
            limits.max_emit_lifetime_ms - limits.min_emit_lifetime_ms
        )
        self.set_parameter(
            EmitterParameter(
                emit_count=rng.randrange(limits.max_emit_count - limits.min_emit_count + 1)
                + limits.min_emit_count,
                emit_style=rng.choice(list(EmitStyle)),
                min_brightness=min_brightness,
                max_brightness=min_brightness
                + rng.random() * (limits.max_brightness - min_brightness),
                min_emit_lifetime_ms=min_lifetime,
                max_emit_lifetime_ms=min_lifetime
                + rng.randrange(limits.max_emit_lifetime_ms - min_lifetime),
                wave_speed_fac=1.0,
                wave_width_fac=1.0,
            )
        )