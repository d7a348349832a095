"""Hues spread over the row by two slowly drifting sine waves."""

from __future__ import annotations

import math
import random
from dataclasses import dataclass, field, replace
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

POSITION_COUNT = 2


@dataclass
class SpectrumPositionParameter:
    """Ranges and round times of one wave's factor and offset."""

    fac_from: float = 0.0
    fac_to: float = 0.0
    fac_round_time_ms: int = 0
    off_from: float = 0.0
    off_to: float = 0.0
    off_round_time_ms: int = 0

    def to_dict(self) -> dict:
        return {
            "facFrom": self.fac_from,
            "facTo": self.fac_to,
            "facRoundTimeMs": self.fac_round_time_ms,
            "offFrom": self.off_from,
            "offTo": self.off_to,
            "offRoundTimeMs": self.off_round_time_ms,
        }

    @classmethod
    def from_dict(cls, data: Any) -> SpectrumPositionParameter:
        data = _require_mapping(data)
        return cls(
            fac_from=_get_float(data, "facFrom"),
            fac_to=_get_float(data, "facTo"),
            fac_round_time_ms=_get_uint(data, "facRoundTimeMs"),
            off_from=_get_float(data, "offFrom"),
            off_to=_get_float(data, "offTo"),
            off_round_time_ms=_get_uint(data, "offRoundTimeMs"),
        )


def _default_positions() -> tuple[SpectrumPositionParameter, ...]:
    return tuple(SpectrumPositionParameter() for _ in range(POSITION_COUNT))


@dataclass
class SpectrumParameter:
    hue_from_720: float = 0.0
    hue_to_720: float = 0.0
    brightness: float = 0.0
    positions: tuple[SpectrumPositionParameter, ...] = field(default_factory=_default_positions)

    def to_dict(self) -> dict:
        return {
            "hueFrom720": self.hue_from_720,
            "hueTo720": self.hue_to_720,
            "brightness": self.brightness,
            "positions": [position.to_dict() for position in self.positions],
        }

    @classmethod
    def from_dict(cls, data: Any) -> SpectrumParameter:
        data = _require_mapping(data)
        raw = data.get("positions")
        if raw is None:
            raw = []
        if not isinstance(raw, list):
            raise ValueError("'positions' must be a list")
        # surplus entries are ignored, missing ones are zero
        positions = [SpectrumPositionParameter.from_dict(item) for item in raw[:POSITION_COUNT]]
        positions += [SpectrumPositionParameter() for _ in range(POSITION_COUNT - len(positions))]
        return cls(
            hue_from_720=_get_float(data, "hueFrom720"),
            hue_to_720=_get_float(data, "hueTo720"),
            brightness=_get_float(data, "brightness"),
            positions=tuple(positions),
        )


@dataclass
class SpectrumLimits:
    max_round_time_ms: int = 60000
    min_round_time_ms: int = 10000
    min_brightness: float = 0.01
    max_brightness: float = 1.0
    min_factor: float = 0.0
    max_factor: float = 10.0
    min_offset: float = 0.0
    max_offset: float = math.pi

    def to_dict(self) -> dict:
        return {
            "maxRoundTimeMs": self.max_round_time_ms,
            "minRoundTimeMs": self.min_round_time_ms,
            "minBrightness": self.min_brightness,
            "maxBrightness": self.max_brightness,
            "minFactor": self.min_factor,
            "maxFactor": self.max_factor,
            "minOffset": self.min_offset,
            "maxOffset": self.max_offset,
        }


@dataclass
class SpectrumPosition:
    """The current factor and offset of one wave, swinging within their ranges."""

    parm: SpectrumPositionParameter
    refresh_interval_ns: int
    rng: random.Random
    factor: float = 0.0
    offset: float = 0.0
    factor_percent: float = field(init=False, default=0.0)
    factor_percent_step: float = field(init=False, default=0.0)
    offset_percent: float = field(init=False, default=0.0)
    offset_percent_step: float = field(init=False, default=0.0)

    def __post_init__(self) -> None:
        if self.parm.fac_round_time_ms <= 0 or self.parm.off_round_time_ms <= 0:
            raise ValueError("round times must be positive")
        interval_ms = self.refresh_interval_ns / 1_000_000
        self.factor_percent_step = interval_ms / self.parm.fac_round_time_ms
        self.offset_percent_step = interval_ms / self.parm.off_round_time_ms
        self.factor_percent = self.rng.random()
        self.offset_percent = self.rng.random()

    @staticmethod
    def _swing(low: float, high: float, percent: float) -> float:
        return (high - low) * (math.sin(percent * 2 * math.pi) * 0.5 + 0.5) + low

    def step_forward(self) -> None:
        self.factor_percent = (self.factor_percent + self.factor_percent_step) % 1.0
        self.factor = self._swing(self.parm.fac_from, self.parm.fac_to, self.factor_percent)
        self.offset_percent = (self.offset_percent + self.offset_percent_step) % 1.0
        self.offset = self._swing(self.parm.off_from, self.parm.off_to, self.offset_percent)


def _corrected(parameter: SpectrumParameter) -> SpectrumParameter:
    """Return ``parameter`` with every from/to pair in ascending order."""
    hue_from, hue_to = sorted((parameter.hue_from_720, parameter.hue_to_720))
    positions = tuple(
        replace(
            position,
            fac_from=min(position.fac_from, position.fac_to),
            fac_to=max(position.fac_from, position.fac_to),
            off_from=min(position.off_from, position.off_to),
            off_to=max(position.off_from, position.off_to),
        )
        for position in parameter.positions
    )
    return replace(parameter, hue_from_720=hue_from, hue_to_720=hue_to, positions=positions)


class ModeSpectrum(Mode):
    """Maps the product of two drifting waves onto a hue range."""

    parameter_type = SpectrumParameter

    def __init__(
        self, store: JsonStore | None, display: Display, rng: random.Random | None = None
    ) -> None:
        super().__init__(store, display, "ModeSpectrum", RenderType.DYNAMIC, rng)
        self.limits = SpectrumLimits()
        self.parameter = SpectrumParameter()
        self.positions: list[SpectrumPosition] = []
        self.leds_hsv = [HSV(0.0, 1.0, 0.0) for _ in range(display.row_led_count)]
        self._restore()

    def _apply_parameter(self, parameter: SpectrumParameter) -> None:
        if len(parameter.positions) != POSITION_COUNT:
            raise ValueError(f"exactly {POSITION_COUNT} positions are needed")
        parameter = _corrected(parameter)
        interval = self.display.refresh_interval_ns
        positions = [SpectrumPosition(p, interval, self.rng) for p in parameter.positions]
        self.parameter = parameter
        self.positions = positions
        for led in self.leds_hsv:
            led.v = parameter.brightness

    def calc_display(self) -> None:
        for position in self.positions:
            position.step_forward()
        first, second = self.positions
        hue_from = self.parameter.hue_from_720
        hue_distance = self.parameter.hue_to_720 - hue_from
        count = len(self.leds_hsv)
        for i, led in enumerate(self.leds_hsv):
            x = i / count * 2 * math.pi
            wave = (
                math.sin(first.factor * x + first.offset)
                * math.cos(second.factor * x + second.offset)
                * 0.5
            ) + 0.5
            led.h = hue_from + wave * hue_distance
        self.display.apply_single_row_hsv(self.leds_hsv)

    def set_parameter(self, parameter: SpectrumParameter) -> None:
        if not isinstance(parameter, SpectrumParameter):
            raise TypeError("expected SpectrumParameter")
        super().set_parameter(parameter)

    def _random_position(self) -> SpectrumPositionParameter:
        limits = self.limits
        rng = self.rng

        def factor() -> float:
            return rng.random() * (limits.max_factor - limits.min_factor) + limits.min_factor

        def offset() -> float:
            return rng.random() * (limits.max_offset - limits.min_offset) + limits.min_offset

        def round_time() -> int:
            return int(
                rng.random() * (limits.max_round_time_ms - limits.min_round_time_ms)
                + limits.min_round_time_ms
            )

        return SpectrumPositionParameter(
            fac_from=factor(),
            fac_to=factor(),
            fac_round_time_ms=round_time(),
            off_from=offset(),
            off_to=offset(),
            off_round_time_ms=round_time(),
        )

    def randomize(self) -> None:
        limits = self.limits
        rng = self.rng
        self.set_parameter(
            SpectrumParameter(
                brightness=rng.random() * (limits.max_brightness - limits.min_brightness)
                + limits.min_brightness,
                hue_from_720=rng.random() * 720.0,
                hue_to_720=rng.random() * 720.0,
                positions=tuple(self._random_position() for _ in range(POSITION_COUNT)),
            )
        )