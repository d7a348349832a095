"""One colour on every LED, cycling through the hues."""

from __future__ import annotations

import random
from dataclasses import dataclass, field
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
class SolidRainbowParameter:
    brightness: float = 0.0
    round_time_ms: int = 0
    hsv: HSV = field(default_factory=HSV)

    def to_dict(self) -> dict:
        return {
            "brightness": self.brightness,
            "roundTimeMs": self.round_time_ms,
            "hsv": {"H": self.hsv.h, "S": self.hsv.s, "V": self.hsv.v},
        }

    @classmethod
    def from_dict(cls, data: Any) -> SolidRainbowParameter:
        data = _require_mapping(data)
        hsv_data = data.get("hsv")
        if hsv_data is None:
            hsv = HSV()
        else:
            upper = {str(k).upper(): v for k, v in _require_mapping(hsv_data).items()}
            hsv = HSV(_get_float(upper, "H"), _get_float(upper, "S"), _get_float(upper, "V"))
        return cls(
            brightness=_get_float(data, "brightness"),
            round_time_ms=_get_uint(data, "roundTimeMs"),
            hsv=hsv,
        )


@dataclass
class SolidRainbowLimits:
    min_round_time_ms: int = 2000
    max_round_time_ms: int = 300000
    min_brightness: float = 0.01
    max_brightness: float = 1.0

    def to_dict(self) -> dict:
        return {
            "minRoundTimeMs": self.min_round_time_ms,
            "maxRoundTimeMs": self.max_round_time_ms,
            "minBrightness": self.min_brightness,
            "maxBrightness": self.max_brightness,
        }


class ModeSolidRainbow(Mode):
    """Moves the hue of a single colour once round the wheel per round time."""

    parameter_type = SolidRainbowParameter

    def __init__(
        self, store: JsonStore | None, display: Display, rng: random.Random | None = None
    ) -> None:
        super().__init__(store, display, "ModeSolidRainbow", RenderType.DYNAMIC, rng)
        self.limits = SolidRainbowLimits()
        self.parameter = SolidRainbowParameter()
        self._hue_step = 0.0
        self._restore()

    def _apply_parameter(self, parameter: SolidRainbowParameter) -> None:
        if parameter.round_time_ms <= 0:
            raise ValueError("roundTimeMs must be positive")
        self.parameter = SolidRainbowParameter(
            brightness=parameter.brightness,
            round_time_ms=parameter.round_time_ms,
            hsv=HSV(parameter.hsv.h, parameter.hsv.s, parameter.brightness),
        )
        self._hue_step = (
            360.0
            / (parameter.round_time_ms / 1000)
            * (self.display.refresh_interval_ns / 1_000_000_000)
        )

    def calc_display(self) -> None:
        hsv = self.parameter.hsv
        hsv.h += self._hue_step
        while hsv.h > 360.0:
            hsv.h -= 360.0
        self.display.all_solid(hsv.to_rgb())

    def set_parameter(self, parameter: SolidRainbowParameter) -> None:
        if not isinstance(parameter, SolidRainbowParameter):
            raise TypeError("expected SolidRainbowParameter")
        super().set_parameter(parameter)

    def randomize(self) -> None:
        limits = self.limits
        rng = self.rng
        self.set_parameter(
            SolidRainbowParameter(
                round_time_ms=int(rng.random() * (limits.max_round_time_ms - limits.min_round_time_ms))
                + limits.min_round_time_ms,
                brightness=rng.random() * (limits.max_brightness - limits.min_brightness)
                + limits.min_brightness,
                hsv=HSV(rng.random() * 360.0, 1.0, self.parameter.brightness),
            )
        )