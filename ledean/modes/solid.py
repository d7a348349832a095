"""A single colour on every LED."""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import Any

from ledean.color import RGB
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
class SolidParameter:
    rgb: RGB = field(default_factory=RGB)
    brightness: float = 0.0

    def to_dict(self) -> dict:
        return {"rgb": self.rgb.to_dict(), "brightness": self.brightness}

    @classmethod
    def from_dict(cls, data: Any) -> SolidParameter:
        data = _require_mapping(data)
        rgb_data = data.get("rgb")
        if rgb_data is None:
            rgb = RGB()
        else:
            rgb_data = _require_mapping(rgb_data)
            rgb = RGB(*(_get_uint(rgb_data, key, bits=8) for key in ("r", "g", "b")))
        return cls(rgb=rgb, brightness=_get_float(data, "brightness"))


@dataclass
class SolidLimits:
    min_brightness: float = 0.0
    max_brightness: float = 1.0

    def to_dict(self) -> dict:
        return {"minBrightness": self.min_brightness, "maxBrightness": self.max_brightness}


def _scale(channel: int, brightness: float) -> int:
    return min(max(int(channel * brightness), 0), 255)


class ModeSolid(Mode):
    """Shows one colour, dimmed by the brightness."""

    parameter_type = SolidParameter

    def __init__(
        self, store: JsonStore | None, display: Display, rng: random.Random | None = None
    ) -> None:
        super().__init__(store, display, "ModeSolid", RenderType.STATIC, rng)
        self.limits = SolidLimits()
        self.parameter = SolidParameter()
        self._restore()

    def calc_display(self) -> None:
        rgb = self.parameter.rgb
        brightness = self.parameter.brightness
        self.display.all_solid(
            RGB(_scale(rgb.r, brightness), _scale(rgb.g, brightness), _scale(rgb.b, brightness))
        )

    def set_parameter(self, parameter: SolidParameter) -> None:
        if not isinstance(parameter, SolidParameter):
            raise TypeError("expected SolidParameter")
        super().set_parameter(SolidParameter(rgb=RGB(parameter.rgb.r, parameter.rgb.g, parameter.rgb.b),
                                             brightness=parameter.brightness))

    def randomize(self) -> None:
        limits = self.limits
        rng = self.rng
        self.set_parameter(
            SolidParameter(
                brightness=rng.random() * (limits.max_brightness - limits.min_brightness)
                + limits.min_brightness,
                rgb=RGB(rng.randrange(255), rng.randrange(255), rng.randrange(255)),
            )
        )