import json
import random

import pytest

from ledean.display import Display
from ledean.modes.spectrum import (
    ModeSpectrum,
    SpectrumParameter,
    SpectrumPositionParameter,
)
from ledean.storage import JsonStore


@pytest.fixture
def display():
    return Display(20, fps=40)


@pytest.fixture
def mode(display):
    return ModeSpectrum(None, display, random.Random(3))


def favourite():
    return SpectrumParameter(
        hue_from_720=147.5,
        hue_to_720=308.6,
        brightness=0.75,
        positions=(
            SpectrumPositionParameter(
                fac_from=2.0816143975048464,
                fac_to=4.332379301570255,
                fac_round_time_ms=51440,
                off_from=1.1849568322507775,
                off_to=2.9930981722250705,
                off_round_time_ms=40118,
            ),
            SpectrumPositionParameter(
                fac_from=7,
                fac_to=8.2,
                fac_round_time_ms=36921,
                off_from=0.17155930631002372,
                off_to=0.8138194589841541,
                off_round_time_ms=49997,
            ),
        ),
    )


def test_set_favourite_parameter_is_kept(mode):
    mode.set_parameter(favourite())
    assert mode.parameter == favourite()
    assert all(led.v == 0.75 for led in mode.leds_hsv)


def test_set_parameter_sorts_ranges(mode):
    mode.set_parameter(
        SpectrumParameter(
            hue_from_720=500.0,
            hue_to_720=100.0,
            brightness=0.5,
            positions=(
                SpectrumPositionParameter(9.0, 2.0, 20000, 3.0, 1.0, 30000),
                SpectrumPositionParameter(1.0, 4.0, 20000, 0.5, 0.2, 30000),
            ),
        )
    )
    p = mode.parameter
    assert (p.hue_from_720, p.hue_to_720) == (100.0, 500.0)
    assert (p.positions[0].fac_from, p.positions[0].fac_to) == (2.0, 9.0)
    assert (p.positions[0].off_from, p.positions[0].off_to) == (1.0, 3.0)
    assert (p.positions[1].off_from, p.positions[1].off_to) == (0.2, 0.5)


def test_dict_round_trip():
    parameter = favourite()
    assert SpectrumParameter.from_dict(parameter.to_dict()) == parameter
    assert SpectrumParameter.from_dict(json.loads(json.dumps(parameter.to_dict()))) == parameter


def test_from_dict_pads_missing_positions():
    parameter = SpectrumParameter.from_dict(
        {"brightness": 0.3, "positions": [{"facFrom": 1.5, "facRoundTimeMs": 1000}]}
    )
    assert parameter.positions[0].fac_from == 1.5
    assert parameter.positions[1] == SpectrumPositionParameter()
    assert len(parameter.positions) == 2


def test_try_set_parameter_rejects_bad_json(mode):
    before = mode.parameter
    with pytest.raises(ValueError):
        mode.try_set_parameter('{"brightness": "bright"}')
    assert mode.parameter == before


def test_zero_round_time_is_rejected(mode):
    bad = favourite()
    bad.positions = (SpectrumPositionParameter(1.0, 2.0, 0, 0.0, 1.0, 1000), bad.positions[1])
    with pytest.raises(ValueError):
        mode.set_parameter(bad)


def test_calc_display_keeps_hues_in_range(mode):
    mode.set_parameter(favourite())
    for _ in range(30):
        mode.calc_display()
        assert all(147.5 <= led.h <= 308.6 for led in mode.leds_hsv)
    for position, parm in zip(mode.positions, mode.parameter.positions):
        assert parm.fac_from <= position.factor <= parm.fac_to
        assert parm.off_from <= position.offset <= parm.off_to
        assert 0.0 <= position.factor_percent < 1.0


def test_calc_display_reaches_the_display(mode, display):
    mode.set_parameter(favourite())
    mode.calc_display()
    expected = [led.to_rgb() for led in mode.leds_hsv]
    assert display.leds == expected


def test_randomize_within_limits(mode):
    limits = mode.limits
    for _ in range(20):
        mode.randomize()
        p = mode.parameter
        assert limits.min_brightness <= p.brightness <= limits.max_brightness
        assert 0.0 <= p.hue_from_720 <= p.hue_to_720 < 720.0
        for position in p.positions:
            assert limits.min_factor <= position.fac_from <= position.fac_to <= limits.max_factor
            assert limits.min_offset <= position.off_from <= position.off_to <= limits.max_offset
            assert limits.min_round_time_ms <= position.fac_round_time_ms <= limits.max_round_time_ms
            assert limits.min_round_time_ms <= position.off_round_time_ms <= limits.max_round_time_ms


def test_parameter_is_stored_and_restored(tmp_path, display):
    store = JsonStore(tmp_path)
    first = ModeSpectrum(store, display, random.Random(1))
    first.set_parameter(favourite())
    assert store.read("ModeSpectrum", "parameter") == favourite().to_dict()
    second = ModeSpectrum(store, display, random.Random(2))
    assert second.parameter == favourite()