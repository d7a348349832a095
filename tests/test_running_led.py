import json
import random

import pytest

from ledean.color import RGB
from ledean.display import Display
from ledean.modes.running_led import (
    ModeRunningLed,
    RunningLedParameter,
    RunningLedStyle,
)
from ledean.storage import JsonStore

LEDS = 10


def make_mode(store=None, seed=1):
    display = Display(LEDS, fps=40)
    return ModeRunningLed(store, display, rng=random.Random(seed)), display


def fixed_parameter(style=RunningLedStyle.LINEAR, fade=0.5):
    return RunningLedParameter(
        brightness=1.0,
        round_time_ms=1000.0,
        hue_from=0.0,
        hue_to=120.0,
        fade_pct=fade,
        style=style,
    )


@pytest.mark.parametrize("seed", range(8))
def test_randomize_stays_within_limits(seed):
    mode, _ = make_mode(seed=seed)
    p = mode.parameter
    lim = mode.limits
    assert lim.min_brightness <= p.brightness <= lim.max_brightness
    assert lim.min_round_time_ms <= p.round_time_ms <= lim.max_round_time_ms
    assert lim.min_fade_pct <= p.fade_pct <= lim.max_fade_pct
    assert 0.0 <= p.hue_from < 360.0
    assert 0.0 <= p.hue_to < 360.0
    assert p.style in set(RunningLedStyle)


def test_parameter_round_trip():
    p = fixed_parameter(RunningLedStyle.TRIGONOMETRIC)
    assert RunningLedParameter.from_dict(json.loads(json.dumps(p.to_dict()))) == p


def test_style_serialises_to_source_names():
    assert fixed_parameter(RunningLedStyle.TRIGONOMETRIC).to_dict()["style"] == "trigonometric"
    assert fixed_parameter(RunningLedStyle.LINEAR).to_dict()["style"] == "linear"


def test_unknown_style_rejected():
    with pytest.raises(ValueError):
        RunningLedParameter.from_dict({"style": "zigzag"})


def test_zero_round_time_rejected():
    mode, _ = make_mode()
    with pytest.raises(ValueError):
        mode.set_parameter(RunningLedParameter(round_time_ms=0.0))


def test_try_set_parameter_invalid_json():
    mode, _ = make_mode()
    before = mode.parameter
    with pytest.raises(ValueError):
        mode.try_set_parameter("{not json")
    assert mode.parameter == before


def test_try_set_parameter_from_json_text():
    mode, _ = make_mode()
    p = fixed_parameter()
    mode.try_set_parameter(json.dumps(p.to_dict()))
    assert mode.parameter == p


@pytest.mark.parametrize("style", list(RunningLedStyle))
def test_active_index_at_the_ends(style):
    mode, _ = make_mode()
    mode.set_parameter(fixed_parameter(style))
    mode.position_deg = 0.0
    assert mode.active_led_index() == 0
    mode.position_deg = 180.0
    assert mode.active_led_index() == LEDS - 1


def test_linear_index_is_symmetric():
    mode, _ = make_mode()
    mode.set_parameter(fixed_parameter(RunningLedStyle.LINEAR))
    mode.position_deg = 60.0
    going = mode.active_led_index()
    mode.position_deg = 300.0
    assert mode.active_led_index() == going


def test_first_frame_lights_one_led():
    mode, display = make_mode()
    mode.set_parameter(fixed_parameter())
    mode.position_deg = 0.0
    mode.activated_leds = [0.0] * LEDS
    mode.calc_display()
    lit = [led for led in display.leds if led != RGB()]
    assert len(lit) == 1
    assert display.leds[0] == lit[0]


def test_activation_stays_in_unit_range():
    mode, _ = make_mode()
    mode.set_parameter(fixed_parameter(RunningLedStyle.TRIGONOMETRIC))
    for _ in range(200):
        mode.calc_display()
        assert all(0.0 <= value <= 1.0 for value in mode.activated_leds)


def test_zero_fade_leaves_no_trail():
    mode, _ = make_mode()
    mode.set_parameter(fixed_parameter(fade=0.0))
    for _ in range(30):
        mode.calc_display()
        assert sum(1 for value in mode.activated_leds if value != 0.0) <= 1


def test_parameter_is_stored(tmp_path):
    store = JsonStore(tmp_path)
    mode, _ = make_mode(store)
    p = fixed_parameter()
    mode.set_parameter(p)
    again, _ = make_mode(store, seed=99)
    assert again.parameter == p