import json
import random
import time

import pytest

from ledean.button import Button
from ledean.modes.controller import ModeController
from ledean.storage import StorageError

MODE_NAMES = [
    "ModeSolid",
    "ModeSolidRainbow",
    "ModeTransitionRainbow",
    "ModeRunningLed",
    "ModeEmitter",
    "ModeGradient",
    "ModeSpectrum",
]


class FakeStore:
    def __init__(self, data=None):
        self.data = dict(data or {})

    def read(self, collection, resource):
        try:
            return self.data[(collection, resource)]
        except KeyError:
            raise StorageError(f"{collection}/{resource} missing") from None

    def write(self, collection, resource, value):
        self.data[(collection, resource)] = value


class FakeDisplay:
    row_led_count = 10
    refresh_interval_ns = 25_000_000

    def __init__(self):
        self.renders = 0
        self.clears = 0
        self.solid = []

    def render(self):
        self.renders += 1

    def force_leds_changed(self):
        pass

    def all_solid(self, rgb):
        self.solid.append(rgb)

    def apply_single_row_hsv(self, row):
        pass

    def apply_single_row_rgb(self, row):
        pass

    def clear(self):
        self.clears += 1


class FakeHub:
    def __init__(self):
        self.broadcasts = []
        self.init_cbs = []
        self.mode_action_cb = None
        self.mode_cb = None

    def on_mode_action(self, callback):
        self.mode_action_cb = callback

    def on_mode(self, callback):
        self.mode_cb = callback

    def append_init_client_cb(self, callback):
        self.init_cbs.append(callback)

    def broadcast(self, cmd):
        self.broadcasts.append(cmd)


class FakeClient:
    def __init__(self):
        self.sent = []

    def send_cmd(self, cmd):
        self.sent.append(cmd)


def decode(cmd):
    return json.loads(cmd.to_json())


@pytest.fixture
def parts():
    store = FakeStore()
    display = FakeDisplay()
    hub = FakeHub()
    controller = ModeController(store, display, hub=hub, rng=random.Random(7))
    yield controller, store, display, hub
    controller.stop(False)


def test_mode_names_in_order(parts):
    controller = parts[0]
    assert controller.mode_names() == MODE_NAMES


def test_default_index_is_stored(parts):
    controller, store, _, _ = parts
    assert controller.index == 0
    assert store.data[("modeController", "modesIndex")] == 0


def test_stored_index_is_restored():
    store = FakeStore({("modeController", "modesIndex"): 3})
    controller = ModeController(store, FakeDisplay(), rng=random.Random(1))
    assert controller.index == 3
    assert controller.current_mode.name == "ModeRunningLed"


def test_out_of_range_stored_index_resets():
    store = FakeStore({("modeController", "modesIndex"): 42})
    controller = ModeController(store, FakeDisplay(), rng=random.Random(1))
    assert controller.index == 0
    assert store.data[("modeController", "modesIndex")] == 0


def test_index_of_and_get_mode(parts):
    controller = parts[0]
    for index, name in enumerate(MODE_NAMES):
        assert controller.index_of(name) == index
        assert controller.get_mode(name).name == name
    with pytest.raises(KeyError):
        controller.index_of("ModeNothing")
    with pytest.raises(KeyError):
        controller.get_mode("ModeNothing")


def test_set_index_out_of_range(parts):
    controller = parts[0]
    with pytest.raises(IndexError):
        controller.set_index(len(MODE_NAMES))


def test_next_mode_wraps(parts):
    controller, store, _, _ = parts
    controller.set_index(len(MODE_NAMES) - 1)
    controller.next_mode()
    assert controller.index == 0
    controller.next_mode()
    assert controller.index == 1
    assert store.data[("modeController", "modesIndex")] == 1


def test_switch_to_unknown_keeps_index(parts):
    controller = parts[0]
    controller.switch_to("ModeSpectrum")
    controller.switch_to("ModeNothing")
    assert controller.index == MODE_NAMES.index("ModeSpectrum")


def test_start_broadcasts_current_mode(parts):
    controller, _, display, hub = parts
    controller.start()
    assert controller.active
    assert display.renders >= 1
    message = decode(hub.broadcasts[-1])
    assert message["cmd"] == "mode"
    assert "ModeSolid" in hub.broadcasts[-1].to_json()


def test_switch_keeps_running(parts):
    controller = parts[0]
    controller.start()
    controller.switch_to("ModeGradient")
    assert controller.active
    assert controller.current_mode.name == "ModeGradient"
    controller.next_mode()
    assert controller.active
    assert controller.current_mode.name == "ModeSpectrum"
    controller.stop(False)
    assert not controller.active


def test_play_pause_toggles(parts):
    controller = parts[0]
    controller.play_pause()
    assert controller.active
    controller.play_pause()
    assert not controller.active


def test_mode_actions(parts):
    controller = parts[0]
    controller.handle_mode_action("playPause")
    assert controller.active
    controller.handle_mode_action("unknown")
    assert controller.active
    controller.handle_mode_action("randomize")
    assert controller.active


def test_randomize_stores_parameter(parts):
    controller, store, _, _ = parts
    controller.randomize()
    assert store.data[("ModeSolid", "parameter")] == controller.mode_solid.parameter_dict()


def test_handle_mode_update_sets_parameter(parts):
    controller, _, _, hub = parts
    parameter = {"rgb": {"r": 10, "g": 20, "b": 30}, "brightness": 0.5}
    controller.handle_mode_update("ModeSolid", parameter)
    assert controller.mode_solid.parameter_dict() == parameter
    assert len(hub.broadcasts) == 1


def test_handle_mode_update_invalid_parameter(parts):
    controller, _, _, hub = parts
    before = controller.mode_solid.parameter_dict()
    controller.handle_mode_update("ModeSolid", {"brightness": "bright"})
    assert controller.mode_solid.parameter_dict() == before
    assert hub.broadcasts == []


def test_hub_mode_switches(parts):
    controller, _, _, hub = parts
    hub.mode_cb("ModeSpectrum", None)
    assert controller.current_mode.name == "ModeSpectrum"
    hub.mode_action_cb("playPause")
    assert controller.active


def test_init_client_sends_everything(parts):
    controller, _, _, hub = parts
    client = FakeClient()
    assert controller.init_client in hub.init_cbs
    controller.init_client(client)
    commands = [decode(cmd)["cmd"] for cmd in client.sent]
    assert commands == ["modeResolver"] + ["modeLimits"] * len(MODE_NAMES) + ["mode"]
    for name, cmd in zip(MODE_NAMES, client.sent[1:-1]):
        assert name in cmd.to_json()


def test_button_presses_drive_controller():
    button = Button(None, "17", start=False)
    controller = ModeController(FakeStore(), FakeDisplay(), button=button, rng=random.Random(3))
    button.press_single()
    assert controller.index == 1
    button.press_long()
    assert controller.active
    button.press_long()
    assert not controller.active


def test_stop_with_clear_screen_clears_display(parts):
    controller, _, display, _ = parts
    controller.start()
    controller.stop(True)
    deadline = time.monotonic() + 2.0
    while display.clears == 0 and time.monotonic() < deadline:
        time.sleep(0.01)
    assert display.clears >= 1
    assert not controller.active