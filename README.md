# ledean

ledean computes animated colour patterns for an LED strip or matrix and
offers a small web server with a websocket. A browser connected to it can
watch the LED colours live, switch modes, change their parameters,
randomize them and pause or resume the animation.

## Modes

- **ModeSolid** – one fixed colour, dimmed by a brightness; drawn once.
- **ModeSolidRainbow** – the whole row cycles through the hue circle.
- **ModeTransitionRainbow** – a rainbow spread over the row that moves along it,
  optionally in reverse.
- **ModeRunningLed** – a light running back and forth and leaving a fading trail,
  with linear or trigonometric motion.
- **ModeEmitter** – random pulses or drops that light up and fade away.
- **ModeGradient** – several wandering hues with gradients between them.
- **ModeSpectrum** – hues set by the product of two slowly drifting sine waves.

Every mode keeps its parameters in a folder of JSON files
(`<folder>/<mode name>/parameter.json`), and the index of the selected mode
is kept as well, so the last settings survive a restart. A mode without
usable stored parameters starts with random ones within its limits.

All modes compute one row of colours; the display copies it onto every
row, reversed on the rows named by the `--reverse_rows` option.

## Installing

```
pip install .
```

For the test suite:

```
pip install ".[test]"
pytest
```

## Running

```
ledean --help
```

lists every option with its default. The number of LEDs must be given; it
must be positive and divisible by `--led_rows`, and `--reverse_rows` must
hold one `0` or `1` per row, separated by commas. A start that lights the
modes at once:

```
ledean --led_count 50 --direct_start
```

Other options include `--fps` (frames per second, default 40), `--path2db`
(the folder of JSON files, default `db`), `--log_level`, `--led_order`,
`--led_device`, `--gpio_button`, `--address`, `--port` and `--no_gui`.

Unless `--no_gui` is given, the web server listens on `0.0.0.0:2211`.
Clients connect to the `/ws` websocket; a folder given with
`--path2frontend` is served as static files; a request to `/exit` ends the
program. Cross-origin requests are allowed from any origin.

## Websocket messages

Every message is a JSON object `{"cmd": <name>, "parm": <object>}`.

From the server:

- `leds` – `{"leds": [{"r": .., "g": .., "b": ..}, ...]}`, the current colours,
  sent at most every 100 ms
- `ledsParameter` – `{"rows": .., "count": ..}`
- `modeResolver` – `{"modes": [...]}`, the mode names in order
- `modeLimits` – `{"id": <mode>, "limits": {...}}`
- `mode` – `{"id": <mode>, "parm": {...}}`, the current mode and its parameters
- `button` – `{"action": "locked" | "unlocked"}`, when a button is configured

From a client:

- `mode` – `{"id": <mode>, "parm": {...}}` sets that mode's parameters if
  `parm` is given, then switches to it
- `action` – `{"action": "randomize" | "playPause"}`
- `button` – `{"action": "single" | "double" | "long" | "toggleLock"}`; a single
  press moves to the next mode, a double press randomizes the current one, a
  long press starts or stops it, and a locked button ignores presses

## Using it from Python

```python
from ledean.parameter import parse_parameters
from ledean.app import run

parameter = parse_parameters(["--led_count", "50", "--no_gui"])
instance = run(parameter)
instance.mode_controller.switch_to("ModeSpectrum")
instance.mode_controller.start()
```

`ledean.color` provides the `RGB` and `HSV` colour types with conversion,
saturating addition and subtraction, and output in any channel order of
`SpiOrder`. `ledean.display.Display` accepts a `writer` callable that
receives the channel bytes of every rendered frame.

## What it does not do

- It drives no LED hardware. `run` builds the display without a writer, so
  frames are computed and sent to websocket clients but reach no strip;
  `--gpio_led_data` and `--led_device` are recorded but not used to open a
  device.
- The button's pin has no hardware behind it and never sees an edge, so
  presses come only from websocket clients.
- Picture mode (`--picture_mode`) is not available; the regular modes are
  used instead and a warning is logged.