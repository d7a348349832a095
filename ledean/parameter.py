"""Command line parameters and log level setup."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import dataclass, fields
from typing import Sequence

TRACE = 5
logging.addLevelName(TRACE, "TRACE")

_LEVELS = {
    "panic": logging.CRITICAL,
    "fatal": logging.CRITICAL,
    "error": logging.ERROR,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "info": logging.INFO,
    "debug": logging.DEBUG,
    "trace": TRACE,
}

_JSON_KEYS = {
    "gpio_button": "gpioButton",
    "gpio_led_data": "gpioLedData",
    "is_picture_mode": "isPictureMode",
    "press_long_ms": "pressLongMs",
    "press_double_timeout": "pressDoubleTimeout",
    "led_count": "ledCount",
    "led_rows": "ledRows",
    "direct_start": "directStart",
    "log_level": "logLevel",
    "path2frontend": "path2Frontend",
    "address": "address",
    "port": "port",
    "fps": "fps",
    "path2db": "path2Db",
    "reverse_rows": "reverseRows",
    "no_gui": "noGui",
    "led_order": "ledOrder",
    "led_device": "ledDevice",
}


class ParameterError(ValueError):
    """The parameters do not describe a usable setup."""


@dataclass
class Parameter:
    gpio_button: str = ""
    gpio_led_data: str = ""
    is_picture_mode: bool = False
    press_long_ms: int = 1200
    press_double_timeout: int = 350
    led_count: int = 0
    led_rows: int = 1
    direct_start: bool = False
    log_level: str = "info"
    path2frontend: str = ""
    address: str = "0.0.0.0"
    port: int = 2211
    fps: int = 40
    path2db: str = "db"
    reverse_rows: str = "0"
    no_gui: bool = False
    led_order: str = "RGB"
    led_device: str = "WS2812"

    def check(self) -> None:
        """Raise ParameterError unless the LED layout is consistent."""
        if self.led_count <= 0:
            raise ParameterError(
                "Error in parameter 'led_count'\n  - At least one led has to be connected"
            )
        if self.led_rows <= 0 or self.led_count % self.led_rows != 0:
            raise ParameterError(
                "Error in parameter 'led_count' and 'led_rows'\n"
                "  - Amount of led have to be equal to each row "
                "(e.g. led_count:20, led_rows:2, => 10 leds per row"
            )
        commas = self.reverse_rows.count(",")
        numbers = self.reverse_rows.count("0") + self.reverse_rows.count("1")
        if not (commas == numbers - 1 and numbers == self.led_rows):
            raise ParameterError("Reverse Rows are set in a wrong way")

    def to_json(self) -> str:
        data = {_JSON_KEYS[f.name]: getattr(self, f.name) for f in fields(self)}
        return json.dumps(data, indent="\t")


def _parse_bool(text: str) -> bool:
    if text in ("1", "t", "T", "true", "TRUE", "True"):
        return True
    if text in ("0", "f", "F", "false", "FALSE", "False"):
        return False
    raise argparse.ArgumentTypeError(f"invalid boolean value {text!r}")


def _parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="ledean", allow_abbrev=False)
    defaults = Parameter()

    def option(flag: str, dest: str, kind: type, help_text: str) -> None:
        default = getattr(defaults, dest)
        names = (f"-{flag}", f"--{flag}")
        if kind is bool:
            parser.add_argument(
                *names, dest=dest, nargs="?", const=True, default=default,
                type=_parse_bool, help=help_text,
            )
        else:
            parser.add_argument(*names, dest=dest, type=kind, default=default, help=help_text)

    option("gpio_button", "gpio_button", str, "gpio pin for the button")
    option("gpio_led_data", "gpio_led_data", str, "gpio pin or SPI port of the LED data line")
    option("picture_mode", "is_picture_mode", bool, "whether the software drives a picture (POI) display")
    option("no_gui", "no_gui", bool, "provide no gui (neither website nor websockets)")
    option("long_press_ms", "press_long_ms", int, "time for the button long press")
    option("double_press_timeout", "press_double_timeout", int, "time between single and double press")
    option("led_count", "led_count", int, "amount of leds")
    option("led_rows", "led_rows", int, "amount of led rows")
    option("direct_start", "direct_start", bool, "activate the LEDs on startup")
    option("log_level", "log_level", str, "log level: panic, fatal, error, warn, info, debug, trace")
    option("path2frontend", "path2frontend", str, "path to the static frontend; empty serves none")
    option("address", "address", str, "local address; empty listens on every interface")
    option("port", "port", int, "port for the webserver")
    option("fps", "fps", int, "display refresh rate, between 1 and 200")
    option("path2db", "path2db", str, "path to the folder of JSON files")
    option("reverse_rows", "reverse_rows", str, "which rows are reversed, e.g. 0,1,0,0")
    option("led_order", "led_order", str, "colour order of the LEDs: BGR|BRG|GRB|GBR|RGB|RBG")
    option("led_device", "led_device", str, "LED protocol: WS2812 | APA102")
    return parser


def parse_parameters(argv: Sequence[str] | None = None) -> Parameter:
    """Read the parameters from ``argv`` (the process arguments if None)."""
    namespace = _parser().parse_args(sys.argv[1:] if argv is None else list(argv))
    return Parameter(**vars(namespace))


def set_log_level(level: str) -> int:
    """Set the root logger to the named level and return it; raise ValueError if unknown."""
    try:
        value = _LEVELS[level.lower()]
    except KeyError:
        raise ValueError(f"not a valid log level: {level!r}") from None
    root = logging.getLogger()
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("level=%(levelname)s msg=%(message)s"))
        root.addHandler(handler)
    root.setLevel(value)
    return value