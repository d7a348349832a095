"""Wires storage, display, button, modes and webserver together and runs them."""

from __future__ import annotations

import logging
import os
import threading
from dataclasses import dataclass
from typing import Sequence

from ledean.button import Button
from ledean.color import order_from_name
from ledean.display import Display, led_device_from_name
from ledean.hub import Hub
from ledean.modes.controller import ModeController
from ledean.parameter import Parameter, ParameterError, parse_parameters, set_log_level
from ledean.storage import JsonStore
from ledean.webserver import start

log = logging.getLogger(__name__)

VERSION = "0.1.6"

_ART = r"""
   /$$       /$$$$$$$$ /$$$$$$$
   | $$      | $$_____/| $$__  $$
   | $$      | $$      | $$  \ $$  /$$$$$$   /$$$$$$  /$$$$$$$
   | $$      | $$$$$   | $$  | $$ /$$__  $$ |____  $$| $$__  $$
   | $$      | $$__/   | $$  | $$| $$$$$$$$  /$$$$$$$| $$  \ $$
   | $$      | $$      | $$  | $$| $$_____/ /$$__  $$| $$  | $$
   | $$$$$$$$| $$$$$$$$| $$$$$$$/|  $$$$$$$|  $$$$$$$| $$  | $$
   |________/|________/|_______/  \_______/ \_______/|__/  |__/
"""


def start_screen() -> str:
    """Return the banner printed at start-up."""
    return f"\n{_ART}\n   LEDean ver. {VERSION}\n \n"


@dataclass
class LEDeanInstance:
    store: JsonStore
    display: Display
    mode_controller: ModeController
    button: Button | None
    hub: Hub | None
    server: threading.Thread | None


def _serve(address: str, port: int, path2frontend: str, hub: Hub) -> None:
    try:
        start(address, port, path2frontend, hub)
    except Exception:
        log.critical("webserver failed", exc_info=True)
        os._exit(1)


def run(parameter: Parameter) -> LEDeanInstance:
    """Check ``parameter``, build every part and start it; raise ParameterError if invalid."""
    parameter.check()
    try:
        set_log_level(parameter.log_level)
    except ValueError as exc:
        log.error("%s", exc)

    store = JsonStore(parameter.path2db)
    hub = None if parameter.no_gui else Hub()
    button = None
    if parameter.gpio_button:
        button = Button(
            store,
            parameter.gpio_button,
            parameter.press_long_ms,
            parameter.press_double_timeout,
            hub,
        )
    display = Display(
        parameter.led_count,
        parameter.led_rows,
        parameter.gpio_led_data,
        parameter.reverse_rows,
        parameter.fps,
        order_from_name(parameter.led_order),
        led_device_from_name(parameter.led_device),
        hub,
    )
    if parameter.is_picture_mode:
        log.warning("picture mode is not available; using the regular modes")
    controller = ModeController(store, display, button, hub)

    server = None
    if hub is not None:
        server = threading.Thread(
            target=_serve,
            args=(parameter.address, parameter.port, parameter.path2frontend, hub),
            name="webserver",
            daemon=True,
        )
        server.start()

    if parameter.direct_start:
        controller.start()

    return LEDeanInstance(store, display, controller, button, hub, server)


def main(argv: Sequence[str] | None = None) -> int:
    print(start_screen(), end="")
    parameter = parse_parameters(argv)
    print("Starting with:\n" + parameter.to_json() + "\n\n", end="")
    try:
        run(parameter)
    except ParameterError as exc:
        log.critical("%s", exc)
        return 1
    log.info("Running forever ...")
    forever = threading.Event()
    try:
        while not forever.wait(3600):
            pass
    except KeyboardInterrupt:
        pass
    return 0