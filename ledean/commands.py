"""Messages exchanged with websocket clients."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Iterable

from ledean.color import RGB

CMD_LEDS = "leds"
CMD_LEDS_PARAMETER = "ledsParameter"
CMD_BUTTON = "button"
CMD_MODE = "mode"
CMD_MODE_LIMITS = "modeLimits"
CMD_MODE_RESOLVER = "modeResolver"
CMD_MODE_ACTION = "action"

ACTION_RANDOMIZE = "randomize"
ACTION_PLAY_PAUSE = "playPause"


@dataclass
class Command:
    """A message of the form ``{"cmd": ..., "parm": ...}``."""

    command: str
    parameter: Any = None

    def to_json(self) -> str:
        return json.dumps(
            {"cmd": self.command, "parm": self.parameter}, separators=(",", ":")
        )

    @classmethod
    def from_json(cls, text: str | bytes) -> Command:
        """Parse a message; raise ValueError if it is not a command object."""
        data = json.loads(text)
        if not isinstance(data, dict):
            raise ValueError("command must be a JSON object")
        command = data.get("cmd", "")
        if command is None:
            command = ""
        if not isinstance(command, str):
            raise ValueError("'cmd' must be a string")
        return cls(command=command, parameter=data.get("parm"))


def leds_command(leds: Iterable[RGB]) -> Command:
    return Command(CMD_LEDS, {"leds": [led.to_dict() for led in leds]})


def leds_parameter_command(rows: int, count: int) -> Command:
    return Command(CMD_LEDS_PARAMETER, {"rows": rows, "count": count})


def button_command(action: str) -> Command:
    return Command(CMD_BUTTON, {"action": action})


def mode_command(mode_id: str, parameter: Any) -> Command:
    return Command(CMD_MODE, {"id": mode_id, "parm": parameter})


def mode_limits_command(mode_id: str, limits: Any) -> Command:
    return Command(CMD_MODE_LIMITS, {"id": mode_id, "limits": limits})


def mode_resolver_command(modes: Iterable[str]) -> Command:
    return Command(CMD_MODE_RESOLVER, {"modes": list(modes)})