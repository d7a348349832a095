"""Websocket clients and the hub that connects them to the LED controller."""

from __future__ import annotations

import asyncio
import json
import logging
import threading
from typing import Any, Callable

from aiohttp import WSMsgType, web

from ledean.commands import Command

log = logging.getLogger(__name__)

CMD_BUTTON = "button"
CMD_MODE = "mode"
CMD_MODE_ACTION = "action"

WRITE_WAIT_S = 10.0
PONG_WAIT_S = 60.0
PING_PERIOD_S = PONG_WAIT_S * 9 / 10
MAX_MESSAGE_SIZE = 2048


class Client:
    """One connected peer; commands for it are handed to ``sender`` as JSON text."""

    def __init__(self, sender: Callable[[str], Any]) -> None:
        self._sender = sender

    def send_cmd(self, cmd: Command) -> None:
        self._sender(cmd.to_json())


def _action_of(parameter: Any) -> str | None:
    if not isinstance(parameter, dict):
        return None
    action = parameter.get("action")
    if action is None:
        return ""
    return action if isinstance(action, str) else None


class Hub:
    """Keeps the connected clients and routes their commands to the listeners."""

    def __init__(self) -> None:
        self._clients: set[Client] = set()
        self._lock = threading.RLock()
        self._init_client_cbs: list[Callable[[Client], Any]] = []
        self._button_cbs: list[Callable[[str], Any]] = []
        self._mode_action_cbs: list[Callable[[str], Any]] = []
        self._mode_cbs: list[Callable[[str, Any], Any]] = []

    def __len__(self) -> int:
        with self._lock:
            return len(self._clients)

    def __contains__(self, client: object) -> bool:
        with self._lock:
            return client in self._clients

    def append_init_client_cb(self, callback: Callable[[Client], Any]) -> None:
        """Call ``callback`` with every client that registers from now on."""
        self._init_client_cbs.append(callback)

    def on_button(self, callback: Callable[[str], Any]) -> None:
        self._button_cbs.append(callback)

    def on_mode_action(self, callback: Callable[[str], Any]) -> None:
        self._mode_action_cbs.append(callback)

    def on_mode(self, callback: Callable[[str, Any], Any]) -> None:
        self._mode_cbs.append(callback)

    def register(self, client: Client) -> None:
        with self._lock:
            log.info("Registered client")
            self._clients.add(client)
            for callback in list(self._init_client_cbs):
                callback(client)

    def unregister(self, client: Client) -> bool:
        """Forget ``client``; return whether it was registered."""
        with self._lock:
            if client not in self._clients:
                return False
            log.info("Unregistered client")
            self._clients.discard(client)
            return True

    def broadcast(self, cmd: Command) -> None:
        with self._lock:
            for client in list(self._clients):
                client.send_cmd(cmd)

    def handle_message(self, text: str | bytes) -> bool:
        """Dispatch one message from a client; return whether a listener got it."""
        try:
            message = json.loads(text)
        except (ValueError, TypeError) as exc:
            log.error("Error reading json message from client: %s", exc)
            return False
        if not isinstance(message, dict):
            log.error("Error reading json message from client: not an object")
            return False
        command = message.get("cmd")
        if command is None:
            command = ""
        if not isinstance(command, str):
            log.error("Error reading json message from client: 'cmd' is not a string")
            return False
        parameter = message.get("parm")

        if command == "":
            log.debug("Empty message. can be ignored")
            return False
        if command == CMD_BUTTON:
            action = _action_of(parameter)
            if action is None:
                log.debug("Could not parse button parm msg: %s", parameter)
                return False
            callbacks: list[Callable[..., Any]] = self._button_cbs
            args: tuple[Any, ...] = (action,)
        elif command == CMD_MODE_ACTION:
            action = _action_of(parameter)
            if action is None:
                log.debug("Could not parse mode action parm msg: %s", parameter)
                return False
            callbacks = self._mode_action_cbs
            args = (action,)
        elif command == CMD_MODE:
            if not isinstance(parameter, dict):
                log.debug("Could not parse mode parm msg: %s", parameter)
                return False
            mode_id = parameter.get("id")
            if mode_id is None:
                mode_id = ""
            if not isinstance(mode_id, str):
                log.debug("Could not parse mode parm msg: %s", parameter)
                return False
            callbacks = self._mode_cbs
            args = (mode_id, parameter.get("parm"))
        else:
            log.debug("Unknown command: '%s' from client", command)
            return False

        for callback in list(callbacks):
            callback(*args)
        return True

    async def websocket_handler(self, request: web.Request) -> web.WebSocketResponse:
        """Serve one websocket connection until the peer goes away."""
        ws = web.WebSocketResponse(heartbeat=PING_PERIOD_S, max_msg_size=MAX_MESSAGE_SIZE)
        await ws.prepare(request)
        loop = asyncio.get_running_loop()
        outbox: asyncio.Queue[str | bytes | None] = asyncio.Queue()

        def enqueue(text: str | bytes) -> None:
            try:
                loop.call_soon_threadsafe(outbox.put_nowait, text)
            except RuntimeError:
                log.debug("dropping message for a closed connection")

        client = Client(enqueue)
        writer = asyncio.create_task(self._write_pump(ws, outbox))
        try:
            await loop.run_in_executor(None, self.register, client)
            async for msg in ws:
                if msg.type in (WSMsgType.TEXT, WSMsgType.BINARY):
                    try:
                        await loop.run_in_executor(None, self.handle_message, msg.data)
                    except Exception:
                        log.exception("handling a client message failed")
                elif msg.type is WSMsgType.ERROR:
                    log.debug("Connection closed with: '%s'", ws.exception())
                    break
        finally:
            self.unregister(client)
            outbox.put_nowait(None)
            await writer
        return ws

    @staticmethod
    async def _write_pump(ws: web.WebSocketResponse, outbox: asyncio.Queue) -> None:
        while True:
            text = await outbox.get()
            if text is None:
                return
            if isinstance(text, (bytes, bytearray)):
                text = bytes(text).decode()
            try:
                await asyncio.wait_for(ws.send_str(text), WRITE_WAIT_S)
            except (ConnectionError, asyncio.TimeoutError, RuntimeError) as exc:
                log.debug("could not send to client: %s", exc)
                await ws.close()
                return