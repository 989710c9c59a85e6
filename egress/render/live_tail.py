"""Follow a run log while a drill is being recorded (Textual)."""

from __future__ import annotations

import threading
import time
from pathlib import Path
from typing import TextIO

from rich.panel import Panel
from rich.text import Text
from textual.app import App, ComposeResult
from textual.containers import Vertical
from textual.screen import Screen
from textual.widgets import Static

from egress.render.replay_reader import parse_tick_line
from egress.render.viewer import render_tick
from egress.sim.contracts import TickPayload


class LogFollower:
    """Reads ticks appended to an open log, holding back unfinished lines."""

    def __init__(self, handle: TextIO) -> None:
        self._handle = handle
        self._partial = ""

    def poll(self) -> list[TickPayload]:
        payloads: list[TickPayload] = []
        while True:
            chunk = self._handle.readline()
            if not chunk:
                return payloads
            if not chunk.endswith("\n"):
                self._partial += chunk
                return payloads
            line = self._partial + chunk
            self._partial = ""
            payload = parse_tick_line(line)
            if payload is not None:
                payloads.append(payload)


class TailScreen(Screen):
    CSS = """
    Screen {
        layout: vertical;
    }
    #tail-view {
        height: 1fr;
    }
    """

    def __init__(self, path: Path, *, poll_interval: float = 0.2) -> None:
        super().__init__()
        self._path = path
        self._poll_interval = poll_interval
        self._view: Static | None = None
        self._stop_event = threading.Event()

    def compose(self) -> ComposeResult:
        with Vertical(id="root"):
            yield Static(id="tail-view")

    def on_mount(self) -> None:
        self._view = self.query_one("#tail-view", Static)
        self._view.update(Panel(Text("Waiting for ticks..."), title="Evacuation"))
        thread = threading.Thread(target=self._tail_loop, daemon=True)
        thread.start()

    def on_unmount(self) -> None:
        self._stop_event.set()

    def _tail_loop(self) -> None:
        with self._path.open("r", encoding="utf-8") as handle:
            follower = LogFollower(handle)
            while not self._stop_event.is_set():
                payloads = follower.poll()
                if not payloads:
                    time.sleep(self._poll_interval)
                    continue
                self.app.call_from_thread(self._show, payloads[-1])

    def _show(self, payload: TickPayload) -> None:
        if self._view:
            self._view.update(render_tick(payload))


class TailApp(App):
    def __init__(self, screen: Screen, *, title: str = "Egress") -> None:
        super().__init__()
        self._initial_screen = screen
        self.title = title

    def on_mount(self) -> None:
        self.push_screen(self._initial_screen)


def tail_replay_log(path: Path, *, poll_interval: float = 0.2) -> None:
    if not path.exists():
        raise FileNotFoundError(f"Missing run log: {path}")
    app = TailApp(TailScreen(path, poll_interval=poll_interval), title="Egress Tail")
    app.run()
