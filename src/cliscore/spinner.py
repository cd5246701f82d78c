"""Terminal spinner shown while waiting on the API."""

from __future__ import annotations

import itertools
import sys
import threading
from dataclasses import dataclass
from typing import TextIO


@dataclass(frozen=True)
class SpinnerStyle:
    frames: tuple[str, ...]
    delay: float = 0.1
    description: str = ""


STYLES: dict[str, SpinnerStyle] = {
    "default": SpinnerStyle(tuple("⠋⠙⠹⠸⠼⠴⠦⠧⠇⠏"), description="Braille dots"),
    "dots": SpinnerStyle(tuple("⣾⣽⣻⢿⡿⣟⣯⣷"), description="Heavy dots"),
    "arrows": SpinnerStyle(tuple("←↖↑↗→↘↓↙"), description="Rotating arrows"),
    "bounce": SpinnerStyle(tuple("⠁⠂⠄⡀⢀⠠⠐⠈"), description="Bouncing dots"),
    "pulse": SpinnerStyle(tuple("▁▂▃▄▅▆▇█▇▆▅▄▃▂"), description="Pulsing bar"),
    "braille": SpinnerStyle(tuple("⠋⠙⠚⠒⠂⠒⠲⠴"), description="Braille pattern"),
    "emoji": SpinnerStyle(("⚡", "🔄", "⏳"), delay=0.3, description="Lightning and refresh"),
    "planet": SpinnerStyle(("🌍", "🌎", "🌏"), delay=0.3, description="Rotating Earth"),
    "clock": SpinnerStyle(tuple("🕐🕑🕒🕓🕔🕕🕖🕗🕘🕙🕚🕛"), description="Clock faces"),
    "simple": SpinnerStyle((".", "..", "...", "...."), delay=0.2, description="Progressive dots"),
    "text": SpinnerStyle(
        ("[=   ]", "[==  ]", "[=== ]", "[====]", "[ ===]", "[  ==]", "[   =]", "[    ]"),
        description="Loading bar",
    ),
    "matrix": SpinnerStyle(tuple("ｱｲｳｴｵｶｷｸｹｺ"), description="Matrix characters"),
}
NO_SPINNER = "none"

# Style choices offered by `cliscore setup`, in menu order.
SETUP_STYLES = ("default", "dots", "arrows", "bounce", "simple", NO_SPINNER)


class Spinner:
    """Animate *message* on a background thread until :meth:`stop` is called.

    ``stop`` waits for the animation thread to finish and clears the line,
    so nothing is left half-drawn when the caller prints its results.
    """

    def __init__(
        self,
        message: str,
        frames: tuple[str, ...] = STYLES["default"].frames,
        delay: float = 0.1,
        stream: TextIO | None = None,
    ):
        self.message = message
        self.frames = frames
        self.delay = delay
        self.stream = stream or sys.stdout
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def running(self) -> bool:
        return self._thread is not None

    def start(self) -> None:
        if self._thread is not None:
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._spin, daemon=True)
        self._thread.start()

    def stop(self) -> None:
        if self._thread is None:
            return
        self._stop.set()
        self._thread.join()
        self._thread = None

    def _spin(self) -> None:
        for frame in itertools.cycle(self.frames):
            self.stream.write(f"\r{frame} {self.message}")
            self.stream.flush()
            if self._stop.wait(self.delay):
                break
        self.stream.write("\r\033[K")
        self.stream.flush()

    def __enter__(self) -> Spinner:
        self.start()
        return self

    def __exit__(self, *exc_info) -> None:
        self.stop()


def create_spinner(
    style: str,
    message: str,
    stream: TextIO | None = None,
) -> Spinner | None:
    """Return a spinner for *style*, or None when spinners are turned off.

    Unknown style names fall back to ``default``.
    """
    if style == NO_SPINNER:
        return None
    chosen = STYLES.get(style, STYLES["default"])
    return Spinner(message, frames=chosen.frames, delay=chosen.delay, stream=stream)
