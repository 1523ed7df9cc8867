"""
Cooperative run control shared between a worker thread and its controller.
"""

import threading
from dataclasses import dataclass

import numpy as np


class RunControl:
    """
    Cancellation token checked once per Metropolis step.

    A controlling thread sets ``pause`` or ``abort``; the worker running
    ``MonteCarloHost.run`` stops at the next step boundary. ``running``
    is set by the worker for the duration of a run.
    """

    def __init__(self):
        self._running = threading.Event()
        self._pause = threading.Event()
        self._abort = threading.Event()

    @property
    def running(self) -> bool:
        return self._running.is_set()

    def set_running(self, value: bool):
        if value:
            self._running.set()
        else:
            self._running.clear()

    def request_pause(self):
        self._pause.set()

    def request_abort(self):
        self._abort.set()

    def resume(self):
        """Clear pause and abort requests."""
        self._pause.clear()
        self._abort.clear()

    @property
    def pause_requested(self) -> bool:
        return self._pause.is_set()

    @property
    def abort_requested(self) -> bool:
        return self._abort.is_set()

    def should_stop(self) -> bool:
        return self._pause.is_set() or self._abort.is_set()

    def __repr__(self) -> str:
        return (f"RunControl(running={self.running}, pause={self.pause_requested}, "
                f"abort={self.abort_requested})")


@dataclass(frozen=True)
class Snapshot:
    """State published for live display, always taken between two steps."""

    steps_done: int
    hamiltonian: float
    magnetisation: float
    states: np.ndarray
    width: int
    height: int

    def lattice(self) -> np.ndarray:
        return self.states.reshape(self.height, self.width)
