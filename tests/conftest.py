"""Shared fixtures: a scripted classifier standing in for WebRTC VAD."""

from __future__ import annotations

from typing import Iterable, List

import numpy as np
import pytest

from vadwindow.errors import ClassifierUnavailable
from vadwindow.frames import Pcm16Frame


class ScriptedClassifier:
    """Returns pre-programmed answers, in order, one per ``is_speech`` call.

    Once the script runs out, every frame is silence.  ``fail_next`` makes
    the next call raise as a failing native engine would.
    """

    def __init__(self, sample_rate: int, vad_mode: int) -> None:
        self.sample_rate = sample_rate
        self.vad_mode = vad_mode
        self.script: List[bool] = []
        self.calls = 0
        self.close_calls = 0
        self.fail_next = False
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def feed(self, answers: Iterable[bool]) -> None:
        self.script.extend(answers)

    def is_speech(self, samples) -> bool:
        if self._closed:
            raise ClassifierUnavailable("classifier has been closed")
        if self.fail_next:
            self.fail_next = False
            raise ClassifierUnavailable("native VAD failed to process frame")
        self.calls += 1
        return self.script.pop(0) if self.script else False

    def close(self) -> None:
        self.close_calls += 1
        self._closed = True


@pytest.fixture
def scripted():
    """Factory that records every classifier it builds."""
    built: List[ScriptedClassifier] = []

    def _factory(sample_rate: int, vad_mode: int) -> ScriptedClassifier:
        c = ScriptedClassifier(sample_rate, vad_mode)
        built.append(c)
        return c

    _factory.built = built  # type: ignore[attr-defined]
    return _factory


def make_frame(length: int = 320, value: int = 0) -> Pcm16Frame:
    return Pcm16Frame(np.full(length, value, dtype=np.int16))
