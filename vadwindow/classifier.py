"""Per-frame speech classification backed by the WebRTC VAD engine.

The classifier is a thin, stateful handle around ``webrtcvad.Vad``.  It
knows nothing about windows or smoothing; it answers a single question for
one 10, 20 or 30 ms frame of mono signed 16-bit PCM: speech or not.

Lifecycle:
    A classifier is OPEN from construction until ``close()`` is called.
    Closing releases the engine handle.  Every call after that raises
    ``ClassifierUnavailable`` instead of returning an answer.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Protocol, Sequence, Tuple, Union

import numpy as np
import webrtcvad

from vadwindow.errors import (
    ClassifierUnavailable,
    FrameLengthMismatch,
    UnsupportedSampleRate,
    UnsupportedVadMode,
)
from vadwindow.frames import frame_length, pcm16_to_bytes

logger = logging.getLogger(__name__)

SAMPLE_RATES: Tuple[int, ...] = (8000, 16000, 32000, 48000)
VAD_MODES: Tuple[int, ...] = (0, 1, 2, 3)
FRAME_DURATIONS_MS: Tuple[int, ...] = (10, 20, 30)


def valid_frame_lengths(sample_rate: int) -> Tuple[int, int, int]:
    """Return the sample counts of 10, 20 and 30 ms frames at *sample_rate*."""
    check_sample_rate(sample_rate)
    ten, twenty, thirty = (frame_length(sample_rate, ms) for ms in FRAME_DURATIONS_MS)
    return ten, twenty, thirty


def is_plain_int(value: object) -> bool:
    """True for an ``int`` that is not a ``bool``."""
    return isinstance(value, int) and not isinstance(value, bool)


def check_sample_rate(sample_rate: int) -> None:
    if not is_plain_int(sample_rate) or sample_rate not in SAMPLE_RATES:
        raise UnsupportedSampleRate(sample_rate, SAMPLE_RATES)


def check_vad_mode(vad_mode: int) -> None:
    if not is_plain_int(vad_mode) or vad_mode not in VAD_MODES:
        raise UnsupportedVadMode(vad_mode, VAD_MODES)


class ClassifierState(Enum):
    OPEN = "open"
    CLOSED = "closed"


class FrameClassifier(Protocol):
    """Interface the sliding-window detector depends on."""

    sample_rate: int

    def is_speech(self, samples: Union[Sequence[int], np.ndarray]) -> bool: ...

    def close(self) -> None: ...

    @property
    def closed(self) -> bool: ...


class WebRtcClassifier:
    """WebRTC VAD bound to one sample rate and aggressiveness mode.

    Modes range from 0 (most conservative) to 3 (most aggressive: most
    likely to flag speech, most prone to false positives).
    """

    def __init__(self, sample_rate: int, vad_mode: int) -> None:
        check_sample_rate(sample_rate)
        check_vad_mode(vad_mode)
        self.sample_rate: int = sample_rate
        self.vad_mode: int = vad_mode
        self.valid_lengths: Tuple[int, int, int] = valid_frame_lengths(sample_rate)
        self._vad: webrtcvad.Vad | None = webrtcvad.Vad(vad_mode)
        self._state = ClassifierState.OPEN
        logger.info(
            "webrtc classifier opened (sample_rate=%d, mode=%d)",
            sample_rate, vad_mode,
        )

    @property
    def state(self) -> ClassifierState:
        return self._state

    @property
    def closed(self) -> bool:
        return self._state is ClassifierState.CLOSED

    def is_valid_length(self, length: int) -> bool:
        return length in self.valid_lengths

    def is_speech(self, samples: Union[Sequence[int], np.ndarray]) -> bool:
        """Classify one frame of signed 16-bit samples.

        Raises ``ClassifierUnavailable`` once closed, ``FrameLengthMismatch``
        when the sample count is not a 10/20/30 ms frame.
        """
        if self._state is ClassifierState.CLOSED or self._vad is None:
            raise ClassifierUnavailable("classifier has been closed")

        pcm = np.asarray(samples, dtype=np.int16)
        if not self.is_valid_length(len(pcm)):
            raise FrameLengthMismatch(len(pcm), self.valid_lengths)

        try:
            return bool(self._vad.is_speech(pcm16_to_bytes(pcm), self.sample_rate))
        except Exception as exc:  # noqa: BLE001
            raise ClassifierUnavailable(
                f"native VAD failed to process frame: {exc}"
            ) from exc

    def close(self) -> None:
        """Release the engine handle.  Further use raises ClassifierUnavailable."""
        if self._state is ClassifierState.CLOSED:
            return
        self._vad = None
        self._state = ClassifierState.CLOSED
        logger.info("webrtc classifier closed")

    def __enter__(self) -> "WebRtcClassifier":
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()
