"""Sliding-window speech detection.

The detector is fed consecutive frames of 10, 20 or 30 ms.  It keeps the
most recent ``window_duration_ms / frame_duration_ms`` frames and decides
whether that window is speech using a hysteresis counter:

    speech frame  -> counter = min(capacity, counter + 1)
    silent frame  -> counter = max(0, counter - 1)
    is_speech()   -> counter >= threshold

The counter is a leaky bucket, not a tally of the speech frames currently
inside the window.  It survives evictions, so the verdict depends on
history older than the window and leans toward whichever state dominated
most recently.  Updates stay O(1) per frame.

Not thread safe.  Use one detector per audio stream.
"""

from __future__ import annotations

import logging
from typing import Callable, Generic, List, Optional, TypeVar

from vadwindow.classifier import FrameClassifier, WebRtcClassifier
from vadwindow.config import DetectorConfig, validate_detector_config
from vadwindow.errors import ClassifierUnavailable, FrameLengthMismatch
from vadwindow.frames import Frame
from vadwindow.window import FrameWindow

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Frame)

ClassifierFactory = Callable[[int, int], FrameClassifier]


class SpeechDetector(Generic[F]):
    """Decides whether the latest window of frames contains speech."""

    def __init__(
        self,
        config: DetectorConfig,
        classifier_factory: Optional[ClassifierFactory] = None,
    ) -> None:
        capacity = validate_detector_config(config)
        factory = classifier_factory or WebRtcClassifier

        self._config = config
        self._capacity: int = capacity
        self._frame_length: int = config.frame_length
        self._window: FrameWindow[F] = FrameWindow(capacity)
        self._counter: int = 0
        self._frames_seen: int = 0
        self._classifier: FrameClassifier = factory(config.sample_rate, config.vad_mode)
        self._last_verdict: bool = self.is_speech()

    @classmethod
    def create(
        cls,
        sample_rate: int,
        vad_mode: int,
        frame_duration_ms: int,
        window_duration_ms: int,
        threshold: int,
        classifier_factory: Optional[ClassifierFactory] = None,
    ) -> "SpeechDetector":
        """Validate the parameters and build a detector.

        Raises a ``ConfigError`` subclass for the first invalid parameter;
        no classifier is opened in that case.
        """
        config = DetectorConfig(
            sample_rate=sample_rate,
            vad_mode=vad_mode,
            frame_duration_ms=frame_duration_ms,
            window_duration_ms=window_duration_ms,
            threshold=threshold,
        )
        return cls(config, classifier_factory)

    # ------------------------------------------------------------------
    # Feeding frames
    # ------------------------------------------------------------------

    def advance(self, frame: F) -> bool:
        """Slide the window forward by one frame and return the new verdict.

        All-or-nothing: on ``FrameLengthMismatch`` or
        ``ClassifierUnavailable`` neither the counter nor the window changes.
        """
        samples = frame.to_pcm16()
        if len(samples) != self._frame_length:
            raise FrameLengthMismatch(len(samples), (self._frame_length,))
        if self._classifier.closed:
            raise ClassifierUnavailable("detector has been closed")

        speech = self._classifier.is_speech(samples)

        if speech:
            self._counter = min(self._capacity, self._counter + 1)
        else:
            self._counter = max(0, self._counter - 1)
        self._window.push(frame)
        self._frames_seen += 1

        verdict = self.is_speech()
        if verdict != self._last_verdict:
            logger.debug(
                "verdict %s -> %s at frame %d (counter=%d)",
                _label(self._last_verdict), _label(verdict),
                self._frames_seen, self._counter,
            )
            self._last_verdict = verdict
        return verdict

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def is_speech(self) -> bool:
        """Return True when the hysteresis counter has reached the threshold."""
        return self._counter >= self._config.threshold

    def current_window(self) -> List[F]:
        """Return a copy of the window, oldest frame first."""
        return self._window.snapshot()

    @property
    def counter(self) -> int:
        return self._counter

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def threshold(self) -> int:
        return self._config.threshold

    @property
    def frame_length(self) -> int:
        return self._frame_length

    @property
    def frame_duration_ms(self) -> int:
        return self._config.frame_duration_ms

    @property
    def config(self) -> DetectorConfig:
        return self._config

    @property
    def frames_seen(self) -> int:
        return self._frames_seen

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @property
    def closed(self) -> bool:
        return self._classifier.closed

    def close(self) -> None:
        """Release the classifier.  Later ``advance`` calls fail."""
        if not self._classifier.closed:
            self._classifier.close()
            logger.debug("detector closed after %d frames", self._frames_seen)

    def __enter__(self) -> "SpeechDetector[F]":
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()


def _label(speech: bool) -> str:
    return "SPEECH" if speech else "SILENCE"
