"""Exception taxonomy for vadwindow.

Three kinds of failure exist:

* ``ConfigError`` — a construction parameter is outside its valid domain.
  Raised once, when a classifier or detector is built, never afterwards.
* ``InputError`` — a frame handed to ``advance`` / ``is_speech`` has the
  wrong number of samples.  The receiver's state is left untouched.
* ``ResourceError`` — the classifier has been closed or its native engine
  failed.  Fatal for that detector instance.
"""

from __future__ import annotations

from typing import Iterable


def _fmt_domain(values: Iterable[int]) -> str:
    return "[" + ", ".join(str(v) for v in values) + "]"


class VadWindowError(Exception):
    """Base class for all vadwindow errors."""


# ── configuration ────────────────────────────────────────────────────

class ConfigError(VadWindowError, ValueError):
    """Raised when a construction parameter is invalid."""


class UnsupportedSampleRate(ConfigError):
    def __init__(self, sample_rate: int, valid: Iterable[int]) -> None:
        self.sample_rate = sample_rate
        self.valid = tuple(valid)
        super().__init__(
            f"sample rate {sample_rate} is invalid, needs to be one of "
            f"{_fmt_domain(self.valid)}"
        )


class UnsupportedVadMode(ConfigError):
    def __init__(self, vad_mode: int, valid: Iterable[int]) -> None:
        self.vad_mode = vad_mode
        self.valid = tuple(valid)
        super().__init__(
            f"VAD mode {vad_mode} is invalid, needs to be one of "
            f"{_fmt_domain(self.valid)}"
        )


class UnsupportedFrameLength(ConfigError):
    def __init__(self, length: int, valid: Iterable[int]) -> None:
        self.length = length
        self.valid = tuple(valid)
        super().__init__(
            f"frame length of {length} samples is invalid, needs to be one "
            f"of {_fmt_domain(self.valid)}"
        )


class UnsupportedWindowSize(ConfigError):
    def __init__(self, window_duration_ms: int, frame_duration_ms: int) -> None:
        self.window_duration_ms = window_duration_ms
        self.frame_duration_ms = frame_duration_ms
        super().__init__(
            f"window size {window_duration_ms}ms is invalid, needs to be a "
            f"positive multiple of {frame_duration_ms}ms"
        )


class UnsupportedThreshold(ConfigError):
    def __init__(self, threshold: int, lower: int, upper: int) -> None:
        self.threshold = threshold
        self.lower = lower
        self.upper = upper
        super().__init__(
            f"threshold {threshold} is invalid, needs to be in "
            f"[{lower}, {upper}]"
        )


# ── per-call input ───────────────────────────────────────────────────

class InputError(VadWindowError, ValueError):
    """Raised when a supplied frame cannot be processed."""


class FrameLengthMismatch(InputError):
    def __init__(self, length: int, expected: Iterable[int]) -> None:
        self.length = length
        self.expected = tuple(expected)
        super().__init__(
            f"frame has {length} samples, expected "
            f"{_fmt_domain(self.expected)}"
        )


# ── resources ────────────────────────────────────────────────────────

class ResourceError(VadWindowError, RuntimeError):
    """Raised when the classifier resource cannot be used."""


class ClassifierUnavailable(ResourceError):
    """The classifier was closed, or its native engine failed."""
