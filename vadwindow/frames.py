"""Audio frames — fixed-duration chunks of mono audio.

Every frame variant exposes a single conversion, ``to_pcm16()``, returning
the canonical representation: a 1-D ``int16`` numpy array.  The detector
only ever classifies the canonical samples but keeps the frame object
itself in its window, so callers get their original representation back.

Variants (closed set):
    * ``Pcm16Frame``   — signed 16-bit integer samples.
    * ``BytePcmFrame`` — little-endian byte pairs, least significant first.
    * ``FloatPcmFrame`` — floating point samples in [-1, 1].
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Protocol, Sequence, Union, runtime_checkable

import numpy as np

from vadwindow.errors import InputError

PCM16_MIN = -32768
PCM16_MAX = 32767
PCM16_SCALE = 32768.0


@runtime_checkable
class Frame(Protocol):
    """Anything convertible to canonical signed 16-bit PCM."""

    def to_pcm16(self) -> np.ndarray: ...


# ── stateless conversion helpers ─────────────────────────────────────

def frame_length(sample_rate: int, duration_ms: int) -> int:
    """Number of samples in *duration_ms* of audio at *sample_rate*."""
    return int(sample_rate * duration_ms / 1000)


def float_to_pcm16(samples: Union[Sequence[float], np.ndarray]) -> np.ndarray:
    """Convert float PCM in [-1, 1] to int16, clipping out-of-range values.

    Values are scaled by 32768 and truncated toward zero.
    """
    scaled = np.asarray(samples, dtype=np.float64) * PCM16_SCALE
    return np.clip(scaled, PCM16_MIN, PCM16_MAX).astype(np.int16)


def bytes_to_pcm16(data: bytes) -> np.ndarray:
    """Decode little-endian 16-bit PCM byte pairs."""
    if len(data) % 2:
        raise InputError(
            f"PCM byte buffer has odd length {len(data)}, expected byte pairs"
        )
    return np.frombuffer(data, dtype="<i2").astype(np.int16)


def pcm16_to_bytes(samples: Union[Sequence[int], np.ndarray]) -> bytes:
    """Encode int16 samples as little-endian byte pairs."""
    return np.asarray(samples, dtype=np.int16).astype("<i2").tobytes()


def _frozen(array: np.ndarray) -> np.ndarray:
    array = np.array(array, copy=True)
    array.setflags(write=False)
    return array


# ── frame variants ───────────────────────────────────────────────────

@dataclass(frozen=True, eq=False)
class Pcm16Frame:
    """Frame holding signed 16-bit samples."""
    samples: np.ndarray

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "samples", _frozen(np.asarray(self.samples, dtype=np.int16))
        )

    def to_pcm16(self) -> np.ndarray:
        return self.samples

    def __len__(self) -> int:
        return len(self.samples)


@dataclass(frozen=True, eq=False)
class BytePcmFrame:
    """Frame holding 16-bit PCM packed as little-endian byte pairs."""
    data: bytes

    def __post_init__(self) -> None:
        data = bytes(self.data)
        # decoded once so odd-length buffers are rejected up front
        object.__setattr__(self, "data", data)
        object.__setattr__(self, "_pcm", _frozen(bytes_to_pcm16(data)))

    @classmethod
    def from_pcm16(cls, samples: Union[Sequence[int], np.ndarray]) -> "BytePcmFrame":
        return cls(pcm16_to_bytes(samples))

    @staticmethod
    def merge(frames: Iterable["BytePcmFrame"]) -> "BytePcmFrame":
        """Concatenate frames, in order, into a single frame."""
        return BytePcmFrame(b"".join(f.data for f in frames))

    def to_pcm16(self) -> np.ndarray:
        return self._pcm  # type: ignore[attr-defined]

    def __len__(self) -> int:
        return len(self.data) // 2


@dataclass(frozen=True, eq=False)
class FloatPcmFrame:
    """Frame holding floating point samples in [-1, 1]."""
    samples: np.ndarray

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "samples", _frozen(np.asarray(self.samples, dtype=np.float64))
        )

    def to_pcm16(self) -> np.ndarray:
        return float_to_pcm16(self.samples)

    def __len__(self) -> int:
        return len(self.samples)
