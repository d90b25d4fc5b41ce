"""Audio I/O — WAV files and microphone capture, cut into frames.

These helpers only move samples around.  They never classify anything;
the detector owns all speech decisions.
"""

from __future__ import annotations

import queue
import threading
import wave
from pathlib import Path
from typing import Iterable, Iterator, Optional, Union

import numpy as np
import sounddevice as sd

from vadwindow.config import AppConfig
from vadwindow.frames import BytePcmFrame, Frame, Pcm16Frame, frame_length, pcm16_to_bytes

PathLike = Union[str, Path]


# ── WAV files ────────────────────────────────────────────────────────

def _open_mono16(path: PathLike) -> wave.Wave_read:
    wf = wave.open(str(path), "rb")
    if wf.getnchannels() != 1 or wf.getsampwidth() != 2:
        channels, width = wf.getnchannels(), wf.getsampwidth()
        wf.close()
        raise ValueError(
            f"{path}: expected mono 16-bit PCM, got {channels} channel(s) "
            f"of {width * 8}-bit audio"
        )
    return wf


def wav_sample_rate(path: PathLike) -> int:
    """Return the sample rate of a mono 16-bit WAV file."""
    with _open_mono16(path) as wf:
        return wf.getframerate()


def read_wav_frames(path: PathLike, frame_duration_ms: int) -> Iterator[BytePcmFrame]:
    """Yield consecutive frames of *frame_duration_ms* from a WAV file.

    A trailing partial frame is dropped.
    """
    with _open_mono16(path) as wf:
        samples_per_frame = frame_length(wf.getframerate(), frame_duration_ms)
        if samples_per_frame <= 0:
            raise ValueError(f"frame duration {frame_duration_ms}ms is too short")
        while True:
            data = wf.readframes(samples_per_frame)
            if len(data) < samples_per_frame * 2:
                return
            yield BytePcmFrame(data)


def write_wav(path: PathLike, frames: Iterable[Frame], sample_rate: int) -> Path:
    """Write frames, in order, as a mono 16-bit PCM WAV file."""
    out = Path(path)
    out.parent.mkdir(parents=True, exist_ok=True)
    pcm = [f.to_pcm16() for f in frames]
    audio = np.concatenate(pcm) if pcm else np.zeros(0, dtype=np.int16)

    with wave.open(str(out), "wb") as wf:
        wf.setnchannels(1)
        wf.setsampwidth(2)  # 16-bit
        wf.setframerate(sample_rate)
        wf.writeframes(pcm16_to_bytes(audio))
    return out


# ── microphone ───────────────────────────────────────────────────────

class AudioCapture:
    """Streams microphone audio into a thread-safe queue of frames."""

    def __init__(self, config: AppConfig) -> None:
        self.sample_rate: int = config.audio.sample_rate
        self.device: Optional[int] = config.audio.device
        self.channels: int = config.audio.channels
        self.frame_samples: int = frame_length(
            self.sample_rate, config.vad.frame_duration_ms
        )
        self._queue: queue.Queue[Pcm16Frame] = queue.Queue()
        self._stream: Optional[sd.InputStream] = None

    # ------------------------------------------------------------------
    def _callback(
        self,
        indata: np.ndarray,
        frames: int,
        time_info: object,
        status: object,
    ) -> None:
        if status:
            print(f"[audio] status: {status}")
        # first channel only; Pcm16Frame copies out of the driver buffer
        self._queue.put(Pcm16Frame(indata[:, 0]))

    # ------------------------------------------------------------------
    def start(self) -> None:
        """Open the microphone stream."""
        self._stream = sd.InputStream(
            samplerate=self.sample_rate,
            device=self.device,
            channels=self.channels,
            dtype="int16",
            blocksize=self.frame_samples,
            callback=self._callback,
        )
        self._stream.start()

    def get_frame(self, timeout: float = 1.0) -> Pcm16Frame:
        """Block until the next frame is available.

        Raises ``queue.Empty`` on timeout.
        """
        return self._queue.get(timeout=timeout)

    def stop(self, timeout: float = 3.0) -> None:
        """Close the microphone stream with a bounded timeout.

        Runs abort/stop/close in a helper thread so a hanging PortAudio
        driver cannot block shutdown indefinitely.
        """
        if self._stream is None:
            return
        stream = self._stream

        def _close() -> None:
            for step in (stream.abort, stream.stop, stream.close):
                try:
                    step()
                except sd.PortAudioError as e:
                    print(f"[audio] {step.__name__} failed: {e}")

        t = threading.Thread(target=_close, daemon=True)
        t.start()
        t.join(timeout=timeout)
        if t.is_alive():
            print(
                f"[shutdown] WARNING: audio.stop() did not complete within "
                f"{timeout}s, continuing shutdown"
            )
        self._stream = None


def list_devices() -> None:
    """Print all available audio devices to stdout."""
    print(sd.query_devices())
