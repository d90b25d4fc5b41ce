"""Configuration loading, dataclass definitions and detector validation."""

from __future__ import annotations

import argparse
from dataclasses import dataclass, field
from typing import Callable, Optional, Sequence

import yaml

from vadwindow.classifier import (
    SAMPLE_RATES,
    VAD_MODES,
    check_sample_rate,
    check_vad_mode,
    is_plain_int,
    valid_frame_lengths,
)
from vadwindow.errors import (
    UnsupportedFrameLength,
    UnsupportedThreshold,
    UnsupportedWindowSize,
)
from vadwindow.frames import frame_length


@dataclass
class AudioConfig:
    device: Optional[int] = None
    sample_rate: int = 16000
    channels: int = 1


@dataclass
class VadConfig:
    vad_mode: int = 1
    frame_duration_ms: int = 20
    window_duration_ms: int = 200
    threshold: int = 8


@dataclass
class ReportConfig:
    output_dir: str = "outputs"
    min_region_ms: int = 0


@dataclass
class AppConfig:
    audio: AudioConfig = field(default_factory=AudioConfig)
    vad: VadConfig = field(default_factory=VadConfig)
    report: ReportConfig = field(default_factory=ReportConfig)

    def detector_config(self) -> "DetectorConfig":
        return DetectorConfig(
            sample_rate=self.audio.sample_rate,
            vad_mode=self.vad.vad_mode,
            frame_duration_ms=self.vad.frame_duration_ms,
            window_duration_ms=self.vad.window_duration_ms,
            threshold=self.vad.threshold,
        )


# ── detector configuration contract ──────────────────────────────────

@dataclass(frozen=True)
class DetectorConfig:
    """Immutable parameters of one sliding-window detector."""
    sample_rate: int
    vad_mode: int
    frame_duration_ms: int
    window_duration_ms: int
    threshold: int

    @property
    def frame_length(self) -> int:
        return frame_length(self.sample_rate, self.frame_duration_ms)

    @property
    def capacity(self) -> int:
        """Window capacity in frames."""
        return self.window_duration_ms // self.frame_duration_ms


def validate_detector_config(
    cfg: DetectorConfig,
    lengths_for: Callable[[int], Sequence[int]] = valid_frame_lengths,
) -> int:
    """Check *cfg* and return the window capacity in frames.

    Rules are applied in order and the first failure is raised:
    sample rate, VAD mode, frame length, window size, threshold.
    """
    check_sample_rate(cfg.sample_rate)
    check_vad_mode(cfg.vad_mode)

    valid = tuple(lengths_for(cfg.sample_rate))
    # durations must be plain ints, not 20.0 or "20"
    if not is_plain_int(cfg.frame_duration_ms):
        raise UnsupportedFrameLength(cfg.frame_duration_ms, valid)
    length = cfg.frame_length
    if cfg.frame_duration_ms <= 0 or length not in valid:
        raise UnsupportedFrameLength(length, valid)

    # window must hold a whole number of frames, at least one
    if (
        not is_plain_int(cfg.window_duration_ms)
        or cfg.window_duration_ms < cfg.frame_duration_ms
        or cfg.window_duration_ms % cfg.frame_duration_ms != 0
    ):
        raise UnsupportedWindowSize(cfg.window_duration_ms, cfg.frame_duration_ms)

    capacity = cfg.capacity
    if not is_plain_int(cfg.threshold) or not 0 <= cfg.threshold <= capacity:
        raise UnsupportedThreshold(cfg.threshold, 0, capacity)
    return capacity


# ── YAML loading ─────────────────────────────────────────────────────

def load_config(path: str) -> AppConfig:
    """Load configuration from a YAML file."""
    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    return _build_config(data)


def _build_config(data: dict) -> AppConfig:
    return AppConfig(
        audio=_build_audio(data.get("audio", {})),
        vad=_build_vad(data.get("vad", {})),
        report=_build_report(data.get("report", {})),
    )


def _build_audio(d: dict) -> AudioConfig:
    return AudioConfig(
        device=d.get("device"),
        sample_rate=d.get("sample_rate", 16000),
        channels=d.get("channels", 1),
    )


def _build_vad(d: dict) -> VadConfig:
    return VadConfig(
        vad_mode=d.get("vad_mode", 1),
        frame_duration_ms=d.get("frame_duration_ms", 20),
        window_duration_ms=d.get("window_duration_ms", 200),
        threshold=d.get("threshold", 8),
    )


def _build_report(d: dict) -> ReportConfig:
    return ReportConfig(
        output_dir=d.get("output_dir", "outputs"),
        min_region_ms=d.get("min_region_ms", 0),
    )


def apply_cli_overrides(config: AppConfig, args: argparse.Namespace) -> AppConfig:
    """Merge CLI arguments into the loaded config (CLI wins)."""
    if args.sample_rate is not None:
        config.audio.sample_rate = args.sample_rate
    if args.device is not None:
        config.audio.device = args.device
    if args.vad_mode is not None:
        config.vad.vad_mode = args.vad_mode
    if args.frame_ms is not None:
        config.vad.frame_duration_ms = args.frame_ms
    if args.window_ms is not None:
        config.vad.window_duration_ms = args.window_ms
    if args.threshold is not None:
        config.vad.threshold = args.threshold
    if args.output_dir:
        config.report.output_dir = args.output_dir
    if args.min_region_ms is not None:
        config.report.min_region_ms = args.min_region_ms
    return config


def build_arg_parser() -> argparse.ArgumentParser:
    """Build the CLI argument parser."""
    p = argparse.ArgumentParser(
        prog="vadwindow",
        description="Sliding-window speech detection over WebRTC VAD frames.",
    )
    p.add_argument("--config", type=str, default="config.yaml",
                   help="Path to YAML config file (default: config.yaml)")

    source = p.add_mutually_exclusive_group()
    source.add_argument("--wav", type=str, default=None, metavar="PATH",
                        help="Scan a mono 16-bit WAV file and report speech regions")
    source.add_argument("--live", action="store_true",
                        help="Print speech/silence transitions from the microphone")
    source.add_argument("--list-audio-devices", action="store_true",
                        help="List available audio input devices and exit")

    p.add_argument("--sample-rate", type=int, choices=list(SAMPLE_RATES),
                   help="Sample rate in Hz (overrides config)")
    p.add_argument("--device", type=int,
                   help="Input device index for --live (overrides config)")
    p.add_argument("--vad-mode", type=int, choices=list(VAD_MODES),
                   help="VAD aggressiveness, 0 = conservative, 3 = aggressive")
    p.add_argument("--frame-ms", type=int,
                   help="Frame duration in ms: 10, 20 or 30 (overrides config)")
    p.add_argument("--window-ms", type=int,
                   help="Window duration in ms, a multiple of the frame duration")
    p.add_argument("--threshold", type=int,
                   help="Hysteresis count at which the window is speech")
    p.add_argument("--output-dir", type=str,
                   help="Report output directory (overrides config)")
    p.add_argument("--min-region-ms", type=int,
                   help="Drop speech regions shorter than this (overrides config)")
    p.add_argument("--log-level", default="WARNING",
                   choices=["DEBUG", "INFO", "WARNING", "ERROR"],
                   help="Logging level (default: WARNING)")
    return p
