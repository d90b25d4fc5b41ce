"""vadwindow — sliding-window speech detection.

Run with:
    python -m vadwindow.main --wav recording.wav
    python -m vadwindow.main --live

Pipeline:
    Audio → frames → WebRTC VAD (per frame) → hysteresis window → verdict
"""

from __future__ import annotations

import logging
import queue
import signal
import sys
import threading
import time
import wave
from pathlib import Path

import sounddevice as sd

from vadwindow.audio import AudioCapture, list_devices, read_wav_frames, wav_sample_rate
from vadwindow.config import (
    AppConfig,
    apply_cli_overrides,
    build_arg_parser,
    load_config,
)
from vadwindow.detector import SpeechDetector
from vadwindow.errors import VadWindowError
from vadwindow.regions import (
    build_region_report,
    filter_short_regions,
    track_regions,
    write_region_report,
)


def _ts() -> str:
    """Compact timestamp for progress lines."""
    return time.strftime("%H:%M:%S")


def _print_config(config: AppConfig) -> None:
    print(f"Sample rate     : {config.audio.sample_rate} Hz")
    print(f"VAD mode        : {config.vad.vad_mode}")
    print(f"Frame           : {config.vad.frame_duration_ms} ms")
    print(f"Window          : {config.vad.window_duration_ms} ms")
    print(f"Threshold       : {config.vad.threshold}")


# ── WAV scan ─────────────────────────────────────────────────────────

def scan_wav(config: AppConfig, wav_path: str) -> Path:
    """Detect speech regions in a WAV file and write the JSON report."""
    # the file decides the sample rate, not the config
    config.audio.sample_rate = wav_sample_rate(wav_path)
    _print_config(config)
    print()

    with SpeechDetector(config.detector_config()) as detector:
        print(f"[{_ts()}] Scanning {wav_path}...")
        regions = track_regions(
            detector, read_wav_frames(wav_path, config.vad.frame_duration_ms)
        )
        total_frames = detector.frames_seen

    regions = filter_short_regions(regions, config.report.min_region_ms)
    for region in regions:
        print(f"  {region.to_txt_line()}")

    report = build_region_report(wav_path, config, regions, total_frames)
    out = write_region_report(report, config.report.output_dir, Path(wav_path).stem)
    print(f"[{_ts()}] {len(regions)} region(s), report written: {out}")
    return out


# ── live microphone ──────────────────────────────────────────────────

def run_live(config: AppConfig) -> None:
    """Print speech/silence transitions from the microphone until stopped."""
    stop_event = threading.Event()

    def _sigint_handler(signum: int, frame: object) -> None:
        print("\n\nStopping (Ctrl+C)...")
        stop_event.set()

    signal.signal(signal.SIGINT, _sigint_handler)

    _print_config(config)
    detector = SpeechDetector(config.detector_config())
    audio = AudioCapture(config)
    speaking = detector.is_speech()

    try:
        audio.start()
        print()
        print("Listening... Press Ctrl+C to stop.")
        print("-" * 60)

        while not stop_event.is_set():
            try:
                frame = audio.get_frame(timeout=0.1)
            except queue.Empty:
                continue

            verdict = detector.advance(frame)
            if verdict != speaking:
                offset = detector.frames_seen * detector.frame_duration_ms / 1000
                label = "SPEECH" if verdict else "SILENCE"
                print(f"  [{offset:9.2f}s] {label} (counter={detector.counter})")
                speaking = verdict

    except KeyboardInterrupt:
        print("\n\nStopping...")

    finally:
        print(f"[{_ts()}] Stopping audio stream...")
        audio.stop(timeout=3.0)
        detector.close()
        print(f"[{_ts()}] Done after {detector.frames_seen} frames.")


# ── entry point ──────────────────────────────────────────────────────

def main() -> None:
    parser = build_arg_parser()
    args = parser.parse_args()

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.list_audio_devices:
        list_devices()
        sys.exit(0)

    config_path = Path(args.config)
    if config_path.exists():
        config = load_config(str(config_path))
    elif args.config != "config.yaml":
        print(f"Error: config file not found: {args.config}")
        sys.exit(1)
    else:
        config = AppConfig()
    config = apply_cli_overrides(config, args)

    if not args.wav and not args.live:
        parser.print_usage()
        print("Error: one of --wav PATH or --live is required")
        sys.exit(1)

    try:
        if args.wav:
            scan_wav(config, args.wav)
        else:
            run_live(config)
    except (VadWindowError, ValueError, OSError, wave.Error, sd.PortAudioError) as e:
        print(f"Error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
