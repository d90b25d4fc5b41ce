"""Speech regions — turns the detector's per-frame verdict into time spans.

A region opens at the frame whose arrival flips the verdict to speech and
closes at the frame that flips it back.  Times are in seconds, measured
from the first frame the detector ever saw.
"""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from vadwindow.config import AppConfig
from vadwindow.detector import SpeechDetector
from vadwindow.frames import Frame


@dataclass(frozen=True)
class SpeechRegion:
    """Immutable span of detected speech."""
    t0: float
    t1: float

    @property
    def duration(self) -> float:
        return self.t1 - self.t0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def to_txt_line(self) -> str:
        return f"[{_fmt_ts(self.t0)} - {_fmt_ts(self.t1)}] speech"


def track_regions(
    detector: SpeechDetector,
    frames: Iterable[Frame],
    open_since: Optional[float] = None,
) -> List[SpeechRegion]:
    """Feed *frames* through *detector* and collect the speech regions.

    A region still open after the last frame ends with that frame.  When
    the detector is already in speech, the first region starts at
    *open_since* (the ``t0`` of the region returned by the previous call);
    without it the region starts at this call's first frame.
    """
    frame_sec = detector.frame_duration_ms / 1000
    index = detector.frames_seen
    speaking = detector.is_speech()
    start = index * frame_sec
    if speaking and open_since is not None:
        start = open_since
    regions: List[SpeechRegion] = []

    for frame in frames:
        verdict = detector.advance(frame)
        if verdict and not speaking:
            start = index * frame_sec
        elif speaking and not verdict:
            regions.append(_region(start, index * frame_sec))
        speaking = verdict
        index += 1

    if speaking:
        regions.append(_region(start, index * frame_sec))
    return regions


def filter_short_regions(regions: List[SpeechRegion], min_region_ms: int) -> List[SpeechRegion]:
    """Drop regions shorter than *min_region_ms*."""
    if min_region_ms <= 0:
        return list(regions)
    min_sec = min_region_ms / 1000
    return [r for r in regions if r.duration >= min_sec - 1e-9]


def build_region_report(
    source: str,
    config: AppConfig,
    regions: List[SpeechRegion],
    total_frames: int,
) -> dict:
    """Build the speech-region report dict for one audio source."""
    frame_sec = config.vad.frame_duration_ms / 1000
    speech_sec = sum(r.duration for r in regions)
    total_sec = total_frames * frame_sec
    return {
        "source": source,
        "config": {
            "sample_rate": config.audio.sample_rate,
            "vad_mode": config.vad.vad_mode,
            "frame_duration_ms": config.vad.frame_duration_ms,
            "window_duration_ms": config.vad.window_duration_ms,
            "threshold": config.vad.threshold,
            "min_region_ms": config.report.min_region_ms,
        },
        "regions": [r.to_dict() for r in regions],
        "stats": {
            "region_count": len(regions),
            "total_frames": total_frames,
            "total_sec": round(total_sec, 3),
            "speech_sec": round(speech_sec, 3),
            "speech_ratio": round(speech_sec / total_sec, 4) if total_sec > 0 else 0.0,
        },
    }


def write_region_report(report: dict, output_dir: str, stem: str) -> Path:
    """Write the report to ``regions_<stem>.json``."""
    p = Path(output_dir) / f"regions_{stem}.json"
    p.parent.mkdir(parents=True, exist_ok=True)
    with open(p, "w", encoding="utf-8") as f:
        json.dump(report, f, ensure_ascii=False, indent=2)
    return p


def _region(t0: float, t1: float) -> SpeechRegion:
    return SpeechRegion(t0=round(t0, 3), t1=round(t1, 3))


def _fmt_ts(seconds: float) -> str:
    """Format seconds as HH:MM:SS.mmm."""
    h = int(seconds // 3600)
    m = int((seconds % 3600) // 60)
    s = seconds % 60
    return f"{h:02d}:{m:02d}:{s:06.3f}"
