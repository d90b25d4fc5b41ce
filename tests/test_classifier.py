"""Tests for the WebRTC-backed frame classifier."""

from __future__ import annotations

from unittest.mock import MagicMock

import numpy as np
import pytest

from vadwindow.classifier import (
    ClassifierState,
    WebRtcClassifier,
    valid_frame_lengths,
)
from vadwindow.errors import (
    ClassifierUnavailable,
    FrameLengthMismatch,
    UnsupportedSampleRate,
    UnsupportedVadMode,
)


# ── valid frame lengths ──────────────────────────────────────────────

class TestValidFrameLengths:
    @pytest.mark.parametrize("rate,expected", [
        (8000, (80, 160, 240)),
        (16000, (160, 320, 480)),
        (32000, (320, 640, 960)),
        (48000, (480, 960, 1440)),
    ])
    def test_lengths_per_rate(self, rate, expected):
        assert valid_frame_lengths(rate) == expected

    @pytest.mark.parametrize("rate", [0, 11025, 44100])
    def test_invalid_rate(self, rate):
        with pytest.raises(UnsupportedSampleRate) as exc:
            valid_frame_lengths(rate)
        assert exc.value.sample_rate == rate


# ── construction ─────────────────────────────────────────────────────

class TestConstruction:
    def test_open_after_construction(self):
        clf = WebRtcClassifier(16000, 2)
        assert clf.state is ClassifierState.OPEN
        assert clf.closed is False
        assert clf.valid_lengths == (160, 320, 480)

    def test_invalid_rate(self):
        with pytest.raises(UnsupportedSampleRate):
            WebRtcClassifier(44100, 1)

    @pytest.mark.parametrize("mode", [-1, 4, True])
    def test_invalid_mode(self, mode):
        with pytest.raises(UnsupportedVadMode):
            WebRtcClassifier(16000, mode)

    def test_rate_checked_before_mode(self):
        with pytest.raises(UnsupportedSampleRate):
            WebRtcClassifier(12345, 9)


# ── classification ───────────────────────────────────────────────────

class TestIsSpeech:
    @pytest.mark.parametrize("rate", [8000, 16000, 32000, 48000])
    @pytest.mark.parametrize("ms", [10, 20, 30])
    def test_digital_silence_is_not_speech(self, rate, ms):
        clf = WebRtcClassifier(rate, 3)
        samples = np.zeros(rate * ms // 1000, dtype=np.int16)
        assert clf.is_speech(samples) is False

    def test_accepts_plain_sequence(self):
        clf = WebRtcClassifier(8000, 0)
        assert clf.is_speech([0] * 80) is False

    @pytest.mark.parametrize("length", [0, 100, 161, 481])
    def test_wrong_length(self, length):
        clf = WebRtcClassifier(16000, 1)
        with pytest.raises(FrameLengthMismatch) as exc:
            clf.is_speech(np.zeros(length, dtype=np.int16))
        assert exc.value.length == length
        assert exc.value.expected == (160, 320, 480)

    def test_engine_failure_becomes_unavailable(self):
        clf = WebRtcClassifier(16000, 1)
        clf._vad = MagicMock()
        clf._vad.is_speech.side_effect = RuntimeError("Error while processing frame")
        with pytest.raises(ClassifierUnavailable) as exc:
            clf.is_speech(np.zeros(160, dtype=np.int16))
        assert isinstance(exc.value.__cause__, RuntimeError)

    def test_engine_receives_little_endian_bytes(self):
        clf = WebRtcClassifier(8000, 1)
        clf._vad = MagicMock()
        clf._vad.is_speech.return_value = 1
        samples = np.arange(80, dtype=np.int16)
        assert clf.is_speech(samples) is True
        buf, rate = clf._vad.is_speech.call_args.args
        assert rate == 8000
        assert buf == samples.astype("<i2").tobytes()


# ── lifecycle ────────────────────────────────────────────────────────

class TestLifecycle:
    def test_use_after_close_fails(self):
        clf = WebRtcClassifier(16000, 1)
        clf.close()
        assert clf.state is ClassifierState.CLOSED
        with pytest.raises(ClassifierUnavailable):
            clf.is_speech(np.zeros(160, dtype=np.int16))

    def test_close_twice_is_harmless(self):
        clf = WebRtcClassifier(16000, 1)
        clf.close()
        clf.close()
        assert clf.closed is True

    def test_closed_check_precedes_length_check(self):
        clf = WebRtcClassifier(16000, 1)
        clf.close()
        with pytest.raises(ClassifierUnavailable):
            clf.is_speech(np.zeros(7, dtype=np.int16))

    def test_context_manager(self):
        with WebRtcClassifier(32000, 2) as clf:
            assert clf.is_speech(np.zeros(320, dtype=np.int16)) is False
        assert clf.closed is True
