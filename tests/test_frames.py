"""Tests for frame variants and PCM conversion helpers."""

from __future__ import annotations

import numpy as np
import pytest

from vadwindow.errors import InputError
from vadwindow.frames import (
    BytePcmFrame,
    FloatPcmFrame,
    Frame,
    Pcm16Frame,
    bytes_to_pcm16,
    float_to_pcm16,
    frame_length,
    pcm16_to_bytes,
)


# ── helpers ──────────────────────────────────────────────────────────

class TestFrameLength:
    @pytest.mark.parametrize("rate,ms,expected", [
        (8000, 10, 80),
        (16000, 20, 320),
        (32000, 30, 960),
        (48000, 10, 480),
        (16000, 25, 400),
    ])
    def test_samples_per_frame(self, rate, ms, expected):
        assert frame_length(rate, ms) == expected


class TestFloatConversion:
    def test_scale_and_truncate(self):
        out = float_to_pcm16([0.0, 0.5, -0.5, 0.25])
        assert out.dtype == np.int16
        assert out.tolist() == [0, 16384, -16384, 8192]

    def test_full_scale_clipped(self):
        out = float_to_pcm16([1.0, -1.0])
        assert out.tolist() == [32767, -32768]

    def test_out_of_range_clipped(self):
        out = float_to_pcm16([3.0, -7.5])
        assert out.tolist() == [32767, -32768]

    def test_truncates_toward_zero(self):
        # 0.00003 * 32768 = 0.98..., -0.00003 * 32768 = -0.98...
        out = float_to_pcm16([0.00003, -0.00003])
        assert out.tolist() == [0, 0]


class TestByteConversion:
    def test_little_endian_pairs(self):
        # least significant byte first
        data = bytes([0x01, 0x20, 0xFF, 0xFF, 0x00, 0x80])
        assert bytes_to_pcm16(data).tolist() == [0x2001, -1, -32768]

    def test_odd_length_rejected(self):
        with pytest.raises(InputError):
            bytes_to_pcm16(b"\x00\x01\x02")

    def test_encode_matches_decode(self):
        samples = [0, 1, -1, 32767, -32768, 1234]
        assert bytes_to_pcm16(pcm16_to_bytes(samples)).tolist() == samples

    def test_encode_layout(self):
        assert pcm16_to_bytes([0x2001]) == b"\x01\x20"


# ── frame variants ───────────────────────────────────────────────────

class TestPcm16Frame:
    def test_canonical_samples(self):
        f = Pcm16Frame([1, -2, 3])
        pcm = f.to_pcm16()
        assert pcm.dtype == np.int16
        assert pcm.tolist() == [1, -2, 3]
        assert len(f) == 3

    def test_copy_on_construction(self):
        source = np.array([1, 2, 3], dtype=np.int16)
        f = Pcm16Frame(source)
        source[0] = 99
        assert f.to_pcm16()[0] == 1

    def test_samples_read_only(self):
        f = Pcm16Frame([1, 2, 3])
        with pytest.raises(ValueError):
            f.to_pcm16()[0] = 5

    def test_frozen(self):
        f = Pcm16Frame([1])
        with pytest.raises(AttributeError):
            f.samples = np.zeros(1, dtype=np.int16)


class TestBytePcmFrame:
    def test_canonical_samples(self):
        f = BytePcmFrame(b"\x01\x00\xff\xff")
        assert f.to_pcm16().tolist() == [1, -1]
        assert len(f) == 2

    def test_keeps_original_bytes(self):
        raw = b"\x10\x00\x20\x00"
        f = BytePcmFrame(bytearray(raw))
        assert f.data == raw
        assert isinstance(f.data, bytes)

    def test_odd_length_rejected(self):
        with pytest.raises(InputError):
            BytePcmFrame(b"\x00")

    def test_from_pcm16(self):
        f = BytePcmFrame.from_pcm16([5, -5])
        assert f.data == b"\x05\x00\xfb\xff"

    def test_merge_preserves_order(self):
        a = BytePcmFrame.from_pcm16([1, 2])
        b = BytePcmFrame.from_pcm16([3])
        c = BytePcmFrame.from_pcm16([4, 5])
        merged = BytePcmFrame.merge([a, b, c])
        assert merged.to_pcm16().tolist() == [1, 2, 3, 4, 5]
        assert merged.data == a.data + b.data + c.data

    def test_merge_empty(self):
        assert len(BytePcmFrame.merge([])) == 0


class TestFloatPcmFrame:
    def test_canonical_samples(self):
        f = FloatPcmFrame([0.5, -1.0, 2.0])
        assert f.to_pcm16().tolist() == [16384, -32768, 32767]
        assert len(f) == 3

    def test_keeps_original_floats(self):
        f = FloatPcmFrame(np.array([0.1, -0.2], dtype=np.float32))
        assert f.samples.dtype == np.float64
        assert f.samples.tolist() == pytest.approx([0.1, -0.2], abs=1e-6)


class TestFrameProtocol:
    @pytest.mark.parametrize("frame", [
        Pcm16Frame([0, 0]),
        BytePcmFrame(b"\x00\x00"),
        FloatPcmFrame([0.0]),
    ])
    def test_variants_satisfy_protocol(self, frame):
        assert isinstance(frame, Frame)

    def test_plain_object_is_not_a_frame(self):
        assert not isinstance(object(), Frame)
