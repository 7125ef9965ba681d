"""
Test Configuration
==================

Pytest fixtures shared by the term-video tests.
"""

import io
from pathlib import Path

import pytest
from PIL import Image

from termvideo.step1_extract_frames import FRAME_PATTERN, VideoExtractor, list_frames


def write_solid_frame(path, luminance, width=2, height=1):
    """Write a grayscale PNG where every pixel has the same luma."""
    Image.new("L", (width, height), color=luminance).save(path)
    return Path(path)


class FakeExtractor(VideoExtractor):
    """Writes solid frames instead of decoding a video."""

    name = "fake"

    def __init__(self, levels=(0, 128, 255), fps=None):
        self.levels = levels
        self.fps = fps
        self.calls = []

    def extract(self, input_video, width, height, output_dir):
        self.calls.append((input_video, width, height, Path(output_dir)))
        for i, level in enumerate(self.levels, start=1):
            write_solid_frame(Path(output_dir) / (FRAME_PATTERN % i), level, width, height)
        return list_frames(output_dir)

    def probe_fps(self, input_video):
        return self.fps


class FakeClock:
    """Monotonic clock that only moves when told to."""

    def __init__(self):
        self.now = 0.0
        self.sleeps = []

    def __call__(self):
        return self.now

    def sleep(self, seconds):
        self.sleeps.append(seconds)
        self.now += seconds


class RecordingStream(io.StringIO):
    """StringIO that keeps each write and can charge time per frame write."""

    def __init__(self, clock=None, write_cost=0.0):
        super().__init__()
        self.writes = []
        self.clock = clock
        self.write_cost = write_cost

    def write(self, s):
        self.writes.append(s)
        if self.clock is not None and s.startswith("\x1b[H") and not s.startswith("\x1b[H\x1b["):
            self.clock.now += self.write_cost
        return super().write(s)


@pytest.fixture
def make_frame(tmp_path):
    """Factory writing solid grayscale frames into tmp_path."""
    def _make(name, luminance, width=2, height=1):
        return write_solid_frame(tmp_path / name, luminance, width, height)
    return _make


@pytest.fixture
def fake_extractor():
    return FakeExtractor()


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def input_video(tmp_path):
    """An existing file standing in for a video."""
    path = tmp_path / "input.mp4"
    path.write_bytes(b"\x00")
    return path
