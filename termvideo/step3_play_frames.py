"""
Step 3: Play ASCII frames back in the terminal
"""

import argparse
import os
import sys
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Callable, Sequence, TextIO


# VT100 control sequences, no capability detection
CLEAR_SCREEN = "\x1b[2J"
CURSOR_HOME = "\x1b[H"
HIDE_CURSOR = "\x1b[?25l"
SHOW_CURSOR = "\x1b[?25h"
DISABLE_LINE_WRAP = "\x1b[?7l"
ENABLE_LINE_WRAP = "\x1b[?7h"

MICROS_PER_SECOND = 1_000_000


def frame_interval_us(fps: int) -> int:
    """Delay between two frames in whole microseconds."""
    if fps <= 0:
        raise ValueError(f"Frame rate must be positive, got {fps}")
    return MICROS_PER_SECOND // fps


@contextmanager
def terminal_display(stream: TextIO):
    """
    Hold the terminal in playback mode for the duration of the block.

    The previous mode is restored on exit, including when the block is
    interrupted with Ctrl+C.
    """
    stream.write(CLEAR_SCREEN + CURSOR_HOME)
    stream.write(HIDE_CURSOR)
    stream.write(DISABLE_LINE_WRAP)
    stream.flush()
    try:
        yield stream
    finally:
        stream.write(ENABLE_LINE_WRAP)
        stream.write(SHOW_CURSOR)
        stream.write(CURSOR_HOME + CLEAR_SCREEN)
        stream.flush()


def play_frames(
    frames: Sequence[str],
    interval_us: int,
    stream: TextIO | None = None,
    clock: Callable[[], float] = time.monotonic,
    sleep: Callable[[float], None] = time.sleep
) -> int:
    """
    Show pre-rendered frames one after another at a fixed pace.

    Frame n is due at start + n * interval. Only the time left until the
    next deadline is slept, so slow writes do not accumulate into drift.

    Args:
        frames: Text frames in temporal order
        interval_us: Time between frames in microseconds
        stream: Output stream (default: sys.stdout)
        clock: Monotonic clock in seconds
        sleep: Sleep function taking seconds

    Returns:
        Number of frames shown
    """
    if stream is None:
        stream = sys.stdout
    interval = interval_us / MICROS_PER_SECOND

    shown = 0
    with terminal_display(stream):
        start = clock()
        for frame in frames:
            # Home the cursor instead of clearing to avoid flicker
            stream.write(CURSOR_HOME + frame)
            stream.flush()
            shown += 1

            remaining = start + shown * interval - clock()
            if remaining > 0:
                sleep(remaining)

    return shown


def load_text_frames(input_dir: str) -> list[str]:
    """Read the .txt frames written by step 2, in name order."""
    return [
        path.read_text(encoding="utf-8")
        for path in sorted(Path(input_dir).glob("*.txt"))
    ]


def main():
    parser = argparse.ArgumentParser(description="Play ASCII text frames in the terminal")
    parser.add_argument(
        "--input-dir",
        default="ascii_frames",
        help="Input directory containing text frames (default: ascii_frames)"
    )
    parser.add_argument(
        "--fps",
        type=int,
        default=30,
        help="Playback FPS (default: 30)"
    )

    args = parser.parse_args()

    if not os.path.exists(args.input_dir):
        print(f"Error: Input directory not found: {args.input_dir}")
        return 1

    try:
        frames = load_text_frames(args.input_dir)
        if not frames:
            raise ValueError(f"No text frames found in {args.input_dir}")
        play_frames(frames, frame_interval_us(args.fps))
        return 0
    except KeyboardInterrupt:
        print("Playback interrupted")
        return 1
    except Exception as e:
        print(f"Error: {e}")
        return 1


if __name__ == "__main__":
    exit(main())
