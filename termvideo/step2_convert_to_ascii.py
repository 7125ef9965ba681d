"""
Step 2: Convert frames to ASCII art based on luminance
"""

import argparse
import os
from pathlib import Path

import numpy as np
from PIL import Image

from termvideo.step1_extract_frames import list_frames


# ASCII characters ordered by visual density (sparse to dense)
GLYPH_RAMP = " .,-~:;=!*#$@"

# Inclusive upper luminance bound of each glyph bucket
BUCKET_UPPER_BOUNDS = np.array([0, 21, 43, 65, 87, 109, 131, 153, 175, 197, 219, 241, 255])

# Glyph for every possible luma value, indexed by the value itself
GLYPH_LUT = np.array(list(GLYPH_RAMP))[
    np.searchsorted(BUCKET_UPPER_BOUNDS, np.arange(256), side="left")
]


class FrameDecodeError(ValueError):
    """Raised when a still image cannot be decoded."""


def get_glyph(luminance: int) -> str:
    """
    Map a luminance sample to its display character.

    Args:
        luminance: Luma value in [0, 255]

    Returns:
        One character of GLYPH_RAMP, denser for brighter samples
    """
    if not 0 <= luminance <= 255:
        raise ValueError(f"Luminance out of range: {luminance}")
    return str(GLYPH_LUT[luminance])


def load_luma(frame_path: str | Path) -> np.ndarray:
    """
    Decode a still image and return its luma channel.

    Args:
        frame_path: Path to the image file

    Returns:
        uint8 array of shape (height, width)
    """
    try:
        with Image.open(frame_path) as img:
            return np.asarray(img.convert("L"), dtype=np.uint8)
    except (OSError, SyntaxError, ValueError) as e:
        raise FrameDecodeError(f"Could not read {frame_path}: {e}") from e


def frame_to_ascii(luma: np.ndarray, width: int, height: int) -> str:
    """
    Convert a luma image to a frame of glyphs.

    Args:
        luma: uint8 array of shape (rows, cols)
        width: Number of glyphs per row
        height: Number of rows

    Returns:
        width * height glyphs with a newline after every row
    """
    if width <= 0 or height <= 0:
        return ""

    rows, cols = luma.shape[:2]
    if width > cols or height > rows:
        raise ValueError(
            f"Requested {width}x{height} glyphs from a {cols}x{rows} image"
        )

    grid = GLYPH_LUT[luma[:height, :width]]
    newlines = np.full((height, 1), "\n")
    return "".join(np.hstack([grid, newlines]).ravel())


def convert_frames_to_ascii(
    frame_paths: list[Path],
    width: int,
    height: int
) -> list[str]:
    """
    Render every frame up front, in order.

    Args:
        frame_paths: Frames in temporal order
        width: Number of glyphs per row
        height: Number of rows

    Returns:
        One text frame per input frame
    """
    total_frames = len(frame_paths)
    if total_frames == 0:
        raise ValueError("No frames to convert")

    print(f"Converting {total_frames} frames to ASCII art...")
    print(f"ASCII resolution: {width}x{height} characters")

    frames = []
    for i, frame_path in enumerate(frame_paths):
        frames.append(frame_to_ascii(load_luma(frame_path), width, height))

        if (i + 1) % 30 == 0 or i == total_frames - 1:
            print(f"  Processed {i + 1}/{total_frames} frames")

    return frames


def main():
    parser = argparse.ArgumentParser(description="Convert extracted frames to ASCII text")
    parser.add_argument(
        "--input-dir",
        default="split_frames",
        help="Input directory containing frames (default: split_frames)"
    )
    parser.add_argument(
        "--output-dir",
        default="ascii_frames",
        help="Output directory for text frames (default: ascii_frames)"
    )
    parser.add_argument("--width", type=int, default=80, help="Glyphs per row (default: 80)")
    parser.add_argument("--height", type=int, default=24, help="Rows per frame (default: 24)")

    args = parser.parse_args()

    if not os.path.exists(args.input_dir):
        print(f"Error: Input directory not found: {args.input_dir}")
        return 1

    try:
        frame_paths = list_frames(args.input_dir)
        frames = convert_frames_to_ascii(frame_paths, args.width, args.height)

        output_path = Path(args.output_dir)
        output_path.mkdir(parents=True, exist_ok=True)
        for frame_path, frame in zip(frame_paths, frames):
            (output_path / f"{frame_path.stem}.txt").write_text(frame, encoding="utf-8")

        print(f"Saved ASCII frames to {args.output_dir}")
        return 0
    except Exception as e:
        print(f"Error: {e}")
        return 1


if __name__ == "__main__":
    exit(main())
