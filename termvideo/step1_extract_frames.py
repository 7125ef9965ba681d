"""
Step 1: Extract frames from a video into the frame cache
"""

import argparse
import math
import os
import shutil
import subprocess
from abc import ABC, abstractmethod
from pathlib import Path

import cv2


# Frame rate used when none is given and probing fails
DEFAULT_FPS = 30

# Zero padded to a fixed width so that sorting by name equals temporal order
FRAME_PATTERN = "frame-%07d.png"
FRAME_GLOB = "frame-*.png"


class ExtractError(Exception):
    """Raised when frames could not be extracted from the input video."""


class ExtractorNotFoundError(ExtractError):
    """Raised when the external extraction tool cannot be located or run."""


def parse_frame_rate(text: str | None) -> int | None:
    """
    Parse a rational frame rate such as "30/1" or "30000/1001".

    Args:
        text: Raw rational string

    Returns:
        Whole frames per second (truncated), or None if unparseable
    """
    if not text:
        return None

    num, sep, den = text.strip().partition("/")
    if not sep:
        return None

    try:
        fps = float(num) / float(den)
    except (ValueError, ZeroDivisionError):
        return None

    if not math.isfinite(fps) or fps < 1:
        return None
    return int(fps)


def prepare_cache_dir(cache_dir: str) -> Path:
    """
    Create a fresh, empty cache directory.

    An existing directory at the same path is deleted together with
    everything in it before being recreated.

    Args:
        cache_dir: Path of the working directory

    Returns:
        Path of the created directory
    """
    cache_path = Path(cache_dir)
    try:
        cache_path.mkdir(parents=True)
    except FileExistsError:
        print(f"Warning: Removing existing directory {cache_dir}")
        if cache_path.is_symlink():
            cache_path.unlink()
        elif cache_path.is_dir():
            shutil.rmtree(cache_path)
        else:
            cache_path.unlink()
        cache_path.mkdir()
    return cache_path


def list_frames(cache_dir: str | Path) -> list[Path]:
    """Return the extracted frames of a cache directory in temporal order."""
    return sorted(Path(cache_dir).glob(FRAME_GLOB))


class VideoExtractor(ABC):
    """Turns a video into a directory of still images and reports its FPS."""

    name = "extractor"

    @abstractmethod
    def extract(self, input_video: str, width: int, height: int, output_dir: str | Path) -> list[Path]:
        """Write frames scaled to width x height into output_dir, return them ordered."""

    @abstractmethod
    def probe_fps(self, input_video: str) -> int | None:
        """Return the source frame rate, or None if it cannot be determined."""


class FFmpegExtractor(VideoExtractor):
    """Extract frames with ffmpeg and probe the frame rate with ffprobe."""

    name = "ffmpeg"

    def __init__(self, ffmpeg: str = "ffmpeg", ffprobe: str = "ffprobe"):
        self.ffmpeg = ffmpeg
        self.ffprobe = ffprobe

    def build_extract_command(self, input_video: str, width: int, height: int, output_dir: str | Path) -> list[str]:
        return [
            self.ffmpeg,
            "-i", str(input_video),
            "-f", "image2",
            "-vf", f"scale={width}:{height}",
            str(Path(output_dir) / FRAME_PATTERN),
        ]

    def build_probe_command(self, input_video: str) -> list[str]:
        return [
            self.ffprobe,
            "-v", "error",
            "-select_streams", "v:0",
            "-show_entries", "stream=r_frame_rate",
            "-of", "default=noprint_wrappers=1:nokey=1",
            str(input_video),
        ]

    def extract(self, input_video: str, width: int, height: int, output_dir: str | Path) -> list[Path]:
        cmd = self.build_extract_command(input_video, width, height, output_dir)
        try:
            result = subprocess.run(
                cmd,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.PIPE,
                encoding="utf-8",
                errors="replace",
            )
        except OSError as e:
            raise ExtractorNotFoundError(
                f"Failed to execute {self.ffmpeg} - do you have it installed? {e}"
            ) from e

        if result.returncode != 0:
            tail = (result.stderr or "").strip().splitlines()[-3:]
            raise ExtractError(
                f"{self.ffmpeg} exited with status {result.returncode}: " + " / ".join(tail)
            )

        frames = list_frames(output_dir)
        if not frames:
            raise ExtractError(f"No frames extracted from {input_video}")

        print(f"Extracted {len(frames)} frames to {output_dir}")
        return frames

    def probe_fps(self, input_video: str) -> int | None:
        try:
            result = subprocess.run(
                self.build_probe_command(input_video),
                stdin=subprocess.DEVNULL,
                capture_output=True,
                encoding="utf-8",
                errors="replace",
            )
        except (OSError, ValueError):
            return None

        if result.returncode != 0:
            return None
        return parse_frame_rate(result.stdout)


class OpenCVExtractor(VideoExtractor):
    """Decode and scale frames in-process with OpenCV."""

    name = "opencv"

    def extract(self, input_video: str, width: int, height: int, output_dir: str | Path) -> list[Path]:
        output_path = Path(output_dir)

        # Open the video file
        cap = cv2.VideoCapture(str(input_video))
        if not cap.isOpened():
            raise ExtractError(f"Could not open video file: {input_video}")

        total_frames = int(cap.get(cv2.CAP_PROP_FRAME_COUNT))
        print(f"Video properties:")
        print(f"  Total frames: {total_frames}")
        print(f"  Resolution: {int(cap.get(cv2.CAP_PROP_FRAME_WIDTH))}x{int(cap.get(cv2.CAP_PROP_FRAME_HEIGHT))}")
        print(f"  Target resolution: {width}x{height}")

        extracted_count = 0
        try:
            while True:
                ret, frame = cap.read()
                if not ret:
                    break

                if width > 0 and height > 0:
                    frame = cv2.resize(frame, (width, height), interpolation=cv2.INTER_AREA)

                extracted_count += 1
                output_file = output_path / (FRAME_PATTERN % extracted_count)
                if not cv2.imwrite(str(output_file), frame):
                    raise ExtractError(f"Could not write frame {output_file}")
        finally:
            cap.release()

        frames = list_frames(output_path)
        if not frames:
            raise ExtractError(f"No frames extracted from {input_video}")

        print(f"Extracted {len(frames)} frames to {output_dir}")
        return frames

    def probe_fps(self, input_video: str) -> int | None:
        cap = cv2.VideoCapture(str(input_video))
        try:
            if not cap.isOpened():
                return None
            fps = cap.get(cv2.CAP_PROP_FPS)
        finally:
            cap.release()

        if not math.isfinite(fps) or fps < 1:
            return None
        return int(fps)


EXTRACTORS = {
    FFmpegExtractor.name: FFmpegExtractor,
    OpenCVExtractor.name: OpenCVExtractor,
}


def get_extractor(name: str) -> VideoExtractor:
    try:
        return EXTRACTORS[name]()
    except KeyError:
        raise ValueError(f"Unknown extractor backend: {name}") from None


def resolve_fps(requested: int | None, extractor: VideoExtractor, input_video: str) -> int:
    """
    Pick the playback frame rate.

    Args:
        requested: Frame rate given on the command line, if any
        extractor: Extractor used to probe the source
        input_video: Path to the input video file

    Returns:
        The requested rate, else the probed rate, else DEFAULT_FPS
    """
    if requested is not None:
        return requested

    probed = extractor.probe_fps(input_video)
    if probed is None:
        print(f"Warning: Could not determine source frame rate, using {DEFAULT_FPS} FPS")
        return DEFAULT_FPS
    return probed


def extract_frames(
    input_video: str,
    cache_dir: str,
    width: int,
    height: int,
    extractor: VideoExtractor | None = None
) -> list[Path]:
    """
    Extract frames from a video file into a freshly created cache directory.

    Args:
        input_video: Path to the input video file
        cache_dir: Directory to save extracted frames (recreated if present)
        width: Frame width in pixels (one glyph per pixel)
        height: Frame height in pixels
        extractor: Extraction backend (default: ffmpeg)

    Returns:
        Extracted frame paths in temporal order
    """
    extractor = extractor or FFmpegExtractor()
    prepare_cache_dir(cache_dir)
    return extractor.extract(input_video, width, height, cache_dir)


def main():
    parser = argparse.ArgumentParser(description="Extract scaled frames from a video")
    parser.add_argument("input_video", help="Path to input video file")
    parser.add_argument(
        "--cache",
        default="split_frames",
        help="Output directory for frames, recreated if it exists (default: split_frames)"
    )
    parser.add_argument("--width", type=int, default=80, help="Frame width (default: 80)")
    parser.add_argument("--height", type=int, default=24, help="Frame height (default: 24)")
    parser.add_argument(
        "--backend",
        choices=sorted(EXTRACTORS),
        default=FFmpegExtractor.name,
        help="Extraction backend (default: ffmpeg)"
    )

    args = parser.parse_args()

    if not os.path.exists(args.input_video):
        print(f"Error: Input video not found: {args.input_video}")
        return 1

    try:
        extract_frames(args.input_video, args.cache, args.width, args.height, get_extractor(args.backend))
        return 0
    except Exception as e:
        print(f"Error: {e}")
        return 1


if __name__ == "__main__":
    exit(main())
