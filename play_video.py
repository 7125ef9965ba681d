"""
Main script: Play a video as ASCII art in the terminal

This script runs all three steps in sequence:
1. Extract frames from the input video, scaled to the playback resolution
2. Convert each frame to ASCII text
3. Play the text frames back at the target FPS
"""

import argparse
import os
import shutil

from termvideo.step1_extract_frames import (
    EXTRACTORS,
    ExtractorNotFoundError,
    FFmpegExtractor,
    extract_frames,
    get_extractor,
    resolve_fps,
)
from termvideo.step2_convert_to_ascii import convert_frames_to_ascii
from termvideo.step3_play_frames import frame_interval_us, play_frames


def play_video(
    input_video: str,
    cache_dir: str = "split_frames",
    width: int = 80,
    height: int = 24,
    fps: int | None = None,
    backend: str = FFmpegExtractor.name,
    keep_cache: bool = False,
    **play_kwargs
) -> int:
    """
    Play a video as ASCII art.

    Args:
        input_video: Path to input video file
        cache_dir: Temporary frame directory, recreated if it exists
        width: Glyphs per row
        height: Rows per frame
        fps: Playback FPS (default: source FPS, or 30 if unknown)
        backend: Frame extraction backend
        keep_cache: Keep the frame directory after playback
        **play_kwargs: Passed through to play_frames

    Returns:
        Number of frames shown
    """
    extractor = get_extractor(backend)
    fps = resolve_fps(fps, extractor, input_video)
    interval = frame_interval_us(fps)

    try:
        print("=" * 60)
        print("STEP 1: Extracting frames from video")
        print("=" * 60)
        frame_paths = extract_frames(input_video, cache_dir, width, height, extractor)

        print()
        print("=" * 60)
        print("STEP 2: Converting frames to ASCII art")
        print("=" * 60)
        frames = convert_frames_to_ascii(frame_paths, width, height)

        print()
        print("=" * 60)
        print(f"STEP 3: Playing {len(frames)} frames at {fps} FPS")
        print("=" * 60)
        return play_frames(frames, interval, **play_kwargs)

    finally:
        # Clean up the frame cache unless keep_cache is True
        if not keep_cache and os.path.exists(cache_dir):
            print("Cleaning up temporary files...")
            try:
                shutil.rmtree(cache_dir)
            except OSError as e:
                print(f"Warning: Could not delete temporary directory {cache_dir}: {e}")


def non_negative_int(value: str) -> int:
    number = int(value)
    if number < 0:
        raise argparse.ArgumentTypeError(f"must be >= 0, got {value}")
    return number


def positive_int(value: str) -> int:
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be >= 1, got {value}")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Play a video as ASCII art in the terminal",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python play_video.py --input input.mp4
  python play_video.py --input input.mp4 --width 120 --height 40
  python play_video.py --input input.mp4 --fps 12 --cache /tmp/frames
  python play_video.py --input input.mp4 --backend opencv
        """
    )
    parser.add_argument(
        "-i", "--input",
        required=True,
        help="Input video file, any format supported by ffmpeg"
    )
    parser.add_argument(
        "-c", "--cache",
        default="split_frames",
        help="Where to save temporary frame data; an existing directory is "
             "deleted first (default: split_frames)"
    )
    parser.add_argument(
        "-w", "--width",
        type=non_negative_int,
        default=None,
        help="Horizontal playback resolution (default: terminal columns)"
    )
    parser.add_argument(
        "-H", "--height",
        type=non_negative_int,
        default=None,
        help="Vertical playback resolution (default: terminal rows)"
    )
    parser.add_argument(
        "-f", "--fps",
        type=positive_int,
        default=None,
        help="Playback frame rate (default: input video FPS, or 30 if probing fails)"
    )
    parser.add_argument(
        "--backend",
        choices=sorted(EXTRACTORS),
        default=FFmpegExtractor.name,
        help="Frame extraction backend (default: ffmpeg)"
    )
    parser.add_argument(
        "--keep-cache",
        action="store_true",
        help="Keep the temporary frame directory"
    )
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)

    if not os.path.exists(args.input):
        print(f"Error: Input video not found: {args.input}")
        return 1

    columns, rows = shutil.get_terminal_size((80, 24))
    width = columns if args.width is None else args.width
    height = rows if args.height is None else args.height

    try:
        play_video(
            args.input,
            args.cache,
            width,
            height,
            args.fps,
            args.backend,
            args.keep_cache
        )
        return 0
    except ExtractorNotFoundError as e:
        print(e)
        return 1
    except KeyboardInterrupt:
        print("Playback interrupted")
        return 1
    except Exception as e:
        print(f"Error: {e}")
        return 1


if __name__ == "__main__":
    exit(main())
