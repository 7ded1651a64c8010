"""
Video assembly module using FFmpeg.
Turns a captured frame sequence into the final video.
"""
import asyncio
import shutil
import subprocess
from pathlib import Path

from config.settings import (
    INPUT_FPS, OUTPUT_FPS, VIDEO_CODEC, PIXEL_FORMAT, H264_CONTAINERS
)
from .errors import EncodingError
from .session import CaptureSession


def check_ffmpeg():
    """Verify FFmpeg is available."""
    if not shutil.which("ffmpeg"):
        raise EncodingError("FFmpeg not found. Please install FFmpeg.")


def build_ffmpeg_command(input_pattern: Path, output: Path,
                         input_fps: int = INPUT_FPS,
                         output_fps: int = OUTPUT_FPS) -> list[str]:
    """
    Build FFmpeg command for encoding a numbered image sequence.

    H.264 settings are only forced for containers that hold H.264; other
    extensions (.webm, .gif, ...) let FFmpeg pick its default encoder.
    """
    vf_filters = [f"fps={output_fps}"]
    codec_args = []

    if Path(output).suffix.lower() in H264_CONTAINERS:
        # libx264 with yuv420p rejects odd dimensions
        vf_filters.append("scale=trunc(iw/2)*2:trunc(ih/2)*2")
        codec_args = ["-c:v", VIDEO_CODEC, "-pix_fmt", PIXEL_FORMAT]

    return [
        "ffmpeg", "-y",
        "-framerate", str(input_fps),
        "-i", str(input_pattern),
        "-vf", ",".join(vf_filters),
        *codec_args,
        str(output),
    ]


async def encode_frames(session: CaptureSession, output: Path,
                        output_fps: int = OUTPUT_FPS) -> Path:
    """
    Encode the session's frames into a video.

    Args:
        session: Session holding a contiguous frame sequence
        output: Destination video path
        output_fps: Frame rate of the produced video

    Returns:
        Path to the written video

    Raises:
        CaptureError: if the frame sequence is empty or has gaps
        EncodingError: if FFmpeg is missing or exits with an error
    """
    check_ffmpeg()
    session.verify_frames()

    output = Path(output)
    output.parent.mkdir(parents=True, exist_ok=True)

    cmd = build_ffmpeg_command(session.input_pattern, output,
                               output_fps=output_fps)
    print(f"  Encoding {session.frame_count} frames with FFmpeg...")

    proc = await asyncio.create_subprocess_exec(
        *cmd,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE
    )
    _, stderr = await proc.communicate()
    stderr_text = stderr.decode(errors="replace") if stderr else ""

    if proc.returncode != 0:
        tail = "\n".join(stderr_text.strip().splitlines()[-5:])
        raise EncodingError(
            f"FFmpeg exited with code {proc.returncode}: {tail}",
            returncode=proc.returncode,
            stderr=stderr_text
        )

    if not output.exists():
        raise EncodingError(f"FFmpeg reported success but {output} is missing")

    return output


def probe_duration(file_path: Path) -> float:
    """Get media file duration in seconds."""
    cmd = [
        "ffprobe",
        "-v", "error",
        "-show_entries", "format=duration",
        "-of", "default=noprint_wrappers=1:nokey=1",
        str(file_path)
    ]

    try:
        result = subprocess.run(cmd, capture_output=True, text=True, check=True)
        return float(result.stdout.strip())
    except (subprocess.CalledProcessError, ValueError, FileNotFoundError):
        return 0
