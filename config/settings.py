"""
Central configuration for page2vid.

Values here are defaults only; command-line flags take precedence.
"""
import os
from dotenv import load_dotenv

load_dotenv()


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    return int(value) if value else default


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if not value:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


# Browser settings
VIEWPORT_WIDTH = _env_int("PAGE2VID_VIEWPORT_WIDTH", 1280)
VIEWPORT_HEIGHT = _env_int("PAGE2VID_VIEWPORT_HEIGHT", 720)
HEADLESS = _env_bool("PAGE2VID_HEADLESS", True)
NAVIGATION_TIMEOUT_MS = _env_int("PAGE2VID_NAVIGATION_TIMEOUT", 30000)

# Capture settings
DEFAULT_SCROLL_SPEED_MS = _env_int("PAGE2VID_SCROLL_SPEED", 1000)
MAX_FRAMES = _env_int("PAGE2VID_MAX_FRAMES", 2000)
SETTLE_POLL_MS = 250
SCRATCH_PREFIX = "page2vid_"

# Frame naming - FFmpeg relies on a gapless sequence starting at 0000
FRAME_PREFIX = "screenshot_"
FRAME_DIGITS = 4
FRAME_FORMAT = "png"

# Video settings
DEFAULT_OUTPUT_NAME = "output.mp4"
INPUT_FPS = 1  # one screenshot per second of video
OUTPUT_FPS = _env_int("PAGE2VID_OUTPUT_FPS", 30)
VIDEO_CODEC = "libx264"
PIXEL_FORMAT = "yuv420p"
# Containers that get VIDEO_CODEC/PIXEL_FORMAT; anything else is left to FFmpeg
H264_CONTAINERS = (".mp4", ".mov", ".mkv", ".m4v")

# Login detection
LOGIN_URL_PATTERN = os.getenv("PAGE2VID_LOGIN_PATTERN", r"/(?:log[-_]?in|sign[-_]?in|auth)\b")

USERNAME_SELECTORS = [
    'input[name="username"]',
    'input[name="email"]',
    'input[name="login"]',
    'input[type="email"]',
]
PASSWORD_SELECTORS = [
    'input[name="password"]',
    'input[type="password"]',
]
SUBMIT_SELECTORS = [
    'button[type="submit"]',
    'input[type="submit"]',
]


def frame_name(index: int) -> str:
    """Filename for the frame at a zero-based index."""
    return f"{FRAME_PREFIX}{index:0{FRAME_DIGITS}d}.{FRAME_FORMAT}"


def frame_pattern() -> str:
    """FFmpeg image2 pattern matching every frame_name()."""
    return f"{FRAME_PREFIX}%0{FRAME_DIGITS}d.{FRAME_FORMAT}"
