"""
Capture session state and scratch directory handling.

A CaptureSession travels from the capture loop to the encoder so neither
stage has to guess where the frames live or how many there are.
"""
import shutil
import tempfile
from contextlib import contextmanager
from pathlib import Path
from dataclasses import dataclass, field
from typing import Iterator, Optional

from config.settings import (
    SCRATCH_PREFIX, FRAME_PREFIX, FRAME_FORMAT, frame_name, frame_pattern
)
from .errors import CaptureError


@contextmanager
def scratch_directory(parent: Optional[Path] = None) -> Iterator[Path]:
    """
    Create a fresh directory for frames and remove it on exit.

    Removal happens on every exit path, including exceptions raised by
    the body (capture or encoding failures).
    """
    path = Path(tempfile.mkdtemp(
        prefix=SCRATCH_PREFIX,
        dir=str(parent) if parent else None
    ))
    try:
        yield path
    finally:
        shutil.rmtree(path, ignore_errors=True)


@dataclass
class CaptureSession:
    """Frames captured for one URL."""
    url: str
    frames_dir: Path
    frame_count: int = 0
    viewport_height: int = 0
    scroll_step: float = 0
    heights: list[int] = field(default_factory=list)
    offsets: list[float] = field(default_factory=list)

    @property
    def page_height(self) -> int:
        return self.heights[-1] if self.heights else 0

    @property
    def input_pattern(self) -> Path:
        return self.frames_dir / frame_pattern()

    def next_frame_path(self) -> Path:
        return self.frames_dir / frame_name(self.frame_count)

    def frame_paths(self) -> list[Path]:
        return sorted(self.frames_dir.glob(f"{FRAME_PREFIX}*.{FRAME_FORMAT}"))

    def verify_frames(self):
        """Ensure frames 0..frame_count-1 exist and nothing else does."""
        if self.frame_count == 0:
            raise CaptureError(f"No frames captured for {self.url}")

        expected = [frame_name(i) for i in range(self.frame_count)]
        found = [p.name for p in self.frame_paths()]
        if found != expected:
            missing = sorted(set(expected) - set(found))
            extra = sorted(set(found) - set(expected))
            raise CaptureError(
                f"Frame sequence in {self.frames_dir} is not contiguous "
                f"(missing: {missing[:5]}, unexpected: {extra[:5]})"
            )
