"""
Browser capture module using Playwright.
Scrolls through a page taking viewport screenshots, then hands the frames
to FFmpeg.
"""
import time
from pathlib import Path
from typing import Optional
from dataclasses import dataclass
from playwright.async_api import async_playwright, Page

from config.settings import (
    VIEWPORT_WIDTH, VIEWPORT_HEIGHT, HEADLESS, NAVIGATION_TIMEOUT_MS,
    DEFAULT_SCROLL_SPEED_MS, MAX_FRAMES, SETTLE_POLL_MS,
    DEFAULT_OUTPUT_NAME, OUTPUT_FPS
)
from .auth import login_if_required
from .assembler import encode_frames
from .session import CaptureSession, scratch_directory

VIEWPORT_HEIGHT_JS = "() => window.innerHeight"
PAGE_HEIGHT_JS = "() => document.body.scrollHeight"
SCROLL_OFFSET_JS = "() => window.scrollY"
SCROLL_BY_JS = "(dy) => window.scrollBy(0, dy)"

# "height": stop when content height stops changing
# "scroll": stop when content height and scroll offset both stop changing
UNTIL_CHOICES = ("height", "scroll")


@dataclass
class RecordingResult:
    """Result of recording a page to video."""
    url: str
    output_file: str
    frame_count: int
    page_height: int
    duration: float
    logged_in: bool


async def _page_height(page: Page) -> int:
    return await page.evaluate(PAGE_HEIGHT_JS)


async def _wait_for_settle(page: Page, timeout_ms: int,
                           poll_ms: int = SETTLE_POLL_MS) -> int:
    """Poll content height until two reads agree or timeout_ms elapses."""
    height = await _page_height(page)
    waited = 0
    while waited < timeout_ms:
        await page.wait_for_timeout(poll_ms)
        waited += poll_ms
        current = await _page_height(page)
        if current == height:
            break
        height = current
    return height


async def capture_frames(page: Page, session: CaptureSession,
                         scroll_speed_ms: int = DEFAULT_SCROLL_SPEED_MS,
                         until: str = "height",
                         settle_timeout_ms: int = 0,
                         max_frames: int = MAX_FRAMES) -> CaptureSession:
    """
    Screenshot the page half a viewport at a time until it stops changing.

    Args:
        page: Loaded page, scrolled to the top
        session: Session whose frames_dir receives the screenshots
        scroll_speed_ms: Fixed wait after every scroll step
        until: Convergence test, one of UNTIL_CHOICES
        settle_timeout_ms: Extra polling for a stable height after the wait (0 disables)
        max_frames: Upper bound on frames captured

    Returns:
        The same session, with frame_count and measurements filled in
    """
    if until not in UNTIL_CHOICES:
        raise ValueError(f"until must be one of {UNTIL_CHOICES}, got {until!r}")

    session.viewport_height = await page.evaluate(VIEWPORT_HEIGHT_JS)
    session.scroll_step = session.viewport_height / 2

    height = await _page_height(page)
    offset = await page.evaluate(SCROLL_OFFSET_JS)
    session.heights.append(height)
    session.offsets.append(offset)

    while True:
        await page.screenshot(path=str(session.next_frame_path()), full_page=False)
        session.frame_count += 1

        if session.frame_count >= max_frames:
            print(f"  Stopping at frame limit ({max_frames})")
            break

        await page.evaluate(SCROLL_BY_JS, session.scroll_step)
        await page.wait_for_timeout(scroll_speed_ms)

        if settle_timeout_ms > 0:
            new_height = await _wait_for_settle(page, settle_timeout_ms)
        else:
            new_height = await _page_height(page)
        new_offset = await page.evaluate(SCROLL_OFFSET_JS)
        session.heights.append(new_height)
        session.offsets.append(new_offset)

        if new_height == height and (until == "height" or new_offset == offset):
            break

        height, offset = new_height, new_offset

    print(f"  Captured {session.frame_count} frames (page height {session.page_height}px)")
    return session


async def record_page(url: str,
                      username: Optional[str] = None,
                      password: Optional[str] = None,
                      output: Optional[Path] = None,
                      scroll_speed_ms: int = DEFAULT_SCROLL_SPEED_MS,
                      *,
                      viewport: Optional[dict] = None,
                      headless: bool = HEADLESS,
                      until: str = "height",
                      settle_timeout_ms: int = 0,
                      max_frames: int = MAX_FRAMES,
                      output_fps: int = OUTPUT_FPS,
                      scratch_parent: Optional[Path] = None) -> RecordingResult:
    """
    Record a webpage as a scrolling video.

    Args:
        url: The URL to record
        username: Login username, used only if a login page shows up
        password: Login password
        output: Output video path (defaults to ./output.mp4)
        scroll_speed_ms: Wait after each scroll step in milliseconds
        viewport: Browser viewport as {"width": ..., "height": ...}
        headless: Run the browser without a window
        until: Convergence test for the capture loop
        settle_timeout_ms: Optional polling for a stable page height
        max_frames: Upper bound on captured frames
        output_fps: Frame rate of the produced video
        scratch_parent: Where to create the temporary frames directory

    Returns:
        RecordingResult describing the produced video
    """
    start_time = time.time()
    output = Path(output) if output else Path.cwd() / DEFAULT_OUTPUT_NAME
    viewport = viewport or {"width": VIEWPORT_WIDTH, "height": VIEWPORT_HEIGHT}

    with scratch_directory(scratch_parent) as frames_dir:
        session = CaptureSession(url=url, frames_dir=frames_dir)

        async with async_playwright() as p:
            browser = await p.chromium.launch(headless=headless)
            try:
                context = await browser.new_context(viewport=viewport)
                page = await context.new_page()

                print(f"  Opening {url}")
                await page.goto(url, timeout=NAVIGATION_TIMEOUT_MS)

                logged_in = await login_if_required(page, url, username, password)

                await page.wait_for_load_state("networkidle")

                await capture_frames(
                    page, session,
                    scroll_speed_ms=scroll_speed_ms,
                    until=until,
                    settle_timeout_ms=settle_timeout_ms,
                    max_frames=max_frames
                )
            finally:
                await browser.close()

        await encode_frames(session, output, output_fps=output_fps)

    return RecordingResult(
        url=url,
        output_file=str(output),
        frame_count=session.frame_count,
        page_height=session.page_height,
        duration=round(time.time() - start_time, 2),
        logged_in=logged_in
    )
