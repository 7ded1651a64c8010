#!/usr/bin/env python3
"""
page2vid - CLI

Record a webpage as a video: scroll through it taking screenshots,
then stitch the screenshots into a video with FFmpeg.
"""
import asyncio
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn

# Add parent to path for imports
sys.path.insert(0, str(Path(__file__).parent))

from config.settings import (
    DEFAULT_OUTPUT_NAME, DEFAULT_SCROLL_SPEED_MS, MAX_FRAMES, OUTPUT_FPS,
    VIEWPORT_WIDTH, VIEWPORT_HEIGHT, HEADLESS
)

console = Console()

__version__ = "1.0.0"


@click.group()
@click.version_option(version=__version__)
def cli():
    """page2vid - Record a webpage as a video."""
    pass


@cli.command()
@click.argument("url")
@click.option("-u", "--username", default=None, help="Username for login (if required)")
@click.option("-p", "--password", default=None, help="Password for login (if required)")
@click.option(
    "-o", "--output",
    default=lambda: str(Path.cwd() / DEFAULT_OUTPUT_NAME),
    show_default=f"./{DEFAULT_OUTPUT_NAME}",
    help="Output video file path"
)
@click.option("-s", "--speed", default=DEFAULT_SCROLL_SPEED_MS, type=click.IntRange(min=0),
              show_default=True, help="Scroll speed in milliseconds")
@click.option("--width", default=VIEWPORT_WIDTH, type=int, show_default=True, help="Viewport width")
@click.option("--height", default=VIEWPORT_HEIGHT, type=int, show_default=True, help="Viewport height")
@click.option("--fps", default=OUTPUT_FPS, type=click.IntRange(min=1), show_default=True,
              help="Output video frame rate")
@click.option(
    "--until",
    default="height",
    type=click.Choice(["height", "scroll"], case_sensitive=False),
    show_default=True,
    help="Stop when page height stops changing, or when height and scroll position both do"
)
@click.option("--settle-timeout", default=0, type=click.IntRange(min=0), show_default=True,
              help="Poll up to this many ms for the page height to settle after each scroll")
@click.option("--max-frames", default=MAX_FRAMES, type=click.IntRange(min=1), show_default=True,
              help="Maximum number of screenshots")
@click.option("--headless/--headful", default=HEADLESS, show_default=True,
              help="Run the browser without a window, or show it")
def record(url: str, username: str, password: str, output: str, speed: int,
           width: int, height: int, fps: int, until: str, settle_timeout: int,
           max_frames: int, headless: bool):
    """Record the page at URL as a video."""
    from modules import get_record_page
    from modules.assembler import probe_duration

    record_page = get_record_page()

    console.print(Panel(f"[bold blue]Recording Page[/bold blue]\nURL: {url}"))
    console.print(f"Saving video to: {output}")

    try:
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=console
        ) as progress:
            task = progress.add_task("Capturing and encoding...", total=None)

            result = asyncio.run(record_page(
                url,
                username=username,
                password=password,
                output=Path(output),
                scroll_speed_ms=speed,
                viewport={"width": width, "height": height},
                headless=headless,
                until=until.lower(),
                settle_timeout_ms=settle_timeout,
                max_frames=max_frames,
                output_fps=fps
            ))

            progress.update(task, completed=True)

    except Exception as exc:
        console.print(f"[bold red]Error:[/bold red] {exc}")
        sys.exit(1)

    table = Table(title="Video Saved")
    table.add_column("Property", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("URL", result.url)
    table.add_row("Output", result.output_file)
    table.add_row("Frames", str(result.frame_count))
    table.add_row("Page Height", f"{result.page_height}px")
    table.add_row("Logged In", "Yes" if result.logged_in else "No")
    video_duration = probe_duration(Path(result.output_file))
    if video_duration:
        table.add_row("Video Length", f"{video_duration:.1f}s")
    table.add_row("Elapsed", f"{result.duration:.1f}s")

    console.print(table)


@cli.command()
def check():
    """Check system requirements."""
    import shutil

    table = Table(title="System Check")
    table.add_column("Component", style="cyan")
    table.add_column("Status", style="green")
    table.add_column("Details", style="yellow")

    # Check FFmpeg
    ffmpeg = shutil.which("ffmpeg")
    table.add_row(
        "FFmpeg",
        "[green]OK[/green]" if ffmpeg else "[red]Missing[/red]",
        ffmpeg or "Install: apt install ffmpeg"
    )

    # Check FFprobe
    ffprobe = shutil.which("ffprobe")
    table.add_row(
        "FFprobe",
        "[green]OK[/green]" if ffprobe else "[yellow]Optional[/yellow]",
        ffprobe or "Included with FFmpeg"
    )

    # Check Playwright
    try:
        from playwright.async_api import async_playwright  # noqa: F401
        table.add_row("Playwright", "[green]OK[/green]", "Browser automation ready")
    except ImportError:
        table.add_row(
            "Playwright",
            "[red]Missing[/red]",
            "Install page2vid (pip install -e .), then run: playwright install chromium"
        )

    console.print(table)

    if not ffmpeg:
        sys.exit(1)


if __name__ == "__main__":
    cli()
