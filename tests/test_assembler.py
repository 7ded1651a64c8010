import asyncio
import subprocess

import pytest

from config.settings import frame_name
from modules import assembler
from modules.assembler import build_ffmpeg_command, encode_frames, probe_duration
from modules.errors import CaptureError, EncodingError
from modules.session import CaptureSession
from tests.fakes import fake_ffmpeg


def make_session(frames_dir, count):
    session = CaptureSession(url="https://example.com", frames_dir=frames_dir)
    for _ in range(count):
        session.next_frame_path().write_bytes(b"png")
        session.frame_count += 1
    return session


def test_command_reads_one_screenshot_per_second(tmp_path):
    cmd = build_ffmpeg_command(tmp_path / "screenshot_%04d.png", tmp_path / "out.mp4")

    assert cmd[0] == "ffmpeg"
    assert cmd[cmd.index("-framerate") + 1] == "1"
    assert cmd.index("-framerate") < cmd.index("-i")
    assert cmd[cmd.index("-i") + 1] == str(tmp_path / "screenshot_%04d.png")
    assert cmd[cmd.index("-vf") + 1].startswith("fps=30")
    assert cmd[-1] == str(tmp_path / "out.mp4")


def test_command_output_fps(tmp_path):
    cmd = build_ffmpeg_command(tmp_path / "f_%04d.png", tmp_path / "o.mp4", output_fps=60)
    assert cmd[cmd.index("-vf") + 1].startswith("fps=60,")


@pytest.mark.parametrize("name", ["page.mp4", "page.MOV", "page.mkv", "page.m4v"])
def test_h264_containers_force_codec_and_even_size(tmp_path, name):
    cmd = build_ffmpeg_command(tmp_path / "screenshot_%04d.png", tmp_path / name)

    assert cmd[cmd.index("-c:v") + 1] == "libx264"
    assert cmd[cmd.index("-pix_fmt") + 1] == "yuv420p"
    assert "scale=trunc(iw/2)*2:trunc(ih/2)*2" in cmd[cmd.index("-vf") + 1]


@pytest.mark.parametrize("name", ["page.webm", "page.gif"])
def test_other_containers_let_ffmpeg_choose_codec(tmp_path, name):
    cmd = build_ffmpeg_command(tmp_path / "screenshot_%04d.png", tmp_path / name)

    assert "-c:v" not in cmd
    assert "-pix_fmt" not in cmd
    assert cmd[cmd.index("-vf") + 1] == "fps=30"
    assert cmd[-1] == str(tmp_path / name)


def test_encode_webm_passes_no_h264_args(monkeypatch, frames_dir, tmp_path):
    calls = []
    monkeypatch.setattr(assembler, "check_ffmpeg", lambda: None)
    monkeypatch.setattr(assembler.asyncio, "create_subprocess_exec", fake_ffmpeg(calls))
    session = make_session(frames_dir, 2)

    asyncio.run(encode_frames(session, tmp_path / "page.webm"))

    assert "libx264" not in calls[0]
    assert (tmp_path / "page.webm").exists()


def test_missing_ffmpeg(monkeypatch, frames_dir, tmp_path):
    monkeypatch.setattr(assembler.shutil, "which", lambda name: None)
    session = make_session(frames_dir, 2)

    with pytest.raises(EncodingError, match="FFmpeg not found"):
        asyncio.run(encode_frames(session, tmp_path / "o.mp4"))


def test_encode_writes_video(monkeypatch, frames_dir, tmp_path):
    calls = []
    monkeypatch.setattr(assembler, "check_ffmpeg", lambda: None)
    monkeypatch.setattr(assembler.asyncio, "create_subprocess_exec", fake_ffmpeg(calls))
    session = make_session(frames_dir, 3)
    output = tmp_path / "nested" / "dir" / "page.mp4"

    result = asyncio.run(encode_frames(session, output))

    assert result == output
    assert output.exists()
    assert calls[0][calls[0].index("-i") + 1] == str(session.input_pattern)


def test_encode_refuses_gapped_frames(monkeypatch, frames_dir, tmp_path):
    calls = []
    monkeypatch.setattr(assembler, "check_ffmpeg", lambda: None)
    monkeypatch.setattr(assembler.asyncio, "create_subprocess_exec", fake_ffmpeg(calls))
    session = make_session(frames_dir, 3)
    (frames_dir / frame_name(1)).unlink()

    with pytest.raises(CaptureError):
        asyncio.run(encode_frames(session, tmp_path / "o.mp4"))
    assert calls == []


def test_ffmpeg_failure_raises(monkeypatch, frames_dir, tmp_path):
    monkeypatch.setattr(assembler, "check_ffmpeg", lambda: None)
    monkeypatch.setattr(assembler.asyncio, "create_subprocess_exec",
                        fake_ffmpeg([], returncode=234, stderr=b"header\nUnknown encoder 'libx264'\n"))
    session = make_session(frames_dir, 1)

    with pytest.raises(EncodingError, match="Unknown encoder") as exc_info:
        asyncio.run(encode_frames(session, tmp_path / "o.mp4"))

    assert exc_info.value.returncode == 234
    assert "header" in exc_info.value.stderr


def test_probe_duration_falls_back_to_zero(monkeypatch, tmp_path):
    def fail(*args, **kwargs):
        raise subprocess.CalledProcessError(1, args[0])

    monkeypatch.setattr(assembler.subprocess, "run", fail)
    assert probe_duration(tmp_path / "missing.mp4") == 0


def test_probe_duration_parses_seconds(monkeypatch, tmp_path):
    monkeypatch.setattr(
        assembler.subprocess, "run",
        lambda *a, **k: subprocess.CompletedProcess(a[0], 0, stdout="12.500000\n", stderr="")
    )
    assert probe_duration(tmp_path / "o.mp4") == 12.5
