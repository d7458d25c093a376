from __future__ import annotations

from pathlib import Path

from mp3_gateway.cli import main


def test_convert_writes_mp3_next_to_input(tmp_path: Path) -> None:
    video = tmp_path / "clip.MOV"
    video.write_bytes(b"0123456789")

    rc = main(["convert", "--input", str(video), "--transcoder", "placeholder"])

    assert rc == 0
    out = tmp_path / "clip.mp3"
    assert out.read_bytes()[:4] == b"\xff\xfb\x90\x00"


def test_convert_honours_explicit_output(tmp_path: Path) -> None:
    video = tmp_path / "clip.mp4"
    video.write_bytes(b"0123456789")
    target = tmp_path / "out" / "audio.mp3"
    target.parent.mkdir()

    rc = main(["convert", "--input", str(video), "--out", str(target), "--transcoder", "placeholder"])

    assert rc == 0
    assert target.exists()


def test_convert_rejects_non_video(tmp_path: Path) -> None:
    notes = tmp_path / "notes.txt"
    notes.write_text("hello")

    rc = main(["convert", "--input", str(notes), "--transcoder", "placeholder"])

    assert rc == 2
    assert not (tmp_path / "notes.mp3").exists()


def test_convert_reports_transcoder_failure(tmp_path: Path, monkeypatch) -> None:
    from mp3_gateway.config import settings

    monkeypatch.setattr(settings, "unimplemented_delay_seconds", 0.0)
    video = tmp_path / "clip.mp4"
    video.write_bytes(b"0123456789")

    rc = main(["convert", "--input", str(video), "--transcoder", "unimplemented"])

    assert rc == 1
    assert not (tmp_path / "clip.mp3").exists()


def test_convert_rejects_unknown_transcoder(tmp_path: Path) -> None:
    video = tmp_path / "clip.mp4"
    video.write_bytes(b"0123456789")

    assert main(["convert", "--input", str(video), "--transcoder", "nope"]) == 2


def test_convert_missing_input(tmp_path: Path) -> None:
    assert main(["convert", "--input", str(tmp_path / "missing.mp4")]) == 2
