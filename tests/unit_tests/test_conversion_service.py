"""Unit tests for destination mapping, encoder commands and per-file dispatch."""

from __future__ import annotations

import subprocess
from pathlib import Path

import pytest

from image_batch.domain.exceptions import EncoderInvocationException, EncoderTimeoutException
from image_batch.domain.models import (
    ConversionFailure,
    ConversionSuccess,
    ConversionTask,
    Encoder,
    EncoderId,
)
from image_batch.services import conversion_service
from image_batch.services.conversion_service import (
    build_command,
    convert_all,
    convert_file,
    destination_for,
)


# --- destination_for ---

def test_destinations_mirror_the_input_tree() -> None:
    root, out = Path("/a"), Path("/a/out")
    assert destination_for(Path("/a/x.png"), root, out) == Path("/a/out/x.webp")
    assert destination_for(Path("/a/b/y.jpg"), root, out) == Path("/a/out/b/y.webp")


def test_only_the_final_suffix_is_replaced() -> None:
    root, out = Path("/in"), Path("/out")
    assert destination_for(Path("/in/a.b.png"), root, out) == Path("/out/a.b.webp")
    assert destination_for(Path("/in/photo.PNG"), root, out) == Path("/out/photo.webp")


def test_directory_names_containing_the_extension_are_untouched() -> None:
    root, out = Path("/in"), Path("/out")
    source = Path("/in/shots.png/cover.png")
    assert destination_for(source, root, out) == Path("/out/shots.png/cover.webp")


def test_file_without_extension_gets_one_appended() -> None:
    assert destination_for(Path("/in/raw/IMG_0001"), Path("/in"), Path("/out")) == Path(
        "/out/raw/IMG_0001.webp"
    )


def test_output_outside_the_input_tree() -> None:
    assert destination_for(Path("/in/sub/a.gif"), Path("/in"), Path("/elsewhere")) == Path(
        "/elsewhere/sub/a.webp"
    )


# --- build_command ---

SRC, DEST = Path("/in/a.png"), Path("/out/a.webp")


def test_sips_command_sets_format_without_quality() -> None:
    cmd = build_command(Encoder(EncoderId.SIPS, "sips"), SRC, DEST)
    assert cmd == ["sips", "-s", "format", "webp", str(SRC), "--out", str(DEST)]


def test_imagemagick_command_uses_quality_90() -> None:
    cmd = build_command(Encoder(EncoderId.IMAGEMAGICK, "/usr/bin/magick"), SRC, DEST)
    assert cmd == ["/usr/bin/magick", str(SRC), "-quality", "90", str(DEST)]


def test_ffmpeg_command_confirms_overwrite_and_uses_quality_80() -> None:
    cmd = build_command(Encoder(EncoderId.FFMPEG, "ffmpeg"), SRC, DEST)
    assert cmd[0] == "ffmpeg"
    assert "-y" in cmd
    assert cmd[cmd.index("-i") + 1] == str(SRC)
    assert cmd[cmd.index("-quality") + 1] == "80"
    assert cmd[-1] == str(DEST)


# --- convert_file ---

def test_convert_file_creates_parent_and_succeeds(
    tmp_path: Path, ffmpeg_encoder: Encoder, fake_run_cmd
) -> None:
    fake_run_cmd()
    source = tmp_path / "in" / "a.png"
    source.parent.mkdir()
    source.write_bytes(b"img")
    destination = tmp_path / "out" / "deep" / "a.webp"

    outcome = convert_file(ConversionTask(source, destination, ffmpeg_encoder))

    assert outcome == ConversionSuccess(source, destination)
    assert destination.read_bytes() == b"img"


def test_convert_file_nonzero_exit_reports_stderr(
    tmp_path: Path, ffmpeg_encoder: Encoder, fake_run_cmd
) -> None:
    fake_run_cmd(failing_names={"a.png"})
    source = tmp_path / "a.png"
    source.write_bytes(b"img")

    outcome = convert_file(ConversionTask(source, tmp_path / "out" / "a.webp", ffmpeg_encoder))

    assert isinstance(outcome, ConversionFailure)
    assert outcome.source == source
    assert "Invalid data found" in outcome.message


def test_convert_file_nonzero_exit_without_stderr(
    tmp_path: Path, ffmpeg_encoder: Encoder, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setattr(
        conversion_service,
        "run_cmd",
        lambda cmd, timeout=None, show_cmd=False: subprocess.CompletedProcess(cmd, 3, "", ""),
    )
    outcome = convert_file(ConversionTask(tmp_path / "a.png", tmp_path / "a.webp", ffmpeg_encoder))
    assert outcome == ConversionFailure(tmp_path / "a.png", "ffmpeg exited with code 3")


@pytest.mark.parametrize(
    "error",
    [EncoderInvocationException("Command not found: ffmpeg"), EncoderTimeoutException("Timed out after 1s")],
)
def test_convert_file_spawn_errors_become_failures(
    tmp_path: Path, ffmpeg_encoder: Encoder, monkeypatch: pytest.MonkeyPatch, error: Exception
) -> None:
    def raising(cmd, timeout=None, show_cmd=False):
        raise error

    monkeypatch.setattr(conversion_service, "run_cmd", raising)
    outcome = convert_file(ConversionTask(tmp_path / "a.png", tmp_path / "a.webp", ffmpeg_encoder))
    assert outcome == ConversionFailure(tmp_path / "a.png", str(error))


def test_convert_file_directory_creation_failure(
    tmp_path: Path, ffmpeg_encoder: Encoder, fake_run_cmd
) -> None:
    fake = fake_run_cmd()
    blocker = tmp_path / "out"
    blocker.write_text("a file where a directory should be")

    outcome = convert_file(ConversionTask(tmp_path / "a.png", blocker / "a.webp", ffmpeg_encoder))

    assert isinstance(outcome, ConversionFailure)
    assert "Cannot create directory" in outcome.message
    assert fake.calls == []


def test_convert_file_passes_timeout(
    tmp_path: Path, ffmpeg_encoder: Encoder, monkeypatch: pytest.MonkeyPatch
) -> None:
    seen = {}

    def recording(cmd, timeout=None, show_cmd=False):
        seen["timeout"] = timeout
        return subprocess.CompletedProcess(cmd, 0, "", "")

    monkeypatch.setattr(conversion_service, "run_cmd", recording)
    convert_file(ConversionTask(tmp_path / "a.png", tmp_path / "a.webp", ffmpeg_encoder), timeout=12.5)
    assert seen["timeout"] == 12.5


# --- convert_all ---

def test_one_failure_does_not_affect_the_others(
    tmp_path: Path, ffmpeg_encoder: Encoder, fake_run_cmd, make_tree
) -> None:
    fake = fake_run_cmd(failing_names={"x.png"})
    root = tmp_path / "a"
    files = sorted(make_tree(root, ["b/y.jpg", "x.png", "z.gif"]))
    out = root / "out"

    successes, failures = convert_all(files, root, out, ffmpeg_encoder)

    assert [s.destination for s in successes] == [out / "b" / "y.webp", out / "z.webp"]
    assert [f.source for f in failures] == [root / "x.png"]
    assert fake.sources == files


def test_convert_all_with_no_files(tmp_path: Path, ffmpeg_encoder: Encoder, fake_run_cmd) -> None:
    fake = fake_run_cmd()
    assert convert_all([], tmp_path, tmp_path / "out", ffmpeg_encoder) == ([], [])
    assert fake.calls == []


def test_worker_pool_keeps_dispatch_order(
    tmp_path: Path, ffmpeg_encoder: Encoder, fake_run_cmd, make_tree
) -> None:
    fake_run_cmd(failing_names={"f03.png", "f07.png"})
    root = tmp_path / "in"
    files = sorted(make_tree(root, [f"d{i % 3}/f{i:02}.png" for i in range(12)]))
    out = tmp_path / "out"

    successes, failures = convert_all(files, root, out, ffmpeg_encoder, workers=4)

    expected_ok = [f for f in files if f.name not in {"f03.png", "f07.png"}]
    assert [s.source for s in successes] == expected_ok
    assert [f.source for f in failures] == [f for f in files if f not in expected_ok]
    assert all(s.destination.is_file() for s in successes)


def test_unexpected_error_is_contained_to_its_file(
    tmp_path: Path, ffmpeg_encoder: Encoder, monkeypatch: pytest.MonkeyPatch
) -> None:
    def flaky(cmd, timeout=None, show_cmd=False):
        if cmd[cmd.index("-i") + 1].endswith("bad.png"):
            raise RuntimeError("boom")
        return subprocess.CompletedProcess(cmd, 0, "", "")

    monkeypatch.setattr(conversion_service, "run_cmd", flaky)
    files = [tmp_path / "bad.png", tmp_path / "good.png"]

    successes, failures = convert_all(files, tmp_path, tmp_path / "out", ffmpeg_encoder)

    assert [s.source for s in successes] == [tmp_path / "good.png"]
    assert failures == [ConversionFailure(tmp_path / "bad.png", "RuntimeError: boom")]


@pytest.mark.parametrize("workers", [1, 2])
def test_sources_sharing_a_destination_are_converted_once(
    tmp_path: Path, ffmpeg_encoder: Encoder, fake_run_cmd, make_tree, workers: int
) -> None:
    fake = fake_run_cmd()
    root = tmp_path / "a"
    files = sorted(make_tree(root, ["a.jpg", "a.png", "b.gif"]))
    out = root / "out"

    successes, failures = convert_all(files, root, out, ffmpeg_encoder, workers=workers)

    assert [s.source for s in successes] == [root / "a.jpg", root / "b.gif"]
    assert [f.source for f in failures] == [root / "a.png"]
    assert "already produced by" in failures[0].message
    assert str(root / "a.jpg") in failures[0].message
    assert fake.sources == [root / "a.jpg", root / "b.gif"]
    assert (out / "a.webp").read_bytes() == b"data:a.jpg"
