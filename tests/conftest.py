"""Shared pytest configuration, marker assignment and encoder test doubles."""

from __future__ import annotations

import stat
import subprocess
import sys
from pathlib import Path
from typing import Callable, Iterable, Iterator

import pytest
from loguru import logger

from image_batch.domain.models import Encoder, EncoderId
from image_batch.services import conversion_service


def pytest_collection_modifyitems(
    config: pytest.Config, items: list[pytest.Item]
) -> None:
    """Attach suite markers based on test file path."""
    del config
    for item in items:
        parts = set(Path(str(item.fspath)).parts)
        if "integration_tests" in parts:
            item.add_marker(pytest.mark.integration)
        elif "unit_tests" in parts:
            item.add_marker(pytest.mark.unit)


@pytest.fixture(autouse=True)
def reset_logger() -> Iterator[None]:
    """`app.main` replaces loguru's sinks; put back a plain stderr sink afterwards."""
    yield
    logger.remove()
    logger.add(sys.stderr, level="DEBUG")


@pytest.fixture
def ffmpeg_encoder() -> Encoder:
    return Encoder(EncoderId.FFMPEG, "ffmpeg")


class FakeRunCmd:
    """Stands in for `run_cmd`: copies the source to the destination unless told to fail."""

    def __init__(self, failing_names: Iterable[str] = ()) -> None:
        self.failing_names = set(failing_names)
        self.calls: list[list[str]] = []

    def __call__(
        self, cmd_list: list[str], timeout: float | None = None, show_cmd: bool = False
    ) -> subprocess.CompletedProcess:
        del timeout, show_cmd
        self.calls.append(list(cmd_list))
        source = Path(cmd_list[cmd_list.index("-i") + 1])
        destination = Path(cmd_list[-1])
        if source.name in self.failing_names:
            return subprocess.CompletedProcess(
                cmd_list, 1, stdout="", stderr=f"{source}: Invalid data found when processing input\n"
            )
        destination.write_bytes(source.read_bytes())
        return subprocess.CompletedProcess(cmd_list, 0, stdout="", stderr="")

    @property
    def sources(self) -> list[Path]:
        return [Path(cmd[cmd.index("-i") + 1]) for cmd in self.calls]


@pytest.fixture
def fake_run_cmd(monkeypatch: pytest.MonkeyPatch) -> Callable[..., FakeRunCmd]:
    """Install a `FakeRunCmd` in the conversion service and return it."""

    def install(failing_names: Iterable[str] = ()) -> FakeRunCmd:
        fake = FakeRunCmd(failing_names)
        monkeypatch.setattr(conversion_service, "run_cmd", fake)
        return fake

    return install


FAKE_FFMPEG_SCRIPT = """#!/bin/sh
if [ "$1" = "-version" ]; then
  echo "ffmpeg version 0.0-fake"
  exit 0
fi
src=""
dest=""
prev=""
for arg in "$@"; do
  if [ "$prev" = "-i" ]; then src="$arg"; fi
  prev="$arg"
  dest="$arg"
done
case "$src" in
  *broken*) echo "Invalid data found when processing input" >&2; exit 1 ;;
esac
cp "$src" "$dest"
"""


@pytest.fixture
def fake_ffmpeg_dir(tmp_path: Path) -> Path:
    """A directory holding an executable `ffmpeg` shell script that copies its input."""
    if sys.platform == "win32":
        pytest.skip("shell script encoder stub needs a POSIX shell")
    tools_dir = tmp_path / "tools"
    tools_dir.mkdir()
    script = tools_dir / "ffmpeg"
    script.write_text(FAKE_FFMPEG_SCRIPT)
    script.chmod(script.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return tools_dir


@pytest.fixture
def make_tree() -> Callable[[Path, Iterable[str]], list[Path]]:
    """Create small files under a root and return their absolute paths."""

    def create(root: Path, relative_paths: Iterable[str]) -> list[Path]:
        created = []
        for rel in relative_paths:
            path = root / rel
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(b"data:" + rel.encode())
            created.append(path)
        return created

    return create
