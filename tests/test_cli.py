from __future__ import annotations

from collections.abc import Iterator
import json
from pathlib import Path

from loguru import logger
from PIL import Image
import pytest

import main


@pytest.fixture
def cli_env(tmp_path: Path) -> Iterator[tuple[list[str], Path]]:
    settings_path = tmp_path / "settings.json"
    settings_path.write_text(
        json.dumps({"photo_work": {"store_delay": 0.01}, "logging": {"level": "DEBUG"}}),
        encoding="utf-8",
    )
    photos = tmp_path / "photos"
    photos.mkdir()
    Image.new("RGB", (40, 20)).save(photos / "a.jpg", format="JPEG")

    yield ["--settings", str(settings_path), "--log-dir", str(tmp_path / "logs")], photos
    logger.remove()


def _show(base_args: list[str], photo: Path, capsys: pytest.CaptureFixture[str]) -> dict:
    capsys.readouterr()
    assert main.main([*base_args, "show", str(photo)]) == 0
    return json.loads(capsys.readouterr().out)[str(photo)]


def test_flag_rotate_and_reset(
    cli_env: tuple[list[str], Path], capsys: pytest.CaptureFixture[str]
) -> None:
    base_args, photos = cli_env
    photo = photos / "a.jpg"

    assert main.main([*base_args, "flag", str(photo)]) == 0
    assert main.main([*base_args, "rotate", "--turns", "-1", str(photo)]) == 0
    assert _show(base_args, photo, capsys) == {"flagged": True, "rotationTurns": 3}

    sidecar = json.loads((photos / "ansel.json").read_text(encoding="utf-8"))
    assert sidecar == {"photos": {"a.jpg": {"flagged": True, "rotationTurns": 3}}}

    assert main.main([*base_args, "unflag", str(photo)]) == 0
    assert _show(base_args, photo, capsys) == {"rotationTurns": 3}

    assert main.main([*base_args, "reset", str(photo)]) == 0
    assert _show(base_args, photo, capsys) == {}
    assert not (photos / "ansel.json").exists()
    assert list((photos.parent / "logs").glob("app_*.log"))


def test_unreadable_photo_sets_exit_code(
    cli_env: tuple[list[str], Path], capsys: pytest.CaptureFixture[str]
) -> None:
    base_args, photos = cli_env
    missing = photos / "missing.jpg"

    assert main.main([*base_args, "flag", str(missing), str(photos / "a.jpg")]) == 1
    assert str(missing) in capsys.readouterr().err
    assert (photos / "ansel.json").exists()
