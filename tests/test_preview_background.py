from __future__ import annotations

from pathlib import Path

import pytest

from course_designer.services.preview_background import (
    BackgroundImage,
    BackgroundLoadError,
    BackgroundLoader,
    decode_image,
)


def _image(name: str) -> BackgroundImage:
    return BackgroundImage(handle=object(), width=100, height=50, file_name=name)


def test_stale_completion_is_ignored() -> None:
    loader = BackgroundLoader()
    first = loader.begin_load()
    second = loader.begin_load()

    assert loader.complete_load(second, _image("new.png")) is True
    assert loader.complete_load(first, _image("old.png")) is False
    assert loader.current.file_name == "new.png"


def test_failed_load_keeps_previous_background() -> None:
    images = {"a.png": _image("a.png")}

    def decoder(path: Path) -> BackgroundImage:
        if path.name in images:
            return images[path.name]
        raise BackgroundLoadError(f"cannot decode {path}")

    loader = BackgroundLoader(decoder=decoder)
    loader.load(Path("a.png"))

    with pytest.raises(BackgroundLoadError):
        loader.load(Path("broken.png"))

    assert loader.current.file_name == "a.png"


def test_clear_invalidates_pending_loads() -> None:
    loader = BackgroundLoader()
    token = loader.begin_load()
    loader.clear()

    assert loader.complete_load(token, _image("late.png")) is False
    assert loader.current is None


def test_decode_rejects_unsupported_suffix(tmp_path) -> None:
    with pytest.raises(BackgroundLoadError, match="Unsupported"):
        decode_image(tmp_path / "map.pdf")


def test_decode_reports_unreadable_image(tmp_path) -> None:
    pytest.importorskip("PyQt5")
    path = tmp_path / "broken.png"
    path.write_bytes(b"not an image")

    with pytest.raises(BackgroundLoadError, match="Unable to load"):
        decode_image(path)
