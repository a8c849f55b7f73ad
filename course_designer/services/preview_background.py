from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

logger = logging.getLogger(__name__)

SUPPORTED_SUFFIXES = (".png", ".jpg", ".jpeg", ".gif", ".bmp", ".webp")


class BackgroundLoadError(ValueError):
    """Raised when a background image cannot be decoded."""


@dataclass(frozen=True)
class BackgroundImage:
    """Decoded background: an opaque drawing handle plus its natural size."""

    handle: object
    width: int
    height: int
    file_name: str


def _load_qimage_class():
    from PyQt5 import QtGui

    return QtGui.QImage


def decode_image(path: Path) -> BackgroundImage:
    path = Path(path)
    if path.suffix.lower() not in SUPPORTED_SUFFIXES:
        raise BackgroundLoadError(f"Unsupported background file type: {path.suffix or path.name}")

    image = _load_qimage_class()(str(path))
    if image.isNull():
        raise BackgroundLoadError(f"Unable to load image from {path}")
    return BackgroundImage(handle=image, width=image.width(), height=image.height(), file_name=path.name)


class BackgroundLoader:
    """
    Track the active background and guard against stale loads.

    Every load gets a token from ``begin_load``. Only the completion carrying
    the newest token is applied; results of older loads are dropped, so the
    last started load always wins.
    """

    def __init__(self, decoder: Callable[[Path], BackgroundImage] = decode_image) -> None:
        self._decoder = decoder
        self._latest_token = 0
        self.current: Optional[BackgroundImage] = None

    def begin_load(self) -> int:
        self._latest_token += 1
        return self._latest_token

    def is_current(self, token: int) -> bool:
        return token == self._latest_token

    def complete_load(self, token: int, image: BackgroundImage) -> bool:
        if not self.is_current(token):
            logger.info("Ignoring stale background load %d (latest is %d)", token, self._latest_token)
            return False
        self.current = image
        return True

    def load(self, path: Path) -> BackgroundImage:
        """Decode ``path`` and make it current; the previous background stays on failure."""
        token = self.begin_load()
        try:
            image = self._decoder(Path(path))
        except BackgroundLoadError:
            logger.exception("Failed to load background image %s", path)
            raise
        self.complete_load(token, image)
        return image

    def clear(self) -> None:
        self._latest_token += 1
        self.current = None
