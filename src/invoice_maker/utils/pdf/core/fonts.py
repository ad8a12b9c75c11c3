from __future__ import annotations

import os
from pathlib import Path
from typing import Dict, Optional

from PIL import ImageFont

FontT = ImageFont.FreeTypeFont | ImageFont.ImageFont


def _candidate_pairs() -> list[tuple[Path, Path]]:
    """(regular, bold) TrueType pairs, most preferred first."""
    candidates: list[tuple[Path, Path]] = []
    override = os.environ.get("INVOICE_MAKER_FONT_DIR")
    if override and Path(override).is_dir():
        base_dir = Path(override)
        candidates.append((base_dir / "regular.ttf", base_dir / "bold.ttf"))
    candidates.append((Path(r"C:\Windows\Fonts\segoeui.ttf"), Path(r"C:\Windows\Fonts\segoeuib.ttf")))
    candidates.append((Path(r"C:\Windows\Fonts\arial.ttf"), Path(r"C:\Windows\Fonts\arialbd.ttf")))
    candidates.append(
        (Path("/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf"), Path("/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf"))
    )
    candidates.append((Path("/Library/Fonts/Arial.ttf"), Path("/Library/Fonts/Arial Bold.ttf")))
    return candidates


def find_font_pair() -> Optional[tuple[Path, Path]]:
    for regular, bold in _candidate_pairs():
        if regular.exists() and bold.exists():
            return regular, bold
    return None


class FontSet:
    """
    Sized regular/bold fonts for the rasterizer, cached per (size, bold).
    Falls back to Pillow's built-in font when no TrueType pair is installed.
    """

    def __init__(self, pair: Optional[tuple[Path, Path]] = None):
        self.pair = pair if pair is not None else find_font_pair()
        self._cache: Dict[tuple[int, bool], FontT] = {}

    def get(self, size: int, bold: bool = False) -> FontT:
        size = max(1, int(size))
        key = (size, bold)
        font = self._cache.get(key)
        if font is None:
            font = self._load(size, bold)
            self._cache[key] = font
        return font

    def _load(self, size: int, bold: bool) -> FontT:
        if self.pair:
            path = self.pair[1] if bold else self.pair[0]
            try:
                return ImageFont.truetype(str(path), size)
            except OSError:
                self.pair = None
        return ImageFont.load_default(size=size)
