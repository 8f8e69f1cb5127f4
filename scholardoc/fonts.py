"""System CJK font discovery for PDF rendering"""

import subprocess
import sys
from pathlib import Path
from typing import List, Optional

from loguru import logger

# reportlab embeds TrueType outlines only; CFF-based .otf files are skipped
USABLE_SUFFIXES = (".ttf", ".ttc")

MACOS_FONTS = [
    "/System/Library/Fonts/PingFang.ttc",
    "/System/Library/Fonts/STHeiti Light.ttc",
    "/System/Library/Fonts/STHeiti Medium.ttc",
    "/Library/Fonts/Microsoft/MingLiU.ttf",
    "/System/Library/Fonts/Supplemental/Songti.ttc",
    "/System/Library/Fonts/Supplemental/Kaiti.ttc",
]

LINUX_FONTS = [
    "/usr/share/fonts/truetype/noto/NotoSansCJK-Regular.ttc",
    "/usr/share/fonts/opentype/noto/NotoSansCJK-Regular.ttc",
    "/usr/share/fonts/truetype/noto/NotoSansCJKtc-Regular.ttf",
    "/usr/share/fonts/truetype/wqy/wqy-microhei.ttc",
    "/usr/share/fonts/truetype/wqy/wqy-zenhei.ttc",
    "/usr/share/fonts/truetype/arphic/uming.ttc",
    "~/.fonts/NotoSansCJKtc-Regular.ttf",
    "~/.local/share/fonts/NotoSansCJKtc-Regular.ttf",
]

WINDOWS_FONTS = [
    "C:/Windows/Fonts/msjh.ttc",
    "C:/Windows/Fonts/msjhbd.ttc",
    "C:/Windows/Fonts/mingliu.ttc",
    "C:/Windows/Fonts/simsun.ttc",
    "C:/Windows/Fonts/simhei.ttf",
    "C:/Windows/Fonts/simkai.ttf",
]


def _platform_candidates(platform: str) -> List[str]:
    if platform == "darwin":
        return list(MACOS_FONTS)
    if platform.startswith("linux"):
        return list(LINUX_FONTS)
    if platform.startswith(("win", "cygwin", "msys")):
        return list(WINDOWS_FONTS)
    return []


def _fontconfig_candidates() -> List[str]:
    # Ask fontconfig for Chinese-capable fonts, if it is installed.
    try:
        result = subprocess.run(
            ["fc-list", ":lang=zh", "file"],
            capture_output=True, text=True, timeout=10
        )
    except (FileNotFoundError, subprocess.TimeoutExpired):
        return []

    if result.returncode != 0:
        return []

    paths = []
    for line in result.stdout.splitlines():
        # Output lines look like "/path/to/font.ttc: "
        path = line.split(":")[0].strip()
        if path:
            paths.append(path)
    return paths


def font_candidates(platform: Optional[str] = None) -> List[Path]:
    platform = platform or sys.platform
    raw = _platform_candidates(platform)
    if platform.startswith("linux"):
        raw = _fontconfig_candidates() + raw

    return [Path(p).expanduser() for p in raw if p.lower().endswith(USABLE_SUFFIXES)]


def find_cjk_font(platform: Optional[str] = None) -> Optional[Path]:
    for path in font_candidates(platform):
        if path.exists():
            logger.debug(f"Using CJK font: {path}")
            return path
    return None
