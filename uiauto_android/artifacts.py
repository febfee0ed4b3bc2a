# uiauto_android/artifacts.py
"""
Debug artifacts for unresolved taps: the raw hierarchy dump and, when the
bridge can provide one, a screenshot of the same moment.
"""
from __future__ import annotations
import io
import os
import time
from typing import Callable, Dict, Optional

from PIL import Image


def _ts() -> str:
    """Timestamp for file naming, millisecond resolution so retries do not collide."""
    return time.strftime("%Y%m%d_%H%M%S") + f"_{int(time.time() * 1000) % 1000:03d}"


def ensure_dir(path: str) -> None:
    os.makedirs(path, exist_ok=True)


def save_hierarchy_dump(xml: str, out_dir: str, prefix: str) -> str:
    ensure_dir(out_dir)
    path = os.path.join(out_dir, f"{prefix}_{_ts()}.xml")
    with open(path, "w", encoding="utf-8") as f:
        f.write(xml)
    return path


def save_screenshot(png_bytes: bytes, out_dir: str, prefix: str) -> Optional[str]:
    """
    Decode a screencap payload and save it as PNG.
    Returns None if the payload is not a decodable image.
    """
    try:
        img = Image.open(io.BytesIO(png_bytes))
        img.load()
    except (OSError, ValueError):
        return None
    ensure_dir(out_dir)
    path = os.path.join(out_dir, f"{prefix}_{_ts()}.png")
    img.save(path, format="PNG")
    return path


def make_artifacts(
    xml: Optional[str],
    out_dir: str,
    prefix: str,
    capture_func: Optional[Callable[[], Optional[bytes]]] = None,
) -> Dict[str, str]:
    """
    Write whatever debug artifacts are available.

    @param xml Raw hierarchy dump (skipped when empty)
    @param out_dir Output directory
    @param prefix File prefix
    @param capture_func Optional callable returning PNG bytes of the screen
    @return Dict of artifact types to file paths
    """
    artifacts: Dict[str, str] = {}

    if xml:
        try:
            artifacts["hierarchy"] = save_hierarchy_dump(xml, out_dir, prefix + "_hierarchy")
        except OSError:
            pass

    if capture_func:
        try:
            png = capture_func()
            if png:
                shot = save_screenshot(png, out_dir, prefix + "_screenshot")
                if shot:
                    artifacts["screenshot"] = shot
        except Exception:
            pass

    return artifacts
