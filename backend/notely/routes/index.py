"""
Notely Backend — Landing Page Route
====================================

What:  GET / serves the packaged static/index.html.
How:   The file is read on every request; a missing or unreadable asset
       raises AssetError, which the global handler turns into a 500.
"""

from pathlib import Path
from typing import Optional

import aiofiles
from fastapi import APIRouter
from fastapi.responses import HTMLResponse

from notely.exceptions import AssetError

STATIC_DIR = Path(__file__).resolve().parent.parent / "static"
INDEX_FILE = "index.html"

router = APIRouter(tags=["Static"])


async def read_asset(name: str, static_dir: Optional[Path] = None) -> str:
    """
    Read a packaged static asset as text, from STATIC_DIR by default.

    Raises:
        AssetError: the file does not exist or cannot be read.
    """
    path = (static_dir or STATIC_DIR) / name
    try:
        async with aiofiles.open(path, "r", encoding="utf-8") as f:
            return await f.read()
    except OSError as e:
        raise AssetError(context={"asset": name, "error_type": type(e).__name__}) from e


@router.get(
    "/",
    response_class=HTMLResponse,
    include_in_schema=False,
)
async def index() -> HTMLResponse:
    return HTMLResponse(content=await read_asset(INDEX_FILE))
