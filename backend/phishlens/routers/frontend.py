# backend/phishlens/routers/frontend.py
from pathlib import Path

from fastapi import APIRouter, Request
from fastapi.responses import FileResponse

from ..errors import NotFound

router = APIRouter()


def _resolve(root: Path, rel: str) -> Path | None:
    if not rel:
        return None
    candidate = (root / rel).resolve()
    # stay inside the frontend directory
    if root not in candidate.parents:
        return None
    return candidate if candidate.is_file() else None


@router.get("/{full_path:path}", include_in_schema=False)
async def spa_fallback(full_path: str, request: Request):
    """Static file if one exists, else the SPA shell."""
    root = Path(request.app.state.settings.FRONTEND_DIR).resolve()

    asset = _resolve(root, full_path)
    if asset is not None:
        return FileResponse(asset)

    index = root / "index.html"
    if index.is_file():
        return FileResponse(index)
    raise NotFound()
