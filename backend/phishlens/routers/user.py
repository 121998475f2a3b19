# backend/phishlens/routers/user.py
from fastapi import APIRouter, Depends

from ..schemas import Account, HistorySummaryResponse
from ..security import get_store, require_user
from ..services.store import Store
from ..services.summary import summarize_history

router = APIRouter()


@router.get("/scans")
async def list_scans(user: Account = Depends(require_user), store: Store = Depends(get_store)):
    return {"scans": await store.list_scans(user.id)}


@router.get("/scans/summary", response_model=HistorySummaryResponse)
async def scans_summary(user: Account = Depends(require_user), store: Store = Depends(get_store)):
    scans = await store.list_scans(user.id)
    return {"items": summarize_history(scans)}
