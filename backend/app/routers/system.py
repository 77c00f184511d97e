from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Query

from ..core.config import settings
from ..core.deps import get_order_store
from ..services.analytics.store import OrderStore

router = APIRouter(prefix="", tags=["Sistem"])


@router.get("/")
async def root():
    return {"name": settings.APP_NAME, "version": settings.VERSION}


@router.get("/api/health")
async def health():
    return {"ok": True, "time": datetime.now(timezone.utc).isoformat()}


@router.get("/api/analytics/window")
async def order_window(
    user_id: str = Query(..., alias="userId", min_length=1),
    store: OrderStore = Depends(get_order_store),
):
    """Kullanıcının ilk ve son sipariş tarihi (kayıt yoksa ikisi de null)."""
    window = await store.fetch_window(user_id)
    return {"start": window.start, "end": window.end}
