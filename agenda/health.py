# agenda/health.py
from fastapi import APIRouter, Depends

from agenda.dependencies.services import get_store
from agenda.services.store import DataStore

router = APIRouter()


@router.get("/health")
async def health(store: DataStore = Depends(get_store)):
    providers = await store.providers.list(active_only=True)
    return {"ok": True, "active_providers": len(providers)}
