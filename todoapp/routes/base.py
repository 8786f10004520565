from __future__ import annotations


from fastapi import APIRouter

from .. import APP_NAME, __version__

router = APIRouter()

@router.get("/health")
def health():
    return {"status": "ok"}

@router.get("/version")
def version():
    return {"app": APP_NAME, "version": __version__}
