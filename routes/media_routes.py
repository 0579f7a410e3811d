# backend/routes/media_routes.py
from fastapi import APIRouter, HTTPException, Request, Response
import logging

from services.errors import StoreUnavailable

router = APIRouter()
LOG = logging.getLogger("routes.media")

# ------------------------------------------------------------
# 🔹 Servir blobs (útil con BLOB_BACKEND=local o memory)
# ------------------------------------------------------------
@router.get("/{key:path}", summary="Descargar un objeto del blob store")
def get_media(key: str, request: Request):
    blob_store = request.app.state.blob_store
    try:
        obj = blob_store.get(key)
    except ValueError:
        obj = None
    except StoreUnavailable as e:
        raise HTTPException(status_code=503, detail=str(e))
    if obj is None:
        raise HTTPException(status_code=404, detail="Not found")
    return Response(content=obj.data, media_type=obj.content_type)
