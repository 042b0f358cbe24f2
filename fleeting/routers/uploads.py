import logging
import mimetypes
import os
from urllib.parse import quote

import filetype
from fastapi import APIRouter, Depends, File, HTTPException, Query, Request, UploadFile
from fastapi.responses import PlainTextResponse
from sqlalchemy.orm import Session

from fleeting.database import get_db
from fleeting.models.resource import Upload
from fleeting.services.access_gate import public_base_url, require_access
from fleeting.services.blob_store import BlobStore, get_blob_store
from fleeting.services.policy import build_policy
from fleeting.services.record_store import RecordStore

logger = logging.getLogger(__name__)

router = APIRouter(dependencies=[Depends(require_access)])

DEFAULT_CONTENT_TYPE = "application/octet-stream"


def _content_type(filename: str, data: bytes, declared: str | None) -> str:
    sniffed = filetype.guess_mime(data)
    if sniffed:
        return sniffed
    if declared and declared != DEFAULT_CONTENT_TYPE:
        return declared
    guessed, _ = mimetypes.guess_type(filename)
    return guessed or DEFAULT_CONTENT_TYPE


def _store_upload(
    request: Request,
    db: Session,
    blob_store: BlobStore,
    *,
    filename: str | None,
    data: bytes,
    declared_type: str | None,
    clicks: str | None,
    time: str | None,
    s: str | None,
):
    filename = os.path.basename((filename or "").replace("\\", "/"))
    if not filename or filename in (".", ".."):
        raise HTTPException(status_code=400, detail="Missing or invalid filename")

    policy = build_policy(clicks, time)
    base_url = public_base_url(request)
    content_type = _content_type(filename, data, declared_type)

    def build(token: str) -> Upload:
        return Upload(
            token=token,
            blob_name=f"{token}/{filename}",
            filename=filename,
            content_type=content_type,
            short_url=f"{base_url}/u/{token}/{quote(filename)}",
            clicks=0,
            clickers=[],
            expire_time=policy.expire_time,
            expire_clicks=policy.expire_clicks,
        )

    store = RecordStore(db, Upload)
    # the record claims the token before any bytes land under it
    upload = store.create_with_fresh_token(build)
    try:
        blob_store.put(upload.blob_name, data, content_type)
    except Exception:
        store.delete(upload.token)
        raise
    logger.info("Stored upload %s (%s, %d bytes)", upload.token, filename, len(data))

    if s:
        return PlainTextResponse(upload.short_url)
    return {
        "status": True,
        "token": upload.token,
        "url": upload.short_url,
        "upload": upload.to_dict(),
    }


@router.get("/uploads")
def list_uploads(db: Session = Depends(get_db)):
    uploads = RecordStore(db, Upload).list_all()
    return {"status": True, "uploads": [upload.to_dict() for upload in uploads]}


@router.post("/uploads")
async def create_upload(
    request: Request,
    uploadfile: UploadFile = File(...),
    clicks: str | None = Query(default=None),
    time: str | None = Query(default=None),
    s: str | None = Query(default=None),
    db: Session = Depends(get_db),
    blob_store: BlobStore = Depends(get_blob_store),
):
    data = await uploadfile.read()
    return _store_upload(
        request,
        db,
        blob_store,
        filename=uploadfile.filename,
        data=data,
        declared_type=uploadfile.content_type,
        clicks=clicks,
        time=time,
        s=s,
    )


@router.put("/uploads/{filename}")
async def put_upload(
    filename: str,
    request: Request,
    clicks: str | None = Query(default=None),
    time: str | None = Query(default=None),
    s: str | None = Query(default=None),
    db: Session = Depends(get_db),
    blob_store: BlobStore = Depends(get_blob_store),
):
    data = await request.body()
    return _store_upload(
        request,
        db,
        blob_store,
        filename=filename,
        data=data,
        declared_type=request.headers.get("content-type"),
        clicks=clicks,
        time=time,
        s=s,
    )


@router.delete("/uploads")
def delete_upload(
    token: str = Query(...),
    db: Session = Depends(get_db),
    blob_store: BlobStore = Depends(get_blob_store),
):
    RecordStore(db, Upload).reclaim(token, blob_store)
    return {"status": True}
