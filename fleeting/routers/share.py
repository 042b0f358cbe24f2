from urllib.parse import quote

from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import RedirectResponse
from sqlalchemy.orm import Session

from fleeting.database import get_db
from fleeting.errors import Gone, NotFound
from fleeting.models.resource import Link, Upload
from fleeting.services.access_accountant import AccessAccountant
from fleeting.services.access_gate import require_access
from fleeting.services.blob_store import BlobStore, get_blob_store
from fleeting.services.record_store import RecordStore
from fleeting.services.sweeper import Sweeper

router = APIRouter(dependencies=[Depends(require_access)])


def _accessor(request: Request) -> str:
    return request.client.host if request.client else ""


def _count_live_access(store: RecordStore, request: Request, token: str):
    # an access that arrives after expiry is refused and not counted
    if store.get(token).is_expired():
        raise Gone(f"{store.kind} {token} has expired")
    record, _ = AccessAccountant(store).record_access(token, _accessor(request))
    return record


@router.get("/l/{token}")
def follow_link(token: str, request: Request, db: Session = Depends(get_db)):
    link = _count_live_access(RecordStore(db, Link), request, token)
    return RedirectResponse(link.url, status_code=302)


@router.get("/u/{token}/{filename}")
def fetch_upload(
    token: str,
    filename: str,
    request: Request,
    db: Session = Depends(get_db),
    blob_store: BlobStore = Depends(get_blob_store),
):
    store = RecordStore(db, Upload)
    if store.get(token).filename != filename:
        raise NotFound(f"No upload named {filename} under {token}")
    upload = _count_live_access(store, request, token)
    data = blob_store.get(upload.blob_name)
    return Response(
        content=data,
        media_type=upload.content_type,
        headers={"Content-Disposition": f"inline; filename*=UTF-8''{quote(upload.filename)}"},
    )


@router.post("/sweep")
def sweep_now(
    db: Session = Depends(get_db),
    blob_store: BlobStore = Depends(get_blob_store),
):
    result = Sweeper(db, blob_store).sweep()
    return {"status": True, **result.as_dict()}
