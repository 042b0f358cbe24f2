from urllib.parse import urlparse

from fastapi import APIRouter, Depends, Form, HTTPException, Query, Request
from fastapi.responses import PlainTextResponse
from sqlalchemy.orm import Session

from fleeting.database import get_db
from fleeting.models.resource import Link
from fleeting.services.access_gate import public_base_url, require_access
from fleeting.services.blob_store import BlobStore, get_blob_store
from fleeting.services.policy import build_policy
from fleeting.services.record_store import RecordStore

router = APIRouter(dependencies=[Depends(require_access)])


@router.get("/links")
def list_links(db: Session = Depends(get_db)):
    links = RecordStore(db, Link).list_all()
    return {"status": True, "links": [link.to_dict() for link in links]}


@router.post("/links")
def create_link(
    request: Request,
    url: str | None = Query(default=None),
    url_form: str | None = Form(default=None, alias="url"),
    clicks: str | None = Query(default=None),
    time: str | None = Query(default=None),
    s: str | None = Query(default=None),
    db: Session = Depends(get_db),
):
    target = url or url_form
    if not target:
        raise HTTPException(status_code=400, detail="Missing 'url'")
    if urlparse(target).scheme not in ("http", "https"):
        raise HTTPException(status_code=400, detail="Only http(s) URLs can be shortened")

    policy = build_policy(clicks, time)
    base_url = public_base_url(request)

    def build(token: str) -> Link:
        return Link(
            token=token,
            url=target,
            short_url=f"{base_url}/l/{token}",
            clicks=0,
            clickers=[],
            expire_time=policy.expire_time,
            expire_clicks=policy.expire_clicks,
        )

    link = RecordStore(db, Link).create_with_fresh_token(build)

    if s:
        return PlainTextResponse(link.short_url)
    return {
        "status": True,
        "token": link.token,
        "url": link.short_url,
        "link": link.to_dict(),
    }


@router.delete("/links")
def delete_link(
    token: str = Query(...),
    db: Session = Depends(get_db),
    blob_store: BlobStore = Depends(get_blob_store),
):
    RecordStore(db, Link).reclaim(token, blob_store)
    return {"status": True}
