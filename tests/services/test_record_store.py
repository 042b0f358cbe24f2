import pytest

from fleeting.errors import Conflict, NotFound
from fleeting.models.resource import Link, Upload
from fleeting.services import tokens
from fleeting.services.record_store import RecordStore


def build_link(token):
    return Link(token=token, url="https://example.com", short_url=f"http://t/l/{token}", clicks=0, clickers=[])


def test_create_and_get(db_session):
    store = RecordStore(db_session, Link)
    store.create(build_link("abcdef"))

    fetched = store.get("abcdef")
    assert fetched.url == "https://example.com"
    assert fetched.clicks == 0
    assert fetched.create_time is not None


def test_create_duplicate_token_conflicts(db_session):
    store = RecordStore(db_session, Link)
    store.create(build_link("abcdef"))
    with pytest.raises(Conflict):
        store.create(build_link("abcdef"))


def test_get_missing_raises_not_found(db_session):
    with pytest.raises(NotFound):
        RecordStore(db_session, Upload).get("nothere")


def test_delete_and_delete_again(db_session):
    store = RecordStore(db_session, Link)
    store.create(build_link("abcdef"))
    store.delete("abcdef")
    with pytest.raises(NotFound):
        store.get("abcdef")
    with pytest.raises(NotFound):
        store.delete("abcdef")


def test_list_all_is_per_variant(db_session):
    links = RecordStore(db_session, Link)
    links.create(build_link("aaaaaa"))
    links.create(build_link("bbbbbb"))
    RecordStore(db_session, Upload).create(
        Upload(token="cccccc", blob_name="cccccc/x", filename="x", content_type="text/plain", clickers=[])
    )

    assert sorted(link.token for link in links.list_all()) == ["aaaaaa", "bbbbbb"]
    assert [u.token for u in RecordStore(db_session, Upload).list_all()] == ["cccccc"]


def test_create_with_fresh_token_retries_on_collision(db_session, monkeypatch):
    store = RecordStore(db_session, Link)
    store.create(build_link("aaaaaa"))

    token_sequence = iter(["aaaaaa", "bbbbbb"])  # first collides, second succeeds
    monkeypatch.setattr(tokens, "generate", lambda length: next(token_sequence))

    link = store.create_with_fresh_token(build_link)
    assert link.token == "bbbbbb"


def test_create_with_fresh_token_gives_up_after_retries(db_session, monkeypatch):
    store = RecordStore(db_session, Link)
    store.create(build_link("aaaaaa"))
    monkeypatch.setattr(tokens, "generate", lambda length: "aaaaaa")

    with pytest.raises(Conflict):
        store.create_with_fresh_token(build_link, retries=3)


def test_create_with_fresh_token_uses_configured_length(db_session):
    link = RecordStore(db_session, Link).create_with_fresh_token(build_link, length=9)
    assert len(link.token) == 9


def test_reclaim_removes_payload_then_record(db_session, blob_store):
    blob_store.put("tok/f.txt", b"x")
    store = RecordStore(db_session, Upload)
    store.create(Upload(token="tok", blob_name="tok/f.txt", filename="f.txt", content_type="text/plain", clickers=[]))

    store.reclaim("tok", blob_store)

    with pytest.raises(NotFound):
        blob_store.get("tok/f.txt")
    with pytest.raises(NotFound):
        store.get("tok")


def test_reclaim_tolerates_missing_payload(db_session, blob_store):
    store = RecordStore(db_session, Upload)
    store.create(Upload(token="tok", blob_name="tok/gone.txt", filename="gone.txt", content_type="text/plain", clickers=[]))

    store.reclaim("tok", blob_store)

    with pytest.raises(NotFound):
        store.get("tok")
