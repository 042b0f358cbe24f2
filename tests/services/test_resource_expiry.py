from datetime import datetime, timedelta, timezone

from fleeting.models.resource import Link, Upload


NOW = datetime(2026, 5, 1, 12, 0, tzinfo=timezone.utc)


def make_link(**kwargs):
    defaults = dict(token="abcdef", url="https://example.com", clicks=0, clickers=[])
    defaults.update(kwargs)
    return Link(**defaults)


def test_record_without_limits_never_expires():
    link = make_link(clicks=10_000)
    assert not link.is_expired(NOW + timedelta(days=3650))


def test_time_limit_is_inclusive_and_stays_expired():
    link = make_link(expire_time=NOW)
    assert not link.is_expired(NOW - timedelta(microseconds=1))
    assert link.is_expired(NOW)
    for later in (timedelta(seconds=1), timedelta(days=1), timedelta(days=400)):
        assert link.is_expired(NOW + later)


def test_naive_expire_time_is_treated_as_utc():
    link = make_link(expire_time=NOW.replace(tzinfo=None))
    assert link.is_expired(NOW)
    assert not link.is_expired(NOW - timedelta(seconds=1))


def test_click_limit():
    assert not make_link(expire_clicks=3, clicks=2).is_expired(NOW)
    assert make_link(expire_clicks=3, clicks=3).is_expired(NOW)
    assert make_link(expire_clicks=3, clicks=4).is_expired(NOW)


def test_zero_click_limit_means_unlimited():
    assert not make_link(expire_clicks=0, clicks=50).is_expired(NOW)


def test_either_limit_expires_the_record():
    link = make_link(expire_clicks=5, clicks=5, expire_time=NOW + timedelta(days=1))
    assert link.is_expired(NOW)
    link = make_link(expire_clicks=5, clicks=0, expire_time=NOW - timedelta(days=1))
    assert link.is_expired(NOW)


def test_upload_release_payload_deletes_blob(blob_store):
    blob_store.put("tok/a.txt", b"data")
    upload = Upload(token="tok", blob_name="tok/a.txt", filename="a.txt", content_type="text/plain")
    upload.release_payload(blob_store)
    assert not (blob_store.root / "tok" / "a.txt").exists()


def test_link_release_payload_is_noop(blob_store):
    make_link().release_payload(blob_store)
