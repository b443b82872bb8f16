from datetime import datetime, timedelta

import pytest
from sqlalchemy import text

from conftest import NOW

from guestbook.errors import ContentNotFound, RepositoryError
from guestbook.repo import ContentRepository


def _seed(repository, status, days_old, media_url=None):
    return repository.create_content(
        user_id="0b9c6d2e-1111-4222-8333-444455556666",
        type="image" if media_url else "text",
        text_content=None if media_url else "Happy birthday!",
        media_url=media_url,
        status=status,
        created_at=NOW - timedelta(days=days_old),
    )


def test_create_and_get(repository):
    created = _seed(repository, "pending", 0, "https://cdn.example/a.jpg")
    loaded = repository.get_content(created.id)

    assert loaded == created
    assert loaded.status == "pending"
    assert loaded.media_url == "https://cdn.example/a.jpg"
    assert isinstance(loaded.created_at, datetime)


def test_create_rejects_unknown_type(repository):
    with pytest.raises(ValueError):
        repository.create_content(user_id="u", type="audio")


def test_get_missing_raises_key_error(repository):
    with pytest.raises(KeyError):
        repository.get_content("does-not-exist")
    with pytest.raises(ContentNotFound):
        repository.get_content("does-not-exist")


def test_find_by_status_older_than(repository):
    old = _seed(repository, "rejected", 10, "https://cdn.example/old.jpg")
    _seed(repository, "rejected", 2)
    _seed(repository, "approved", 30)

    found = repository.find_by_status_older_than("rejected", NOW - timedelta(days=7))

    assert [r.id for r in found] == [old.id]
    assert found[0].media_url == "https://cdn.example/old.jpg"


def test_counts(repository):
    _seed(repository, "rejected", 10)
    _seed(repository, "rejected", 8)
    _seed(repository, "rejected", 1)
    _seed(repository, "pending", 20)

    cutoff = NOW - timedelta(days=7)
    assert repository.count_by_status("rejected") == 3
    assert repository.count_by_status_older_than("rejected", cutoff) == 2
    assert repository.count_by_status("approved") == 0


def test_unknown_status_is_rejected(repository):
    with pytest.raises(ValueError):
        repository.count_by_status("deleted")


def test_delete_by_ids(repository):
    a = _seed(repository, "rejected", 10)
    b = _seed(repository, "rejected", 10)
    c = _seed(repository, "pending", 10)

    assert repository.delete_by_ids([a.id, b.id]) == 2
    assert repository.count_by_status("rejected") == 0
    assert repository.get_content(c.id).id == c.id


def test_delete_by_ids_empty_is_noop(repository):
    _seed(repository, "rejected", 10)
    assert repository.delete_by_ids([]) == 0
    assert repository.count_by_status("rejected") == 1


def test_set_status(repository):
    item = _seed(repository, "pending", 1)

    updated = repository.set_status(item.id, "approved", approved_at=NOW)

    assert updated.status == "approved"
    assert updated.approved_at is not None


def test_set_status_missing_row(repository):
    with pytest.raises(ContentNotFound):
        repository.set_status("missing", "approved", approved_at=NOW)


def test_database_errors_become_repository_errors(engine):
    with engine.begin() as conn:
        conn.execute(text("DROP TABLE content"))

    repository = ContentRepository(engine)
    with pytest.raises(RepositoryError):
        repository.find_by_status_older_than("rejected", NOW)
    with pytest.raises(RepositoryError):
        repository.delete_by_ids(["a"])


def test_non_uuid_id_is_not_found_without_querying(engine):
    with engine.begin() as conn:
        conn.execute(text("DROP TABLE content"))

    repository = ContentRepository(engine)
    with pytest.raises(ContentNotFound):
        repository.get_content("not-a-uuid")
    with pytest.raises(ContentNotFound):
        repository.set_status("not-a-uuid", "approved", approved_at=NOW)


def test_uuid_lookup_is_case_insensitive(repository):
    item = _seed(repository, "pending", 0)
    assert repository.get_content(item.id.upper()).id == item.id
