import asyncio
import os

import pytest

from quotebuilder.exceptions import DraftEncryptionError, DraftStoreError, SettingsError
from quotebuilder.persistence.draft_store import (
    SETTINGS_SLOT_KEY,
    FileDraftStore,
    InMemoryDraftStore,
    SettingsDraftStore,
    build_draft_store,
)
from quotebuilder.persistence.quote_codec import dumps_quote, loads_quote
from quotebuilder.security.encryption import derive_key
from quotebuilder.services.settings_service import SettingsService
from tests.factories import sample_quote


def _run(coro):
    return asyncio.run(coro)


def test_in_memory_store_single_slot():
    store = InMemoryDraftStore()

    assert _run(store.load()) is None
    _run(store.save("first"))
    _run(store.save("second"))
    assert _run(store.load()) == "second"


def test_in_memory_store_with_delay():
    store = InMemoryDraftStore("seed", delay=0.001)

    assert _run(store.load()) == "seed"


def test_settings_store_round_trip(settings_stub):
    settings = settings_stub()
    store = SettingsDraftStore(settings)
    blob = dumps_quote(sample_quote())

    assert _run(store.load()) is None
    _run(store.save(blob))

    assert settings.value(SETTINGS_SLOT_KEY) == blob
    assert loads_quote(_run(store.load())) == sample_quote()


def test_settings_store_wraps_backend_errors():
    class BrokenSettings:
        def setValue(self, key, value):
            raise RuntimeError("registry locked")

        def value(self, key, default=None):
            raise RuntimeError("registry locked")

        def sync(self):
            pass

    store = SettingsDraftStore(BrokenSettings())

    with pytest.raises(DraftStoreError):
        _run(store.save("blob"))
    with pytest.raises(DraftStoreError):
        _run(store.load())


def test_file_store_missing_file_is_empty_slot(tmp_path):
    store = FileDraftStore(tmp_path / "drafts" / "quote.json")

    assert _run(store.load()) is None


def test_file_store_round_trip_creates_parent(tmp_path):
    path = tmp_path / "nested" / "quote.json"
    store = FileDraftStore(path)
    blob = dumps_quote(sample_quote(client_name="Zoë"))

    _run(store.save(blob))

    assert path.read_text(encoding="utf-8") == blob
    assert _run(store.load()) == blob
    assert [p.name for p in path.parent.iterdir()] == ["quote.json"]


def test_file_store_overwrites_previous_draft(tmp_path):
    store = FileDraftStore(tmp_path / "quote.json")

    _run(store.save("one"))
    _run(store.save("two"))

    assert _run(store.load()) == "two"


def test_file_store_read_error_is_store_error(tmp_path):
    directory = tmp_path / "is_a_dir"
    directory.mkdir()
    store = FileDraftStore(directory)

    with pytest.raises(DraftStoreError):
        _run(store.load())
    with pytest.raises(DraftStoreError):
        _run(store.save("blob"))


def test_file_store_undecodable_bytes_are_store_error(tmp_path):
    path = tmp_path / "quote_draft.json"
    path.write_bytes(b"\xff\xfe\x00garbage")

    with pytest.raises(DraftStoreError, match="UTF-8"):
        _run(FileDraftStore(path).load())


def test_encrypted_file_store_hides_plaintext(tmp_path):
    key = derive_key("correct horse", os.urandom(16), iterations=1_000)
    path = tmp_path / "quote.enc"
    store = FileDraftStore(path, key=key)
    blob = dumps_quote(sample_quote())

    _run(store.save(blob))

    assert store.encrypted
    assert "Acme Traders" not in path.read_text(encoding="utf-8")
    assert _run(store.load()) == blob


def test_encrypted_file_store_rejects_wrong_key(tmp_path):
    salt = os.urandom(16)
    path = tmp_path / "quote.enc"
    _run(FileDraftStore(path, key=derive_key("right", salt, iterations=1_000)).save("secret"))

    intruder = FileDraftStore(path, key=derive_key("wrong", salt, iterations=1_000))

    with pytest.raises(DraftStoreError):
        _run(intruder.load())


def test_build_draft_store_defaults_to_settings(settings_stub):
    service = SettingsService()

    store = build_draft_store(service)

    assert isinstance(store, SettingsDraftStore)


def test_build_draft_store_memory_backend(settings_stub):
    service = SettingsService()
    service.save_draft_backend("memory")

    assert isinstance(build_draft_store(service), InMemoryDraftStore)


def test_build_draft_store_file_backend(settings_stub, tmp_path):
    service = SettingsService()
    service.save_draft_backend("file")
    service.set("drafts/path", str(tmp_path / "draft.json"))

    store = build_draft_store(service)

    assert isinstance(store, FileDraftStore)
    assert store.path == tmp_path / "draft.json"
    assert not store.encrypted


def test_build_draft_store_encrypted_requires_passphrase(settings_stub, tmp_path):
    service = SettingsService()
    service.save_draft_backend("file")
    service.set("drafts/path", str(tmp_path / "draft.enc"))
    service.set("drafts/encrypt", "true")

    with pytest.raises(DraftEncryptionError):
        build_draft_store(service)

    store = build_draft_store(service, passphrase="s3cret")
    assert store.encrypted
    assert service.get("security/draft_salt")


def test_build_draft_store_unknown_backend(settings_stub):
    service = SettingsService()
    service.set("drafts/backend", "cloud")

    with pytest.raises(SettingsError):
        build_draft_store(service)
