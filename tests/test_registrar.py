import logging

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError

from app.core.exceptions import (
    DuplicateKeyError,
    NotFoundError,
    StoreUnavailableError,
    StoreWriteFailedError,
    UploadFailedError,
    ValidationError,
)
from app.services.bank_account import BankAccountService
from app.services.vendor import VendorService
from tests.fakes import FakeAttachmentStore


def _operational_error():
    return OperationalError("INSERT", {}, Exception("disk I/O error"))


# ---------------------------------------------------------------------------
# Create
# ---------------------------------------------------------------------------


async def test_create_vendor_without_files(db_session, store):
    svc = VendorService(db_session, store)

    vendor = await svc.create({"user_id": "u1", "phone": "9999999999", "name": "Ravi"})

    assert vendor.user_id == "u1"
    assert vendor.phone == "9999999999"
    assert vendor.personal_photo is None
    assert vendor.aadhar_photo is None
    assert vendor.cart_photo is None
    assert store.puts == []


async def test_duplicate_phone_is_rejected_before_upload(db_session, store):
    svc = VendorService(db_session, store)
    await svc.create({"user_id": "u1", "phone": "9999999999"})

    with pytest.raises(DuplicateKeyError) as exc_info:
        await svc.create(
            {"user_id": "u2", "phone": "9999999999"}, {"personal_photo": b"P"}
        )

    assert exc_info.value.status_code == 400
    assert store.puts == []
    rows = await svc.list_all()
    assert [r.user_id for r in rows] == ["u1"]


async def test_existing_user_id_is_rejected_before_upload(db_session, store):
    svc = VendorService(db_session, store)
    await svc.create({"user_id": "u1", "phone": "111"}, {"cart_photo": b"original"})

    with pytest.raises(DuplicateKeyError):
        await svc.create({"user_id": "u1", "phone": "222"}, {"cart_photo": b"other"})

    assert store.objects["u1/vendor/cart.jpg"] == b"original"


async def test_create_with_files_stores_uploaded_urls(db_session, store):
    svc = VendorService(db_session, store)

    vendor = await svc.create(
        {"user_id": "u1", "phone": "123"},
        {"personal_photo": b"P", "aadhar_photo": b"A", "cart_photo": b"C"},
    )

    assert vendor.personal_photo == store.public_url("u1/vendor/personal.jpg")
    assert vendor.aadhar_photo == store.public_url("u1/vendor/aadhar.jpg")
    assert vendor.cart_photo == store.public_url("u1/vendor/cart.jpg")
    assert store.objects["u1/vendor/aadhar.jpg"] == b"A"


async def test_uploaded_url_wins_over_supplied_value(db_session, store):
    svc = BankAccountService(db_session, store)

    account = await svc.create(
        {"user_id": "u1", "account_number": "ACC1", "passbook_photo": "https://elsewhere/x.jpg"},
        {"passbook_photo": b"B"},
    )

    assert account.passbook_photo == store.public_url("u1/bank/passbook.jpg")


async def test_upload_failure_writes_nothing(db_session):
    store = FakeAttachmentStore(fail_on={"cart.jpg"})
    svc = VendorService(db_session, store)

    with pytest.raises(UploadFailedError):
        await svc.create(
            {"user_id": "u1", "phone": "123"},
            {"personal_photo": b"P", "cart_photo": b"C"},
        )

    assert await svc.list_all() == []


@pytest.mark.parametrize(
    "fields, message",
    [
        ({"user_id": "u1"}, "phone is required"),
        ({"user_id": "u1", "phone": ""}, "phone is required"),
        ({"phone": "123"}, "user_id"),
        ({"user_id": "../u1", "phone": "123"}, "user_id"),
        ({"user_id": "u1", "phone": "123", "nickname": "x"}, "nickname"),
    ],
)
async def test_create_validation(db_session, store, fields, message):
    svc = VendorService(db_session, store)

    with pytest.raises(ValidationError, match=message):
        await svc.create(fields)
    assert store.puts == []


async def test_insert_failure_reports_orphans(db_session, store, monkeypatch, caplog):
    svc = VendorService(db_session, store, compensate_orphans=False)

    async def failing_create(**kwargs):
        raise _operational_error()

    monkeypatch.setattr(svc._repo, "create", failing_create)

    with caplog.at_level(logging.WARNING, logger="app.services.uploader"):
        with pytest.raises(StoreWriteFailedError):
            await svc.create({"user_id": "u1", "phone": "123"}, {"personal_photo": b"P"})

    assert "u1/vendor/personal.jpg" in store.objects
    assert any("u1/vendor/personal.jpg" in r.message for r in caplog.records)


async def test_insert_failure_with_compensation_removes_uploads(db_session, store, monkeypatch):
    svc = VendorService(db_session, store, compensate_orphans=True)

    async def failing_create(**kwargs):
        raise _operational_error()

    monkeypatch.setattr(svc._repo, "create", failing_create)

    with pytest.raises(StoreWriteFailedError):
        await svc.create(
            {"user_id": "u1", "phone": "123"}, {"personal_photo": b"P", "cart_photo": b"C"}
        )

    assert store.objects == {}
    assert sorted(store.deleted) == ["u1/vendor/cart.jpg", "u1/vendor/personal.jpg"]


async def test_race_past_the_guard_is_caught_by_unique_constraint(db_session, store, monkeypatch):
    svc = VendorService(db_session, store)

    async def always_available(key_field, key_value):
        return True

    monkeypatch.setattr(svc._guard, "is_available", always_available)
    await svc.create({"user_id": "u1", "phone": "555"})

    with pytest.raises(DuplicateKeyError):
        await svc.create({"user_id": "u2", "phone": "555"})

    rows = await svc.list_all()
    assert [r.user_id for r in rows] == ["u1"]


async def test_user_id_race_keeps_the_saved_records_attachments(db_session, store, monkeypatch):
    svc = VendorService(db_session, store, compensate_orphans=True)

    async def always_available(key_field, key_value):
        return True

    monkeypatch.setattr(svc._guard, "is_available", always_available)
    await svc.create({"user_id": "u1", "phone": "111"}, {"personal_photo": b"first"})
    # Saved by another request: not in this session's identity map
    db_session.expunge_all()

    with pytest.raises(DuplicateKeyError, match="user_id 'u1'"):
        await svc.create({"user_id": "u1", "phone": "222"}, {"personal_photo": b"second"})

    # The path belongs to the saved u1 record, so nothing is deleted
    assert store.deleted == []
    assert "u1/vendor/personal.jpg" in store.objects
    row = await svc.get("u1")
    assert row.phone == "111"
    assert row.personal_photo == "https://cdn.test/photos/u1/vendor/personal.jpg"


async def test_key_race_with_compensation_removes_only_own_uploads(db_session, store, monkeypatch):
    svc = BankAccountService(db_session, store, compensate_orphans=True)

    async def always_available(key_field, key_value):
        return True

    monkeypatch.setattr(svc._guard, "is_available", always_available)
    await svc.create({"user_id": "u1", "account_number": "ACC1"}, {"passbook_photo": b"one"})

    with pytest.raises(DuplicateKeyError, match="Account number already exists"):
        await svc.create({"user_id": "u2", "account_number": "ACC1"}, {"passbook_photo": b"two"})

    assert store.deleted == ["u2/bank/passbook.jpg"]
    assert store.objects == {"u1/bank/passbook.jpg": b"one"}


async def test_guard_query_failure_is_store_unavailable(db_session, store, monkeypatch):
    svc = BankAccountService(db_session, store)

    async def failing_find_one(**filters):
        raise _operational_error()

    monkeypatch.setattr(svc._repo, "find_one", failing_find_one)

    with pytest.raises(StoreUnavailableError):
        await svc.create({"user_id": "u1", "account_number": "ACC1"}, {"passbook_photo": b"B"})
    assert store.puts == []


# ---------------------------------------------------------------------------
# Update
# ---------------------------------------------------------------------------


async def test_update_only_replaces_supplied_photo(db_session, store):
    svc = VendorService(db_session, store)
    await svc.create(
        {"user_id": "u1", "phone": "123"},
        {"personal_photo": b"P", "aadhar_photo": b"A"},
    )

    updated = await svc.update("u1", {}, {"cart_photo": b"C2"})

    assert updated.personal_photo == store.public_url("u1/vendor/personal.jpg")
    assert updated.aadhar_photo == store.public_url("u1/vendor/aadhar.jpg")
    assert updated.cart_photo == store.public_url("u1/vendor/cart.jpg")
    assert store.objects["u1/vendor/cart.jpg"] == b"C2"


async def test_update_scalar_fields(db_session, store):
    svc = VendorService(db_session, store)
    await svc.create({"user_id": "u1", "phone": "123", "city": "Pune"})

    updated = await svc.update("u1", {"city": "Mumbai", "user_id": "ignored"})

    assert updated.user_id == "u1"
    assert updated.city == "Mumbai"
    assert updated.phone == "123"


async def test_update_twice_is_idempotent(db_session, store):
    svc = VendorService(db_session, store)
    await svc.create({"user_id": "u1", "phone": "123"})

    def snapshot(row):
        return {
            col: getattr(row, col)
            for col in ("user_id", "phone", "name", "personal_photo", "cart_photo")
        }

    first = snapshot(await svc.update("u1", {"name": "Asha"}, {"cart_photo": b"C"}))
    second = snapshot(await svc.update("u1", {"name": "Asha"}, {"cart_photo": b"C"}))

    assert first == second
    assert list(store.objects) == ["u1/vendor/cart.jpg"]


async def test_update_missing_record_is_not_found(db_session, store):
    svc = BankAccountService(db_session, store)

    with pytest.raises(NotFoundError):
        await svc.update("ghost", {"bank_name": "SBI"})


async def test_update_with_nothing_returns_current_row(db_session, store):
    svc = BankAccountService(db_session, store)
    await svc.create({"user_id": "u1", "account_number": "ACC1"})

    row = await svc.update("u1", {})

    assert row.account_number == "ACC1"
    with pytest.raises(NotFoundError):
        await svc.update("ghost", {})


async def test_upload_failure_leaves_record_untouched(db_session):
    store = FakeAttachmentStore(fail_on={"passbook.jpg"})
    svc = BankAccountService(db_session, store)
    await svc.create({"user_id": "u1", "account_number": "ACC1", "bank_name": "SBI"})

    with pytest.raises(UploadFailedError):
        await svc.update("u1", {"bank_name": "HDFC"}, {"passbook_photo": b"B"})

    row = await svc.get("u1")
    assert row.bank_name == "SBI"
    assert row.passbook_photo is None


async def test_key_change_allowed_when_mutable(db_session, store):
    svc = VendorService(db_session, store, key_mutable_on_update=True)
    await svc.create({"user_id": "u1", "phone": "111"})

    updated = await svc.update("u1", {"phone": "222"})

    assert updated.phone == "222"


async def test_key_change_to_taken_value_is_duplicate(db_session, store):
    svc = VendorService(db_session, store, key_mutable_on_update=True)
    await svc.create({"user_id": "u1", "phone": "111"})
    await svc.create({"user_id": "u2", "phone": "222"})

    with pytest.raises(DuplicateKeyError):
        await svc.update("u2", {"phone": "111"})

    row = await svc.get("u2")
    assert row.phone == "222"


async def test_clearing_required_field_is_validation_error(db_session, store):
    svc = VendorService(db_session, store)
    await svc.create({"user_id": "u1", "phone": "111"})

    with pytest.raises(ValidationError, match="phone cannot be empty"):
        await svc.update("u1", {"phone": None}, {"cart_photo": b"C"})

    assert store.puts == []
    row = await svc.get("u1")
    assert row.phone == "111"


async def test_update_constraint_failure_on_other_column_is_store_write_failed(
    db_session, store, monkeypatch
):
    svc = VendorService(db_session, store)
    await svc.create({"user_id": "u1", "phone": "111"})

    async def failing_update(user_id, **kwargs):
        raise IntegrityError("UPDATE", {}, Exception("CHECK constraint failed: vendors"))

    monkeypatch.setattr(svc._repo, "update", failing_update)

    with pytest.raises(StoreWriteFailedError):
        await svc.update("u1", {"phone": "222", "city": "Pune"})


async def test_key_change_rejected_when_immutable(db_session, store):
    svc = BankAccountService(db_session, store, key_mutable_on_update=False)
    await svc.create({"user_id": "u1", "account_number": "ACC1"})

    with pytest.raises(ValidationError, match="account_number"):
        await svc.update("u1", {"account_number": "ACC2"}, {"passbook_photo": b"B"})
    assert store.puts == []

    # Re-sending the same value is not a change
    row = await svc.update("u1", {"account_number": "ACC1", "upi_id": "me@upi"})
    assert row.upi_id == "me@upi"


# ---------------------------------------------------------------------------
# Retrieval
# ---------------------------------------------------------------------------


async def test_get_missing_vendor_is_not_found(db_session, store):
    svc = VendorService(db_session, store)

    with pytest.raises(NotFoundError) as exc_info:
        await svc.get("nobody")
    assert exc_info.value.status_code == 404


async def test_list_all_returns_every_row(db_session, store):
    svc = BankAccountService(db_session, store)
    await svc.create({"user_id": "a", "account_number": "1"})
    await svc.create({"user_id": "b", "account_number": "2"})

    rows = await svc.list_all()

    assert sorted(r.account_number for r in rows) == ["1", "2"]
