# tests/test_credentials.py

from __future__ import annotations

import pytest

from taskpad.auth.credentials import CredentialService, User
from taskpad.core.errors import (
    EmptyInput,
    InvalidCredentials,
    PasswordMismatch,
    StoreReadFailed,
    StoreWriteFailed,
    UsernameTaken,
)

from .fakes import RecordingStore


@pytest.mark.asyncio
async def test_register_then_login_returns_same_user(store: RecordingStore) -> None:
    svc = CredentialService(store)

    created = await svc.register("alice", "s3cret", "s3cret")
    assert created == User("alice", "s3cret")
    assert await store.get("Users/alice") == {"username": "alice", "password": "s3cret"}

    logged_in = await svc.login("alice", "s3cret")
    assert logged_in.username == "alice"
    assert logged_in.password == "s3cret"


@pytest.mark.asyncio
async def test_second_registration_of_same_name_fails_without_write(store: RecordingStore) -> None:
    svc = CredentialService(store)
    await svc.register("bob", "pw1", "pw1")
    writes_before = list(store.writes)

    with pytest.raises(UsernameTaken) as ei:
        await svc.register("bob", "other", "other")

    assert str(ei.value) == "Username already exists"
    assert store.writes == writes_before
    # the first account is untouched
    assert (await store.get("Users/bob"))["password"] == "pw1"


@pytest.mark.asyncio
async def test_login_wrong_password_and_unknown_user_are_indistinguishable(store: RecordingStore) -> None:
    svc = CredentialService(store)
    await svc.register("carol", "right", "right")

    with pytest.raises(InvalidCredentials) as wrong:
        await svc.login("carol", "wrong")
    with pytest.raises(InvalidCredentials) as unknown:
        await svc.login("nobody", "right")

    assert str(wrong.value) == str(unknown.value) == "Invalid username or password"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "username,password",
    [("", "pw"), ("alice", ""), ("   ", "pw"), ("alice", "  ")],
)
async def test_login_requires_both_fields(store: RecordingStore, username: str, password: str) -> None:
    with pytest.raises(EmptyInput) as ei:
        await CredentialService(store).login(username, password)
    assert str(ei.value) == "Please enter both username and password"
    assert store.reads == []


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "fields",
    [("", "pw", "pw"), ("dave", "", "pw"), ("dave", "pw", ""), ("dave", " ", " ")],
)
async def test_register_requires_all_fields(store: RecordingStore, fields: tuple[str, str, str]) -> None:
    with pytest.raises(EmptyInput) as ei:
        await CredentialService(store).register(*fields)
    assert str(ei.value) == "Please fill in all fields"
    assert store.writes == []


@pytest.mark.asyncio
async def test_password_mismatch_is_checked_before_touching_the_store(store: RecordingStore) -> None:
    store.fail_reads = "offline"

    with pytest.raises(PasswordMismatch):
        await CredentialService(store).register("erin", "one", "two")

    assert store.reads == []
    assert store.writes == []


@pytest.mark.asyncio
async def test_read_failure_surfaces_as_store_error(store: RecordingStore) -> None:
    store.fail_reads = "Permission denied"
    svc = CredentialService(store)

    with pytest.raises(StoreReadFailed) as ei:
        await svc.login("alice", "pw")
    assert str(ei.value) == "Error: Permission denied"

    with pytest.raises(StoreReadFailed):
        await svc.register("alice", "pw", "pw")


@pytest.mark.asyncio
async def test_write_failure_surfaces_message(store: RecordingStore) -> None:
    store.fail_writes = "quota exceeded"

    with pytest.raises(StoreWriteFailed) as ei:
        await CredentialService(store).register("frank", "pw", "pw")

    assert ei.value.message == "quota exceeded"
    assert await store.get("Users/frank") is None


@pytest.mark.asyncio
async def test_login_compares_passwords_exactly(store: RecordingStore) -> None:
    svc = CredentialService(store)
    await svc.register("gina", "Secret", "Secret")

    with pytest.raises(InvalidCredentials):
        await svc.login("gina", "secret")
    with pytest.raises(InvalidCredentials):
        await svc.login("gina", "Secret ")
