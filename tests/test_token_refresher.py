"""Token refresh behaviour."""

from __future__ import annotations

import asyncio

import pytest

from strava_notifier.credentials import StorageError
from strava_notifier.strava.application import RefreshFailed, TokenRefresher

from tests.builders import NOW, make_credential, make_token_grant
from tests.conftest import FrozenClock
from tests.fakes import InMemoryCredentialStore, StravaClientFake

pytestmark = pytest.mark.asyncio


async def test_fresh_credential_is_returned_untouched(
    refresher: TokenRefresher,
    strava_fake: StravaClientFake,
    credential_store: InMemoryCredentialStore,
) -> None:
    credential = make_credential(expires_at=NOW + 1)

    result = await refresher.ensure_fresh(credential)

    assert result is credential
    assert strava_fake.total_calls() == 0
    assert credential_store.calls == []


async def test_expired_credential_is_refreshed_and_persisted(
    refresher: TokenRefresher,
    strava_fake: StravaClientFake,
    credential_store: InMemoryCredentialStore,
) -> None:
    credential = make_credential(expires_at=NOW)
    credential_store.with_credentials(credential)
    strava_fake.expect_refresh_token(returns=make_token_grant())

    result = await refresher.ensure_fresh(credential)

    assert strava_fake.calls["refresh_token"] == [("refresh-1",)]
    assert result.access_token == "new-access"
    assert result.refresh_token == "new-refresh"
    assert result.expires_at == NOW + 21600
    assert result.notify_target == credential.notify_target
    assert credential_store.rows[credential.athlete_id] == result


async def test_refresh_rejection_raises_refresh_failed(
    refresher: TokenRefresher,
    strava_fake: StravaClientFake,
    credential_store: InMemoryCredentialStore,
) -> None:
    credential = make_credential(expires_at=NOW - 10)
    credential_store.with_credentials(credential)
    strava_fake.expect_refresh_token(raises=RefreshFailed("invalid_grant"))

    with pytest.raises(RefreshFailed):
        await refresher.ensure_fresh(credential)

    assert credential_store.rows[credential.athlete_id] == credential


async def test_concurrent_refreshes_share_one_exchange(
    refresher: TokenRefresher,
    strava_fake: StravaClientFake,
    credential_store: InMemoryCredentialStore,
) -> None:
    credential = make_credential(expires_at=NOW - 10)
    credential_store.with_credentials(credential)
    strava_fake.refresh_gate = asyncio.Event()
    strava_fake.expect_refresh_token(returns=make_token_grant())

    first = asyncio.create_task(refresher.ensure_fresh(credential))
    second = asyncio.create_task(refresher.ensure_fresh(credential))
    await asyncio.sleep(0)
    strava_fake.refresh_gate.set()
    results = await asyncio.gather(first, second)

    assert strava_fake.call_count("refresh_token") == 1
    assert results[0] == results[1]
    assert results[0].access_token == "new-access"


async def test_refreshes_for_different_athletes_run_independently(
    refresher: TokenRefresher,
    strava_fake: StravaClientFake,
    credential_store: InMemoryCredentialStore,
) -> None:
    one = make_credential(athlete_id=1, expires_at=NOW - 10)
    two = make_credential(athlete_id=2, expires_at=NOW - 10, refresh_token="refresh-2")
    credential_store.with_credentials(one, two)
    strava_fake.expect_refresh_token(returns=make_token_grant(access_token="a1"))
    strava_fake.expect_refresh_token(returns=make_token_grant(access_token="a2"))

    results = await asyncio.gather(refresher.ensure_fresh(one), refresher.ensure_fresh(two))

    assert strava_fake.call_count("refresh_token") == 2
    assert {result.access_token for result in results} == {"a1", "a2"}


async def test_later_expiry_triggers_a_new_exchange(
    strava_fake: StravaClientFake,
    credential_store: InMemoryCredentialStore,
) -> None:
    clock = FrozenClock(NOW)
    refresher = TokenRefresher(strava_fake, credential_store, clock=clock)
    credential = make_credential(expires_at=NOW - 10)
    credential_store.with_credentials(credential)
    strava_fake.expect_refresh_token(returns=make_token_grant(expires_at=NOW + 60))
    strava_fake.expect_refresh_token(returns=make_token_grant(access_token="third"))

    refreshed = await refresher.ensure_fresh(credential)
    assert await refresher.ensure_fresh(refreshed) is refreshed

    clock.advance(61)
    again = await refresher.ensure_fresh(refreshed)

    assert again.access_token == "third"
    assert strava_fake.call_count("refresh_token") == 2


async def test_stale_copy_after_finished_refresh_reuses_stored_tokens(
    refresher: TokenRefresher,
    strava_fake: StravaClientFake,
    credential_store: InMemoryCredentialStore,
) -> None:
    credential = make_credential(expires_at=NOW - 10)
    credential_store.with_credentials(credential)
    read_before_refresh = credential.model_copy()
    strava_fake.expect_refresh_token(returns=make_token_grant())

    first = await refresher.ensure_fresh(credential)
    second = await refresher.ensure_fresh(read_before_refresh)

    assert strava_fake.calls["refresh_token"] == [("refresh-1",)]
    assert second == first
    assert second.access_token == "new-access"


async def test_token_rotated_by_another_worker_is_not_spent_again(
    refresher: TokenRefresher,
    strava_fake: StravaClientFake,
    credential_store: InMemoryCredentialStore,
) -> None:
    credential_store.with_credentials(
        make_credential(expires_at=NOW - 10, refresh_token="refresh-2")
    )

    result = await refresher.ensure_fresh(make_credential(expires_at=NOW - 10))

    assert strava_fake.total_calls() == 0
    assert result.refresh_token == "refresh-2"


async def test_row_deleted_before_refresh_raises_storage_error(
    refresher: TokenRefresher,
    strava_fake: StravaClientFake,
) -> None:
    with pytest.raises(StorageError):
        await refresher.ensure_fresh(make_credential(expires_at=NOW - 10))

    assert strava_fake.total_calls() == 0
