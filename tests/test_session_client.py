"""Client-side session context behaviour against the live app."""
from medibot.client.session import SessionContext, INITIAL_SESSION, SIGNED_IN, TOKEN_REFRESHED

from conftest import unique_email, PASSWORD


async def test_sign_in_error_is_server_message(async_client):
    session = SessionContext(async_client)
    result = await session.sign_in(unique_email("missing"), PASSWORD)
    assert not result.ok
    assert result.error == "Invalid email or password"
    assert session.user is None


async def test_validation_errors_are_flattened(async_client):
    session = SessionContext(async_client)
    result = await session.sign_up("not-an-email", PASSWORD)
    assert result.error
    assert session.access_token is None


async def test_load_session_restores_user_and_clears_loading(async_client):
    email = unique_email("restore")
    first = SessionContext(async_client)
    await first.sign_up(email, PASSWORD, role="healthcare_provider", name="Dr Uwase")

    events = []
    second = SessionContext(async_client)
    second.on_auth_state_change(lambda event, user: events.append(event))
    assert second.loading is True

    result = await second.load_session(first.access_token, first.refresh_token)
    assert result.ok
    assert second.loading is False
    assert second.user["email"] == email
    assert second.user["name"] == "Dr Uwase"
    assert events == [INITIAL_SESSION]


async def test_load_session_without_tokens(async_client):
    session = SessionContext(async_client)
    result = await session.load_session()
    assert result.ok
    assert session.user is None
    assert session.loading is False


async def test_refresh_emits_token_refreshed(async_client):
    events = []
    session = SessionContext(async_client)
    session.on_auth_state_change(lambda event, user: events.append(event))
    await session.sign_up(unique_email("refresh"), PASSWORD)
    old_refresh = session.refresh_token

    result = await session.refresh()
    assert result.ok
    assert session.refresh_token != old_refresh
    assert events == [SIGNED_IN, TOKEN_REFRESHED]


async def test_failing_listener_does_not_break_others(async_client):
    seen = []

    def broken(event, user):
        raise RuntimeError("listener bug")

    session = SessionContext(async_client)
    session.on_auth_state_change(broken)
    session.on_auth_state_change(lambda event, user: seen.append(event))

    result = await session.sign_up(unique_email("listener"), PASSWORD)
    assert result.ok
    assert seen == [SIGNED_IN]
