# tests/test_dashboard.py
import pytest

from alert_dashboard.shared.exceptions import AlreadyLoggedIn, AuthError, DuplicateAlert, ValidationError
from alert_dashboard.shared.schemas import GUEST_IDENTITY, AlertCondition

from .conftest import TEST_EMAIL, TEST_PASSWORD


@pytest.mark.asyncio
async def test_register_switches_to_login_view_with_success_message(dashboard):
    dashboard.toggle_auth_view()
    assert dashboard.is_login_view is False

    dashboard.register(TEST_EMAIL, TEST_PASSWORD, TEST_PASSWORD)

    assert dashboard.is_login_view is True
    assert dashboard.auth_message == "Account created successfully! Please log in."
    assert dashboard.auth_message_ok is True
    assert dashboard.current_user() is None


@pytest.mark.asyncio
async def test_login_loads_universe_and_prices(dashboard, registered, market):
    await dashboard.login(TEST_EMAIL.upper(), TEST_PASSWORD)

    assert dashboard.current_user() == TEST_EMAIL
    assert [c.id for c in dashboard.poller.coins] == ["bitcoin", "ethereum", "dogecoin"]
    assert dashboard.poller.prices["bitcoin"] == 64000.5
    assert dashboard.poller.running is True
    assert market.paths()[0].endswith("/coins/markets")
    assert market.paths()[1].endswith("/simple/price")


@pytest.mark.asyncio
async def test_login_wrong_password(dashboard, registered):
    with pytest.raises(AuthError, match="Invalid email or password."):
        await dashboard.login(TEST_EMAIL, "wrong-password")
    assert dashboard.current_user() is None
    assert dashboard.poller.running is False


@pytest.mark.asyncio
async def test_login_validates_input_first(dashboard):
    with pytest.raises(ValidationError, match="cannot be empty"):
        await dashboard.login("", "")
    with pytest.raises(ValidationError, match="at least 6"):
        await dashboard.login(TEST_EMAIL, "123")


@pytest.mark.asyncio
async def test_guest_login(dashboard):
    assert await dashboard.login_guest() == GUEST_IDENTITY
    assert dashboard.snapshot().is_guest is True


@pytest.mark.asyncio
async def test_add_and_remove_alert(dashboard):
    await dashboard.login_guest()

    alert = dashboard.add_alert("bitcoin", "above", "70000")
    assert alert.threshold == 70000.0
    assert dashboard.notices.pop_all()[-1].message == "Alert set for Bitcoin!"

    with pytest.raises(DuplicateAlert):
        dashboard.add_alert("bitcoin", AlertCondition.ABOVE, 70000)

    assert dashboard.remove_alert("bitcoin", "above", "70000") is True
    assert dashboard.alerts.active == []
    assert dashboard.notices.pop_all()[-1].message == "Alert removed."


@pytest.mark.asyncio
async def test_remove_unknown_alert_is_noop(dashboard):
    await dashboard.login_guest()
    dashboard.add_alert("bitcoin", "above", 70000)

    assert dashboard.remove_alert("ethereum", "below", 1) is False
    assert dashboard.remove_alert("ethereum", "below", "not-a-number") is False
    assert len(dashboard.alerts.active) == 1


@pytest.mark.asyncio
@pytest.mark.parametrize("threshold", ["", "0", "-5", "abc", "nan", "inf", None])
async def test_invalid_threshold_rejected(dashboard, threshold):
    await dashboard.login_guest()
    with pytest.raises(ValidationError, match="valid price threshold"):
        dashboard.add_alert("bitcoin", "above", threshold)
    assert dashboard.alerts.active == []


@pytest.mark.asyncio
async def test_invalid_condition_rejected(dashboard):
    await dashboard.login_guest()
    with pytest.raises(ValidationError):
        dashboard.add_alert("bitcoin", "sideways", 10)


@pytest.mark.asyncio
async def test_alert_actions_need_a_session(dashboard):
    with pytest.raises(AuthError):
        dashboard.add_alert("bitcoin", "above", 10)


@pytest.mark.asyncio
async def test_logout_clears_state_and_relogin_restores_it(dashboard, registered, market):
    await dashboard.login(TEST_EMAIL, TEST_PASSWORD)
    dashboard.add_alert("bitcoin", "above", 60000)
    dashboard.add_alert("ethereum", "above", 5000)
    await dashboard.refresh_prices()
    active_before = list(dashboard.alerts.active)
    triggered_before = list(dashboard.alerts.triggered)
    assert [a.coin_id for a in triggered_before] == ["bitcoin"]

    dashboard.logout()
    assert dashboard.current_user() is None
    assert dashboard.alerts.active == []
    assert dashboard.alerts.triggered == []
    assert dashboard.poller.running is False

    await dashboard.login(TEST_EMAIL, TEST_PASSWORD)
    assert dashboard.alerts.active == active_before
    assert dashboard.alerts.triggered == triggered_before


@pytest.mark.asyncio
async def test_failed_price_fetch_leaves_state_unchanged(dashboard, market):
    await dashboard.login_guest()
    dashboard.add_alert("bitcoin", "below", 1000)
    prices_before = dict(dashboard.poller.prices)

    market.prices["bitcoin"] = 10.0
    market.prices_status = 503
    await dashboard.refresh_prices()

    assert dashboard.poller.prices == prices_before
    assert len(dashboard.alerts.active) == 1
    assert dashboard.alerts.triggered == []


@pytest.mark.asyncio
async def test_poll_triggers_alert_and_notifies(dashboard, market):
    await dashboard.login_guest()
    dashboard.add_alert("ethereum", "below", 3000)
    dashboard.notices.clear()

    market.prices["ethereum"] = 2999.5
    await dashboard.refresh_prices()

    assert dashboard.alerts.active == []
    assert dashboard.alerts.triggered[0].triggered_price == 2999.5
    assert dashboard.notices.pop_all()[0].message == "You have 1 new triggered alert(s)!"


@pytest.mark.asyncio
async def test_restore_reenters_app_for_existing_session(dashboard, registered):
    dashboard.sessions.login(TEST_EMAIL)
    await dashboard.restore()
    assert dashboard.poller.running is True
    assert dashboard.alerts.user_key == TEST_EMAIL


@pytest.mark.asyncio
async def test_snapshot_reflects_selection(dashboard):
    await dashboard.login_guest()
    dashboard.select_coin("ethereum", "  eth ")

    snapshot = dashboard.snapshot()
    assert snapshot.selected_coin_id == "ethereum"
    assert snapshot.search == "eth"
    assert snapshot.prices["ethereum"] == 3100.25


@pytest.mark.asyncio
async def test_login_with_corrupt_stored_alerts_starts_empty(dashboard, registered, durable_store):
    durable_store.set(f"alerts_{TEST_EMAIL}", {"active": [{"coinId": None}], "triggered": 7})

    await dashboard.login(TEST_EMAIL, TEST_PASSWORD)

    assert dashboard.current_user() == TEST_EMAIL
    assert dashboard.alerts.active == []
    assert dashboard.poller.running is True


@pytest.mark.asyncio
async def test_failed_app_entry_ends_the_session(dashboard, registered, monkeypatch):
    def broken_load(user_key):
        raise RuntimeError("storage offline")

    monkeypatch.setattr(dashboard.alerts, "load", broken_load)

    with pytest.raises(RuntimeError):
        await dashboard.login(TEST_EMAIL, TEST_PASSWORD)

    assert dashboard.current_user() is None
    assert dashboard.poller.running is False
    monkeypatch.undo()
    assert await dashboard.login(TEST_EMAIL, TEST_PASSWORD) == TEST_EMAIL


@pytest.mark.asyncio
async def test_second_login_is_rejected_as_already_logged_in(dashboard, registered):
    await dashboard.login_guest()
    with pytest.raises(AlreadyLoggedIn):
        await dashboard.login(TEST_EMAIL, TEST_PASSWORD)
    assert dashboard.current_user() == GUEST_IDENTITY
