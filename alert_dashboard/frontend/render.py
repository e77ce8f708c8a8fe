"""HTML fragments for the dashboard, projected from a DashboardSnapshot.

Every function here is pure: same snapshot in, same markup out. Alerts whose
coin is not part of the loaded universe are skipped.
"""
from datetime import datetime, timezone, tzinfo
from html import escape
from typing import List, Optional

from ..shared.schemas import (
    Alert,
    AlertCondition,
    Coin,
    DashboardSnapshot,
    Notice,
    NoticeLevel,
    TriggeredAlert,
)

NO_ACTIVE_ALERTS = "No active alerts."
NO_TRIGGERED_ALERTS = "No triggered alerts yet."

_NOTICE_CLASSES = {
    NoticeLevel.SUCCESS: "toast-success",
    NoticeLevel.INFO: "toast-info",
    NoticeLevel.WARNING: "toast-warning",
    NoticeLevel.ERROR: "toast-error",
}


def format_usd(value: float) -> str:
    """`$` plus thousands separators and at most three fraction digits."""
    text = f"{value:,.3f}".rstrip("0").rstrip(".")
    return f"${text}"


def format_time(moment: datetime, tz: Optional[tzinfo] = None) -> str:
    """Clock time in tz (server local time by default). Naive values are UTC."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(tz).strftime("%I:%M:%S %p").lstrip("0")


def filter_coins(coins: List[Coin], search: str) -> List[Coin]:
    """Case-insensitive substring match on name or symbol."""
    term = (search or "").strip().lower()
    if not term:
        return list(coins)
    return [
        coin for coin in coins
        if term in coin.name.lower() or term in coin.symbol.lower()
    ]


def selected_coin(snapshot: DashboardSnapshot) -> Optional[Coin]:
    """The selected coin if it survives the search filter, else the first match."""
    candidates = filter_coins(snapshot.coins, snapshot.search)
    for coin in candidates:
        if coin.id == snapshot.selected_coin_id:
            return coin
    return candidates[0] if candidates else None


def _icon(coin: Coin, size: str = "icon") -> str:
    if not coin.image:
        return ""
    return f'<img src="{escape(coin.image)}" alt="{escape(coin.name)}" class="{size}">'


def _arrow(condition: AlertCondition) -> str:
    if condition == AlertCondition.ABOVE:
        return '<span class="up">&#9650;</span>'
    return '<span class="down">&#9660;</span>'


def render_coin_options(snapshot: DashboardSnapshot) -> str:
    current = selected_coin(snapshot)
    options = []
    for coin in filter_coins(snapshot.coins, snapshot.search):
        selected = " selected" if current is not None and coin.id == current.id else ""
        options.append(
            f'<option value="{escape(coin.id)}"{selected}>'
            f'{escape(coin.name)} ({escape(coin.symbol.upper())})</option>'
        )
    return "".join(options)


def render_coin_summary(snapshot: DashboardSnapshot) -> str:
    coin = selected_coin(snapshot)
    if coin is None:
        return ""
    price = snapshot.prices.get(coin.id)
    price_text = format_usd(price) if price is not None else "Loading..."
    return (
        f'<div class="coin-summary">{_icon(coin, "icon-lg")}'
        f'<div><p class="coin-name">{escape(coin.name)}</p>'
        f'<p id="current-price-{escape(coin.id)}" class="muted">{price_text}</p></div></div>'
    )


def render_active_alert(alert: Alert, coin: Coin) -> str:
    return f"""
<div class="alert-row">
    <div class="alert-info">
        {_icon(coin)}
        <div>
            <p class="coin-symbol">{escape(coin.symbol.upper())}</p>
            <p class="muted">{_arrow(alert.condition)} {alert.condition.value} {format_usd(alert.threshold)}</p>
        </div>
    </div>
    <form method="post" action="/ui/alerts/remove">
        <input type="hidden" name="coin_id" value="{escape(alert.coin_id)}">
        <input type="hidden" name="condition" value="{alert.condition.value}">
        <input type="hidden" name="threshold" value="{alert.threshold!r}">
        <button type="submit" class="remove-alert-btn" title="Remove alert">&times;</button>
    </form>
</div>"""


def render_active_alerts(snapshot: DashboardSnapshot) -> str:
    if not snapshot.active:
        return f'<p class="empty">{NO_ACTIVE_ALERTS}</p>'
    rows = []
    for alert in snapshot.active:
        coin = snapshot.coin(alert.coin_id)
        if coin is None:
            continue
        rows.append(render_active_alert(alert, coin))
    return "".join(rows)


def render_notification(alert: TriggeredAlert, coin: Coin) -> str:
    return f"""
<div class="notification {alert.condition.value}">
    <span class="check">&#10003;</span>
    <div>
        <strong>{escape(coin.symbol.upper())}</strong> went {alert.condition.value} {format_usd(alert.threshold)}
        <span class="muted">(@ {format_usd(alert.triggered_price)} at {format_time(alert.triggered_at)})</span>
    </div>
</div>"""


def render_notifications(snapshot: DashboardSnapshot) -> str:
    if not snapshot.triggered:
        return f'<p class="empty">{NO_TRIGGERED_ALERTS}</p>'
    rows = []
    for alert in snapshot.triggered:
        coin = snapshot.coin(alert.coin_id)
        if coin is None:
            continue
        rows.append(render_notification(alert, coin))
    return "".join(rows)


def render_notices(notices: List[Notice]) -> str:
    return "".join(
        f'<div class="toast {_NOTICE_CLASSES[notice.level]}">{escape(notice.message)}</div>'
        for notice in notices
    )


def render_auth(snapshot: DashboardSnapshot) -> str:
    if snapshot.is_login_view:
        title, subtitle, button = "Welcome Back!", "Login to access your dashboard.", "Login"
        toggle_text, toggle_button = "Don't have an account?", "Sign Up"
        confirm = ""
    else:
        title, subtitle, button = "Create an Account", "Get started in seconds.", "Create Account"
        toggle_text, toggle_button = "Already have an account?", "Login"
        confirm = (
            '<label>Confirm Password'
            '<input type="password" name="confirm_password" id="confirm-password"></label>'
        )
    message_class = "ok" if snapshot.auth_message_ok else "error"
    mode = "login" if snapshot.is_login_view else "signup"

    return f"""
<section id="auth-container" class="card">
    <h1 id="auth-title">{title}</h1>
    <p id="auth-subtitle" class="muted">{subtitle}</p>
    <form method="post" action="/ui/auth">
        <input type="hidden" name="mode" value="{mode}">
        <label>Email<input type="email" name="email" id="email"></label>
        <label>Password<input type="password" name="password" id="password"></label>
        {confirm}
        <p id="auth-error" class="{message_class}">{escape(snapshot.auth_message)}</p>
        <button type="submit" id="primary-auth-btn">{button}</button>
    </form>
    <form method="post" action="/ui/guest"><button type="submit" id="guest-btn">Continue as Guest</button></form>
    <form method="post" action="/ui/auth/toggle">
        <span id="auth-toggle-text">{toggle_text}</span>
        <button type="submit" id="auth-toggle-btn" class="link">{toggle_button}</button>
    </form>
</section>"""


def render_app(snapshot: DashboardSnapshot) -> str:
    coin = selected_coin(snapshot)
    coin_id = escape(coin.id) if coin is not None else ""
    return f"""
<section id="app-container">
    <header>
        <span id="user-email">{escape(snapshot.user or "")}</span>
        <form method="post" action="/ui/logout"><button type="submit" id="logout-btn">Logout</button></form>
    </header>
    <div class="card">
        <h2>Create Alert</h2>
        <form method="post" action="/ui/select">
            <input type="text" name="search" id="crypto-search" placeholder="Search coins" value="{escape(snapshot.search)}">
            <select name="coin_id" id="crypto-select">{render_coin_options(snapshot)}</select>
            <button type="submit">Select</button>
        </form>
        <div id="crypto-icon-price">{render_coin_summary(snapshot)}</div>
        <form method="post" action="/ui/alerts">
            <input type="hidden" name="coin_id" value="{coin_id}">
            <select name="condition" id="alert-condition">
                <option value="above">Price goes above</option>
                <option value="below">Price goes below</option>
            </select>
            <input type="number" step="any" name="threshold" id="price-threshold" placeholder="Price in USD">
            <button type="submit" id="add-alert-btn">Set Alert</button>
        </form>
    </div>
    <div class="card">
        <h2>Active Alerts</h2>
        <div id="active-alerts-list">{render_active_alerts(snapshot)}</div>
    </div>
    <div class="card">
        <h2>Notifications</h2>
        <div id="notifications-list">{render_notifications(snapshot)}</div>
    </div>
</section>"""


PAGE_STYLE = """
body { font-family: 'Segoe UI', Arial, sans-serif; background: #111827; color: #f9fafb; margin: 0; padding: 20px; }
.card { background: #1f2937; border-radius: 12px; padding: 20px; margin: 16px auto; max-width: 560px; }
.muted { color: #9ca3af; font-size: 14px; }
.empty { color: #9ca3af; text-align: center; }
.error { color: #ef4444; } .ok { color: #22c55e; }
.up { color: #4ade80; } .down { color: #f87171; }
.icon { width: 32px; height: 32px; margin-right: 12px; border-radius: 50%; }
.icon-lg { width: 40px; height: 40px; margin-right: 12px; border-radius: 50%; }
.alert-row, .notification, .coin-summary, .alert-info { display: flex; align-items: center; }
.alert-row { justify-content: space-between; background: #374151; padding: 12px; border-radius: 8px; margin: 6px 0; }
.notification { background: #374151; padding: 8px; border-radius: 6px; margin: 6px 0; font-size: 14px; }
.notification.above .check { color: #4ade80; } .notification.below .check { color: #f87171; }
.check { margin-right: 12px; }
#toasts { position: fixed; top: 20px; right: 20px; }
.toast { color: white; padding: 8px 16px; border-radius: 8px; margin-bottom: 8px; animation: fade 3s forwards; }
.toast-success { background: #22c55e; } .toast-info { background: #3b82f6; }
.toast-warning { background: #eab308; } .toast-error { background: #ef4444; }
@keyframes fade { 0%, 85% { opacity: 1; } 100% { opacity: 0; visibility: hidden; } }
"""


def render_page(snapshot: DashboardSnapshot) -> str:
    """Full HTML document: the app when logged in, the auth form otherwise."""
    if snapshot.logged_in:
        body = render_app(snapshot)
        refresh = f'<meta http-equiv="refresh" content="{snapshot.poll_interval_seconds}">'
    else:
        body = render_auth(snapshot)
        refresh = ""
    return f"""<!DOCTYPE html>
<html>
<head>
    <meta charset="utf-8">
    {refresh}
    <title>Crypto Price Alerts</title>
    <style>{PAGE_STYLE}</style>
</head>
<body>
    <div id="toasts">{render_notices(snapshot.notices)}</div>
    {body}
</body>
</html>"""
