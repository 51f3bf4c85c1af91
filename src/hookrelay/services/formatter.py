"""Human-readable message formatting for relayed webhooks.

Every function here is pure and total: missing or oddly typed payload fields
fall back to placeholders instead of raising.
"""

from collections.abc import Callable
from decimal import Decimal
from typing import Any

from hookrelay.models.envelope import Provider, WebhookEnvelope

_BELL = "\U0001f514"  # 🔔
_UNKNOWN = "unknown"


def _get(data: Any, *path: str | int) -> Any:
    """Walk nested dicts/lists, returning None at the first missing step."""
    current = data
    for step in path:
        if isinstance(step, int):
            if not isinstance(current, list) or not -len(current) <= step < len(current):
                return None
            current = current[step]
        else:
            if not isinstance(current, dict):
                return None
            current = current.get(step)
    return current


def _text(value: Any, fallback: str = _UNKNOWN) -> str:
    if value is None or value == "" or isinstance(value, (dict, list)):
        return fallback
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _format_amount(amount: Any, currency: Any) -> str:
    """Minor units to a compact major-unit string, e.g. ``500, "usd"`` -> ``5USD``."""
    if isinstance(amount, bool) or not isinstance(amount, (int, float)) or not amount:
        return "N/A"
    major = Decimal(str(amount)) / 100
    suffix = currency.upper() if isinstance(currency, str) else ""
    return f"{major.normalize():f}{suffix}"


def _format_stripe(event: str, data: Any) -> str:
    lines = [f"{_BELL} Stripe: {event}"]

    if event == "checkout.session.completed":
        email = _get(data, "customer_details", "email") or _get(data, "customer_email")
        lines.append(f"Customer: {_text(email)}")
        lines.append(f"Amount: {_format_amount(_get(data, 'amount_total'), _get(data, 'currency'))}")
        lines.append(f"Status: {_text(_get(data, 'payment_status'))}")
    elif event == "payment_intent.succeeded":
        lines.append(f"Amount: {_format_amount(_get(data, 'amount'), _get(data, 'currency'))}")
        lines.append("Status: succeeded")
    elif event == "customer.subscription.created":
        lines.append(f"Customer: {_text(_get(data, 'customer'))}")
        lines.append(f"Plan: {_text(_get(data, 'items', 'data', 0, 'price', 'id'))}")
    else:
        lines.append(f"ID: {_text(_get(data, 'id'))}")

    return "\n".join(lines)


def _format_github(event: str, data: Any) -> str:
    lines = [f"{_BELL} GitHub: {event}"]
    repo = _text(_get(data, "repository", "full_name"))

    if event == "push":
        ref = _get(data, "ref")
        branch = ref.removeprefix("refs/heads/") if isinstance(ref, str) and ref else None
        commits = _get(data, "commits")
        lines.append(f"Repo: {repo}")
        lines.append(f"Branch: {_text(branch)}")
        lines.append(f"Commits: {len(commits) if isinstance(commits, list) else 0}")
    elif event == "pull_request":
        lines.append(f"Repo: {repo}")
        lines.append(f"Action: {_text(_get(data, 'action'))}")
        number = _text(_get(data, "number") or None, "?")
        lines.append(f"PR: #{number} - {_text(_get(data, 'pull_request', 'title'))}")
    elif event == "issues":
        lines.append(f"Repo: {repo}")
        lines.append(f"Action: {_text(_get(data, 'action'))}")
        number = _text(_get(data, "issue", "number") or None, "?")
        lines.append(f"Issue: #{number} - {_text(_get(data, 'issue', 'title'))}")
    else:
        lines.append(f"Repo: {repo}")

    return "\n".join(lines)


_FORMATTERS: dict[Provider, Callable[[str, Any], str]] = {
    Provider.STRIPE: _format_stripe,
    Provider.GITHUB: _format_github,
}


def format_webhook_message(envelope: WebhookEnvelope) -> str:
    """Render ``envelope`` as the multi-line message handed to the relay command."""
    formatter = _FORMATTERS.get(envelope.provider)
    if formatter is None:
        return f"{_BELL} Webhook: {envelope.provider.value}\nEvent: {envelope.event}"
    return formatter(envelope.event, envelope.data)
