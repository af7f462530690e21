"""Slack incoming-webhook delivery."""

import httpx

from clubfeed.core.errors import NotificationPostError


def get_webhook_client() -> httpx.AsyncClient:
    """Create an httpx client for webhook posts (transport default timeouts)."""
    return httpx.AsyncClient()


async def post_message(webhook: str, payload: dict) -> None:
    """POST a JSON payload to a Slack webhook; raise NotificationPostError on failure."""
    try:
        async with get_webhook_client() as client:
            resp = await client.post(webhook, json=payload)
    except httpx.HTTPError as e:
        raise NotificationPostError(f"POST to webhook failed: {e}") from e

    if not resp.is_success:
        raise NotificationPostError(
            f"Webhook returned HTTP {resp.status_code}: {resp.text[:300]}",
            status_code=resp.status_code,
        )
