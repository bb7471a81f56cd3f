"""
Slack Web API transport.
Outbound calls go through httpx; inbound messages arrive on the Events API
webhook (see flagbot.api.slack).
"""

import hashlib
import hmac
import time
from typing import Any, Dict, Optional

import httpx
from flask import current_app

from flagbot.errors import IdentityLookupError, TransportError
from flagbot.transport import Transport, UserInfo

API_BASE = "https://slack.com/api"

# Requests older than this are rejected as replays
SIGNATURE_MAX_AGE_SEC = 60 * 5


class SlackTransport(Transport):
    def __init__(self, token: str, client: Optional[httpx.Client] = None):
        self.token = token
        self.bot_id = ''
        self._client = client or httpx.Client(base_url=API_BASE, timeout=20)

    def _call(self, method: str, **params: Any) -> Dict[str, Any]:
        """Call a Web API method and return the decoded body."""
        r = self._client.post(
            f"/{method}",
            headers={"Authorization": f"Bearer {self.token}"},
            data=params,
        )
        r.raise_for_status()
        body = r.json()
        if not body.get("ok"):
            raise TransportError(f"{method}: {body.get('error', 'unknown_error')}")
        return body

    def connect(self) -> str:
        try:
            body = self._call("auth.test")
        except httpx.HTTPError as exc:
            raise TransportError(f"auth.test: {exc}") from exc
        self.bot_id = body["user_id"]
        current_app.logger.info(f"[slack] authenticated as {self.bot_id}")
        return self.bot_id

    def user_info(self, user_id: str) -> UserInfo:
        try:
            body = self._call("users.info", user=user_id)
        except (httpx.HTTPError, TransportError) as exc:
            current_app.logger.warning(f"[slack] users.info failed for {user_id}: {exc}")
            raise IdentityLookupError() from exc
        return UserInfo(user_id=user_id, name=body["user"]["name"])

    def open_private_channel(self, user_id: str) -> str:
        try:
            body = self._call("conversations.open", users=user_id)
        except (httpx.HTTPError, TransportError) as exc:
            current_app.logger.warning(f"[slack] conversations.open failed for {user_id}: {exc}")
            raise IdentityLookupError() from exc
        return body["channel"]["id"]

    def resolve_channel_by_name(self, name: str) -> Optional[str]:
        """Find a channel id by name, private groups first, then public channels."""
        for types in ("private_channel", "public_channel"):
            cursor = ""
            while True:
                body = self._call(
                    "conversations.list",
                    types=types,
                    exclude_archived="true",
                    limit=200,
                    cursor=cursor,
                )
                for channel in body.get("channels", []):
                    if channel.get("name") == name:
                        return channel["id"]
                cursor = (body.get("response_metadata") or {}).get("next_cursor") or ""
                if not cursor:
                    break
        return None

    def send(self, channel: str, text: str) -> None:
        try:
            self._call("chat.postMessage", channel=channel, text=text)
        except httpx.HTTPError as exc:
            raise TransportError(f"chat.postMessage: {exc}") from exc

    def is_private(self, channel: str) -> bool:
        # Direct message channel ids start with D
        return channel.startswith("D")


def verify_signature(signing_secret: str, timestamp: str, body: bytes, signature: str,
                     now: Optional[float] = None) -> bool:
    """Check a Slack request signature (v0 scheme)."""
    try:
        ts = int(timestamp)
    except (TypeError, ValueError):
        return False
    if abs((now or time.time()) - ts) > SIGNATURE_MAX_AGE_SEC:
        return False
    base = b"v0:" + str(ts).encode() + b":" + body
    expected = "v0=" + hmac.new(signing_secret.encode(), base, hashlib.sha256).hexdigest()
    return hmac.compare_digest(expected, signature or "")
