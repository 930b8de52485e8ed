"""Cloudflare Turnstile verification for public submissions."""

from __future__ import annotations

import logging

import httpx

logger = logging.getLogger(__name__)


class TurnstileVerifier:
    def __init__(self, client: httpx.AsyncClient, secret: str, verify_url: str) -> None:
        self._client = client
        self._secret = secret.strip()
        self._verify_url = verify_url

    @property
    def enabled(self) -> bool:
        return bool(self._secret)

    async def verify(self, token: str | None, remote_ip: str | None = None) -> bool:
        """Return True only when Turnstile confirms the token.

        Without a configured secret every token passes (local development).
        """
        if not self.enabled:
            return True

        token = (token or "").strip()
        if not token:
            return False

        form = {"secret": self._secret, "response": token}
        if remote_ip:
            form["remoteip"] = remote_ip

        try:
            resp = await self._client.post(self._verify_url, data=form)
            payload = resp.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning("Turnstile verification unavailable: %s", exc)
            return False

        success = isinstance(payload, dict) and payload.get("success") is True
        if not success:
            error_codes = payload.get("error-codes") if isinstance(payload, dict) else None
            logger.info("Turnstile rejected token: %s", error_codes)
        return success
