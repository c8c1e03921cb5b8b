"""reCAPTCHA integration for verifying public form submissions."""

import logging
from typing import Optional

import httpx

from core.config import settings

logger = logging.getLogger(__name__)


class RecaptchaVerifier:
    """Verifies reCAPTCHA response tokens against the siteverify endpoint."""

    def __init__(
        self,
        secret_key: Optional[str] = None,
        verify_url: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        """
        Initialize the verifier.

        Args:
            secret_key: Server-side reCAPTCHA secret; verification is
                skipped when it is empty
            verify_url: Verification endpoint
            timeout: HTTP timeout in seconds
        """
        self.secret_key = secret_key if secret_key is not None else settings.recaptcha_secret_key
        self.verify_url = verify_url or settings.recaptcha_verify_url
        self.timeout = timeout or settings.recaptcha_timeout

    @property
    def enabled(self) -> bool:
        return bool(self.secret_key)

    async def verify(self, token: str, remote_ip: Optional[str] = None) -> bool:
        """
        Verify a client token.

        Args:
            token: Token produced by the reCAPTCHA widget
            remote_ip: Client IP forwarded to the verification service

        Returns:
            True if the token is valid (or verification is disabled)
        """
        if not self.enabled:
            logger.debug("reCAPTCHA secret not configured, skipping verification")
            return True

        data = {"secret": self.secret_key, "response": token}
        if remote_ip:
            data["remoteip"] = remote_ip

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(self.verify_url, data=data)
        except httpx.HTTPError as e:
            logger.error(f"reCAPTCHA verification request failed: {e}")
            return False

        if response.status_code != 200:
            logger.error(f"reCAPTCHA verification returned HTTP {response.status_code}")
            return False

        try:
            payload = response.json()
        except ValueError:
            logger.error("reCAPTCHA verification returned a non-JSON body")
            return False

        if not isinstance(payload, dict):
            logger.error("reCAPTCHA verification returned an unexpected payload")
            return False

        if payload.get("success") is not True:
            logger.info(f"reCAPTCHA rejected token: {payload.get('error-codes', [])}")
            return False

        return True
