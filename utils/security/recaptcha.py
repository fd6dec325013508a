"""
reCAPTCHA verification.

Posts the client token to Google's siteverify endpoint through a shared
``httpx.AsyncClient`` owned by the application lifespan.
"""

from typing import Optional

import httpx

from utils.errors import CaptchaVerificationError
from utils.monitoring import get_logger

logger = get_logger(__name__)

DEFAULT_VERIFY_URL = "https://www.google.com/recaptcha/api/siteverify"


class RecaptchaVerifier:
    """Checks reCAPTCHA tokens against the verification endpoint."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        secret: Optional[str],
        verify_url: str = DEFAULT_VERIFY_URL,
        timeout: float = 10.0,
    ):
        self.client = client
        self.secret = secret
        self.verify_url = verify_url
        self.timeout = timeout

    async def verify(self, token: str, remote_ip: Optional[str] = None) -> None:
        """
        Verify a captcha token.

        Raises:
            CaptchaVerificationError: Token rejected, endpoint unreachable or
                no secret configured
        """
        if not self.secret:
            logger.error("❌ RECAPTCHA_SECRET is not configured")
            raise CaptchaVerificationError()

        data = {"secret": self.secret, "response": token}
        if remote_ip:
            data["remoteip"] = remote_ip

        try:
            response = await self.client.post(self.verify_url, data=data, timeout=self.timeout)
            response.raise_for_status()
            result = response.json()
            if not isinstance(result, dict):
                raise ValueError("siteverify response is not a JSON object")
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("⚠️  reCAPTCHA verification request failed", error_type=type(e).__name__)
            raise CaptchaVerificationError() from e

        if not result.get("success"):
            logger.info("reCAPTCHA rejected token", error_codes=result.get("error-codes"))
            raise CaptchaVerificationError()
