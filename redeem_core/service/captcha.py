import logging
from typing import Optional

import gconf
import httpx

from redeem_core.util.misc import format_error

log = logging.getLogger(__name__)


class CaptchaVerifier:
    """Checks captcha tokens against a Turnstile compatible siteverify endpoint"""

    def __init__(
        self,
        secret_key: str = None,
        verify_url: str = None,
        transport: httpx.AsyncBaseTransport = None,
    ):
        self.secret_key = (
            secret_key if secret_key is not None else gconf.get("captcha.secret_key", default="")
        ).strip()
        self.verify_url = verify_url or gconf.get("captcha.verify_url")
        self.timeout = gconf.get("captcha.timeout_seconds", default=10)
        self._transport = transport
        if not self.secret_key:
            log.warning("no captcha secret configured, captcha verification is disabled")

    async def verify(self, token: str, remote_ip: Optional[str] = None) -> bool:
        if not self.secret_key:
            return True
        if not token:
            return False

        form = {"secret": self.secret_key, "response": token}
        if remote_ip:
            form["remoteip"] = remote_ip

        try:
            async with httpx.AsyncClient(transport=self._transport, timeout=self.timeout) as client:
                response = await client.post(self.verify_url, data=form)
            result = response.json()
        except (httpx.HTTPError, ValueError) as e:
            log.error(f"captcha verification failed: {format_error(e)}")
            return False

        if result.get("success") is not True:
            log.debug(f"captcha rejected: {result.get('error-codes')}")
            return False
        return True
