import logging
from pathlib import Path

import gconf
import httpx
import jinja2

from redeem_core.util.misc import format_error

log = logging.getLogger(__name__)

TEMPLATE_DIR = Path(__file__).parent.parent / "templates"


class EmailSender:
    def __init__(self, api_key: str = None, transport: httpx.AsyncBaseTransport = None):
        self.api_key = api_key if api_key is not None else gconf.get("email.api_key", default="")
        self._transport = transport
        env = jinja2.Environment(loader=jinja2.FileSystemLoader(TEMPLATE_DIR), autoescape=True)
        self._login_code_template = env.get_template("login_code.html")

    def render_login_code(self, email: str, code: str, name: str = None) -> str:
        return self._login_code_template.render(
            {
                "code": code,
                "email": email,
                "name": name,
                "ttl_minutes": gconf.get("admin.login_code.ttl_minutes", default=15),
            }
        )

    async def send_login_code(self, email: str, code: str, name: str = None) -> bool:
        if not self.api_key:
            log.warning(f"no email api key configured, login code for {email}: {code}")
            return True

        payload = {
            "from": gconf.get("email.sender"),
            "to": [email],
            "subject": gconf.get("email.subject"),
            "html": self.render_login_code(email, code, name),
        }
        try:
            async with httpx.AsyncClient(
                transport=self._transport, timeout=gconf.get("email.timeout_seconds", default=10)
            ) as client:
                response = await client.post(
                    gconf.get("email.api_url"),
                    json=payload,
                    headers={"Authorization": f"Bearer {self.api_key}"},
                )
                response.raise_for_status()
        except httpx.HTTPError as e:
            log.error(f"could not send login code to {email}: {format_error(e)}")
            return False

        log.debug(f"sent login code to {email}")
        return True
