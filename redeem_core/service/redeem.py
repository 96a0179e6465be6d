import logging
from datetime import datetime
from typing import Callable

from redeem_core.data_model.redeem import RedeemResult
from redeem_core.service.brute_force import BruteForceGuard
from redeem_core.service.codes import CodeStore
from redeem_core.service.exceptions import (
    CodeUsed,
    InvalidCode,
    IpBlocked,
    PromoEnded,
    PromoNotStarted,
)
from redeem_core.service.settings import CampaignSettingsService
from redeem_core.util.misc import utc_now

log = logging.getLogger(__name__)


class RedeemService:
    def __init__(
        self,
        settings: CampaignSettingsService,
        guard: BruteForceGuard,
        codes: CodeStore,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.settings = settings
        self.guard = guard
        self.codes = codes
        self.clock = clock

    async def redeem(self, code: str, ip: str) -> RedeemResult:
        """
        Exchange a code for its reward link.
        The campaign window is checked first, then the ip lockout and only
        then the code itself. Only unknown codes count as failed attempts.
        """
        window = await self.settings.get_window()
        now = self.clock()
        if not window.has_started(now):
            raise PromoNotStarted
        if window.has_ended(now):
            raise PromoEnded

        block = await self.guard.is_blocked(ip)
        if block.blocked:
            log.info(f"rejected redemption from blocked ip {ip}")
            raise IpBlocked(block.minutes_remaining)

        normalized = normalize_code(code)
        found = await self.codes.get_by_code(normalized)
        if not found:
            attempt = await self.guard.record_failed_attempt(ip)
            if attempt.blocked:
                raise IpBlocked
            log.info(f"unknown code {normalized} from {ip}")
            raise InvalidCode

        if found.is_used:
            log.info(f"{found} was already used")
            raise CodeUsed

        if not await self.codes.mark_used(found.id, ip, now):
            log.info(f"{found} was redeemed concurrently")
            raise CodeUsed

        await self.guard.clear_attempts(ip)
        log.info(f"{found} redeemed by {ip}")
        return RedeemResult(link=found.link)


def normalize_code(code: str) -> str:
    return code.strip().upper()
