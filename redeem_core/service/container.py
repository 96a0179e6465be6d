from dataclasses import dataclass

from redeem_core.service.admin_auth import AdminAuthService, DbAdminStore
from redeem_core.service.brute_force import BruteForceGuard, DbBruteForceStore
from redeem_core.service.captcha import CaptchaVerifier
from redeem_core.service.codes import CodeService, DbCodeStore
from redeem_core.service.email import EmailSender
from redeem_core.service.import_jobs import DbImportJobStore, ImportService
from redeem_core.service.job_cache import TTLJobStatusCache
from redeem_core.service.redeem import RedeemService
from redeem_core.service.settings import CampaignSettingsService, DbSettingsStore


@dataclass
class Services:
    settings: CampaignSettingsService
    guard: BruteForceGuard
    redeem: RedeemService
    codes: CodeService
    imports: ImportService
    captcha: CaptchaVerifier
    admin_auth: AdminAuthService


def build_services() -> Services:
    """Wire the services to their database backed stores"""
    settings = CampaignSettingsService(DbSettingsStore())
    guard = BruteForceGuard(DbBruteForceStore())
    code_store = DbCodeStore()
    return Services(
        settings=settings,
        guard=guard,
        redeem=RedeemService(settings, guard, code_store),
        codes=CodeService(code_store),
        imports=ImportService(DbImportJobStore(), code_store, TTLJobStatusCache()),
        captcha=CaptchaVerifier(),
        admin_auth=AdminAuthService(DbAdminStore(), EmailSender()),
    )
