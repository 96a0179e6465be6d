import logging
from logging import LogRecord
from pathlib import Path
from typing import List

import gconf
import pytest
import pytest_asyncio
from asgi_lifespan import LifespanManager
from httpx import AsyncClient, ASGITransport

from redeem_core.app_factory import create_app
from redeem_core.data_model.admin import AdminUser
from redeem_core.service.admin_auth import AdminAuthService
from redeem_core.service.brute_force import BruteForceGuard
from redeem_core.service.captcha import CaptchaVerifier
from redeem_core.service.codes import CodeService
from redeem_core.service.container import Services
from redeem_core.service.email import EmailSender
from redeem_core.service.import_jobs import ImportService
from redeem_core.service.job_cache import TTLJobStatusCache
from redeem_core.service.redeem import RedeemService
from redeem_core.service.settings import CampaignSettingsService
from tests.fakes import (
	FakeAdminStore,
	FakeBruteForceStore,
	FakeClock,
	FakeCodeStore,
	FakeImportJobStore,
	FakeSettingsStore,
)

CONFIG_FILE = Path(__file__).parent.parent / 'config.yml'


@pytest.fixture(autouse=True, scope='session')
def load_config():
	gconf.load(str(CONFIG_FILE))


@pytest.fixture(autouse=True)
def config_override(request):
	test_override = {
		'imports': {'chunk_delay_seconds': 0},
		'admin': {'jwt_secret': 'test-secret'},
	}

	# Detects the variable named *config_override* of a test module
	module_override = getattr(request.module, 'config_override', {})

	# Detects the annotation named @pytest.mark.config_override of a test function
	function_override_mark = request.node.get_closest_marker('config_override')
	function_override = function_override_mark.args[0] if function_override_mark else {}

	with gconf.override_conf(test_override), gconf.override_conf(module_override), gconf.override_conf(
			function_override):
		yield


@pytest.fixture
def clock():
	return FakeClock()


@pytest.fixture
def settings_store():
	return FakeSettingsStore()


@pytest.fixture
def brute_force_store():
	return FakeBruteForceStore()


@pytest.fixture
def code_store():
	return FakeCodeStore({'PROMO1': 'https://x.com/1', 'PROMO2': 'https://x.com/2'})


@pytest.fixture
def import_job_store():
	return FakeImportJobStore()


@pytest.fixture
def admin_store():
	return FakeAdminStore()


@pytest.fixture
def settings_service(settings_store):
	return CampaignSettingsService(settings_store)


@pytest.fixture
def guard(brute_force_store, clock):
	return BruteForceGuard(brute_force_store, clock=clock)


@pytest.fixture
def redeem_service(settings_service, guard, code_store, clock):
	return RedeemService(settings_service, guard, code_store, clock=clock)


@pytest.fixture
def import_service(import_job_store, code_store):
	return ImportService(import_job_store, code_store, TTLJobStatusCache())


@pytest.fixture
def admin_auth(admin_store):
	return AdminAuthService(admin_store, EmailSender(api_key=''))


@pytest.fixture
def services(settings_service, guard, redeem_service, code_store, import_service, admin_auth) -> Services:
	return Services(
		settings=settings_service,
		guard=guard,
		redeem=redeem_service,
		codes=CodeService(code_store),
		imports=import_service,
		captcha=CaptchaVerifier(secret_key=''),
		admin_auth=admin_auth,
	)


@pytest_asyncio.fixture
async def api_client(mocker, services) -> AsyncClient:
	async def noop():
		pass

	mocker.patch('redeem_core.app_factory.migrate', lambda: None)
	mocker.patch('redeem_core.app_factory.make_and_open_connection_pool', noop)
	mocker.patch('redeem_core.app_factory.close_connection_pool', noop)

	app = create_app(services)
	# for the LifeSpanManager, see: https://github.com/encode/httpx/issues/1024
	async with LifespanManager(app), AsyncClient(transport=ASGITransport(app=app), base_url='http://test') as client:
		yield client


@pytest_asyncio.fixture
async def admin_headers(admin_store, admin_auth):
	await admin_store.insert_if_absent('Test Admin', 'admin@example.com')
	admin: AdminUser = await admin_store.get_by_email('admin@example.com')
	return {'Authorization': f'Bearer {admin_auth.create_token(admin)}'}


class MemoryLogHandler(logging.Handler):
	def __init__(self):
		super().__init__()
		self.records: List[LogRecord] = []

	def emit(self, record):
		self.records.append(record)


@pytest.fixture
def memory_logger():
	memory_handler = MemoryLogHandler()
	root_logger = logging.getLogger()
	root_logger.addHandler(memory_handler)
	yield memory_handler
	root_logger.removeHandler(memory_handler)
