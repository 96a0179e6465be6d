import asyncio
import os
import time

import pytest
from httpx import AsyncClient


def requires_test_env(*envs: str):
	"""Skip unless REDEEM_TEST_ENV names one of the given environments"""
	configured = os.environ.get('REDEEM_TEST_ENV', '').split(',')
	return pytest.mark.skipif(
		not any(e in configured for e in envs),
		reason=f'requires REDEEM_TEST_ENV to contain one of {envs}')


async def wait_until_import_finished(api_client: AsyncClient, job_id: str, headers: dict, timeout=5) -> dict:
	start = time.monotonic()
	while True:
		response = await api_client.get(f'/api/admin/import-status/{job_id}', headers=headers)
		response.raise_for_status()
		status = response.json()
		if status['status'] in ('completed', 'failed'):
			return status
		if time.monotonic() - start > timeout:
			raise TimeoutError(f'import {job_id} still {status["status"]} after {timeout} seconds')
		await asyncio.sleep(0.05)
