import asyncio

import pytest

from redeem_core.util.async_util import PeriodicTask, CronTask


class Counter:
	def __init__(self):
		self.n = 0

	async def count(self):
		self.n += 1

	async def fail(self):
		self.n += 1
		raise ValueError('boom')


def test_fail_invalid_cron_expression():
	with pytest.raises(TypeError):
		CronTask(Counter().count, cron='foo')


async def test_delay():
	c = Counter()
	p = PeriodicTask(c.count, delay=0.1)
	p.start()
	await asyncio.sleep(0.25)
	p.stop()
	await p.wait()
	assert c.n == 3


async def test_errors_do_not_stop_the_task(memory_logger):
	c = Counter()
	p = PeriodicTask(c.fail, delay=0.05)
	p.start()
	await asyncio.sleep(0.12)
	p.stop()
	await p.wait()
	assert c.n >= 2
	assert any('ValueError: boom' in r.getMessage() for r in memory_logger.records)


async def test_start_is_idempotent():
	c = Counter()
	p = PeriodicTask(c.count, delay=10)
	p.start()
	p.start()
	await asyncio.sleep(0.05)
	p.stop()
	await p.wait()
	assert c.n == 1


async def test_wait_without_start():
	await PeriodicTask(Counter().count, delay=1).wait()


async def test_cron():
	c = Counter()
	p = CronTask(c.count, cron='* * * * * *')
	p.start()
	await asyncio.sleep(2.05)
	p.stop()
	await p.wait()
	assert 2 <= c.n <= 3
