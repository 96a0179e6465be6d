from datetime import timedelta

import pytest

from redeem_core.data_model.brute_force import BruteForceRecord
from redeem_core.service.brute_force import BruteForceGuard


async def test_not_blocked_without_record(guard):
	status = await guard.is_blocked('1.2.3.4')
	assert not status.blocked
	assert status.minutes_remaining is None
	assert await guard.get_attempts('1.2.3.4') is None


async def test_blocked_on_fifth_failure(guard):
	for _ in range(4):
		status = await guard.record_failed_attempt('1.2.3.4')
		assert not status.blocked

	status = await guard.record_failed_attempt('1.2.3.4')
	assert status.blocked
	assert status.minutes_remaining == 15

	status = await guard.record_failed_attempt('1.2.3.4')
	assert status.blocked
	assert (await guard.get_attempts('1.2.3.4')).attempts == 6


async def test_minutes_remaining_after_block(guard, clock):
	for _ in range(5):
		await guard.record_failed_attempt('1.2.3.4')

	clock.advance(minutes=3, seconds=10)
	status = await guard.is_blocked('1.2.3.4')
	assert status.blocked
	assert 0 < status.minutes_remaining <= 15
	assert status.minutes_remaining == 12


async def test_block_expires(guard, clock):
	for _ in range(5):
		await guard.record_failed_attempt('1.2.3.4')

	clock.advance(minutes=15)
	assert not (await guard.is_blocked('1.2.3.4')).blocked


async def test_minutes_remaining_rounds_up(guard, brute_force_store, clock):
	await brute_force_store.upsert(BruteForceRecord(
		ip='1.2.3.4',
		attempts=5,
		last_attempt=clock(),
		blocked_until=clock() + timedelta(seconds=30),
	))
	status = await guard.is_blocked('1.2.3.4')
	assert status.blocked
	assert status.minutes_remaining == 1


async def test_clear_attempts(guard):
	for _ in range(5):
		await guard.record_failed_attempt('1.2.3.4')
	assert (await guard.is_blocked('1.2.3.4')).blocked

	await guard.clear_attempts('1.2.3.4')
	assert not (await guard.is_blocked('1.2.3.4')).blocked
	assert await guard.get_attempts('1.2.3.4') is None

	await guard.clear_attempts('1.2.3.4')


async def test_ips_are_isolated(guard):
	for _ in range(5):
		await guard.record_failed_attempt('1.2.3.4')
	await guard.record_failed_attempt('2001:db8::1')

	assert (await guard.is_blocked('1.2.3.4')).blocked
	assert not (await guard.is_blocked('1.2.3.5')).blocked
	assert not (await guard.is_blocked('2001:db8::1')).blocked
	assert (await guard.get_attempts('2001:db8::1')).attempts == 1


async def test_last_attempt_is_updated(guard, clock):
	await guard.record_failed_attempt('1.2.3.4')
	clock.advance(seconds=42)
	await guard.record_failed_attempt('1.2.3.4')

	record = await guard.get_attempts('1.2.3.4')
	assert record.attempts == 2
	assert record.last_attempt == clock()
	assert record.blocked_until is None


async def test_sweep_keeps_recent_and_blocked_records(guard, brute_force_store, clock):
	await guard.record_failed_attempt('10.0.0.1')
	for _ in range(5):
		await guard.record_failed_attempt('10.0.0.2')

	clock.advance(hours=25)
	await guard.record_failed_attempt('10.0.0.4')
	await brute_force_store.upsert(BruteForceRecord(
		ip='10.0.0.3',
		attempts=5,
		last_attempt=clock() - timedelta(hours=30),
		blocked_until=clock() + timedelta(minutes=5),
	))

	deleted = await guard.sweep_stale(timedelta(hours=24))

	assert deleted == 2
	assert set(brute_force_store.records) == {'10.0.0.3', '10.0.0.4'}


@pytest.mark.config_override({'redeem': {'brute_force': {'max_attempts': 3, 'block_duration_minutes': 5}}})
async def test_thresholds_come_from_config(brute_force_store, clock):
	guard = BruteForceGuard(brute_force_store, clock=clock)

	await guard.record_failed_attempt('1.2.3.4')
	await guard.record_failed_attempt('1.2.3.4')
	status = await guard.record_failed_attempt('1.2.3.4')

	assert status.blocked
	assert status.minutes_remaining == 5
