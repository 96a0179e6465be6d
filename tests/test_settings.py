from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from redeem_core.data_model.settings import CampaignSettingsUpdate, CampaignWindow, parse_timestamp


async def test_defaults_are_unbounded(settings_service):
	settings = await settings_service.get_all()
	assert settings.start_date == ''
	assert settings.end_date == ''

	window = await settings_service.get_window()
	assert window.start is None
	assert window.end is None


async def test_update_replaces_both(settings_service, settings_store):
	await settings_service.update(CampaignSettingsUpdate(start_date='2025-01-01T00:00:00Z', end_date='2025-02-01T00:00:00Z'))
	await settings_service.update(CampaignSettingsUpdate(start_date='2025-03-01T00:00:00+02:00'))

	assert settings_store.values == {'start_date': '2025-03-01T00:00:00+02:00', 'end_date': ''}


async def test_invalid_stored_value_is_ignored(settings_service, settings_store, memory_logger):
	settings_store.values['start_date'] = 'next tuesday'
	settings_store.values['end_date'] = '2030-01-01T00:00:00'

	window = await settings_service.get_window()

	assert window.start is None
	assert window.end == datetime(2030, 1, 1, tzinfo=timezone.utc)
	assert any('start_date' in r.getMessage() for r in memory_logger.records)


def test_update_rejects_garbage():
	with pytest.raises(ValidationError):
		CampaignSettingsUpdate(start_date='soon', end_date='')


def test_update_accepts_null():
	update = CampaignSettingsUpdate(start_date=None, end_date=' 2025-01-01 ')
	assert update.start_date == ''
	assert update.end_date == '2025-01-01'


def test_parse_timestamp():
	assert parse_timestamp('') is None
	assert parse_timestamp('2025-01-01T10:00:00Z') == datetime(2025, 1, 1, 10, tzinfo=timezone.utc)
	assert parse_timestamp('2025-01-01T10:00:00').tzinfo == timezone.utc


def test_window():
	now = datetime(2025, 1, 15, tzinfo=timezone.utc)
	window = CampaignWindow(start=datetime(2025, 1, 1, tzinfo=timezone.utc), end=datetime(2025, 1, 31, tzinfo=timezone.utc))
	assert window.has_started(now)
	assert not window.has_ended(now)
	assert not window.has_started(datetime(2024, 12, 31, tzinfo=timezone.utc))
	assert window.has_ended(datetime(2025, 2, 1, tzinfo=timezone.utc))
	assert not window.has_ended(window.end)

	unbounded = CampaignWindow()
	assert unbounded.has_started(now)
	assert not unbounded.has_ended(now)
