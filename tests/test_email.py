import json

import httpx
import pytest

from redeem_core.service.email import EmailSender

config_override = {'email': {'api_url': 'https://mail.test/emails', 'sender': 'Admin <admin@mail.test>'}}


def test_render_login_code():
	html = EmailSender(api_key='').render_login_code('a@example.com', '123456', 'Alice')
	assert '123456' in html
	assert '15 minutes' in html
	assert 'Alice' in html


async def test_without_api_key_the_code_is_logged(memory_logger):
	sender = EmailSender(api_key='')
	assert await sender.send_login_code('a@example.com', '654321')
	assert any('654321' in r.getMessage() for r in memory_logger.records)


async def test_send_login_code():
	requests = []

	def handler(request: httpx.Request):
		requests.append(request)
		return httpx.Response(200, json={'id': 'mail-1'})

	sender = EmailSender(api_key='key', transport=httpx.MockTransport(handler))
	assert await sender.send_login_code('a@example.com', '123456')

	request = requests[0]
	assert str(request.url) == 'https://mail.test/emails'
	assert request.headers['Authorization'] == 'Bearer key'
	body = json.loads(request.content)
	assert body['to'] == ['a@example.com']
	assert body['from'] == 'Admin <admin@mail.test>'
	assert '123456' in body['html']


def _rejecting(request):
	return httpx.Response(422, json={'message': 'invalid from'})


def _unreachable(request):
	raise httpx.ConnectError('down')


@pytest.mark.parametrize('handler', [_rejecting, _unreachable])
async def test_send_failure(handler):
	sender = EmailSender(api_key='key', transport=httpx.MockTransport(handler))
	assert not await sender.send_login_code('a@example.com', '123456')


def test_render_escapes_html():
	html = EmailSender(api_key='').render_login_code('a@example.com', '123456', '<b>Eve</b>')
	assert '<b>Eve</b>' not in html
	assert '&lt;b&gt;Eve&lt;/b&gt;' in html
