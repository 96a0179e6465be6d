from urllib.parse import parse_qs

import httpx

from redeem_core.service.captcha import CaptchaVerifier

VERIFY_URL = 'https://captcha.test/siteverify'


def _transport(response_json=None, status_code=200, requests=None, raise_error=None):
	def handler(request: httpx.Request):
		if requests is not None:
			requests.append(request)
		if raise_error:
			raise raise_error
		return httpx.Response(status_code, json=response_json)
	return httpx.MockTransport(handler)


async def test_disabled_without_secret():
	verifier = CaptchaVerifier(secret_key='', verify_url=VERIFY_URL, transport=_transport(raise_error=AssertionError()))
	assert await verifier.verify('')
	assert await verifier.verify('anything')


async def test_empty_token_is_rejected():
	requests = []
	verifier = CaptchaVerifier(secret_key='s3cret', verify_url=VERIFY_URL, transport=_transport({'success': True}, requests=requests))
	assert not await verifier.verify('')
	assert requests == []


async def test_accepted_token():
	requests = []
	verifier = CaptchaVerifier(secret_key='s3cret', verify_url=VERIFY_URL, transport=_transport({'success': True}, requests=requests))

	assert await verifier.verify('token', remote_ip='1.2.3.4')

	form = parse_qs(requests[0].content.decode())
	assert form == {'secret': ['s3cret'], 'response': ['token'], 'remoteip': ['1.2.3.4']}
	assert str(requests[0].url) == VERIFY_URL


async def test_rejected_token():
	verifier = CaptchaVerifier(
		secret_key='s3cret',
		verify_url=VERIFY_URL,
		transport=_transport({'success': False, 'error-codes': ['invalid-input-response']}),
	)
	assert not await verifier.verify('token')


async def test_transport_error_is_rejection(memory_logger):
	verifier = CaptchaVerifier(
		secret_key='s3cret',
		verify_url=VERIFY_URL,
		transport=_transport(raise_error=httpx.ConnectError('down')),
	)
	assert not await verifier.verify('token')
	assert any('captcha verification failed' in r.getMessage() for r in memory_logger.records)


async def test_garbage_response_is_rejection():
	def handler(request):
		return httpx.Response(200, text='<html>')
	verifier = CaptchaVerifier(secret_key='s3cret', verify_url=VERIFY_URL, transport=httpx.MockTransport(handler))
	assert not await verifier.verify('token')
