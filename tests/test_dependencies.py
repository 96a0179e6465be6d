from fastapi import Request

from redeem_core.web.dependencies import UNKNOWN_CLIENT, get_client_ip


def _request(client=None, headers=()):
	return Request({
		'type': 'http',
		'method': 'POST',
		'scheme': 'http',
		'server': ('test', 80),
		'path': '/api/redeem',
		'query_string': b'',
		'headers': [(k.encode(), v.encode()) for k, v in headers],
		'client': client,
	})


def test_client_ip():
	assert get_client_ip(_request(client=('192.0.2.7', 5000))) == '192.0.2.7'


def test_missing_client_address_is_logged(memory_logger):
	assert get_client_ip(_request()) == UNKNOWN_CLIENT
	assert any(
		'no client address' in r.getMessage() and '/api/redeem' in r.getMessage()
		for r in memory_logger.records)
