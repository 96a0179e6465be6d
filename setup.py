import logging

from setuptools import setup, find_packages

log = logging.getLogger(__name__)

setup(
	name='redeem_core',
	version='0.4.0.dev0',
	packages=find_packages(include=['redeem_core', 'redeem_core.*']),
	description='Promotional code redemption service with brute-force protection and CSV bulk import',
	python_requires='>=3.11',
	install_requires=[
		'gconf',
		'uvicorn',
		'fastapi',
		'pyjwt',
		'pydantic>=2',
		'Jinja2',
		'psycopg[binary]',
		'psycopg-pool',
		'yoyo-migrations',
		'cachetools',
		'croniter',
		'email_validator',
		'httpx',
	],
	extras_require={
		'dev': [
			'setuptools',
			'ruff',
			'pytest',
			'pytest-mock',
			'pytest-asyncio',
			'asgi-lifespan==2.*',
		]
	},
	package_data={'redeem_core': ['templates/*']},
)
