"""WSGI entrypoint: ``gunicorn -c gunicorn.conf.py tokenauth.wsgi:app``."""

from tokenauth import create_app

app = create_app()
