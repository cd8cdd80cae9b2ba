# ecommerce_admin/i18n.py
# Message catalogues keyed by symbolic status code.
import json
import os
from functools import lru_cache

from flask import current_app, g, has_request_context, request

TRANSLATIONS_DIR = os.path.join(os.path.abspath(os.path.dirname(__file__)), 'translations')


@lru_cache(maxsize=None)
def load_catalog(locale):
    path = os.path.join(TRANSLATIONS_DIR, f"{locale}.json")
    if not os.path.exists(path):
        return {}
    with open(path, encoding='utf-8') as fh:
        return json.load(fh)


def get_locale():
    """Primary subtag of the first Accept-Language entry, restricted to the supported locales."""
    default_locale = current_app.config.get('DEFAULT_LOCALE', 'en')
    if not has_request_context():
        return default_locale
    header = request.headers.get('Accept-Language', '') or ''
    lang = header.split(',')[0].split(';')[0].split('-')[0].strip().lower()
    if lang in current_app.config.get('SUPPORTED_LOCALES', [default_locale]):
        return lang
    return default_locale


def current_locale():
    if has_request_context() and getattr(g, 'locale', None):
        return g.locale
    return get_locale()


def translate(key, default, locale=None):
    if key is None:
        return default
    catalog = load_catalog(locale or current_locale())
    return catalog.get(str(key), default)
