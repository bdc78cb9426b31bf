# Make the Django project root (web/) importable before collection
import sys
from pathlib import Path

import pytest

BASE_DIR = Path(__file__).resolve().parent  # .../web
p = str(BASE_DIR)
if p not in sys.path:
    sys.path.insert(0, p)


@pytest.fixture(autouse=True)
def use_stubs_for_tests(settings):
    settings.USE_HTTP_ADAPTERS = False
    settings.MONOPAY_TOKEN = "test-token"
    settings.MONOPAY_BASE_URL = "http://monopay.test/api/"
    settings.MONOPAY_REDIRECT_URL = "https://shop.test/return"
    settings.MEDIA_URL = "/media/"


@pytest.fixture(autouse=True)
def fresh_stub(monkeypatch):
    from apps.payments import providers

    monkeypatch.setattr(providers, "_stub", None)
