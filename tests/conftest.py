import os

import django
import pytest

from objgit import ObjectStore


def pytest_configure(config):
    os.environ.setdefault("DJANGO_SETTINGS_MODULE", "django_core.settings")
    django.setup()


@pytest.fixture
def store(tmp_path):
    s = ObjectStore(tmp_path / ".git")
    s.init()
    return s
