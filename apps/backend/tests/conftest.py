"""
Shared fixtures for enrichment tests.
"""

import pytest

from core.secrets import SessionProvider
from fakes import RecordingSleep


@pytest.fixture
def recording_sleep():
    return RecordingSleep()


@pytest.fixture
def session():
    return SessionProvider(
        cookies=[{"name": "li_at", "value": "AQEDAR-session-token", "domain": ".linkedin.com", "path": "/"}],
    )


@pytest.fixture
def anonymous_session():
    return SessionProvider(cookies=[])
