"""
Pytest configuration and fixtures for all tests.
"""

import os
import sys
import pytest

# Add src to Python path before any imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '../src'))

# Set up test environment variables before importing any modules
os.environ.setdefault('AWS_DEFAULT_REGION', 'us-west-2')
os.environ.setdefault('LOG_LEVEL', 'INFO')

from entitydecode.config import DecoderConfig
from entitydecode.services.store import BytesStore


SAMPLE_MESSAGE = (
    b"From: =?utf-8?Q?Jos=C3=A9?= <jose@example.com>\r\n"
    b"To: Team: a@x.com, b@y.com;\r\n"
    b"Subject: =?utf-8?Q?caf=C3=A9?=\r\n"
    b"Content-Type: text/plain; charset=iso-8859-1\r\n"
    b"Content-Transfer-Encoding: quoted-printable\r\n"
    b"\r\n"
    b"caf=E9 cr=E8me\r\n"
)


@pytest.fixture
def sample_message():
    return SAMPLE_MESSAGE


@pytest.fixture
def sample_fields():
    """Fields as the structural parser reports them for SAMPLE_MESSAGE."""
    body_start = SAMPLE_MESSAGE.index(b"\r\n\r\n") + 4
    return {
        'headers': {
            'from': '=?utf-8?Q?Jos=C3=A9?= <jose@example.com>',
            'to': 'Team: a@x.com, b@y.com;',
            'subject': '=?utf-8?Q?caf=C3=A9?=',
            'received': ['from mx1.example.com', 'from mx2.example.com'],
            'content-type': 'text/plain; charset=iso-8859-1',
            'content-transfer-encoding': 'quoted-printable',
        },
        'content-type': 'text/plain',
        'charset': 'iso-8859-1',
        'transfer-encoding': 'quoted-printable',
        'starting-pos': 0,
        'ending-pos': len(SAMPLE_MESSAGE),
        'starting-pos-body': body_start,
        'ending-pos-body': len(SAMPLE_MESSAGE),
    }


@pytest.fixture
def store():
    return BytesStore(SAMPLE_MESSAGE)


@pytest.fixture
def config():
    return DecoderConfig()
