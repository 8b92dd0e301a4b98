"""
pytest unit test session level fixtures
"""

import json
import logging
import platform
import urllib.request
from typing import Any, Mapping

import pytest
import requests
from pytest_socket import SocketBlockedError, disable_socket

from cmrtransmit import Transmit
from cmrtransmit.core.connection import TransmitResponse
from cmrtransmit.core.logging_setup import SILENT_LOGGER_NAME

MISSING_CONFIG_PATH = "/nonexistent/.cmrTransmitConfig"


def pytest_runtest_setup():
    """Disable socket connections during unit tests.

    This uses the https://pypi.org/project/pytest-socket/ library for this functionality.
    """
    # This is a work-around because of https://github.com/python/cpython/issues/77589
    if platform.system() != "Windows":
        disable_socket(allow_unix_socket=True)


def test_confirm_connections_blocked():
    """Confirm that socket connections are blocked during unit tests."""
    if platform.system() != "Windows":
        with pytest.raises(SocketBlockedError) as cm_ex:
            urllib.request.urlopen("http://example.com")
        assert "A test tried to use socket.socket." == str(cm_ex.value)


@pytest.fixture(scope="session")
def transmit():
    """
    Create a Transmit instance that can be shared by all tests in the session. Its
    settings come only from the library defaults.
    """
    transmit = Transmit(
        debug=False,
        config_path=MISSING_CONFIG_PATH,
        requests_session=requests.Session(),
        environ={},
        cache_client=False,
    )
    transmit.logger = logging.getLogger(SILENT_LOGGER_NAME)
    Transmit.set_client(transmit)
    return transmit


def json_response(status: int, body: Any = None, headers: Mapping = None):
    """Builds the TransmitResponse of an application replying with JSON."""
    text = "" if body is None else json.dumps(body)
    response_headers = {"Content-Type": "application/json;charset=utf-8"}
    response_headers.update(headers or {})
    return TransmitResponse(
        status=status, headers=response_headers, body=body, text=text
    )


def text_response(status: int, text: str = ""):
    """Builds the TransmitResponse of an application replying with plain text."""
    return TransmitResponse(
        status=status, headers={"Content-Type": "text/plain"}, body=text, text=text
    )


@pytest.fixture
def make_json_response():
    return json_response


@pytest.fixture
def make_text_response():
    return text_response
