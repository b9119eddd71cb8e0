"""Fixtures wiring the API client to the in-process mock backend."""
from urllib.parse import urlsplit

import pytest
import requests
from requests.adapters import BaseAdapter
from requests.structures import CaseInsensitiveDict

import mock_api
from clinic_schedule.http_client import ApiClient, create_http_session

MOCK_ROOT = "http://mock"
SKIPPED_HEADERS = ("Content-Length", "Host")


class FlaskAppAdapter(BaseAdapter):
    """Transport adapter answering requests from a Flask app's test client."""

    def __init__(self, app):
        super().__init__()
        self.app = app

    def send(self, request, stream=False, timeout=None, verify=True, cert=None, proxies=None):
        url = urlsplit(request.url)
        headers = {k: v for k, v in request.headers.items() if k not in SKIPPED_HEADERS}
        # One test client per call; quick-create sends from several threads
        reply = self.app.test_client().open(
            url.path,
            method=request.method,
            query_string=url.query,
            headers=headers,
            data=request.body,
        )

        response = requests.Response()
        response.status_code = reply.status_code
        response._content = reply.get_data()
        response.headers = CaseInsensitiveDict(reply.headers)
        response.encoding = "utf-8"
        response.url = request.url
        response.request = request
        return response

    def close(self):
        pass


@pytest.fixture
def backend():
    """Fresh mock backend state for each test."""
    mock_api.reset_store()
    mock_api.app.config["REQUIRE_AUTH"] = False
    mock_api.app.config["FAIL_CREATES_AFTER"] = None
    yield mock_api
    mock_api.reset_store()
    mock_api.app.config["REQUIRE_AUTH"] = False
    mock_api.app.config["FAIL_CREATES_AFTER"] = None


@pytest.fixture
def client(backend):
    session = create_http_session()
    session.mount(MOCK_ROOT, FlaskAppAdapter(backend.app))
    return ApiClient(base_url=f"{MOCK_ROOT}{backend.API_PREFIX}", token="", session=session)
