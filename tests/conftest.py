from unittest.mock import Mock

import pytest


def make_client(pages, status_code=200):
    """Mock ``requests.get`` replacement serving ``pages`` (url -> html)."""
    def get(url, headers=None, timeout=None):
        resp = Mock()
        resp.status_code = status_code if url in pages else 404
        resp.text = pages.get(url, "")
        return resp

    return Mock(side_effect=get)


@pytest.fixture
def client_factory():
    return make_client
