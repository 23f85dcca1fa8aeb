import pytest
import requests


@pytest.fixture
def connection_error():
    return requests.ConnectionError("Connection refused")
