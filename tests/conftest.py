import pytest
from fastapi.testclient import TestClient

from cipherapi.encryption import CipherContext, make_keyphrase
from cipherapi.main import create_app


@pytest.fixture
def cipher():
    return CipherContext(make_keyphrase(32))


@pytest.fixture
def app(cipher):
    return create_app(cipher)


@pytest.fixture
def client(app):
    return TestClient(app)
