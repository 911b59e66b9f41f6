"""Shared fixtures wiring a client to an in-memory transport."""

import pytest

from judo_payments.core.client import PaymentClient
from judo_payments.core.session import Session

from tests.support import FakeTransport, Recorder


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def session(transport) -> Session:
    return Session(token="tok_1", secret="sec_1", sandboxed=True, transport=transport)


@pytest.fixture
def client(session) -> PaymentClient:
    return PaymentClient(session)


@pytest.fixture
def recorder() -> Recorder:
    return Recorder()
