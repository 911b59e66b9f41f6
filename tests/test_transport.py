"""Tests for the requests-backed transport."""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from unittest import mock

import requests

from judo_payments.core.client import PaymentClient
from judo_payments.core.models import Amount, Reference
from judo_payments.core.session import RequestsTransport, Session


def _http_response(status, body=b'{"receiptId": "1"}'):
    response = requests.Response()
    response.status_code = status
    response._content = body
    return response


def test_posts_json_with_headers_and_timeout():
    http = mock.MagicMock(spec=requests.Session)
    http.post.return_value = _http_response(200)
    outcomes = []

    RequestsTransport(http, timeout=12).dispatch(
        "https://gw.example/transactions/payments",
        {"Authorization": "Basic abc"},
        {"judoId": "1"},
        outcomes.append,
    )

    http.post.assert_called_once_with(
        "https://gw.example/transactions/payments",
        json={"judoId": "1"},
        headers={"Authorization": "Basic abc"},
        timeout=12,
    )
    assert outcomes[0].ok
    assert outcomes[0].body == {"receiptId": "1"}


def test_error_status_keeps_decoded_body():
    http = mock.MagicMock(spec=requests.Session)
    http.post.return_value = _http_response(403, b'{"message": "denied", "category": "2"}')
    outcomes = []

    RequestsTransport(http).dispatch("https://gw.example/x", {}, {}, outcomes.append)

    assert not outcomes[0].ok
    assert outcomes[0].status_code == 403
    assert outcomes[0].body["message"] == "denied"


def test_non_json_body_is_left_undecoded():
    http = mock.MagicMock(spec=requests.Session)
    http.post.return_value = _http_response(502, b"Bad Gateway")
    outcomes = []

    RequestsTransport(http).dispatch("https://gw.example/x", {}, {}, outcomes.append)

    assert outcomes[0].body is None
    assert outcomes[0].text == "Bad Gateway"


def test_connection_failure_is_reported_not_raised():
    http = mock.MagicMock(spec=requests.Session)
    http.post.side_effect = requests.Timeout("read timed out")
    outcomes = []

    RequestsTransport(http).dispatch("https://gw.example/x", {}, {}, outcomes.append)

    assert isinstance(outcomes[0].error, requests.Timeout)
    assert not outcomes[0].ok


def test_executor_runs_exchange_off_the_calling_thread():
    http = mock.MagicMock(spec=requests.Session)
    http.post.return_value = _http_response(200)
    outcomes = []

    with ThreadPoolExecutor(max_workers=1) as executor:
        RequestsTransport(http, executor=executor).dispatch(
            "https://gw.example/x", {}, {}, outcomes.append
        )

    assert len(outcomes) == 1
    assert outcomes[0].ok


def test_executor_failure_inside_exchange_still_completes():
    http = mock.MagicMock(spec=requests.Session)
    http.post.side_effect = RuntimeError("adapter blew up")
    done = threading.Event()
    outcomes = []

    def on_complete(result):
        outcomes.append(result)
        done.set()

    with ThreadPoolExecutor(max_workers=1) as executor:
        RequestsTransport(http, executor=executor).dispatch("https://gw.example/x", {}, {}, on_complete)
        assert done.wait(2)

    assert isinstance(outcomes[0].error, RuntimeError)


def test_executor_logs_failing_callback(caplog):
    http = mock.MagicMock(spec=requests.Session)
    http.post.return_value = _http_response(200)

    def on_complete(result):
        raise KeyError("caller bug")

    with caplog.at_level(logging.ERROR):
        with ThreadPoolExecutor(max_workers=1) as executor:
            RequestsTransport(http, executor=executor).dispatch("https://gw.example/x", {}, {}, on_complete)

    assert "Transaction callback failed" in caplog.text


def test_client_on_executor_completes_for_malformed_record():
    http = mock.MagicMock(spec=requests.Session)
    http.post.return_value = _http_response(
        200, b'{"result": "Success", "cardDetails": {"endDate": 1229}}'
    )
    done = threading.Event()
    outcomes = []

    def completion(response, error):
        outcomes.append((response, error))
        done.set()

    with ThreadPoolExecutor(max_workers=1) as executor:
        session = Session(token="tok_1", secret="sec_1", transport=RequestsTransport(http, executor=executor))
        PaymentClient(session).payment("1", Amount(35), Reference("r1", "p1"), completion)
        assert done.wait(2)

    response, error = outcomes[0]
    assert error is None
    assert response.card_details.formatted_end_date() == "12/29"
