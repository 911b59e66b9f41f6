"""In-memory transport and completion recorder used across the tests."""

from typing import Any, List, Mapping, Optional

from judo_payments.core.session import TransportResult


class FakeTransport:
    """Records dispatches and answers each one with the next queued result."""

    def __init__(self, *results: TransportResult) -> None:
        self.results = list(results)
        self.calls: List[dict] = []

    def queue(self, result: TransportResult) -> None:
        self.results.append(result)

    def dispatch(self, url, headers, body, on_complete) -> None:
        self.calls.append({"url": url, "headers": dict(headers), "body": dict(body)})
        on_complete(self.results.pop(0))


class Recorder:
    def __init__(self) -> None:
        self.calls: List[tuple] = []

    def __call__(self, response, error) -> None:
        self.calls.append((response, error))

    @property
    def response(self):
        assert len(self.calls) == 1
        return self.calls[0][0]

    @property
    def error(self):
        assert len(self.calls) == 1
        return self.calls[0][1]


def ok(body: Any, status: int = 200) -> TransportResult:
    return TransportResult(status_code=status, body=body, text="{}")


def failed(body: Optional[Mapping[str, Any]], status: int = 400, text: str = "") -> TransportResult:
    return TransportResult(status_code=status, body=body, text=text)
