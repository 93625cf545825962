import asyncio
import threading
from decimal import Decimal

import pytest

from core.tokens import INTUITION_TESTNET, TokenSymbol
from pricing.debounce import QuoteDebouncer, QuoteRequest, orchestrator_compute
from pricing.quote import QuoteErrorKind, QuoteOrchestrator
from pricing.reserves import ReserveReader


def _request(amount: str) -> QuoteRequest:
    return QuoteRequest(TokenSymbol.TTRUST, TokenSymbol.ORACLE, amount, Decimal("0.5"))


class _Recorder:
    def __init__(self):
        self.computed = []
        self.delivered = []

    def compute(self, request):
        self.computed.append(request.amount)
        return f"quote:{request.amount}"

    def on_result(self, request, result):
        self.delivered.append((request.amount, result))


@pytest.mark.parametrize(
    "amount, empty",
    [("", True), ("  ", True), ("0", True), ("abc", True), ("1", False)],
)
def test_request_is_empty(amount, empty):
    assert _request(amount).is_empty is empty


@pytest.mark.asyncio
async def test_rapid_changes_compute_once_for_last_value():
    recorder = _Recorder()
    debouncer = QuoteDebouncer(recorder.compute, recorder.on_result, delay=0.05)

    for amount in ("1", "10", "100"):
        debouncer.submit(_request(amount))
        await asyncio.sleep(0.01)
    await debouncer.wait()

    assert recorder.computed == ["100"]
    assert recorder.delivered == [("100", "quote:100")]
    assert not debouncer.pending


@pytest.mark.asyncio
async def test_spaced_changes_each_compute():
    recorder = _Recorder()
    debouncer = QuoteDebouncer(recorder.compute, recorder.on_result, delay=0.01)

    debouncer.submit(_request("1"))
    await debouncer.wait()
    debouncer.submit(_request("2"))
    await debouncer.wait()

    assert recorder.computed == ["1", "2"]


@pytest.mark.asyncio
async def test_in_flight_result_is_discarded_when_superseded():
    started = threading.Event()
    release = threading.Event()
    delivered = []

    def compute(request):
        if request.amount == "1":
            started.set()
            release.wait(2)
        return request.amount

    debouncer = QuoteDebouncer(
        compute, lambda req, result: delivered.append(result), delay=0
    )
    debouncer.submit(_request("1"))
    await asyncio.to_thread(started.wait, 2)

    debouncer.submit(_request("2"))
    release.set()
    await debouncer.wait()

    assert delivered == ["2"]


@pytest.mark.asyncio
async def test_empty_amount_cancels_pending_quote():
    recorder = _Recorder()
    debouncer = QuoteDebouncer(recorder.compute, recorder.on_result, delay=0.05)

    debouncer.submit(_request("5"))
    assert debouncer.submit(_request("")) is None
    assert not debouncer.pending
    await asyncio.sleep(0.1)

    assert recorder.computed == []


@pytest.mark.asyncio
async def test_cancel_drops_everything():
    recorder = _Recorder()
    debouncer = QuoteDebouncer(recorder.compute, recorder.on_result, delay=0.05)
    debouncer.submit(_request("5"))
    debouncer.cancel()
    await debouncer.wait()
    await asyncio.sleep(0.1)
    assert recorder.delivered == []


def test_negative_delay_rejected():
    with pytest.raises(ValueError):
        QuoteDebouncer(lambda r: r, lambda r, q: None, delay=-1)


def test_orchestrator_compute_builds_quote(chain):
    orchestrator = QuoteOrchestrator(INTUITION_TESTNET, ReserveReader(chain))
    compute = orchestrator_compute(orchestrator)

    result = compute(_request("1.5"))
    assert result.ok
    assert result.quote.amount_in == 1_500_000_000_000_000_000

    too_precise = compute(_request("0.0000000000000000001"))
    assert too_precise.error.kind is QuoteErrorKind.INVALID_INPUT
