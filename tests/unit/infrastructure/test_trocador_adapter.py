"""Unit tests для TrocadorAdapter (httpx.MockTransport замість мережі)."""

from decimal import Decimal

import httpx
import pytest

from swap_service.domain.swaps.exceptions import UpstreamRejected, UpstreamUnavailable
from swap_service.domain.swaps.value_objects import RateType
from swap_service.infrastructure.aggregator.adapters import TrocadorAdapter
from swap_service.infrastructure.aggregator.circuit_breakers import (
    CircuitBreaker,
    CircuitState,
)
from swap_service.infrastructure.aggregator.errors import AggregatorErrorResponse
from swap_service.infrastructure.aggregator.rate_limiting import TokenBucket
from tests.fakes import make_quote

BASE_URL = "https://trocador.test/api"


class Upstream:
    """Scripted upstream: path → list of responses (останній повторюється)."""

    def __init__(self, routes: dict[str, list]) -> None:
        self.routes = routes
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path.removeprefix("/api")
        script = self.routes[path]
        item = script.pop(0) if len(script) > 1 else script[0]
        if isinstance(item, Exception):
            raise item
        return item

    def calls(self, path: str) -> int:
        return sum(1 for r in self.requests if r.url.path == f"/api{path}")


def build_adapter(upstream: Upstream, circuit: CircuitBreaker | None = None) -> TrocadorAdapter:
    client = httpx.AsyncClient(base_url=BASE_URL, transport=httpx.MockTransport(upstream))
    return TrocadorAdapter(
        api_key="test-key",
        max_retries=2,
        retry_base_delay=0,
        retry_max_delay=0,
        circuit_breaker=circuit
        or CircuitBreaker(
            name="test", failure_threshold=5, ignored_exceptions=(AggregatorErrorResponse,)
        ),
        rate_limiter=TokenBucket(capacity=1000, refill_rate=1000),
        client=client,
    )


RATE_PAYLOAD = {
    "trade_id": "R1",
    "quotes": {
        "quotes": [
            {
                "provider": "ChangeNOW",
                "amount_to": "6.10",
                "min_amount": "0.001",
                "max_amount": "5",
                "waste": "0.4",
                "kycrating": "A",
                "eta": 15,
            },
            {"provider": "FixedFloat", "amount_to": 6.2, "kycrating": "B"},
            {"provider": "Broken", "amount_to": "n/a"},
        ]
    },
}


class TestGetRates:
    async def test_normalizes_provider_quotes(self):
        # Arrange
        upstream = Upstream({"/new_rate": [httpx.Response(200, json=RATE_PAYLOAD)]})
        adapter = build_adapter(upstream)

        # Act
        offers = await adapter.get_rates("btc", "xmr", Decimal("0.1"), "Mainnet", "Mainnet")

        # Assert
        assert [o.provider for o in offers] == ["ChangeNOW", "FixedFloat"]
        first = offers[0]
        assert first.quote_token == "R1:ChangeNOW"
        assert first.amount_to == Decimal("6.10")
        assert first.amount_from == Decimal("0.1")
        assert first.min_amount == Decimal("0.001")
        assert first.provider_fee == Decimal("0.4")
        assert first.eta_minutes == 15
        assert first.upstream_rate_id == "R1"
        assert offers[1].amount_to == Decimal("6.2")

    async def test_sends_pair_params(self):
        upstream = Upstream({"/new_rate": [httpx.Response(200, json=RATE_PAYLOAD)]})
        adapter = build_adapter(upstream)

        await adapter.get_rates("btc", "xmr", Decimal("0.1"), "Mainnet", "Mainnet")

        request = upstream.requests[0]
        assert request.url.params["ticker_from"] == "btc"
        assert request.url.params["ticker_to"] == "xmr"
        assert request.url.params["amount_from"] == "0.1"

    async def test_accepts_plain_quote_list(self):
        payload = {"trade_id": "R2", "quotes": [{"provider": "Exolix", "amount_to": "1"}]}
        adapter = build_adapter(Upstream({"/new_rate": [httpx.Response(200, json=payload)]}))

        offers = await adapter.get_rates("btc", "xmr", Decimal("0.1"), "Mainnet", "Mainnet")

        assert [o.quote_token for o in offers] == ["R2:Exolix"]

    async def test_404_means_no_route(self):
        adapter = build_adapter(
            Upstream({"/new_rate": [httpx.Response(404, json={"error": "pair not found"})]})
        )

        offers = await adapter.get_rates("btc", "zzz", Decimal("0.1"), "Mainnet", "Mainnet")

        assert offers == []

    async def test_transient_errors_are_retried(self):
        # Arrange: 503 → timeout → success
        upstream = Upstream(
            {
                "/new_rate": [
                    httpx.Response(503),
                    httpx.ReadTimeout("timed out"),
                    httpx.Response(200, json=RATE_PAYLOAD),
                ]
            }
        )
        adapter = build_adapter(upstream)

        # Act
        offers = await adapter.get_rates("btc", "xmr", Decimal("0.1"), "Mainnet", "Mainnet")

        # Assert
        assert len(offers) == 2
        assert upstream.calls("/new_rate") == 3

    async def test_retries_exhausted_raise_unavailable(self):
        upstream = Upstream({"/new_rate": [httpx.Response(502)]})
        adapter = build_adapter(upstream)

        with pytest.raises(UpstreamUnavailable):
            await adapter.get_rates("btc", "xmr", Decimal("0.1"), "Mainnet", "Mainnet")

        assert upstream.calls("/new_rate") == 3  # max_retries + 1

    async def test_rate_limit_message_is_transient(self):
        upstream = Upstream(
            {
                "/new_rate": [
                    httpx.Response(200, json={"error": "Rate limit exceeded"}),
                    httpx.Response(200, json=RATE_PAYLOAD),
                ]
            }
        )
        adapter = build_adapter(upstream)

        offers = await adapter.get_rates("btc", "xmr", Decimal("0.1"), "Mainnet", "Mainnet")

        assert len(offers) == 2
        assert upstream.calls("/new_rate") == 2

    async def test_invalid_json_is_unavailable(self):
        adapter = build_adapter(
            Upstream({"/new_rate": [httpx.Response(200, content=b"<html>oops</html>")]})
        )

        with pytest.raises(UpstreamUnavailable):
            await adapter.get_rates("btc", "xmr", Decimal("0.1"), "Mainnet", "Mainnet")

    async def test_missing_rate_id_is_unavailable(self):
        adapter = build_adapter(
            Upstream({"/new_rate": [httpx.Response(200, json={"quotes": []})]})
        )

        with pytest.raises(UpstreamUnavailable):
            await adapter.get_rates("btc", "xmr", Decimal("0.1"), "Mainnet", "Mainnet")


class TestCreateTrade:
    TRADE_PAYLOAD = {
        "trade_id": "T100",
        "address_provider": "bc1qdeposit",
        "address_provider_memo": "",
        "amount_to": "6.1",
        "status": "new",
    }

    async def test_creates_trade_from_quote(self):
        # Arrange
        upstream = Upstream({"/new_trade": [httpx.Response(200, json=self.TRADE_PAYLOAD)]})
        adapter = build_adapter(upstream)
        quote = make_quote(token="R1:changenow", upstream_rate_id="R1", rate_type=RateType.FIXED)

        # Act
        result = await adapter.create_trade(
            quote=quote,
            destination_address="4Ab3xmr",
            refund_address="1QxBtc",
            destination_extra_id="memo-1",
        )

        # Assert
        assert result.upstream_trade_id == "T100"
        assert result.deposit_address == "bc1qdeposit"
        assert result.deposit_extra_id is None
        assert result.amount_to == Decimal("6.1")
        params = upstream.requests[0].url.params
        assert params["id"] == "R1"
        assert params["provider"] == "changenow"
        assert params["address"] == "4Ab3xmr"
        assert params["refund"] == "1QxBtc"
        assert params["address_memo"] == "memo-1"
        assert params["fixed"] == "True"

    async def test_rate_id_falls_back_to_token_prefix(self):
        upstream = Upstream({"/new_trade": [httpx.Response(200, json=self.TRADE_PAYLOAD)]})
        adapter = build_adapter(upstream)

        await adapter.create_trade(make_quote(token="R7:changenow"), "4Ab3xmr", None)

        params = upstream.requests[0].url.params
        assert params["id"] == "R7"
        assert "refund" not in params

    async def test_rejection_carries_reason(self):
        upstream = Upstream(
            {"/new_trade": [httpx.Response(400, json={"error": "amount below minimum"})]}
        )
        adapter = build_adapter(upstream)

        with pytest.raises(UpstreamRejected) as exc_info:
            await adapter.create_trade(make_quote(), "4Ab3xmr", None)

        assert exc_info.value.reason == "amount below minimum"

    async def test_create_is_never_retried(self):
        upstream = Upstream({"/new_trade": [httpx.Response(503)]})
        adapter = build_adapter(upstream)

        with pytest.raises(UpstreamUnavailable):
            await adapter.create_trade(make_quote(), "4Ab3xmr", None)

        assert upstream.calls("/new_trade") == 1

    async def test_missing_deposit_address_is_unavailable(self):
        payload = {"trade_id": "T100", "status": "new"}
        adapter = build_adapter(Upstream({"/new_trade": [httpx.Response(200, json=payload)]}))

        with pytest.raises(UpstreamUnavailable):
            await adapter.create_trade(make_quote(), "4Ab3xmr", None)


class TestGetTradeStatus:
    async def test_reads_first_element_of_list(self):
        payload = [{"trade_id": "T100", "status": "sending", "amount_to": "6.1"}]
        adapter = build_adapter(Upstream({"/trade": [httpx.Response(200, json=payload)]}))

        status = await adapter.get_trade_status("T100")

        assert status.upstream_trade_id == "T100"
        assert status.status == "sending"
        assert status.amount_to == Decimal("6.1")

    async def test_accepts_object_payload(self):
        adapter = build_adapter(
            Upstream({"/trade": [httpx.Response(200, json={"status": "finished"})]})
        )

        status = await adapter.get_trade_status("T100")

        assert status.upstream_trade_id == "T100"
        assert status.status == "finished"

    async def test_empty_list_is_unavailable(self):
        adapter = build_adapter(Upstream({"/trade": [httpx.Response(200, json=[])]}))

        with pytest.raises(UpstreamUnavailable):
            await adapter.get_trade_status("T100")

    async def test_refusal_is_unavailable(self):
        adapter = build_adapter(
            Upstream({"/trade": [httpx.Response(404, json={"error": "trade not found"})]})
        )

        with pytest.raises(UpstreamUnavailable):
            await adapter.get_trade_status("T100")


class TestValidateAddress:
    async def test_valid_address(self):
        adapter = build_adapter(
            Upstream({"/validateaddress": [httpx.Response(200, json={"result": True})]})
        )

        verdict = await adapter.validate_address("4Ab3xmr", "xmr", "Mainnet")

        assert verdict.valid is True

    async def test_invalid_address_has_reason(self):
        adapter = build_adapter(
            Upstream({"/validateaddress": [httpx.Response(200, json={"result": False})]})
        )

        verdict = await adapter.validate_address("garbage", "xmr", "Mainnet")

        assert verdict.valid is False
        assert "xmr" in verdict.reason

    async def test_non_boolean_result_is_unavailable(self):
        adapter = build_adapter(
            Upstream({"/validateaddress": [httpx.Response(200, json={"result": "maybe"})]})
        )

        with pytest.raises(UpstreamUnavailable):
            await adapter.validate_address("4Ab3xmr", "xmr", "Mainnet")

    async def test_auth_failure_is_unavailable(self):
        adapter = build_adapter(
            Upstream({"/validateaddress": [httpx.Response(401, json={"error": "bad key"})]})
        )

        with pytest.raises(UpstreamUnavailable):
            await adapter.validate_address("4Ab3xmr", "xmr", "Mainnet")

    async def test_client_error_is_negative_verdict(self):
        adapter = build_adapter(
            Upstream(
                {"/validateaddress": [httpx.Response(400, json={"error": "unknown ticker"})]}
            )
        )

        verdict = await adapter.validate_address("4Ab3xmr", "zzz", "Mainnet")

        assert verdict.valid is False
        assert verdict.reason == "unknown ticker"


class TestCircuitIntegration:
    async def test_business_refusals_do_not_open_circuit(self):
        circuit = CircuitBreaker(
            name="test", failure_threshold=2, ignored_exceptions=(AggregatorErrorResponse,)
        )
        upstream = Upstream(
            {"/new_trade": [httpx.Response(400, json={"error": "amount too low"})]}
        )
        adapter = build_adapter(upstream, circuit)

        for _ in range(3):
            with pytest.raises(UpstreamRejected):
                await adapter.create_trade(make_quote(), "4Ab3xmr", None)

        assert circuit.state == CircuitState.CLOSED

    async def test_open_circuit_fails_fast(self):
        # Arrange
        circuit = CircuitBreaker(name="test", failure_threshold=1, timeout_seconds=60)
        upstream = Upstream({"/trade": [httpx.Response(500)]})
        adapter = build_adapter(upstream, circuit)

        with pytest.raises(UpstreamUnavailable):
            await adapter.get_trade_status("T100")
        calls_before = upstream.calls("/trade")

        # Act & Assert
        with pytest.raises(UpstreamUnavailable):
            await adapter.get_trade_status("T100")
        assert upstream.calls("/trade") == calls_before
        assert circuit.state == CircuitState.OPEN
