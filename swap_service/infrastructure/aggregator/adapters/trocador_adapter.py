"""Trocador Aggregator Adapter - implements AggregatorPort interface.

Використовує httpx.AsyncClient. Включає token bucket rate limiting, retry
logic (тільки read-only calls) та circuit breaker protection.

Trocador API:
    GET /new_rate         - rate query, повертає trade_id + quotes per provider
    GET /new_trade        - create trade з trade_id rate query + provider
    GET /trade            - trade status
    GET /validateaddress  - address validation
"""

import logging
from decimal import Decimal, InvalidOperation
from typing import Any

import httpx

from swap_service.domain.swaps.exceptions import UpstreamRejected, UpstreamUnavailable
from swap_service.domain.swaps.ports import AggregatorPort
from swap_service.domain.swaps.value_objects import (
    AddressVerdict,
    Quote,
    RateOffer,
    RateType,
    UpstreamTrade,
    UpstreamTradeStatus,
)
from swap_service.infrastructure.aggregator.circuit_breakers import (
    CircuitBreaker,
    CircuitBreakerOpenError,
)
from swap_service.infrastructure.aggregator.errors import (
    AggregatorErrorResponse,
    AggregatorTransientError,
)
from swap_service.infrastructure.aggregator.rate_limiting import RedisTokenBucket, TokenBucket
from swap_service.infrastructure.aggregator.retry import retry_with_backoff

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://trocador.app/api"

_RATE_LIMIT_MARKERS = ("rate limit", "too many requests")


def _to_decimal(value: Any) -> Decimal | None:
    """Parse upstream number (string або number) → Decimal."""
    if value is None or value == "":
        return None
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError):
        return None


def _to_int(value: Any) -> int | None:
    if value is None or value == "":
        return None
    try:
        return int(float(value))
    except (TypeError, ValueError):
        return None


def _to_text(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def compose_quote_token(rate_id: str, provider: str) -> str:
    """Quote token = rate query id + provider (unique per offer)."""
    return f"{rate_id}:{provider}"


class TrocadorAdapter(AggregatorPort):
    """Trocador aggregator adapter з rate limiting, retry та circuit breaker.

    Example:
        >>> adapter = TrocadorAdapter(api_key="your_api_key")
        >>> offers = await adapter.get_rates("btc", "xmr", Decimal("0.1"), "Mainnet", "Mainnet")
        >>> offers[0].quote_token  # "Y7kd...:ChangeNOW"
        >>> await adapter.close()
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = DEFAULT_BASE_URL,
        timeout_seconds: float = 30.0,
        max_retries: int = 3,
        retry_base_delay: float = 1.0,
        retry_max_delay: float = 4.0,
        circuit_breaker: CircuitBreaker | None = None,
        rate_limiter: TokenBucket | RedisTokenBucket | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize Trocador adapter.

        Args:
            api_key: Trocador API key (sent as API-Key header).
            base_url: API base URL.
            timeout_seconds: Timeout для кожного outbound call.
            max_retries: Retries для read-only calls.
            retry_base_delay: Backoff base delay (1s → 2s → 4s).
            retry_max_delay: Backoff cap.
            circuit_breaker: Shared breaker (default: own instance).
            rate_limiter: Token bucket, local або Redis (default: local, 10 tokens, 1/s).
            client: Pre-built httpx client (tests inject MockTransport).
        """
        self._client = client or httpx.AsyncClient(
            base_url=base_url,
            timeout=httpx.Timeout(timeout_seconds),
            headers={"API-Key": api_key},
        )
        self._owns_client = client is None
        self._circuit = circuit_breaker or CircuitBreaker(
            name="trocador",
            ignored_exceptions=(AggregatorErrorResponse,),
        )
        self._rate_limiter = rate_limiter or TokenBucket(capacity=10, refill_rate=1.0)

        self._get_with_retry = retry_with_backoff(
            max_retries=max_retries,
            base_delay=retry_base_delay,
            max_delay=retry_max_delay,
            retryable_exceptions=(AggregatorTransientError,),
        )(self._get_once)

    async def close(self) -> None:
        """Close HTTP client and rate limiter connections."""
        if self._owns_client:
            await self._client.aclose()
        await self._rate_limiter.close()
        logger.info("trocador.closed")

    # --- RATES ---

    async def get_rates(
        self,
        from_asset: str,
        to_asset: str,
        amount: Decimal,
        network_from: str,
        network_to: str,
        rate_type: RateType = RateType.FLOATING,
    ) -> list[RateOffer]:
        """Query /new_rate and normalize every provider quote to RateOffer.

        Quotes без parseable amount_to пропускаються.
        """
        params = {
            "ticker_from": from_asset,
            "network_from": network_from,
            "ticker_to": to_asset,
            "network_to": network_to,
            "amount_from": str(amount),
        }

        try:
            payload = await self._request("/new_rate", params, retry=True)
        except AggregatorErrorResponse as e:
            if e.status_code == 404:
                logger.info("trocador.rates.no_route", extra={"reason": e.reason})
                return []
            raise UpstreamUnavailable(
                "Aggregator refused rate query", reason=e.reason
            ) from e

        if not isinstance(payload, dict):
            raise UpstreamUnavailable("Malformed rate response: expected object")

        rate_id = _to_text(payload.get("trade_id"))
        if rate_id is None:
            raise UpstreamUnavailable("Malformed rate response: missing trade_id")

        quotes = payload.get("quotes") or []
        if isinstance(quotes, dict):
            quotes = quotes.get("quotes") or []
        if not isinstance(quotes, list):
            raise UpstreamUnavailable("Malformed rate response: quotes is not a list")

        offers: list[RateOffer] = []
        for raw in quotes:
            offer = self._parse_offer(raw, rate_id, amount)
            if offer is not None:
                offers.append(offer)

        logger.info(
            "trocador.rates.received",
            extra={
                "rate_id": rate_id,
                "pair": f"{from_asset}->{to_asset}",
                "quotes_count": len(offers),
                "rate_type": rate_type.value,
            },
        )
        return offers

    def _parse_offer(
        self, raw: Any, rate_id: str, amount: Decimal
    ) -> RateOffer | None:
        if not isinstance(raw, dict):
            return None

        provider = _to_text(raw.get("provider"))
        amount_to = _to_decimal(raw.get("amount_to"))
        if provider is None or amount_to is None or amount_to < 0:
            logger.warning(
                "trocador.rates.quote_skipped",
                extra={"rate_id": rate_id, "provider": provider},
            )
            return None

        return RateOffer(
            quote_token=compose_quote_token(rate_id, provider),
            provider=provider,
            amount_from=amount,
            amount_to=amount_to,
            min_amount=_to_decimal(raw.get("min_amount")),
            max_amount=_to_decimal(raw.get("max_amount")),
            provider_fee=_to_decimal(raw.get("waste")),
            kyc_rating=_to_text(raw.get("kycrating")),
            eta_minutes=_to_int(raw.get("eta")),
            upstream_rate_id=rate_id,
        )

    # --- TRADES ---

    async def create_trade(
        self,
        quote: Quote,
        destination_address: str,
        refund_address: str | None,
        destination_extra_id: str | None = None,
        refund_extra_id: str | None = None,
    ) -> UpstreamTrade:
        """Create upstream trade. NEVER retried.

        Raises:
            UpstreamRejected: Trocador відхилив (reason verbatim).
            UpstreamUnavailable: Transport failure або malformed response.
        """
        rate_id = quote.upstream_rate_id or quote.quote_token.split(":", 1)[0]
        params: dict[str, str] = {
            "id": rate_id,
            "ticker_from": quote.from_asset,
            "network_from": quote.from_network,
            "ticker_to": quote.to_asset,
            "network_to": quote.to_network,
            "amount_from": str(quote.amount),
            "address": destination_address,
            "provider": quote.provider,
            "fixed": "True" if quote.rate_type is RateType.FIXED else "False",
        }
        if destination_extra_id:
            params["address_memo"] = destination_extra_id
        if refund_address:
            params["refund"] = refund_address
        if refund_extra_id:
            params["refund_memo"] = refund_extra_id

        logger.info(
            "trocador.create_trade.start",
            extra={"rate_id": rate_id, "provider": quote.provider},
        )

        try:
            payload = await self._request("/new_trade", params, retry=False)
        except AggregatorErrorResponse as e:
            logger.warning(
                "trocador.create_trade.rejected",
                extra={"rate_id": rate_id, "reason": e.reason},
            )
            raise UpstreamRejected(
                "Aggregator rejected trade", reason=e.reason, provider=quote.provider
            ) from e

        if not isinstance(payload, dict):
            raise UpstreamUnavailable("Malformed trade response: expected object")

        upstream_trade_id = _to_text(payload.get("trade_id"))
        deposit_address = _to_text(payload.get("address_provider"))
        if upstream_trade_id is None or deposit_address is None:
            logger.error(
                "trocador.create_trade.malformed",
                extra={"rate_id": rate_id, "payload_keys": sorted(payload)},
            )
            raise UpstreamUnavailable(
                "Malformed trade response: missing trade_id or address_provider"
            )

        result = UpstreamTrade(
            upstream_trade_id=upstream_trade_id,
            deposit_address=deposit_address,
            deposit_extra_id=_to_text(payload.get("address_provider_memo")),
            amount_to=_to_decimal(payload.get("amount_to")),
            status=_to_text(payload.get("status")),
        )

        logger.info(
            "trocador.create_trade.success",
            extra={"upstream_trade_id": upstream_trade_id, "status": result.status},
        )
        return result

    async def get_trade_status(self, upstream_trade_id: str) -> UpstreamTradeStatus:
        """Poll /trade. Trocador повертає list з одним trade."""
        try:
            payload = await self._request(
                "/trade", {"id": upstream_trade_id}, retry=True
            )
        except AggregatorErrorResponse as e:
            raise UpstreamUnavailable(
                "Aggregator refused status query",
                upstream_trade_id=upstream_trade_id,
                reason=e.reason,
            ) from e

        if isinstance(payload, list):
            payload = payload[0] if payload else None
        if not isinstance(payload, dict):
            raise UpstreamUnavailable(
                "Malformed status response", upstream_trade_id=upstream_trade_id
            )

        status = _to_text(payload.get("status"))
        if status is None:
            raise UpstreamUnavailable(
                "Malformed status response: missing status",
                upstream_trade_id=upstream_trade_id,
            )

        return UpstreamTradeStatus(
            upstream_trade_id=_to_text(payload.get("trade_id")) or upstream_trade_id,
            status=status,
            amount_to=_to_decimal(payload.get("amount_to")),
            confirmations=_to_int(payload.get("confirmations")),
            raw=payload,
        )

    # --- ADDRESS VALIDATION ---

    async def validate_address(
        self, address: str, asset: str, network: str
    ) -> AddressVerdict:
        """Ask /validateaddress. Тільки boolean result вважається відповіддю."""
        params = {"ticker": asset, "network": network, "address": address}
        try:
            payload = await self._request("/validateaddress", params, retry=True)
        except AggregatorErrorResponse as e:
            if e.status_code in (401, 403):
                raise UpstreamUnavailable(
                    "Aggregator refused validation request", reason=e.reason
                ) from e
            return AddressVerdict(valid=False, reason=e.reason)

        result = payload.get("result") if isinstance(payload, dict) else None
        if not isinstance(result, bool):
            raise UpstreamUnavailable("Malformed validation response")

        if result:
            return AddressVerdict(valid=True)
        return AddressVerdict(
            valid=False,
            reason=_to_text(payload.get("message"))
            or f"Address is not valid for {asset} on {network}",
        )

    # --- TRANSPORT ---

    async def _request(self, path: str, params: dict[str, str], retry: bool) -> Any:
        """Send GET через circuit breaker (+ retry для read-only).

        Raises:
            AggregatorErrorResponse: Upstream refused (caller maps it).
            UpstreamUnavailable: Timeout, transport, open circuit, malformed body.
        """
        call = self._get_with_retry if retry else self._get_once
        try:
            return await self._circuit.call(call, path, params)
        except CircuitBreakerOpenError as e:
            raise UpstreamUnavailable("Aggregator circuit open", path=path) from e
        except AggregatorTransientError as e:
            raise UpstreamUnavailable(str(e), path=path) from e

    async def _get_once(self, path: str, params: dict[str, str]) -> Any:
        await self._rate_limiter.acquire()

        try:
            response = await self._client.get(path, params=params)
        except httpx.TimeoutException as e:
            logger.warning("trocador.timeout", extra={"path": path})
            raise AggregatorTransientError(f"Aggregator timeout on {path}") from e
        except httpx.TransportError as e:
            logger.warning("trocador.transport_error", extra={"path": path, "error": str(e)})
            raise AggregatorTransientError(f"Aggregator transport error: {e}") from e

        if response.status_code == 429 or response.status_code >= 500:
            logger.warning(
                "trocador.http_error",
                extra={"path": path, "status_code": response.status_code},
            )
            raise AggregatorTransientError(
                f"Aggregator HTTP {response.status_code} on {path}"
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise UpstreamUnavailable(
                "Malformed aggregator response: invalid JSON", path=path
            ) from e

        error = payload.get("error") if isinstance(payload, dict) else None
        if response.status_code >= 400 or error:
            reason = str(error or response.reason_phrase or "unknown error")
            if any(marker in reason.lower() for marker in _RATE_LIMIT_MARKERS):
                raise AggregatorTransientError(f"Aggregator rate limit: {reason}")
            raise AggregatorErrorResponse(
                status_code=response.status_code if response.status_code >= 400 else 400,
                reason=reason,
            )

        return payload
