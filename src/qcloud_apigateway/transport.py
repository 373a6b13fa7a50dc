from __future__ import annotations

import base64
import hashlib
import hmac
import random
import time
from typing import Any, Callable, Mapping, Protocol

import httpx
import structlog
from circuitbreaker import CircuitBreaker, CircuitBreakerError
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from qcloud_apigateway.errors import RetryableTransportError, TransportError
from qcloud_apigateway.models import DEFAULT_REGION
from qcloud_apigateway.settings import Settings, get_settings

logger = structlog.get_logger()

SERVICE_TYPE = "apigateway"
REQUEST_CLIENT = "SDK_PYTHON_APIGATEWAY_0.1.0"
DEFAULT_SIGNATURE_METHOD = "HmacSHA1"


class SignedTransport(Protocol):
    """Signed-request capability the client delegates every call to.

    Implementations sign ``params`` with their credential pair, deliver them
    and return the decoded response body. Failures to deliver are raised;
    the response envelope is returned as-is for the caller to classify.
    """

    region: str

    async def request(
        self,
        params: Mapping[str, Any],
        options: Mapping[str, Any] | None = None,
        extra: Mapping[str, Any] | None = None,
    ) -> dict[str, Any]:
        ...


def is_retryable_status(status_code: int) -> bool:
    """Determine if HTTP status code is retryable."""
    return status_code in (429, 502, 503, 504)


def flatten_params(params: Mapping[str, Any], prefix: str = "") -> dict[str, str]:
    """Flatten nested params into dotted keys.

    ``{"requestConfig": {"path": "/a"}, "ids": ["x"]}`` becomes
    ``{"requestConfig.path": "/a", "ids.0": "x"}``. Underscores in keys are
    written as dots and ``None`` values are dropped.
    """
    flat: dict[str, str] = {}
    for key, value in params.items():
        name = str(key).replace("_", ".")
        if prefix:
            name = f"{prefix}.{name}"
        if value is None:
            continue
        if isinstance(value, Mapping):
            flat.update(flatten_params(value, name))
        elif isinstance(value, (list, tuple)):
            flat.update(flatten_params({str(i): item for i, item in enumerate(value)}, name))
        elif isinstance(value, bool):
            flat[name] = "true" if value else "false"
        else:
            flat[name] = str(value)
    return flat


def canonical_query(params: Mapping[str, str]) -> str:
    """Sorted, unencoded ``k=v`` pairs used in the string to sign."""
    return "&".join(f"{key}={params[key]}" for key in sorted(params))


def sign(string_to_sign: str, secret_key: str, signature_method: str = DEFAULT_SIGNATURE_METHOD) -> str:
    """Base64 HMAC of ``string_to_sign`` keyed by the secret key."""
    digestmod = hashlib.sha256 if signature_method == "HmacSHA256" else hashlib.sha1
    mac = hmac.new(secret_key.encode("utf-8"), string_to_sign.encode("utf-8"), digestmod)
    return base64.b64encode(mac.digest()).decode("ascii")


class QcloudTransport:
    """Signed-request transport for the Qcloud v2 action API.

    Every request is signed with the credential pair, POSTed (or sent as a
    GET query) to ``<serviceType>.<baseHost><path>`` and its JSON body
    returned. Connection failures and throttling statuses are retried
    behind a circuit breaker.
    """

    def __init__(
        self,
        secret_id: str,
        secret_key: str,
        *,
        service_type: str = SERVICE_TYPE,
        region: str = DEFAULT_REGION,
        settings: Settings | None = None,
        clock: Callable[[], float] = time.time,
        nonce: Callable[[], int] | None = None,
    ) -> None:
        settings = settings or get_settings()
        self._secret_id = secret_id
        self._secret_key = secret_key
        self._timeout = settings.timeout
        self._clock = clock
        self._nonce = nonce or (lambda: random.randint(1, 65535))
        self.region = str(region)
        self.defaults: dict[str, Any] = {
            "protocol": settings.protocol,
            "baseHost": settings.base_host,
            "path": settings.path,
            "method": settings.method,
            "serviceType": service_type,
            "SignatureMethod": settings.signature_method,
        }
        # One breaker per transport so failures never trip other clients.
        self._breaker = CircuitBreaker(
            failure_threshold=5,
            recovery_timeout=60,
            expected_exception=RetryableTransportError,
            name=f"{service_type}_transport",
        )
        self._guarded_send = self._breaker(self._send)

    def _options(self, options: Mapping[str, Any] | None) -> dict[str, Any]:
        merged = dict(self.defaults)
        if options:
            merged.update(options)
        return merged

    @staticmethod
    def host(options: Mapping[str, Any]) -> str:
        return options.get("host") or f"{options['serviceType']}.{options['baseHost']}"

    def url(self, options: Mapping[str, Any] | None = None) -> str:
        opts = self._options(options)
        return f"{opts['protocol']}://{self.host(opts)}{opts['path']}"

    def sign_params(
        self,
        params: Mapping[str, Any],
        options: Mapping[str, Any] | None = None,
    ) -> dict[str, str]:
        """Return the flattened request params with ``Signature`` attached."""
        opts = self._options(options)
        signature_method = params.get("SignatureMethod") or opts["SignatureMethod"]

        public: dict[str, Any] = {
            "Region": opts.get("Region") or self.region,
            "Timestamp": int(self._clock()),
            "Nonce": self._nonce(),
            "RequestClient": REQUEST_CLIENT,
        }
        if signature_method != DEFAULT_SIGNATURE_METHOD:
            public["SignatureMethod"] = signature_method

        flat = flatten_params({**public, **dict(params), "SecretId": self._secret_id})
        method = str(opts["method"]).upper()
        string_to_sign = f"{method}{self.host(opts)}{opts['path']}?{canonical_query(flat)}"
        flat["Signature"] = sign(string_to_sign, self._secret_key, signature_method)
        return flat

    async def request(
        self,
        params: Mapping[str, Any],
        options: Mapping[str, Any] | None = None,
        extra: Mapping[str, Any] | None = None,
    ) -> dict[str, Any]:
        opts = self._options(options)
        signed = self.sign_params(params, opts)
        url = self.url(opts)
        try:
            return await self._guarded_send(
                str(opts["method"]).upper(),
                url,
                signed,
                dict(extra or {}),
            )
        except CircuitBreakerError as exc:
            logger.warning("http_circuit_open", url=url, action=signed.get("Action"))
            raise RetryableTransportError(
                "Circuit open after repeated failures",
                {"url": url},
            ) from exc

    @retry(
        retry=retry_if_exception_type(RetryableTransportError),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=2, min=1, max=30),
        reraise=True,
    )
    async def _send(
        self,
        method: str,
        url: str,
        data: dict[str, str],
        extra: dict[str, Any],
    ) -> dict[str, Any]:
        """Execute the signed request with retry; wrapped by the circuit breaker."""
        extra = dict(extra)
        timeout = extra.pop("timeout", self._timeout)
        if method == "GET":
            payload = {"params": data}
        else:
            payload = {"data": data}

        try:
            async with httpx.AsyncClient(timeout=timeout) as client:
                response = await client.request(method, url, **payload, **extra)

                if is_retryable_status(response.status_code):
                    logger.warning(
                        "http_retryable_error",
                        status=response.status_code,
                        method=method,
                        url=url,
                        action=data.get("Action"),
                    )
                    raise RetryableTransportError(
                        f"HTTP {response.status_code}",
                        {"status": response.status_code},
                    )

                response.raise_for_status()
                try:
                    return response.json()
                except ValueError as exc:
                    raise TransportError(
                        "Gateway response did not contain JSON",
                        {"status": response.status_code},
                    ) from exc

        except httpx.HTTPStatusError as exc:
            logger.error(
                "http_permanent_error",
                status=exc.response.status_code,
                method=method,
                url=url,
                action=data.get("Action"),
            )
            raise TransportError(
                f"HTTP {exc.response.status_code}",
                {"status": exc.response.status_code},
            ) from exc
        except (httpx.TimeoutException, httpx.ConnectError, httpx.ReadError) as exc:
            logger.warning("http_network_error", method=method, url=url, error=str(exc))
            raise RetryableTransportError(str(exc) or type(exc).__name__) from exc
