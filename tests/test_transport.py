import base64
import hashlib
import hmac
from urllib.parse import parse_qs

import httpx
import pytest
import respx
from circuitbreaker import CircuitBreakerError
from httpx import Response
from qcloud_apigateway.errors import RetryableTransportError, TransportError
from qcloud_apigateway.transport import (
    REQUEST_CLIENT,
    QcloudTransport,
    canonical_query,
    flatten_params,
    sign,
)
from tenacity import wait_none

ENDPOINT = "https://apigateway.api.qcloud.com/v2/index.php"


@pytest.fixture
def transport(settings):
    return QcloudTransport(
        "id",
        "key",
        settings=settings,
        clock=lambda: 1500000000.7,
        nonce=lambda: 42,
    )


def _form(request: httpx.Request) -> dict[str, str]:
    return {k: v[0] for k, v in parse_qs(request.content.decode()).items()}


def test_flatten_nested_params():
    flat = flatten_params(
        {
            "serviceId": "service-1",
            "requestConfig": {"method": "GET", "path": "/hello"},
            "requestParameters": [{"name": "id", "required": "TRUE"}],
            "serviceTimeout": 30,
            "enabled": True,
            "apiDesc": None,
            "instance_ids": ["a"],
        }
    )

    assert flat == {
        "serviceId": "service-1",
        "requestConfig.method": "GET",
        "requestConfig.path": "/hello",
        "requestParameters.0.name": "id",
        "requestParameters.0.required": "TRUE",
        "serviceTimeout": "30",
        "enabled": "true",
        "instance.ids.0": "a",
    }


def test_canonical_query_sorts_without_encoding():
    assert canonical_query({"b": "2", "a": "x&y", "B": "1"}) == "B=1&a=x&y&b=2"


def test_sign_uses_hmac_sha1_by_default():
    expected = base64.b64encode(hmac.new(b"key", b"payload", hashlib.sha1).digest()).decode()

    assert sign("payload", "key") == expected
    assert sign("payload", "key", "HmacSHA256") != expected


def test_sign_params_adds_public_params_and_signature(transport):
    signed = transport.sign_params({"Action": "DescribeService", "serviceId": "s-1"})

    expected_string = (
        "POSTapigateway.api.qcloud.com/v2/index.php?"
        "Action=DescribeService&Nonce=42&Region=gz"
        f"&RequestClient={REQUEST_CLIENT}&SecretId=id&Timestamp=1500000000&serviceId=s-1"
    )
    assert signed.pop("Signature") == sign(expected_string, "key")
    assert signed == {
        "Action": "DescribeService",
        "serviceId": "s-1",
        "Region": "gz",
        "Nonce": "42",
        "Timestamp": "1500000000",
        "RequestClient": REQUEST_CLIENT,
        "SecretId": "id",
    }


def test_sign_params_keeps_secret_id(transport):
    signed = transport.sign_params({"Action": "DescribeService", "SecretId": "other"})

    assert signed["SecretId"] == "id"


def test_sign_params_follows_region_changes(transport):
    transport.region = "bj"

    assert transport.sign_params({"Action": "DescribeService"})["Region"] == "bj"
    assert transport.sign_params({"Action": "DescribeService"}, {"Region": "sh"})["Region"] == "sh"


def test_sign_params_with_sha256(transport):
    signed = transport.sign_params({"Action": "DescribeService"}, {"SignatureMethod": "HmacSHA256"})

    assert signed["SignatureMethod"] == "HmacSHA256"
    assert len(base64.b64decode(signed["Signature"])) == 32


def test_url_honours_options(transport):
    assert transport.url() == ENDPOINT
    assert transport.url({"serviceType": "cvm", "protocol": "http"}) == "http://cvm.api.qcloud.com/v2/index.php"
    assert transport.url({"host": "gw.example.com"}) == "https://gw.example.com/v2/index.php"


@pytest.mark.asyncio
async def test_request_posts_signed_form(transport):
    with respx.mock:
        route = respx.post(ENDPOINT).mock(
            return_value=Response(200, json={"code": 0, "message": "", "codeDesc": "Success", "totalCount": 0})
        )

        body = await transport.request(
            {"Action": "DescribeServicesStatus", "limit": 10},
            extra={"headers": {"X-Request-Source": "tests"}},
        )

        assert body == {"code": 0, "message": "", "codeDesc": "Success", "totalCount": 0}
        request = route.calls.last.request
        form = _form(request)
        assert form["Action"] == "DescribeServicesStatus"
        assert form["limit"] == "10"
        assert form["Signature"]
        assert request.headers["X-Request-Source"] == "tests"


@pytest.mark.asyncio
async def test_request_get_sends_query(transport):
    with respx.mock:
        route = respx.route(
            method="GET", host="apigateway.api.qcloud.com", path="/v2/index.php"
        ).mock(return_value=Response(200, json={"code": 0}))

        await transport.request({"Action": "DescribeService"}, {"method": "GET"})

        params = route.calls.last.request.url.params
        assert params["Action"] == "DescribeService"
        assert params["SecretId"] == "id"


@pytest.mark.asyncio
async def test_request_returns_business_errors_unclassified(transport):
    payload = {"code": 4000, "message": "missing action", "codeDesc": "ActionNotFound"}
    with respx.mock:
        respx.post(ENDPOINT).mock(return_value=Response(200, json=payload))

        assert await transport.request({}) == payload


@pytest.mark.asyncio
async def test_request_permanent_error_no_retry(transport):
    with respx.mock:
        route = respx.post(ENDPOINT).mock(return_value=Response(400))

        with pytest.raises(TransportError) as exc_info:
            await transport.request({"Action": "DescribeService"})

        assert not isinstance(exc_info.value, RetryableTransportError)
        assert exc_info.value.details == {"status": 400}
        assert route.call_count == 1


@pytest.mark.asyncio
async def test_request_non_json_body(transport):
    with respx.mock:
        respx.post(ENDPOINT).mock(return_value=Response(200, text="<html>busy</html>"))

        with pytest.raises(TransportError):
            await transport.request({"Action": "DescribeService"})


@pytest.mark.asyncio
async def test_request_retry_on_503(transport):
    with respx.mock:
        route = respx.post(ENDPOINT)
        route.side_effect = [
            Response(503),
            Response(200, json={"code": 0, "serviceId": "service-1"}),
        ]

        body = await transport.request({"Action": "DescribeService"})

        assert body["serviceId"] == "service-1"
        assert route.call_count == 2


@pytest.mark.asyncio
async def test_request_retry_on_connect_error(transport):
    with respx.mock:
        route = respx.post(ENDPOINT)
        route.side_effect = [
            httpx.ConnectError("connection refused"),
            Response(200, json={"code": 0}),
        ]

        assert await transport.request({"Action": "DescribeService"}) == {"code": 0}
        assert route.call_count == 2


@pytest.fixture
def no_retry_wait(monkeypatch):
    monkeypatch.setattr(QcloudTransport._send.retry, "wait", wait_none())


@pytest.mark.asyncio
async def test_open_circuit_raises_transport_error(transport, no_retry_wait):
    with respx.mock:
        route = respx.post(ENDPOINT).mock(side_effect=httpx.ConnectError("refused"))

        for _ in range(5):
            with pytest.raises(RetryableTransportError):
                await transport.request({"Action": "DescribeService"})
        calls = route.call_count

        with pytest.raises(RetryableTransportError) as exc_info:
            await transport.request({"Action": "DescribeService"})

        assert isinstance(exc_info.value.__cause__, CircuitBreakerError)
        assert exc_info.value.details == {"url": ENDPOINT}
        assert route.call_count == calls


@pytest.mark.asyncio
async def test_circuit_is_per_transport(transport, settings, no_retry_wait):
    other = QcloudTransport("other-id", "other-key", region="sh", settings=settings)
    with respx.mock:
        route = respx.post(ENDPOINT)
        route.side_effect = [httpx.ConnectError("refused")] * 15 + [
            Response(200, json={"code": 0, "serviceId": "service-1"})
        ]

        for _ in range(5):
            with pytest.raises(RetryableTransportError):
                await transport.request({"Action": "DescribeService"})

        body = await other.request({"Action": "DescribeService"})

        assert body["serviceId"] == "service-1"
        assert route.call_count == 16
