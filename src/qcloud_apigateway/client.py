"""
Qcloud API Gateway client.

Example::

    gateway = APIGateway("secret-id", "secret-key", region="sh")
    status = await gateway.describe_services_status()
    # {"totalCount": 1, "serviceStatusSet": [{"serviceId": "service-0abc0def", ...}]}

Every catalog method tags its parameters with an ``Action`` name and goes
through :meth:`APIGateway.request`, which is the only place a response is
classified as success or failure.
"""

from __future__ import annotations

from typing import Any, Awaitable, Callable, Mapping

import structlog

from qcloud_apigateway.catalog import ActionSpec, get_action
from qcloud_apigateway.errors import ActionError, ConfigurationError, TransportError
from qcloud_apigateway.settings import Settings, get_settings
from qcloud_apigateway.transport import SERVICE_TYPE, QcloudTransport, SignedTransport

logger = structlog.get_logger()

ENVELOPE_FIELDS = ("code", "message", "codeDesc")

TransportFactory = Callable[..., SignedTransport]
ActionMethod = Callable[..., Awaitable[Any]]


def _action_method(name: str) -> ActionMethod:
    spec = get_action(name)

    async def method(
        self: APIGateway,
        params: Mapping[str, Any] | None = None,
        *,
        options: Mapping[str, Any] | None = None,
        extra: Mapping[str, Any] | None = None,
        **kwargs: Any,
    ) -> Any:
        return await self.call(spec, params, options=options, extra=extra, **kwargs)

    method.__name__ = spec.method_name
    method.__qualname__ = f"APIGateway.{spec.method_name}"
    method.__doc__ = spec.summary
    method.__annotations__ = {
        **method.__annotations__,
        "params": spec.params | None,
        "return": spec.returns,
    }
    return method


class APIGateway:
    """Client for the API Gateway management actions.

    Holds one signed transport built from the credential pair and region.
    Missing credentials (after falling back to ``QCLOUD_SECRET_ID`` and
    ``QCLOUD_SECRET_KEY``) raise :class:`ConfigurationError` immediately.
    """

    def __init__(
        self,
        secret_id: str | None = None,
        secret_key: str | None = None,
        *,
        region: str | None = None,
        settings: Settings | None = None,
        transport_factory: TransportFactory | None = None,
    ) -> None:
        settings = settings or get_settings()
        secret_id = secret_id or settings.secret_id
        secret_key = secret_key or settings.secret_key
        if not secret_id or not secret_key:
            raise ConfigurationError("SecretId and SecretKey are required")

        factory = transport_factory or QcloudTransport
        self._transport: SignedTransport = factory(
            secret_id,
            secret_key,
            service_type=SERVICE_TYPE,
            region=str(region or settings.region),
            settings=settings,
        )

    @classmethod
    def from_options(cls, options: Mapping[str, Any], **kwargs: Any) -> APIGateway:
        """Build a client from ``{"SecretId", "SecretKey", "Region"}`` options."""
        return cls(
            options.get("SecretId"),
            options.get("SecretKey"),
            region=options.get("Region"),
            **kwargs,
        )

    @classmethod
    def from_settings(cls, settings: Settings | None = None, **kwargs: Any) -> APIGateway:
        return cls(settings=settings or get_settings(), **kwargs)

    @property
    def transport(self) -> SignedTransport:
        return self._transport

    @property
    def region(self) -> str:
        return self._transport.region

    def set_region(self, region: str) -> APIGateway:
        """Change the default region of subsequent calls."""
        self._transport.region = str(region)
        logger.info("apigateway_region_changed", region=str(region))
        return self

    async def request(
        self,
        params: Mapping[str, Any],
        options: Mapping[str, Any] | None = None,
        extra: Mapping[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Send ``params`` and return the response without its envelope.

        Transport errors propagate unchanged. A positive envelope ``code``
        raises :class:`ActionError` named after the envelope's ``codeDesc``.
        """
        action = params.get("Action")
        logger.debug(
            "apigateway_request",
            action=action,
            region=(options or {}).get("Region") or self.region,
        )

        response = await self._transport.request(params, options or {}, extra or {})

        try:
            code = int(response.get("code") or 0)
        except (TypeError, ValueError) as exc:
            raise TransportError(
                "Gateway response has invalid code",
                {"code": response.get("code")},
            ) from exc
        if code > 0:
            logger.warning(
                "apigateway_action_failed",
                action=action,
                code=code,
                code_desc=response.get("codeDesc"),
            )
            raise ActionError(
                response.get("message", ""),
                code_desc=response.get("codeDesc", ""),
                code=code,
                action=action,
            )

        for field in ENVELOPE_FIELDS:
            response.pop(field, None)
        return response

    async def call(
        self,
        action: str | ActionSpec,
        params: Mapping[str, Any] | None = None,
        *,
        options: Mapping[str, Any] | None = None,
        extra: Mapping[str, Any] | None = None,
        **kwargs: Any,
    ) -> Any:
        """Invoke a catalog action by name (``CreateService`` or ``create_service``)."""
        spec = action if isinstance(action, ActionSpec) else get_action(action)
        payload = dict(params or {})
        payload.update(kwargs)
        payload["Action"] = spec.action

        result = await self.request(payload, options, extra)
        if spec.result_key is not None:
            return result.get(spec.result_key)
        return result

    # Services
    describe_services_status = _action_method("DescribeServicesStatus")
    describe_service = _action_method("DescribeService")
    create_service = _action_method("CreateService")
    modify_service = _action_method("ModifyService")
    delete_service = _action_method("DeleteService")

    # APIs
    describe_apis_status = _action_method("DescribeApisStatus")
    describe_api = _action_method("DescribeApi")
    create_api = _action_method("CreateApi")
    modify_api = _action_method("ModifyApi")
    delete_api = _action_method("DeleteApi")
    run_api = _action_method("RunApi")

    # Releases
    release_service = _action_method("ReleaseService")
    unrelease_service = _action_method("UnReleaseService")
    describe_service_environment_list = _action_method("DescribeServiceEnvironmentList")
    describe_service_release_version = _action_method("DescribeServiceReleaseVersion")

    # Usage plans
    describe_usage_plans_status = _action_method("DescribeUsagePlansStatus")
    describe_usage_plan = _action_method("DescribeUsagePlan")
    create_usage_plan = _action_method("CreateUsagePlan")
