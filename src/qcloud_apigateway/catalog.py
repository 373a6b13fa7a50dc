from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Dict, List, Literal

from qcloud_apigateway.models import (
    Api,
    ApiSearch,
    ApiStatusSet,
    DeleteServiceResult,
    Pager,
    RunApiParams,
    RunApiResult,
    Service,
    ServiceEnvironmentList,
    ServiceRelease,
    ServiceSearch,
    ServiceStatusSet,
    ServiceVersionList,
    UnReleaseResult,
    UsagePlan,
    UsagePlanBind,
    UsagePlanStatusSet,
)

Resource = Literal["service", "api", "release", "usage_plan"]

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")


@dataclass(frozen=True)
class ActionSpec:
    """One remote action exposed as a client method.

    ``params`` and ``returns`` are the TypedDicts describing the request and
    the envelope-free response. ``result_key`` names a nested field returned
    in place of the whole response.
    """

    action: str
    resource: Resource
    summary: str
    params: Any = dict
    returns: Any = dict
    result_key: str | None = None
    method: str | None = None

    @property
    def method_name(self) -> str:
        return self.method or _CAMEL_BOUNDARY.sub("_", self.action).lower()


ACTIONS: tuple[ActionSpec, ...] = (
    # Services
    ActionSpec(
        "DescribeServicesStatus",
        "service",
        "List or search services. Accepts limit (0-100), offset, "
        "searchId (a `service-` id) and searchName.",
        params=ServiceSearch,
        returns=ServiceStatusSet,
    ),
    ActionSpec(
        "DescribeService",
        "service",
        "Describe one service by serviceId.",
        params=Service,
        returns=Service,
    ),
    ActionSpec(
        "CreateService",
        "service",
        "Create a service from protocol, serviceName and serviceDesc.",
        params=Service,
        returns=Service,
        result_key="data",
    ),
    ActionSpec(
        "ModifyService",
        "service",
        "Modify serviceName, serviceDesc or protocol of a service.",
        params=Service,
        returns=Service,
    ),
    ActionSpec(
        "DeleteService",
        "service",
        "Delete a service by serviceId.",
        params=Service,
        returns=DeleteServiceResult,
    ),
    # APIs
    ActionSpec(
        "DescribeApisStatus",
        "api",
        "List or search the APIs of a service. Accepts limit (0-100), "
        "offset and searchName (a URL path).",
        params=ApiSearch,
        returns=ApiStatusSet,
    ),
    ActionSpec(
        "DescribeApi",
        "api",
        "Describe one API by serviceId and apiId.",
        params=Api,
        returns=Api,
    ),
    ActionSpec("CreateApi", "api", "Create an API in a service.", params=Api, returns=Api),
    ActionSpec("ModifyApi", "api", "Modify an existing API.", params=Api),
    ActionSpec("DeleteApi", "api", "Delete an API by serviceId and apiId.", params=Api),
    ActionSpec(
        "RunApi",
        "api",
        "Invoke an API synchronously and return its status, headers, body and delay.",
        params=RunApiParams,
        returns=RunApiResult,
    ),
    # Releases
    ActionSpec(
        "ReleaseService",
        "release",
        "Release a service to the test, prepub or release environment.",
        params=ServiceRelease,
        returns=ServiceRelease,
    ),
    ActionSpec(
        "UnReleaseService",
        "release",
        "Take a service offline in one environment.",
        params=ServiceRelease,
        returns=UnReleaseResult,
        method="unrelease_service",
    ),
    ActionSpec(
        "DescribeServiceEnvironmentList",
        "release",
        "List the environments of a service with their status and URL.",
        params=Service,
        returns=ServiceEnvironmentList,
    ),
    ActionSpec(
        "DescribeServiceReleaseVersion",
        "release",
        "List the released versions of a service.",
        params=ServiceRelease,
        returns=ServiceVersionList,
    ),
    # Usage plans
    ActionSpec(
        "DescribeUsagePlansStatus",
        "usage_plan",
        "List usage plans.",
        params=Pager,
        returns=UsagePlanStatusSet,
    ),
    ActionSpec(
        "DescribeUsagePlan",
        "usage_plan",
        "Describe a usage plan with its bound secrets and environments.",
        params=UsagePlan,
        returns=UsagePlanBind,
    ),
    ActionSpec(
        "CreateUsagePlan",
        "usage_plan",
        "Create a usage plan from usagePlanName, usagePlanDesc, "
        "maxRequestNumPreSec and requestControlUnit.",
        params=UsagePlan,
        returns=UsagePlan,
    ),
)

_BY_NAME: Dict[str, ActionSpec] = {}
for _spec in ACTIONS:
    _BY_NAME[_spec.action] = _spec
    _BY_NAME[_spec.method_name] = _spec
del _spec


def get_action(name: str) -> ActionSpec:
    """Look up an action by its remote name or its method name."""
    spec = _BY_NAME.get(name)
    if spec is None:
        raise KeyError(f"Action '{name}' is not in the catalog")
    return spec


def actions_for(resource: Resource) -> List[ActionSpec]:
    return [spec for spec in ACTIONS if spec.resource == resource]
