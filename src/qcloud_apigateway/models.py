"""
Data-transfer shapes exchanged with the API Gateway.

Requests and responses are plain dicts at runtime; these TypedDicts only
describe them. Identifiers and timestamps are always assigned by the gateway.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any, Literal, TypedDict


class Region(StrEnum):
    """Region codes accepted by the gateway."""
    BEIJING = "bj"
    SHANGHAI = "sh"
    GUANGZHOU = "gz"


DEFAULT_REGION = Region.GUANGZHOU


class ServiceProtocol(StrEnum):
    HTTP = "http"
    HTTPS = "https"
    HTTP_AND_HTTPS = "http&https"


class ServiceType(StrEnum):
    """Backend type of an API."""
    HTTP = "HTTP"
    MOCK = "MOCK"
    SCF = "SCF"


class EnvironmentName(StrEnum):
    TEST = "test"
    PREPUB = "prepub"
    RELEASE = "release"


class ParameterPosition(StrEnum):
    HEADER = "HEADER"
    BODY = "BODY"
    QUERY = "QUERY"
    PATH = "PATH"


class ResponseType(StrEnum):
    HTML = "HTML"
    JSON = "JSON"
    TEST = "TEST"
    BINARY = "BINARY"
    XML = "XML"


StringBoolean = Literal["TRUE", "FALSE"]
ParameterType = Literal["string", "int", "long", "float", "double", "boolean"]
RequestControlUnit = Literal["SECOND"]


class Pager(TypedDict, total=False):
    limit: int  # 0..100
    offset: int


class TotalCount(TypedDict):
    totalCount: int


class Service(TypedDict, total=False):
    serviceId: str
    serviceName: str
    serviceDesc: str
    protocol: str
    subDomain: str
    availableEnvironments: list[Any]
    createdTime: str
    modifiedTime: str


class ServiceStatusSet(TotalCount):
    serviceStatusSet: list[Service]


class ApiRequestConfig(TypedDict):
    method: str
    path: str


class ApiConstantParameter(TypedDict, total=False):
    name: str
    desc: str
    position: str
    defaultValue: str


class ApiRequestParameter(TypedDict, total=False):
    name: str
    desc: str
    position: str
    defaultValue: str
    type: ParameterType
    required: StringBoolean


class ApiResponseErrorCode(TypedDict):
    code: str
    msg: str
    desc: str


class Api(TypedDict, total=False):
    apiId: str
    serviceId: str
    apiName: str
    apiDesc: str
    serviceType: str
    requestConfig: ApiRequestConfig
    method: str
    path: str
    serviceTimeout: int  # 1..1800 seconds
    authRequired: StringBoolean
    serviceScfFunctionName: str
    serviceMockReturnMessage: str
    constantParameters: list[ApiConstantParameter]
    requestParameters: list[ApiRequestParameter]
    responseType: str
    responseSuccessExample: str
    responseFailExample: str
    responseErrorCodes: list[ApiResponseErrorCode]
    createdTime: str
    modifiedTime: str


class ApiStatusSet(TotalCount):
    apiIdStatusSet: list[Api]


class RunApiResult(TypedDict):
    returnCode: int
    returnHeader: str
    returnBody: str
    delay: int


class ServiceRelease(TypedDict, total=False):
    serviceId: str
    environmentName: str
    releaseDesc: str
    releaseTime: str


class ServiceEnvironment(TypedDict):
    url: str
    environmentName: str
    status: Literal[0, 1]
    versionName: str


class ServiceEnvironmentList(TotalCount):
    environmentList: list[ServiceEnvironment]


class ServiceVersion(TypedDict):
    versionName: str
    versionDesc: str
    createTime: str
    environments: list[str]


class ServiceVersionList(TotalCount):
    versionList: list[ServiceVersion]


class UsagePlan(TypedDict, total=False):
    usagePlanId: str
    usagePlanName: str
    usagePlanDesc: str
    maxRequestNumPreSec: int
    requestControlUnit: RequestControlUnit
    createdTime: str
    modifiedTime: str


class UsagePlanBind(UsagePlan, total=False):
    bindSecretIdTotalCount: int
    bindSecretIds: list[Any]
    bindEnvironmentTotalCount: int
    bindEnvironments: list[Any]


class UsagePlanStatusSet(TotalCount):
    usagePlanStatusSet: list[UsagePlan]


class ServiceSearch(Pager, total=False):
    searchId: str  # starts with `service-`
    searchName: str


class ApiSearch(Pager, total=False):
    serviceId: str
    searchName: str  # URL path, e.g. `/path`


class RunApiParams(TypedDict, total=False):
    serviceId: str
    apiId: str
    contentType: Literal["application/x-www-form-urlencoded", "application/json"]


class DeleteServiceResult(TypedDict):
    requestId: None


class UnReleaseResult(TypedDict):
    unReleaseDesc: None
