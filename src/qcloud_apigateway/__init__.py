"""Async client for the Qcloud API Gateway management API."""

from qcloud_apigateway.catalog import ACTIONS, ActionSpec, actions_for, get_action
from qcloud_apigateway.client import APIGateway
from qcloud_apigateway.errors import (
    ActionError,
    APIGatewayError,
    ConfigurationError,
    RetryableTransportError,
    TransportError,
)
from qcloud_apigateway.logging import SecretMasker, bind_context, configure_logging
from qcloud_apigateway.models import DEFAULT_REGION, Region
from qcloud_apigateway.settings import Settings, get_settings
from qcloud_apigateway.transport import QcloudTransport, SignedTransport

__version__ = "0.1.0"

__all__ = [
    "ACTIONS",
    "APIGateway",
    "APIGatewayError",
    "ActionError",
    "ActionSpec",
    "ConfigurationError",
    "DEFAULT_REGION",
    "QcloudTransport",
    "Region",
    "RetryableTransportError",
    "SecretMasker",
    "Settings",
    "SignedTransport",
    "TransportError",
    "actions_for",
    "bind_context",
    "configure_logging",
    "get_action",
    "get_settings",
]
