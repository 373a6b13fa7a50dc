from qcloud_apigateway.errors import (
    ActionError,
    APIGatewayError,
    ConfigurationError,
    RetryableTransportError,
    TransportError,
    format_error_message,
)


def test_hierarchy():
    assert issubclass(ConfigurationError, APIGatewayError)
    assert issubclass(TransportError, APIGatewayError)
    assert issubclass(RetryableTransportError, TransportError)
    assert issubclass(ActionError, APIGatewayError)


def test_action_error_carries_envelope():
    err = ActionError("请求失败，参数错误:[action]", code_desc="ActionNotFound", code=4000)

    assert str(err) == "请求失败，参数错误:[action]"
    assert err.name == "ActionNotFound"
    assert err.code == 4000
    assert err.action is None
    assert "ActionNotFound" in repr(err)


def test_format_error_message():
    assert format_error_message(ConfigurationError("missing")) == "missing"
    assert (
        format_error_message(TransportError("HTTP 400", {"status": 400}))
        == "HTTP 400 (status=400)"
    )
    assert (
        format_error_message(ActionError("bad id", code_desc="InvalidParameterValue", code=4000))
        == "InvalidParameterValue: bad id"
    )
