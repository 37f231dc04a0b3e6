from freshdesk_gateway.errors import FreshdeskAPIError, format_api_error


def test_message_and_field_errors_are_joined():
    body = {"message": "Validation failed", "errors": {"email": ["is invalid"]}}
    message = format_api_error(400, "Bad Request", body)
    assert "Validation failed" in message
    assert "email: is invalid" in message


def test_list_shaped_field_errors():
    body = {
        "description": "Validation failed",
        "errors": [
            {"field": "email", "message": "It should be in the 'valid email address' format", "code": "invalid_value"},
            {"field": "priority", "message": "It should be one of these values: '1,2,3,4'", "code": "invalid_value"},
        ],
    }
    message = format_api_error(400, "Bad Request", body)
    assert message.startswith("Validation failed")
    assert "email: It should be in the 'valid email address' format" in message
    assert "priority:" in message


def test_message_only():
    assert format_api_error(404, "Not Found", {"message": "Record not found"}) == "Record not found"


def test_field_errors_without_message_use_status_line():
    message = format_api_error(400, "Bad Request", {"errors": {"name": ["can't be blank"]}})
    assert message == "400 Bad Request (name: can't be blank)"


def test_unparseable_body_falls_back_to_status_line():
    assert format_api_error(502, "Bad Gateway", None) == "502 Bad Gateway"
    assert format_api_error(500, "Internal Server Error", ["not", "an", "object"]) == "500 Internal Server Error"
    assert format_api_error(401, "Unauthorized", {"code": "invalid_credentials"}) == "401 Unauthorized"


def test_api_error_details():
    err = FreshdeskAPIError("boom", status_code=409, errors={"email": ["taken"]})
    assert err.status_code == 409
    assert err.error_type == "http_error"
    assert err.details == {"status": 409, "errors": {"email": ["taken"]}}
