import base64

import pytest
from fastapi import Request

from browsable_sql.options import BasicAuthCredentials, BrowsableOptions
from browsable_sql.security.auth import (
    AUTH_CHALLENGE,
    basic_authorization,
    check_auth,
    parse_basic_authorization,
)


def make_request(headers=None, path="/query/raw", method="POST"):
    scope = {
        "type": "http",
        "method": method,
        "scheme": "http",
        "server": ("testserver", 80),
        "path": path,
        "query_string": b"",
        "headers": [(k.lower().encode("latin-1"), v.encode("latin-1")) for k, v in (headers or {}).items()],
    }
    return Request(scope)


@pytest.fixture
def options():
    return BrowsableOptions(basic_auth=BasicAuthCredentials(username="admin", password="pa:ss"))


def test_basic_authorization_encodes_credentials():
    header = basic_authorization("admin", "pa:ss")

    assert header == "Basic " + base64.b64encode(b"admin:pa:ss").decode()
    assert parse_basic_authorization(header) == ("admin", "pa:ss")


@pytest.mark.parametrize(
    "header",
    [None, "", "Bearer token", "Basic", "Basic !!!notbase64", "Basic " + base64.b64encode(b"nocolon").decode()],
)
def test_malformed_headers_do_not_parse(header):
    assert parse_basic_authorization(header) is None


def test_matching_credentials_proceed(options):
    request = make_request({"Authorization": basic_authorization("admin", "pa:ss")})

    assert check_auth(request, options) is None


def test_missing_header_gets_challenge(options):
    response = check_auth(make_request(), options)

    assert response.status_code == 401
    assert response.headers["www-authenticate"] == AUTH_CHALLENGE
    assert response.headers["access-control-allow-origin"] == "*"


def test_malformed_header_gets_challenge(options):
    response = check_auth(make_request({"Authorization": "Basic %%%"}), options)

    assert response.status_code == 401
    assert response.headers["www-authenticate"] == AUTH_CHALLENGE


@pytest.mark.parametrize("username,password", [("admin", "wrong"), ("root", "pa:ss"), ("admin", "pa")])
def test_wrong_credentials_get_no_challenge(options, username, password):
    response = check_auth(make_request({"Authorization": basic_authorization(username, password)}), options)

    assert response.status_code == 401
    assert "www-authenticate" not in response.headers
    assert response.body == b"Invalid credentials"


def test_missing_configuration_is_a_server_error():
    response = check_auth(make_request(), BrowsableOptions())

    assert response.status_code == 500
    assert b"Authentication configuration missing" in response.body


def test_disabled_auth_always_proceeds():
    options = BrowsableOptions(dangerously_disable_auth=True)

    assert check_auth(make_request(), options) is None
    assert check_auth(make_request({"Authorization": "garbage"}), options) is None


def test_credentials_repr_hides_password():
    assert "pa:ss" not in repr(BasicAuthCredentials(username="admin", password="pa:ss"))
