import json

import httpx
import pytest

from bizdash.backend import BackendClient
from bizdash.config import Settings
from bizdash.errors import BackendError


def make_client(handler, **kwargs):
    http = httpx.Client(transport=httpx.MockTransport(handler))
    return BackendClient("https://project.example.co/", "anon-key", client=http, **kwargs)


def test_select_builds_query():
    seen = {}

    def handler(request):
        seen["request"] = request
        return httpx.Response(200, json=[{"id": 1}])

    backend = make_client(handler)
    rows = backend.select("sales_data", order_by="created_at", descending=True, filters={"user_id": "u1"})

    request = seen["request"]
    assert rows == [{"id": 1}]
    assert request.method == "GET"
    assert request.url.path == "/rest/v1/sales_data"
    assert request.url.params["select"] == "*"
    assert request.url.params["order"] == "created_at.desc"
    assert request.url.params["user_id"] == "eq.u1"
    assert request.headers["apikey"] == "anon-key"
    assert request.headers["authorization"] == "Bearer anon-key"


def test_user_token_replaces_key_as_bearer():
    seen = {}

    def handler(request):
        seen["auth"] = request.headers["authorization"]
        return httpx.Response(200, json=[])

    make_client(handler, access_token="user-jwt").select("traffic_data")
    assert seen["auth"] == "Bearer user-jwt"


def test_insert_posts_rows():
    seen = {}

    def handler(request):
        seen["request"] = request
        return httpx.Response(201)

    make_client(handler).insert("sales_data", [{"revenue": "1"}])

    request = seen["request"]
    assert request.method == "POST"
    assert request.headers["prefer"] == "return=minimal"
    assert json.loads(request.content) == [{"revenue": "1"}]


def test_insert_nothing_sends_nothing():
    def handler(request):
        raise AssertionError("no request expected")

    make_client(handler).insert("sales_data", [])


def test_delete_all_filters_on_id():
    seen = {}

    def handler(request):
        seen["request"] = request
        return httpx.Response(204)

    make_client(handler).delete_all("performance_metrics")
    assert seen["request"].method == "DELETE"
    assert seen["request"].url.params["id"] == "neq."


def test_rpc_posts_params():
    seen = {}

    def handler(request):
        seen["request"] = request
        return httpx.Response(204)

    result = make_client(handler).rpc("upsert_user_setting", {"p_user_id": "u1"})
    assert result is None
    assert seen["request"].url.path == "/rest/v1/rpc/upsert_user_setting"
    assert json.loads(seen["request"].content) == {"p_user_id": "u1"}


def test_error_message_is_passed_through():
    def handler(request):
        return httpx.Response(409, json={"code": "23505", "message": "duplicate key value"})

    with pytest.raises(BackendError, match="duplicate key value") as exc:
        make_client(handler).insert("sales_data", [{"id": 1}])
    assert exc.value.status_code == 409


def test_plain_text_error():
    def handler(request):
        return httpx.Response(500, text="upstream down")

    with pytest.raises(BackendError, match="upstream down"):
        make_client(handler).select("sales_data")


def test_transport_error_becomes_backend_error():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(BackendError, match="unreachable"):
        make_client(handler).select("sales_data")


def test_from_settings_requires_url():
    with pytest.raises(BackendError):
        BackendClient.from_settings(Settings(backend_url=""))


def test_non_json_success_body_becomes_backend_error():
    def handler(request):
        return httpx.Response(200, text="<html>login</html>")

    with pytest.raises(BackendError, match="invalid JSON") as exc:
        make_client(handler).select("sales_data")
    assert exc.value.status_code == 200


def test_rpc_non_json_body_becomes_backend_error():
    def handler(request):
        return httpx.Response(200, text="<html>proxy</html>")

    with pytest.raises(BackendError, match="invalid JSON"):
        make_client(handler).rpc("upsert_user_setting", {})
