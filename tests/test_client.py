from urllib.parse import parse_qsl

import httpx
import pytest

from conftest import OPERATIONS


@pytest.mark.parametrize("operation, path", OPERATIONS)
def test_operation_sends_get_to_endpoint(client, server, operation, path):
    getattr(client, operation)()

    request = server.last
    assert request.method == "GET"
    assert request.url.host == "cms.example.com"
    assert request.url.path == path
    assert request.url.query == b""


@pytest.mark.parametrize("operation, path", OPERATIONS)
def test_operation_sends_headers(client, server, operation, path):
    getattr(client, operation)({})

    assert server.last.headers["API-NUM"] == "secret-key"
    assert server.last.headers["Content-Type"] == "application/json"


def test_fetch_events_query_follows_insertion_order(client, server):
    client.fetch_events({"timeline": "upcoming", "limit": 5})

    assert server.last.url.query == b"timeline=upcoming&limit=5"


def test_query_string_round_trip(client, server):
    params = {
        "name": "About us",
        "prefix": "a&b=c",
        "id": 42,
        "limit": 10,
        "start": 0,
        "content_type": "slider_image",
    }

    client.fetch_content(params)

    query = server.last.url.query.decode()
    assert parse_qsl(query, keep_blank_values=True) == [
        (key, str(value)) for key, value in params.items()
    ]


def test_boolean_params_are_sent_as_digits(client, server):
    client.fetch_content({"has_uploaded_file": True, "id": 3})
    assert server.last.url.query == b"has_uploaded_file=1&id=3"

    client.fetch_content({"has_uploaded_file": False})
    assert server.last.url.query == b"has_uploaded_file=0"


def test_none_params_are_omitted(client, server):
    client.fetch_media_gallery({"mediaType": "images", "id": None})

    assert server.last.url.query == b"mediaType=images"


def test_undocumented_params_are_sent(client, server):
    client.fetch_website_menu({"menuLevel": "parent", "lang": "da"})

    assert dict(server.last.url.params) == {"menuLevel": "parent", "lang": "da"}


def test_base_path_is_kept(server):
    from webcontents import WebcontentsApiClient

    client = WebcontentsApiClient(
        "https://cms.example.com/site/",
        "key",
        transport=httpx.MockTransport(server),
    )
    client.fetch_system_data()

    assert server.last.url.path == "/site/api/webcontents/fetchSystemData"


def test_new_api_key_used_by_next_request(client, server):
    client.set_api_key("new-key")
    client.fetch_content()

    assert server.last.headers["API-NUM"] == "new-key"


def test_new_api_url_used_by_next_request(client, server):
    client.set_api_url("https://other.example.com/")
    client.fetch_events()

    assert server.last.url.host == "other.example.com"
    assert server.last.url.path == "/api/webcontents/fetchEvents"


def test_request_uses_fixed_timeout(client, server):
    client.fetch_content()

    assert server.last.extensions["timeout"]["read"] == 30


def test_success_response_is_not_wrapped(client, server):
    server.respond = lambda request: httpx.Response(200, json={"items": [1, 2, 3]})

    assert client.fetch_content({}) == {"items": [1, 2, 3]}


def test_success_response_status_comes_from_payload(client, server):
    server.respond = lambda request: httpx.Response(
        200, json={"status": True, "data": [{"id": 1}]}
    )

    assert client.fetch_events() == {"status": True, "data": [{"id": 1}]}


def test_success_response_list_payload(client, server):
    server.respond = lambda request: httpx.Response(200, json=[{"id": 1}])

    assert client.fetch_website_menu() == [{"id": 1}]


def test_success_with_malformed_json_returns_none(client, server):
    # Known quirk: a broken success body is not reported as an error.
    server.respond = lambda request: httpx.Response(200, text="<html>ok</html>")

    assert client.fetch_content() is None


def test_success_with_empty_body_returns_none(client, server):
    server.respond = lambda request: httpx.Response(204)

    assert client.fetch_system_data() is None


def test_redirect_is_not_followed(client, server):
    server.respond = lambda request: httpx.Response(
        302, headers={"Location": "https://elsewhere.example.com/"}
    )

    assert client.fetch_content() is None
    assert len(server.requests) == 1


@pytest.mark.parametrize("operation, path", OPERATIONS)
def test_connection_error_is_returned(client, server, operation, path):
    def refuse(request):
        raise httpx.ConnectError("Connection refused", request=request)

    server.respond = refuse

    result = getattr(client, operation)()

    assert result["status"] is False
    assert result["data"] is None
    assert result["message"] == "API connection error: Connection refused"


def test_non_ascii_api_key_is_sent_as_utf8(server):
    from webcontents import WebcontentsApiClient

    client = WebcontentsApiClient(
        "https://cms.example.com", "clé", transport=httpx.MockTransport(server)
    )

    assert client.fetch_content() == {"status": True}
    sent = [value for name, value in server.last.headers.raw if name.lower() == b"api-num"]
    assert sent == ["clé".encode("utf-8")]


def test_unbuildable_url_is_reported_as_connection_error(server):
    from webcontents import WebcontentsApiClient

    client = WebcontentsApiClient(
        "https://cms.example.com:99999", "key", transport=httpx.MockTransport(server)
    )

    result = client.fetch_events()

    assert result["status"] is False
    assert result["data"] is None
    assert result["message"].startswith("API connection error: ")
    assert server.requests == []


def test_timeout_is_reported_as_connection_error(client, server):
    def time_out(request):
        raise httpx.ReadTimeout("timed out", request=request)

    server.respond = time_out

    result = client.fetch_media_gallery({"limit": 1})

    assert result == {
        "status": False,
        "message": "API connection error: timed out",
        "data": None,
    }


@pytest.mark.parametrize("operation, path", OPERATIONS)
def test_http_error_uses_message_from_body(client, server, operation, path):
    server.respond = lambda request: httpx.Response(404, json={"message": "not found"})

    result = getattr(client, operation)()

    assert result == {
        "status": False,
        "message": "not found",
        "data": {"message": "not found"},
    }


def test_http_error_with_non_json_body(client, server):
    server.respond = lambda request: httpx.Response(500, text="Internal Server Error")

    result = client.fetch_content()

    assert result == {
        "status": False,
        "message": "API request failed with HTTP code 500",
        "data": None,
    }


def test_http_error_without_message_keeps_body(client, server):
    server.respond = lambda request: httpx.Response(
        401, json={"error": "invalid key", "message": None}
    )

    result = client.fetch_events()

    assert result == {
        "status": False,
        "message": "API request failed with HTTP code 401",
        "data": {"error": "invalid key", "message": None},
    }


def test_http_error_with_list_body(client, server):
    server.respond = lambda request: httpx.Response(422, json=["bad", "input"])

    result = client.fetch_website_menu({"parentId": 1})

    assert result == {
        "status": False,
        "message": "API request failed with HTTP code 422",
        "data": ["bad", "input"],
    }


def test_status_399_is_success(client, server):
    server.respond = lambda request: httpx.Response(399, json={"items": []})

    assert client.fetch_content() == {"items": []}


def test_status_400_is_failure(client, server):
    server.respond = lambda request: httpx.Response(400, json={"message": "bad"})

    assert client.fetch_content()["status"] is False
