import httpx
import pytest

from krystal.errors import (
    ApiError,
    AuthError,
    InvalidParamsError,
    JsonError,
    PaymentRequiredError,
    RequestError,
    UrlError,
)
from krystal.http import API_KEY_HEADER, HttpClient, add_param
from krystal.models import PoolSortBy

from conftest import BASE_URL, json_response


class TestBuildUrl:
    def test_params_keep_order_and_repeats(self):
        http = HttpClient("k", BASE_URL)
        url = http.build_url("/v1/positions", [("wallet", "0xabc"), ("protocols", "a"), ("protocols", "b")])
        assert str(url) == f"{BASE_URL}/v1/positions?wallet=0xabc&protocols=a&protocols=b"
        assert url.params.get_list("protocols") == ["a", "b"]

    def test_no_params_no_query_string(self):
        http = HttpClient("k", BASE_URL + "/")
        assert str(http.build_url("/v1/chains")) == f"{BASE_URL}/v1/chains"

    def test_special_characters_are_encoded(self):
        http = HttpClient("k", BASE_URL)
        url = http.build_url("/v1/pools", [("token", "a b&c=d")])
        assert "a b&c=d" not in str(url)
        assert url.params["token"] == "a b&c=d"

    def test_relative_base_is_rejected(self):
        http = HttpClient("k", "not-a-base-url")
        with pytest.raises(UrlError):
            http.build_url("/v1/chains")


class TestAddParam:
    def test_none_is_skipped(self):
        params = []
        add_param(params, "chainId", None)
        assert params == []

    def test_value_encoding(self):
        params = []
        add_param(params, "withIncentives", True)
        add_param(params, "withIncentives", False)
        add_param(params, "sortBy", PoolSortBy.VOLUME_24H)
        add_param(params, "chainId", 137)
        add_param(params, "protocol", "uniswapv3")
        assert params == [
            ("withIncentives", "true"),
            ("withIncentives", "false"),
            ("sortBy", "2"),
            ("chainId", "137"),
            ("protocol", "uniswapv3"),
        ]


class TestGetJson:
    async def test_sends_auth_headers(self, make_http):
        http, recorder = make_http(json_response({"ok": True}))
        async with http:
            data = await http.get_json(http.build_url("/v1/chains"))
        assert data == {"ok": True}
        request = recorder.last
        assert request.method == "GET"
        assert request.headers[API_KEY_HEADER] == "test-key"
        assert request.headers["Content-Type"] == "application/json"
        assert request.headers["User-Agent"] == "krystal-cli/0.1.0"

    @pytest.mark.parametrize(
        "status,error",
        [
            (400, InvalidParamsError),
            (401, AuthError),
            (402, PaymentRequiredError),
            (404, ApiError),
            (429, ApiError),
            (500, ApiError),
            (503, ApiError),
        ],
    )
    async def test_status_classification(self, make_http, status, error):
        http, _ = make_http(lambda request: httpx.Response(status, text="boom"))
        async with http:
            with pytest.raises(error) as exc:
                await http.get_json(http.build_url("/v1/chains"))
        assert type(exc.value) is error

    async def test_bad_request_carries_body(self, make_http):
        http, _ = make_http(lambda request: httpx.Response(400, text="limit too big"))
        async with http:
            with pytest.raises(InvalidParamsError) as exc:
                await http.get_json(http.build_url("/v1/pools"))
        assert exc.value.message == "Bad request: limit too big"

    async def test_server_error_is_retryable(self, make_http):
        http, _ = make_http(lambda request: httpx.Response(502, text="bad gateway"))
        async with http:
            with pytest.raises(ApiError) as exc:
                await http.get_json(http.build_url("/v1/pools"))
        assert exc.value.status == 502
        assert exc.value.message == "bad gateway"
        assert exc.value.is_retryable
        assert str(exc.value) == "API returned error: 502 - bad gateway"

    async def test_client_error_is_not_retryable(self, make_http):
        http, _ = make_http(lambda request: httpx.Response(404, text="nope"))
        async with http:
            with pytest.raises(ApiError) as exc:
                await http.get_json(http.build_url("/v1/pools"))
        assert not exc.value.is_retryable

    async def test_non_json_success_body(self, make_http):
        http, _ = make_http(lambda request: httpx.Response(200, text="<html>"))
        async with http:
            with pytest.raises(JsonError):
                await http.get_json(http.build_url("/v1/chains"))

    async def test_transport_failure(self, make_http):
        def refuse(request):
            raise httpx.ConnectError("connection refused", request=request)

        http, _ = make_http(refuse)
        async with http:
            with pytest.raises(RequestError) as exc:
                await http.get_json(http.build_url("/v1/chains"))
        assert exc.value.is_retryable
        assert exc.value.is_connect
        assert not exc.value.is_timeout
        assert "internet connection" in exc.value.user_message()

    async def test_timeout(self, make_http):
        def slow(request):
            raise httpx.ReadTimeout("timed out", request=request)

        http, _ = make_http(slow)
        async with http:
            with pytest.raises(RequestError) as exc:
                await http.get_json(http.build_url("/v1/chains"))
        assert exc.value.is_timeout
        assert exc.value.user_message().startswith("Request timed out")
