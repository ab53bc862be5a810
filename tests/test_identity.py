from starlette.requests import Request

from app.utils.identity import IdentityResolver, decode_access_token

from conftest import make_token


def build_request(headers=None, cookies=None):
    raw_headers = [(k.lower().encode(), v.encode()) for k, v in (headers or {}).items()]
    if cookies:
        cookie_header = "; ".join(f"{k}={v}" for k, v in cookies.items())
        raw_headers.append((b"cookie", cookie_header.encode()))
    return Request({
        "type": "http",
        "method": "GET",
        "path": "/",
        "headers": raw_headers,
        "query_string": b"",
    })


resolver = IdentityResolver(allow_user_id_cookie=True)


def test_bearer_token_wins():
    request = build_request(
        headers={"Authorization": f"Bearer {make_token('abc', email='Me@Example.com')}"},
        cookies={"supabase-user-id": "cookie-user"},
    )

    identity = resolver.resolve(request)

    assert identity.user_id == "abc"
    assert identity.email == "me@example.com"
    assert identity.method == "bearer"


def test_invalid_bearer_falls_back_to_cookie_token():
    request = build_request(
        headers={"Authorization": "Bearer not-a-jwt"},
        cookies={"supabase-access-token": make_token("from-cookie")},
    )

    identity = resolver.resolve(request)

    assert identity.user_id == "from-cookie"
    assert identity.method == "cookie_token"


def test_expired_cookie_token_falls_back_to_user_id_cookie():
    request = build_request(cookies={
        "supabase-access-token": make_token("expired", expires_in=-60),
        "supabase-user-id": "raw-id",
    })

    identity = resolver.resolve(request)

    assert identity.user_id == "raw-id"
    assert identity.method == "cookie_id"
    assert identity.email is None


def test_placeholder_cookie_values_are_ignored():
    assert resolver.resolve(build_request(cookies={"supabase-user-id": "undefined"})) is None
    assert resolver.resolve(build_request(cookies={"supabase-user-id": "null"})) is None


def test_user_id_cookie_can_be_disabled():
    strict = IdentityResolver(allow_user_id_cookie=False)
    assert strict.resolve(build_request(cookies={"supabase-user-id": "raw-id"})) is None


def test_no_credentials():
    assert resolver.resolve(build_request()) is None


def test_forged_and_wrong_audience_tokens_rejected():
    assert decode_access_token(make_token("abc", secret="someone-else")) is None
    assert decode_access_token(make_token("abc", audience="anon")) is None
    assert decode_access_token(make_token("abc"))["sub"] == "abc"
