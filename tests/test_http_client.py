import io
import json
import urllib.error

import pytest
from fakes import FakeResponse

from schoolapp.core.errors import TransportError
from schoolapp.core.http_client import ApiClient, EntityResource, mask_token
from schoolapp.domain.entities import get_entity


class RecordingOpener:
    def __init__(self, *results):
        self.results = list(results)
        self.requests = []

    def __call__(self, req, timeout=None):
        self.requests.append(req)
        result = self.results.pop(0)
        if isinstance(result, BaseException):
            raise result
        return FakeResponse(json.dumps(result).encode("utf-8") if not isinstance(result, bytes) else result)


def _http_error(code, body: bytes):
    return urllib.error.HTTPError("http://test/api/x", code, "err", {}, io.BytesIO(body))


def test_bearer_header_and_json_body():
    opener = RecordingOpener({"ok": True})
    client = ApiClient("http://test/api/", opener=opener)
    client.set_token("secret-token")
    assert client.post("/things/add", {"name": "A"}) == {"ok": True}
    req = opener.requests[0]
    assert req.full_url == "http://test/api/things/add"
    assert req.get_method() == "POST"
    assert req.get_header("Authorization") == "Bearer secret-token"
    assert json.loads(req.data) == {"name": "A"}


def test_no_auth_header_without_token():
    opener = RecordingOpener([])
    client = ApiClient("http://test/api", opener=opener)
    client.get("/list", params={"page": 2, "q": None})
    req = opener.requests[0]
    assert req.full_url == "http://test/api/list?page=2"
    assert req.get_header("Authorization") is None


def test_http_error_message_priority():
    opener = RecordingOpener(
        _http_error(422, b'{"message": "Email taken", "error": "dup"}'),
        _http_error(500, b'{"error": "Boom"}'),
        _http_error(502, b"Bad gateway page"),
        _http_error(500, b""),
    )
    client = ApiClient("http://test/api", opener=opener)
    messages = []
    for _ in range(4):
        with pytest.raises(TransportError) as info:
            client.get("/x")
        messages.append((info.value.status, info.value.message))
    assert messages == [
        (422, "Email taken"),
        (500, "Boom"),
        (502, "Bad gateway page"),
        (500, "An unknown error occurred."),
    ]


def test_network_failure_is_status_zero():
    client = ApiClient("http://test/api", opener=RecordingOpener(urllib.error.URLError("refused")))
    with pytest.raises(TransportError) as info:
        client.get("/x")
    assert info.value.status == 0
    assert info.value.message == "Network error. Please check your connection."


@pytest.mark.parametrize(
    "body, token, user",
    [
        ({"token": "t1", "user": {"id": 1}}, "t1", {"id": 1}),
        ({"access_token": "t2", "data": {"user": {"id": 2}}}, "t2", {"id": 2}),
        ({"data": {"token": "t3", "id": 3}}, "t3", {"token": "t3", "id": 3}),
        ({"auth": {"token": "t4"}}, "t4", None),
        ({"data": {"token": "t5"}}, "t5", None),
    ],
)
def test_login_extracts_token_and_user(body, token, user):
    client = ApiClient("http://test/api", opener=RecordingOpener(body))
    result = client.login("a@b.co", "secret1")
    assert result.token == token
    assert result.user == user
    # the session controller decides whether to keep the token
    assert client.token is None


def test_auth_check_unwraps_data():
    client = ApiClient("http://test/api", opener=RecordingOpener({"data": {"role": 0}}))
    assert client.auth_check() == {"role": 0}


def test_entity_resource_routes_and_delete_via_get():
    opener = RecordingOpener({"data": []}, {"message": "ok"}, {"message": "ok"}, {"message": "ok"})
    resource = EntityResource(ApiClient("http://test/api", opener=opener), get_entity("religion"))
    resource.list()
    resource.create({"name": "X"})
    resource.update(5, {"name": "Y"})
    resource.delete(5)
    routes = [(r.get_method(), r.full_url) for r in opener.requests]
    assert routes == [
        ("GET", "http://test/api/admin/settings/religion"),
        ("POST", "http://test/api/admin/settings/religion/add"),
        ("POST", "http://test/api/admin/settings/religion/update/5"),
        ("GET", "http://test/api/admin/settings/religion/delete/5"),
    ]


def test_status_false_envelope_raises_joined_messages():
    body = {"status": False, "msg": {"name": ["The name field is required."], "code": "Too long"}}
    resource = EntityResource(
        ApiClient("http://test/api", opener=RecordingOpener(body)), get_entity("subject")
    )
    with pytest.raises(TransportError) as info:
        resource.create({})
    assert info.value.status == 400
    assert info.value.message == "The name field is required., Too long"


def test_mask_token():
    assert mask_token(None) == "<none>"
    assert mask_token("abcdefghij") == "abcdef..."
    assert mask_token("abc") == "***"


def test_userless_login_reports_invalid_credentials():
    from schoolapp.core.errors import AuthError
    from schoolapp.core.storage import PersistentStore, StorageKey
    from schoolapp.domain.models import Credentials
    from schoolapp.gui.services.session_controller import SessionController

    store = PersistentStore()
    store.set_flag(StorageKey.ONBOARDING_COMPLETED)
    client = ApiClient("http://test/api", opener=RecordingOpener({"data": {"token": "T"}}))
    session = SessionController(store, client)
    session.bootstrap()
    with pytest.raises(AuthError) as info:
        session.login(Credentials("admin@school.test", "secret1"))
    assert info.value.message == "Invalid email or password."
    assert client.token is None


def test_dashboard_counts_grade_filter():
    opener = RecordingOpener({"data": {}}, {"data": {}})
    client = ApiClient("http://test/api", opener=opener)
    client.dashboard_counts()
    client.dashboard_counts(4)
    assert opener.requests[0].full_url == "http://test/api/admin/settings/count"
    assert opener.requests[1].full_url == "http://test/api/admin/settings/count?grade_id=4"
