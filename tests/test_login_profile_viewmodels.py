from fakes import FakeApi, login_ok

from schoolapp.core.errors import TransportError
from schoolapp.core.storage import StorageKey
from schoolapp.domain.models import AppPhase, ToastKind
from schoolapp.gui.services.event_bus import EventBus
from schoolapp.gui.services.session_controller import SessionController
from schoolapp.gui.viewmodels.login_viewmodel import LOGIN_SUCCESS_TEXT, LoginViewModel
from schoolapp.gui.viewmodels.profile_viewmodel import ProfileViewModel


def _session(store, api):
    store.set_flag(StorageKey.ONBOARDING_COMPLETED)
    session = SessionController(store, api, EventBus())
    session.bootstrap()
    return session


def test_prefills_remembered_email(store):
    store.set(StorageKey.REMEMBER_ME, "admin@school.test")
    vm = LoginViewModel(_session(store, FakeApi()), None)
    assert vm.state.email == "admin@school.test"
    assert vm.state.remember_me is True


def test_invalid_email_blocks_network(store, notifications, shown):
    api = FakeApi()
    vm = LoginViewModel(_session(store, api), notifications)
    vm.state.email = "nope"
    vm.state.password = "secret1"
    assert vm.submit() is False
    assert api.calls == []
    assert vm.state.error_field == "email"
    assert [(m.kind, m.text) for m in shown] == [(ToastKind.ERROR, "Please enter a valid email")]


def test_short_password_blocks_network(store, notifications, shown):
    api = FakeApi()
    vm = LoginViewModel(_session(store, api), notifications)
    vm.state.email = "admin@school.test"
    vm.state.password = "123"
    assert vm.submit() is False
    assert api.calls == []
    assert shown[0].text == "Password must be at least 6 characters"


def test_successful_login(store, notifications, shown):
    api = FakeApi()
    api.login_result = login_ok(role=0)
    session = _session(store, api)
    vm = LoginViewModel(session, notifications)
    vm.state.email = "admin@school.test"
    vm.state.password = "secret1"
    assert vm.submit() is True
    assert session.phase is AppPhase.HOME
    assert vm.state.password == ""
    assert [(m.kind, m.text) for m in shown] == [(ToastKind.SUCCESS, LOGIN_SUCCESS_TEXT)]


def test_rejected_login_shows_error(store, notifications, shown):
    api = FakeApi()
    api.login_error = TransportError("x", status=401, data={"error": "Unauthorized"})
    session = _session(store, api)
    vm = LoginViewModel(session, notifications)
    vm.state.email = "admin@school.test"
    vm.state.password = "secret1"
    assert vm.submit() is False
    assert session.phase is AppPhase.LOGIN
    assert vm.state.submitting is False
    assert shown[-1].text == "Unauthorized"


def test_change_password_validation(store, notifications, shown):
    api = FakeApi()
    vm = ProfileViewModel(_session(store, api), api, notifications)
    assert vm.change_password("", "newpass1", "newpass1") is False
    assert vm.change_password("old", "short", "short") is False
    assert vm.change_password("old", "newpass1", "different") is False
    assert [m.text for m in shown] == [
        "Current password is required",
        "New password must be at least 6 characters",
        "Passwords do not match",
    ]
    assert api.calls == []


def test_change_password_success_and_failure(store, notifications, shown):
    api = FakeApi()
    vm = ProfileViewModel(_session(store, api), api, notifications)
    assert vm.change_password("oldpass", "newpass1", "newpass1") is True
    assert api.calls[-1] == ("change_password", "oldpass", "newpass1")
    assert shown[-1].kind is ToastKind.SUCCESS and shown[-1].text == "Password changed"
    api.change_password_error = TransportError("x", status=422, data={"message": "Wrong current password"})
    assert vm.change_password("bad", "newpass1", "newpass1") is False
    assert shown[-1].text == "Wrong current password"


def test_profile_summary_uses_role_label(store):
    api = FakeApi()
    api.login_result = login_ok(role=1, name="Asha")
    session = _session(store, api)
    from schoolapp.domain.models import Credentials

    session.login(Credentials("admin@school.test", "secret1"))
    vm = ProfileViewModel(session, api, None)
    assert vm.summary() == {"name": "Asha", "email": "admin@school.test", "role": "Admin"}
