from pathlib import Path

from fakes import FakeApi, FakeScheduler

from schoolapp.core.storage import MemoryBackend, PersistentStore, StorageKey
from schoolapp.domain.models import AppPhase
from schoolapp.gui.app.bootstrap import AppContext, create_app, parse_data_dir
from schoolapp.gui.viewmodels.crud_viewmodel import CrudViewModel


def test_headless_bootstrap_fresh_install(tmp_path: Path):
    ctx = create_app(headless=True, data_dir=tmp_path, api_client=FakeApi(), scheduler=FakeScheduler())
    assert isinstance(ctx, AppContext)
    assert ctx.qt_app is None
    assert ctx.initial_phase is AppPhase.ONBOARDING
    assert ctx.session.phase is AppPhase.ONBOARDING
    assert ctx.duration_s >= 0
    names = [e.name for e in ctx.timing.events]
    assert names == ["open_store", "build_services", "session_bootstrap"]
    assert not ctx.errors.installed


def test_bootstrap_with_stored_session():
    store = PersistentStore(
        MemoryBackend(
            {
                StorageKey.ONBOARDING_COMPLETED.value: "true",
                StorageKey.AUTH_TOKEN.value: "abc",
            }
        )
    )
    api = FakeApi()
    ctx = create_app(headless=True, store=store, api_client=api, scheduler=FakeScheduler())
    assert ctx.initial_phase is AppPhase.HOME
    assert api.token == "abc"


def test_onboarding_persists_across_bootstraps(tmp_path: Path):
    first = create_app(headless=True, data_dir=tmp_path, api_client=FakeApi(), scheduler=FakeScheduler())
    first.session.complete_onboarding()
    second = create_app(headless=True, data_dir=tmp_path, api_client=FakeApi(), scheduler=FakeScheduler())
    assert second.initial_phase is AppPhase.LOGIN


def test_view_model_factories_share_buses():
    ctx = create_app(headless=True, store=PersistentStore(), api_client=FakeApi(), scheduler=FakeScheduler())
    vm = ctx.crud_view_model("branch")
    assert isinstance(vm, CrudViewModel)
    assert vm.definition.key == "branch"
    assert ctx.login_view_model().state.email == ""


def test_parse_data_dir():
    assert parse_data_dir(["--data-dir", "/tmp/x"]) == "/tmp/x"
    assert parse_data_dir(["--data-dir=/tmp/y"]) == "/tmp/y"
    assert parse_data_dir(["--other"]) is None
