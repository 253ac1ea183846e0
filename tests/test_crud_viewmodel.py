from fakes import FakeResource

from schoolapp.core.errors import TransportError
from schoolapp.domain.entities import get_entity
from schoolapp.domain.models import ToastKind
from schoolapp.gui.services.event_bus import AppEvent, EventBus
from schoolapp.gui.viewmodels.crud_viewmodel import CrudViewModel

BRANCHES = {"data": [{"id": 1, "name": "Main", "address": "Road 1", "status": "1"}]}


def _vm(key, resource, notifications, scheduler, events=None):
    return CrudViewModel(get_entity(key), resource, notifications, scheduler, events)


def test_load_normalizes_envelope(notifications, shown, scheduler):
    resource = FakeResource(list_response={"data": {"grade": [{"id": 4, "name": "One"}]}})
    vm = _vm("grade", resource, notifications, scheduler)
    assert vm.load() is True
    assert vm.state.items == [{"id": 4, "name": "One"}]
    assert vm.state.loaded_once and not vm.state.loading
    assert shown == []


def test_first_load_failure_clears_list(notifications, shown, scheduler):
    resource = FakeResource(list_error=TransportError("Server error", status=500))
    vm = _vm("branch", resource, notifications, scheduler)
    assert vm.load() is False
    assert vm.state.items == []
    assert vm.state.error == "Server error"
    assert [(m.kind, m.text) for m in shown] == [(ToastKind.ERROR, "Server error")]


def test_later_load_failure_keeps_previous_list(notifications, shown, scheduler):
    resource = FakeResource(list_response=BRANCHES)
    vm = _vm("branch", resource, notifications, scheduler)
    vm.load()
    resource.list_error = TransportError("Network error. Please check your connection.")
    vm.load()
    assert vm.state.items == BRANCHES["data"]
    assert vm.state.error


def test_successful_create_one_toast_one_refetch(notifications, shown, scheduler):
    events = EventBus()
    mutations = []
    events.subscribe(AppEvent.ENTITY_MUTATED, lambda e: mutations.append(e.payload))
    resource = FakeResource(list_response=BRANCHES, create_response={"message": "Branch saved"})
    vm = _vm("branch", resource, notifications, scheduler, events)
    vm.set_field("name", "North")
    vm.set_field("address", "Hill 2")
    assert vm.submit() is True
    assert resource.calls[0] == ("create", {"name": "North", "address": "Hill 2", "status": 1})
    assert resource.count("list") == 1
    assert [(m.kind, m.text) for m in shown] == [(ToastKind.SUCCESS, "Branch saved")]
    assert vm.state.form == get_entity("branch").default_form()
    assert mutations == [{"entity": "branch", "action": "added"}]


def test_success_default_message(notifications, shown, scheduler):
    resource = FakeResource(create_response={"status": True})
    vm = _vm("caste", resource, notifications, scheduler)
    vm.set_field("name", "General")
    vm.submit()
    assert shown[0].text == "Caste added successfully"


def test_failed_create_keeps_form_and_skips_refetch(notifications, shown, scheduler):
    resource = FakeResource(
        create_error=TransportError("x", status=422, data={"message": "Name already taken"})
    )
    vm = _vm("branch", resource, notifications, scheduler)
    vm.set_field("name", "Main")
    assert vm.submit() is False
    assert resource.count("list") == 0
    assert [(m.kind, m.text) for m in shown] == [(ToastKind.ERROR, "Name already taken")]
    assert vm.state.form["name"] == "Main"
    assert vm.state.submitting is False


def test_validation_failure_makes_no_call(notifications, shown, scheduler):
    resource = FakeResource()
    vm = _vm("academic_year", resource, notifications, scheduler)
    vm.set_field("name", "2025")
    vm.set_field("start_date", "2025-01-01")
    vm.set_field("end_date", "20251231")
    assert vm.submit() is False
    assert resource.calls == []
    assert len(shown) == 1 and shown[0].kind is ToastKind.ERROR
    assert "YYYYMMDD" in shown[0].text


def test_non_finite_number_blocks_submit(notifications, shown, scheduler):
    resource = FakeResource()
    vm = _vm("mark_grade", resource, notifications, scheduler)
    for name, value in {"name": "A+", "gpa": "nan", "percent_from": "inf", "percent_upto": "100"}.items():
        vm.set_field(name, value)
    assert vm.submit() is False
    assert resource.calls == []
    assert shown[-1].text == "GPA must be a number"


def test_required_fields_message(notifications, shown, scheduler):
    vm = _vm("branch", FakeResource(), notifications, scheduler)
    assert vm.submit() is False
    assert shown[0].text == "Please fill Name"


def test_edit_then_update(notifications, shown, scheduler):
    resource = FakeResource(list_response=BRANCHES)
    vm = _vm("branch", resource, notifications, scheduler)
    vm.load()
    vm.begin_edit(vm.state.items[0])
    assert vm.state.editing_id == 1
    assert vm.state.form == {"name": "Main", "address": "Road 1", "status": True}
    vm.set_field("status", False)
    assert vm.submit() is True
    assert resource.calls[1] == ("update", 1, {"name": "Main", "address": "Road 1", "status": 0})
    assert vm.state.editing_id is None


def test_reset_form_forgets_record(notifications, scheduler):
    vm = _vm("branch", FakeResource(), notifications, scheduler)
    vm.begin_edit({"id": 9, "name": "X", "status": 0})
    vm.reset_form()
    assert vm.state.editing_id is None
    assert vm.state.form["name"] == ""


def test_submit_refused_while_submitting(notifications, scheduler):
    resource = FakeResource()
    vm = _vm("branch", resource, notifications, scheduler)
    vm.set_field("name", "A")
    vm.state.submitting = True
    assert vm.submit() is False
    assert resource.calls == []


def test_delete_refetches_immediately(notifications, shown, scheduler):
    resource = FakeResource(list_response=BRANCHES)
    vm = _vm("branch", resource, notifications, scheduler)
    assert vm.delete({"id": 1}) is True
    assert resource.calls == [("delete", 1), ("list", None)]
    assert shown[0].kind is ToastKind.SUCCESS


def test_delete_on_laggy_entity_waits(notifications, shown, scheduler):
    resource = FakeResource(delete_response={})
    vm = _vm("caste", resource, notifications, scheduler)
    vm.delete({"id": 5})
    assert resource.count("list") == 0
    assert vm.refetch_pending
    scheduler.advance(499)
    assert resource.count("list") == 0
    scheduler.advance(1)
    assert resource.count("list") == 1
    assert shown[0].text == "Caste deleted successfully"


def test_unmount_cancels_delayed_refetch(notifications, scheduler):
    resource = FakeResource()
    vm = _vm("subject", resource, notifications, scheduler)
    vm.delete(3)
    vm.unmount()
    scheduler.advance(1000)
    assert resource.count("list") == 0
    assert vm.load() is False


def test_failed_delete_shows_error(notifications, shown, scheduler):
    resource = FakeResource(delete_error=TransportError("Not found", status=404))
    vm = _vm("branch", resource, notifications, scheduler)
    assert vm.delete({"id": 1}) is False
    assert resource.count("list") == 0
    assert shown[0].text == "Not found"


def test_results_after_unmount_are_discarded(notifications, shown, scheduler):
    class UnmountingResource(FakeResource):
        vm = None

        def list(self, params=None):
            self.vm.unmount()
            return BRANCHES

    resource = UnmountingResource()
    vm = _vm("branch", resource, notifications, scheduler)
    resource.vm = vm
    assert vm.load() is False
    assert vm.state.items == []
    assert shown == []


def test_is_active_uses_flag_coercion(notifications, scheduler):
    vm = _vm("branch", FakeResource(), notifications, scheduler)
    assert vm.is_active({"status": "1"})
    assert vm.is_active({"status": 1.0})
    assert not vm.is_active({"status": "0"})
    assert not vm.is_active({})
    calendar = _vm("academic_calendar", FakeResource(), notifications, scheduler)
    assert calendar.is_active({})


def test_calendar_payload_split(notifications, scheduler):
    resource = FakeResource()
    vm = _vm("academic_calendar", resource, notifications, scheduler)
    vm.set_field("name", "Holiday")
    vm.set_field("date", "20250131")
    vm.set_field("description", "Break")
    assert vm.submit() is True
    payload = resource.calls[0][1]
    assert (payload["year"], payload["month"], payload["day"]) == ("2025", "01", "31")
