"""Entity registry for the administration screens.

Each backend entity is described once: endpoint base, the candidate paths
its list envelope may use (in precedence order), the form fields with their
kinds, and a few behavioural knobs (status field, delayed refetch after
delete). Screens and view models are generic over these definitions.

Endpoint convention (from the backend routes)::

    GET  <base>                 list
    POST <base>/add             create
    POST <base>/update/{id}     update
    GET  <base>/delete/{id}     delete
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from schoolapp.config import settings
from schoolapp.domain.normalizer import (
    DATA,
    DATA_DATA,
    TOP_LEVEL,
    CandidatePath,
    coerce_flag,
    data_key,
)
from schoolapp.domain.validation import (
    check_date8,
    check_number,
    is_blank,
    require_fields,
    split_date8,
)

__all__ = [
    "FieldKind",
    "FieldSpec",
    "EntityDefinition",
    "ENTITIES",
    "get_entity",
    "list_entities",
]


class FieldKind(str, Enum):
    TEXT = "text"
    DATE8 = "date8"  # YYYYMMDD
    NUMBER = "number"
    FLAG = "flag"


@dataclass(frozen=True)
class FieldSpec:
    name: str
    label: str
    kind: FieldKind = FieldKind.TEXT
    required: bool = False
    send_as_int: bool = False
    default: Any = None

    def initial_value(self) -> Any:
        if self.default is not None:
            return self.default
        return True if self.kind is FieldKind.FLAG else ""


PayloadHook = Callable[[Dict[str, Any]], Dict[str, Any]]


@dataclass(frozen=True)
class EntityDefinition:
    key: str
    label: str
    endpoint: str
    list_paths: Tuple[CandidatePath, ...]
    fields: Tuple[FieldSpec, ...]
    status_field: Optional[str] = "status"
    title_field: str = "name"
    refetch_delay_ms: int = 0
    payload_hook: Optional[PayloadHook] = None
    delete_method: str = "GET"
    _by_name: Dict[str, FieldSpec] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "_by_name", {f.name: f for f in self.fields})

    # Endpoints ----------------------------------------------------------
    def list_url(self) -> str:
        return self.endpoint

    def add_url(self) -> str:
        return f"{self.endpoint}/add"

    def update_url(self, record_id: Any) -> str:
        return f"{self.endpoint}/update/{record_id}"

    def delete_url(self, record_id: Any) -> str:
        return f"{self.endpoint}/delete/{record_id}"

    # Form handling ------------------------------------------------------
    def field_named(self, name: str) -> Optional[FieldSpec]:
        return self._by_name.get(name)

    def default_form(self) -> Dict[str, Any]:
        return {f.name: f.initial_value() for f in self.fields}

    def form_from_record(self, record: Mapping[str, Any]) -> Dict[str, Any]:
        form: Dict[str, Any] = {}
        for spec in self.fields:
            value = record.get(spec.name)
            if spec.kind is FieldKind.FLAG:
                form[spec.name] = coerce_flag(value)
            else:
                form[spec.name] = "" if value is None else str(value)
        return form

    def validate(self, form: Mapping[str, Any]) -> None:
        labels = {f.name: f.label for f in self.fields}
        require_fields(form, [f.name for f in self.fields if f.required], labels)
        for spec in self.fields:
            value = form.get(spec.name)
            if is_blank(value):
                continue
            if spec.kind is FieldKind.DATE8:
                check_date8(value, spec.name, spec.label)
            elif spec.kind is FieldKind.NUMBER:
                check_number(value, spec.name, spec.label)

    def build_payload(self, form: Mapping[str, Any]) -> Dict[str, Any]:
        payload: Dict[str, Any] = {}
        for spec in self.fields:
            value = form.get(spec.name, spec.initial_value())
            if spec.kind is FieldKind.FLAG:
                payload[spec.name] = 1 if coerce_flag(value) else 0
            elif is_blank(value):
                if spec.required:
                    payload[spec.name] = value
                continue
            elif spec.kind is FieldKind.NUMBER:
                number = check_number(value, spec.name, spec.label)
                payload[spec.name] = int(number) if number.is_integer() else number
            elif spec.kind is FieldKind.DATE8:
                text = str(value).strip()
                payload[spec.name] = int(text) if spec.send_as_int else text
            else:
                payload[spec.name] = str(value).strip()
        if self.payload_hook is not None:
            payload = self.payload_hook(payload)
        return payload


def _split_calendar_date(payload: Dict[str, Any]) -> Dict[str, Any]:
    year, month, day = split_date8(str(payload.get("date", "")))
    payload.update(year=year, month=month, day=day)
    return payload


def _name(required: bool = True) -> FieldSpec:
    return FieldSpec("name", "Name", required=required)


_STATUS = FieldSpec("status", "Active", FieldKind.FLAG)

_LAGGY = settings.DELETE_REFETCH_DELAY_MS


def _settings_entity(
    key: str,
    label: str,
    slug: str,
    fields: Tuple[FieldSpec, ...],
    *,
    wrapper: Optional[str] = None,
    **kwargs: Any,
) -> EntityDefinition:
    paths: List[CandidatePath] = [TOP_LEVEL, DATA, DATA_DATA]
    if wrapper:
        paths.append(data_key(wrapper))
    return EntityDefinition(
        key=key,
        label=label,
        endpoint=f"/admin/settings/{slug}",
        list_paths=tuple(paths),
        fields=fields,
        **kwargs,
    )


_DEFINITIONS: Tuple[EntityDefinition, ...] = (
    _settings_entity(
        "academic_year",
        "Academic year",
        "academic-year",
        (
            _name(),
            FieldSpec("start_date", "Start date", FieldKind.DATE8, required=True, send_as_int=True),
            FieldSpec("end_date", "End date", FieldKind.DATE8, required=True, send_as_int=True),
            _STATUS,
        ),
        wrapper="academicYear",
    ),
    _settings_entity(
        "branch",
        "Branch",
        "branch",
        (_name(), FieldSpec("address", "Address"), _STATUS),
        wrapper="branch",
    ),
    _settings_entity("pickup_point", "Pickup point", "pick-up-point", (_name(), _STATUS)),
    EntityDefinition(
        key="grade",
        label="Grade",
        endpoint="/admin/settings/grade",
        # Grades usually arrive as data.grade; prefer it over a bare data object.
        list_paths=(TOP_LEVEL, data_key("grade"), DATA, DATA_DATA),
        fields=(
            _name(),
            FieldSpec("branch_id", "Branch", FieldKind.NUMBER, required=True),
            _STATUS,
        ),
    ),
    EntityDefinition(
        key="section",
        label="Section",
        endpoint="/admin/settings/section",
        list_paths=(TOP_LEVEL, data_key("section"), DATA, DATA_DATA),
        fields=(
            _name(),
            FieldSpec("grade_id", "Grade", FieldKind.NUMBER, required=True),
            _STATUS,
        ),
    ),
    _settings_entity(
        "rfid",
        "RFID",
        "rfid",
        (
            _name(),
            FieldSpec("rfid_no", "RFID number", required=True),
            FieldSpec("type", "Type"),
            _STATUS,
        ),
    ),
    _settings_entity(
        "vehicle",
        "Vehicle",
        "vehicle",
        (
            _name(),
            FieldSpec("vehicle_number", "Vehicle number", required=True),
            FieldSpec("remote_vehicle_id", "Remote vehicle id"),
            _STATUS,
        ),
    ),
    _settings_entity(
        "event",
        "Event",
        "event",
        (_name(), FieldSpec("description", "Description"), _STATUS),
    ),
    _settings_entity(
        "academic_calendar",
        "Academic calendar",
        "academic-calendar",
        (
            _name(),
            FieldSpec("date", "Date", FieldKind.DATE8, required=True),
            FieldSpec("description", "Description", required=True),
        ),
        status_field=None,
        refetch_delay_ms=_LAGGY,
        payload_hook=_split_calendar_date,
    ),
    _settings_entity("caste", "Caste", "caste", (_name(), _STATUS), refetch_delay_ms=_LAGGY),
    _settings_entity("religion", "Religion", "religion", (_name(), _STATUS)),
    _settings_entity("route", "Route", "route", (_name(), _STATUS), wrapper="route"),
    _settings_entity("scholarship", "Scholarship", "scholarship", (_name(), _STATUS)),
    _settings_entity(
        "subject",
        "Subject",
        "subject",
        (
            _name(),
            FieldSpec("code", "Code"),
            FieldSpec("subject_credit_hours", "Credit hours", FieldKind.NUMBER),
            FieldSpec("subject_type", "Type"),
            FieldSpec("grade_id", "Grade", FieldKind.NUMBER),
            FieldSpec("section_id", "Section", FieldKind.NUMBER),
        ),
        wrapper="subject",
        status_field=None,
        refetch_delay_ms=_LAGGY,
    ),
    _settings_entity(
        "notice",
        "Notice",
        "notice",
        (
            FieldSpec("title", "Title", required=True),
            FieldSpec("desc", "Description", required=True),
            FieldSpec("published_at", "Published at", FieldKind.DATE8),
            FieldSpec("grade_id", "Grade", FieldKind.NUMBER),
            FieldSpec("section_id", "Section", FieldKind.NUMBER),
        ),
        status_field=None,
        title_field="title",
    ),
    _settings_entity(
        "schedule",
        "Schedule",
        "schedule",
        (
            FieldSpec("grade_id", "Grade", FieldKind.NUMBER, required=True),
            FieldSpec("section_id", "Section", FieldKind.NUMBER, required=True),
            FieldSpec("subject_id", "Subject", FieldKind.NUMBER, required=True),
            FieldSpec("staff_id", "Teacher", FieldKind.NUMBER),
            FieldSpec("day", "Day", required=True),
            FieldSpec("start_time", "Start time", required=True),
            FieldSpec("end_time", "End time", required=True),
            FieldSpec("academic_year_id", "Academic year", FieldKind.NUMBER),
        ),
        status_field=None,
        title_field="day",
    ),
    _settings_entity("student_category", "Student category", "student-category", (_name(),), status_field=None),
    _settings_entity("post", "Post", "post", (_name(), _STATUS)),
    _settings_entity(
        "route_pickup_point",
        "Route pickup point",
        "route-pickup-point",
        (
            FieldSpec("route_id", "Route", FieldKind.NUMBER, required=True),
            FieldSpec("pick_up_point_id", "Pickup point", FieldKind.NUMBER, required=True),
        ),
        wrapper="routePickupPoint",
        status_field=None,
        title_field="route_id",
    ),
    _settings_entity("leave_type", "Leave type", "leave/type", (_name(), _STATUS)),
    EntityDefinition(
        key="exam_type",
        label="Exam type",
        endpoint="/admin/exam/type",
        list_paths=(TOP_LEVEL, DATA, DATA_DATA, data_key("examType")),
        fields=(
            _name(),
            FieldSpec("can_enter_mark", "Can enter marks", FieldKind.FLAG, default=False),
            FieldSpec("is_publish", "Published", FieldKind.FLAG, default=False),
            FieldSpec("is_schedule_publish", "Schedule published", FieldKind.FLAG, default=False),
            _STATUS,
        ),
    ),
    EntityDefinition(
        key="mark_grade",
        label="Mark grade",
        endpoint="/admin/exam/mark-grade",
        list_paths=(TOP_LEVEL, DATA, DATA_DATA),
        fields=(
            _name(),
            FieldSpec("gpa", "GPA", FieldKind.NUMBER, required=True),
            FieldSpec("percent_from", "Percent from", FieldKind.NUMBER, required=True),
            FieldSpec("percent_upto", "Percent upto", FieldKind.NUMBER, required=True),
            FieldSpec("description", "Description"),
        ),
        status_field=None,
    ),
)

ENTITIES: Dict[str, EntityDefinition] = {d.key: d for d in _DEFINITIONS}


def get_entity(key: str) -> EntityDefinition:
    try:
        return ENTITIES[key]
    except KeyError:
        raise KeyError(f"Unknown entity '{key}'") from None


def list_entities() -> List[EntityDefinition]:
    return list(_DEFINITIONS)
