"""Pydantic models describing a scholarship as delivered by the API."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from logging import getLogger
from typing import Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    ValidatorFunctionWrapHandler,
    field_validator,
)

log = getLogger(__name__)


def _blank_to_none(value: object) -> object:
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return value


def _none_to_list(value: object) -> object:
    return [] if value is None else value


def _fallback_on_error(
    default: object,
) -> Callable[[object, ValidatorFunctionWrapHandler], object]:
    """Build a wrap validator that treats an unparseable optional value as absent."""

    def validate(value: object, handler: ValidatorFunctionWrapHandler) -> object:
        try:
            return handler(value)
        except ValidationError:
            log.warning("Ignoring unparseable scholarship field value %r", value)
            return default

    return validate


def _has_race_code_id(item: object) -> bool:
    if not isinstance(item, Mapping):
        return False
    value: object = item.get("id")  # pyright: ignore[reportUnknownMemberType]
    if isinstance(value, bool):
        return False
    return isinstance(value, int) or (isinstance(value, str) and bool(value.strip()))


class ApiBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True, frozen=True)


class MeritPayload(ApiBaseModel):
    merit_type: str | None = Field(default=None, alias="meritType")
    minimum_gpa: float | None = Field(default=None, alias="minimumGPA")

    _normalize_blank = field_validator("merit_type", "minimum_gpa", mode="before")(_blank_to_none)
    _tolerate_gpa = field_validator("minimum_gpa", mode="wrap")(_fallback_on_error(None))


class RaceCodePayload(ApiBaseModel):
    id: str

    @field_validator("id", mode="before")
    @classmethod
    def _stringify(cls, value: object) -> object:
        return str(value) if isinstance(value, int) else value


class CollegePayload(ApiBaseModel):
    college_code: str | None = Field(default=None, alias="collegeCode")

    _normalize_blank = field_validator("college_code", mode="before")(_blank_to_none)


class MajorPayload(ApiBaseModel):
    major_code: str | None = Field(default=None, alias="majorCode")
    major: str | None = None
    college_code: str | None = Field(default=None, alias="collegeCode")

    _normalize_blank = field_validator("major_code", "major", "college_code", mode="before")(
        _blank_to_none
    )


class RawScholarship(ApiBaseModel):
    """One scholarship record; every field other than code and name is optional."""

    code: str
    name: str
    last_updated: str | None = Field(default=None, alias="lastUpdated")
    description: str | None = None
    levels: list[str] = Field(default_factory=list[str])
    merit: list[MeritPayload] = Field(default_factory=list[MeritPayload])
    minimum_age: int | None = Field(default=None, alias="minimumAge")
    race_codes: list[RaceCodePayload] = Field(
        default_factory=list[RaceCodePayload],
        alias="raceCodes",
    )
    international: bool = False
    students_of_color: bool = Field(default=False, alias="studentsOfColor")
    veterans: bool = False
    gender: str | None = None
    states: list[str] = Field(default_factory=list[str])
    colleges: list[CollegePayload] = Field(default_factory=list[CollegePayload])
    majors: list[MajorPayload] = Field(default_factory=list[MajorPayload])

    _normalize_blank = field_validator(
        "last_updated", "description", "minimum_age", "gender", mode="before"
    )(_blank_to_none)
    _normalize_lists = field_validator(
        "levels", "merit", "race_codes", "states", "colleges", "majors", mode="before"
    )(_none_to_list)
    _tolerate_age = field_validator("minimum_age", mode="wrap")(_fallback_on_error(None))
    _tolerate_flags = field_validator(
        "international", "students_of_color", "veterans", mode="wrap"
    )(_fallback_on_error(False))

    @field_validator("race_codes", mode="before")
    @classmethod
    def _drop_unusable_race_codes(cls, value: object) -> object:
        if not isinstance(value, list):
            return value
        items: list[object] = list(value)  # pyright: ignore[reportUnknownArgumentType]
        usable = [item for item in items if _has_race_code_id(item)]
        if len(usable) != len(items):
            log.warning("Ignoring %s race codes without an id", len(items) - len(usable))
        return usable

    @field_validator("code", "name", mode="before")
    @classmethod
    def _require_text(cls, value: object) -> object:
        if isinstance(value, int):
            value = str(value)
        if isinstance(value, str) and not value.strip():
            raise ValueError("must not be blank")
        return value

    @field_validator("levels", "states", mode="before")
    @classmethod
    def _stringify_items(cls, value: object) -> object:
        if isinstance(value, list):
            items: list[object] = list(value)  # pyright: ignore[reportUnknownArgumentType]
            return [str(item) for item in items if item is not None]
        return value

    @field_validator("international", "students_of_color", "veterans", mode="before")
    @classmethod
    def _falsy_to_false(cls, value: object) -> object:
        if value is None or value == "":
            return False
        return value


RawScholarshipInput = RawScholarship | Mapping[str, Any]


def ensure_raw_scholarship(record: RawScholarshipInput) -> RawScholarship:
    if isinstance(record, RawScholarship):
        return record
    return RawScholarship.model_validate(record)
