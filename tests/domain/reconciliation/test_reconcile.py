from __future__ import annotations

import logging

import pytest

from scholarsync.domain.model import ImportOutcome, ModerationState, Vocabulary
from scholarsync.domain.reconciliation import (
    InvalidScholarshipError,
    ReferenceResolver,
    ScholarshipArchiver,
    ScholarshipReconciler,
    fingerprint,
    is_importable,
)
from tests.helpers.scholarships import (
    FakeReferenceTermRepository,
    FakeScholarshipRepository,
    RecordingEditLock,
    make_payload,
)


def _reconciler(
    scholarships: FakeScholarshipRepository | None = None,
    terms: FakeReferenceTermRepository | None = None,
    *,
    edit_lock: RecordingEditLock | None = None,
    now: float = 5_000.0,
) -> ScholarshipReconciler:
    return ScholarshipReconciler(
        scholarships or FakeScholarshipRepository(),
        ReferenceResolver(terms or FakeReferenceTermRepository()),
        edit_lock=edit_lock,
        clock=lambda: now,
    )


def _term_names(terms: FakeReferenceTermRepository, vocabulary: Vocabulary) -> list[str]:
    return [term.name for term in terms.items if term.vocabulary is vocabulary]


def test_new_record_is_created_and_published() -> None:
    scholarships = FakeScholarshipRepository()
    record = make_payload(name="Smith &amp; Sons Award")

    result = _reconciler(scholarships).reconcile(record)

    assert result.outcome is ImportOutcome.CREATED
    stored = scholarships.items[0]
    assert stored.title == "Smith & Sons Award"
    assert stored.code == "SCH-1"
    assert stored.api_hash == fingerprint(record)
    assert stored.last_update == 1_709_294_400
    assert stored.import_stamp == 5_000
    assert stored.published is True
    assert stored.moderation_state is ModerationState.PUBLISHED


def test_field_mapping() -> None:
    scholarships = FakeScholarshipRepository()
    terms = FakeReferenceTermRepository()
    record = make_payload(
        levels=["1", "2"],
        merit=[{"meritType": "Need", "minimumGPA": 3.5}],
        minimumAge=18,
        raceCodes=[{"id": "B"}, {"id": 2}],
        international=True,
        studentsOfColor=True,
        gender="F",
        states=["MI", "ZZ"],
    )

    _reconciler(scholarships, terms).reconcile(record)

    stored = scholarships.items[0]
    assert stored.class_levels == ["first_current", "second"]
    assert stored.kind == "need"
    assert stored.minimum_gpa == 3.5
    assert stored.minimum_age == 18
    assert stored.race_codes == ["B", "2"]
    assert stored.international == ["yes"]
    assert stored.population == ["students_color", "women"]
    assert _term_names(terms, Vocabulary.LOCATION) == ["Michigan", "ZZ Unknown"]
    assert len(stored.home_state_ids) == 2


def test_replay_of_identical_record_is_skipped() -> None:
    scholarships = FakeScholarshipRepository()
    reconciler = _reconciler(scholarships)
    record = make_payload()

    first = reconciler.reconcile(record)
    second = reconciler.reconcile(dict(record))

    assert first.outcome is ImportOutcome.CREATED
    assert second.outcome is ImportOutcome.SKIPPED
    assert len(scholarships.items) == 1


def test_unpublished_record_with_same_fingerprint_is_republished() -> None:
    scholarships = FakeScholarshipRepository()
    edit_lock = RecordingEditLock()
    reconciler = _reconciler(scholarships, edit_lock=edit_lock)
    record = make_payload()
    stored = reconciler.reconcile(record).scholarship
    stored.archive()

    result = reconciler.reconcile(record)

    assert result.outcome is ImportOutcome.UPDATED
    assert stored.published is True
    assert stored.moderation_state is ModerationState.PUBLISHED
    assert edit_lock.released == [stored.id]


def test_changed_record_updates_in_place() -> None:
    scholarships = FakeScholarshipRepository()
    reconciler = _reconciler(scholarships)
    original = reconciler.reconcile(make_payload()).scholarship
    changed = make_payload(name="Renamed", last_updated="2024-04-01T00:00:00Z")

    result = reconciler.reconcile(changed)

    assert result.outcome is ImportOutcome.UPDATED
    assert result.scholarship is original
    assert len(scholarships.items) == 1
    assert original.title == "Renamed"
    assert original.api_hash == fingerprint(changed)


def test_equal_timestamp_counts_as_update() -> None:
    scholarships = FakeScholarshipRepository()
    reconciler = _reconciler(scholarships)
    reconciler.reconcile(make_payload())

    result = reconciler.reconcile(make_payload(description="Same day edit"))

    assert result.outcome is ImportOutcome.UPDATED
    assert scholarships.items[0].description == "Same day edit"


def test_older_changed_record_still_updates(caplog: pytest.LogCaptureFixture) -> None:
    scholarships = FakeScholarshipRepository()
    reconciler = _reconciler(scholarships)
    reconciler.reconcile(make_payload(last_updated="2024-05-01T00:00:00Z"))
    older = make_payload(description="restored", last_updated="2024-01-01T00:00:00Z")

    with caplog.at_level(logging.WARNING, logger="scholarsync.domain.reconciliation.reconcile"):
        result = reconciler.reconcile(older)

    stored = scholarships.items[0]
    assert result.outcome is ImportOutcome.UPDATED
    assert len(scholarships.items) == 1
    assert stored.description == "restored"
    assert stored.api_hash == fingerprint(older)
    assert stored.last_update == 1_704_067_200
    assert "did not advance" in caplog.text


def test_changed_record_stays_published_through_archival() -> None:
    scholarships = FakeScholarshipRepository()
    reconciler = _reconciler(scholarships)
    batch = [
        make_payload(f"SCH-{index}", last_updated="2024-05-01T00:00:00Z") for index in range(12)
    ]
    for record in batch:
        reconciler.reconcile(record)
    batch[0] = make_payload("SCH-0", description="late edit", last_updated="2024-01-01T00:00:00Z")

    for record in batch:
        reconciler.reconcile(record)
    report = ScholarshipArchiver(scholarships).archive({fingerprint(record) for record in batch})

    assert report.archived_count == 0
    assert all(item.published for item in scholarships.items)


def test_update_clears_fields_the_payload_dropped() -> None:
    scholarships = FakeScholarshipRepository()
    reconciler = _reconciler(scholarships)
    reconciler.reconcile(
        make_payload(international=True, raceCodes=[{"id": "B"}], minimumAge=18, gender="F")
    )

    sparse = {"code": "SCH-1", "name": "Example Scholarship", "lastUpdated": "2024-06-01"}
    result = reconciler.reconcile(sparse)

    stored = result.scholarship
    assert result.outcome is ImportOutcome.UPDATED
    assert stored.description is None
    assert stored.class_levels == []
    assert stored.kind is None
    assert stored.minimum_gpa is None
    assert stored.minimum_age is None
    assert stored.race_codes == []
    assert stored.international == []
    assert stored.population == []
    assert stored.home_state_ids == []
    assert stored.school_ids == []
    assert stored.major_ids == []
    assert stored.api_hash == fingerprint(sparse)


def test_cleared_stamps_force_rewrite_of_unchanged_record() -> None:
    scholarships = FakeScholarshipRepository()
    reconciler = _reconciler(scholarships)
    record = make_payload()
    stored = reconciler.reconcile(record).scholarship
    stored.import_stamp = None
    stored.last_update = None

    rewritten = reconciler.reconcile(record)
    replayed = reconciler.reconcile(record)

    assert rewritten.outcome is ImportOutcome.UPDATED
    assert stored.import_stamp == 5_000
    assert stored.last_update == 1_709_294_400
    assert replayed.outcome is ImportOutcome.SKIPPED


def test_unparseable_optional_fields_do_not_reject_record() -> None:
    scholarships = FakeScholarshipRepository()
    record = make_payload(
        merit=[{"meritType": "Merit", "minimumGPA": "N/A"}],
        minimumAge="unknown",
        raceCodes=[{"id": "B"}, {"label": "no id"}],
        veterans="sometimes",
    )

    result = _reconciler(scholarships).reconcile(record)

    stored = result.scholarship
    assert result.outcome is ImportOutcome.CREATED
    assert stored.kind == "merit"
    assert stored.minimum_gpa is None
    assert stored.minimum_age is None
    assert stored.race_codes == ["B"]
    assert stored.population == []


def test_single_school_claims_every_major() -> None:
    terms = FakeReferenceTermRepository()
    record = make_payload(
        colleges=[{"collegeCode": "EG"}],
        majors=[
            {"majorCode": "CS", "major": "Computer Science", "collegeCode": "XX"},
            {"majorCode": "ME", "major": "Mechanical Engineering"},
        ],
    )

    _reconciler(terms=terms).reconcile(record)

    school = terms.find_one(vocabulary=Vocabulary.SCHOOLS, code="EG")
    majors = terms.query(vocabulary=Vocabulary.SCHOLARSHIP_MAJOR)
    assert school is not None
    assert len(majors) == 2
    assert all(major.school_ids == [school.id] for major in majors)


def test_several_schools_match_majors_by_college_code() -> None:
    terms = FakeReferenceTermRepository()
    record = make_payload(
        colleges=[{"collegeCode": "EG"}, {"collegeCode": "TX"}],
        majors=[
            {"majorCode": "CS", "major": "Computer Science", "collegeCode": "EG"},
            {"majorCode": "LAW", "major": "Law", "collegeCode": "TX"},
            {"majorCode": "ART", "major": "Art", "collegeCode": "AR"},
            {"majorCode": "UND", "major": "Undeclared"},
        ],
    )

    _reconciler(terms=terms).reconcile(record)

    engineering = terms.find_one(vocabulary=Vocabulary.SCHOOLS, code="EG")
    law = terms.find_one(vocabulary=Vocabulary.SCHOOLS, code="LW")
    assert engineering is not None
    assert law is not None
    by_code = {term.code: term for term in terms.query(vocabulary=Vocabulary.SCHOLARSHIP_MAJOR)}
    assert by_code["CS"].school_ids == [engineering.id]
    assert by_code["LAW"].school_ids == [law.id]
    assert by_code["ART"].school_ids == []
    assert by_code["UND"].school_ids == []


def test_aliased_colleges_collapse_to_one_school() -> None:
    scholarships = FakeScholarshipRepository()
    terms = FakeReferenceTermRepository()
    record = make_payload(
        colleges=[{"collegeCode": "AH"}, {"collegeCode": "SS"}],
        majors=[{"majorCode": "HIS", "major": "History", "collegeCode": "AH"}],
    )

    _reconciler(scholarships, terms).reconcile(record)

    school = terms.find_one(vocabulary=Vocabulary.SCHOOLS, code="AHSS")
    assert school is not None
    assert scholarships.items[0].school_ids == [school.id]
    major = terms.find_one(vocabulary=Vocabulary.SCHOLARSHIP_MAJOR, code="HIS")
    assert major is not None
    assert major.school_ids == [school.id]


def test_reference_terms_are_shared_between_scholarships() -> None:
    terms = FakeReferenceTermRepository()
    reconciler = _reconciler(terms=terms)

    reconciler.reconcile(make_payload("A", "Alpha"))
    reconciler.reconcile(make_payload("B", "Beta"))

    assert _term_names(terms, Vocabulary.LOCATION) == ["Michigan"]
    assert _term_names(terms, Vocabulary.SCHOOLS) == ["EG"]
    assert _term_names(terms, Vocabulary.SCHOLARSHIP_MAJOR) == ["Computer Science"]


@pytest.mark.parametrize(
    "record",
    [
        {"code": "", "name": "No code"},
        {"code": "X", "name": "   "},
        {"name": "Missing code"},
        ["not", "a", "mapping"],
    ],
)
def test_records_without_code_or_name_are_rejected(record: object) -> None:
    assert is_importable(record) is False
    with pytest.raises(InvalidScholarshipError):
        _reconciler().reconcile(record)  # pyright: ignore[reportArgumentType]
