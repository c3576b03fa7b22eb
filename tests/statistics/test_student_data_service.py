from __future__ import annotations

from datetime import date

import pytest

from src.academy_ledger.academy_ledger.assessments.model import ScoreEntry, TestRecord
from src.academy_ledger.academy_ledger.core.enums import AttendanceMark, HomeworkMark, Role, TestType
from src.academy_ledger.academy_ledger.core.exceptions import AuthorizationError, NotFoundError, ValidationError
from src.academy_ledger.academy_ledger.ledger.model import Period, StudentRecord
from src.academy_ledger.academy_ledger.users.model import Actor

KIM = Actor(user_id=2, role=Role.TEACHER)
LEE = Actor(user_id=3, role=Role.TEACHER)
PARK = Actor(user_id=4, role=Role.STUDENT)
CHOI = Actor(user_id=5, role=Role.STUDENT)
PARK_PARENT = Actor(user_id=6, role=Role.PARENT)
HAN = Actor(user_id=7, role=Role.STUDENT)


@pytest.fixture
def service(container):
    return container.student_data_service


def _add_day(lesson_days, class_id, on, *periods):
    day_id = lesson_days.create(class_id=class_id, lesson_date=on)
    lesson_days.save_periods(lesson_day_id=day_id, periods=periods)
    return day_id


def _march_first(lesson_days):
    return _add_day(
        lesson_days,
        1,
        date(2024, 3, 1),
        Period(
            teacher_id=1,
            memo="Fractions",
            records=(
                StudentRecord(1, AttendanceMark.PRESENT, HomeworkMark.DONE),
                StudentRecord(2, AttendanceMark.ABSENT, HomeworkMark.NOT_DONE),
            ),
        ),
    )


def _test(test_id, class_id, on, scores):
    return TestRecord(
        test_id=test_id,
        class_id=class_id,
        test_type=TestType.WEEKLY,
        test_date=on,
        scores=tuple(ScoreEntry(sid, score) for sid, score in scores),
    )


def test_monthly_statistics_for_the_scenario_month(service, lesson_days):
    _march_first(lesson_days)

    stats = service.monthly_statistics(PARK, 2024, 3)

    assert (stats.attendance.total, stats.attendance.count, stats.attendance.rate) == (1, 1, 100.0)
    assert (stats.homework.total, stats.homework.count, stats.homework.rate) == (1, 1, 100.0)
    assert stats.test_average is None
    assert stats.test_count == 0


def test_monthly_statistics_are_scoped_to_the_month(service, lesson_days, tests_repo):
    _march_first(lesson_days)
    _add_day(lesson_days, 1, date(2024, 4, 1), Period(teacher_id=1, records=(StudentRecord(1),)))
    tests_repo.add(_test(1, 1, date(2024, 3, 31), [(1, 80), (2, 60)]))
    tests_repo.add(_test(2, 1, date(2024, 4, 1), [(1, 100)]))

    stats = service.monthly_statistics(PARK, "2024", "3")

    assert stats.attendance.total == 1
    assert stats.test_average == 80
    assert stats.test_count == 1

    april = service.monthly_statistics(PARK, 2024, 4)
    assert (april.attendance.total, april.attendance.count, april.attendance.rate) == (1, 0, 0.0)
    assert (april.homework.total, april.homework.rate) == (0, 0.0)
    assert april.test_average == 100


@pytest.mark.parametrize("year,month", [(1999, 3), (2101, 1), (2024, 0), (2024, 13), ("abc", 3)])
def test_monthly_statistics_reject_out_of_range_periods(service, year, month):
    with pytest.raises(ValidationError):
        service.monthly_statistics(PARK, year, month)


def test_parent_sees_the_linked_students_numbers(service, lesson_days):
    _march_first(lesson_days)

    assert service.monthly_statistics(PARK_PARENT, 2024, 3) == service.monthly_statistics(PARK, 2024, 3)


def test_explicit_class_outside_membership_is_not_found(service, lesson_days):
    _march_first(lesson_days)

    with pytest.raises(NotFoundError):
        service.lessons(CHOI, class_id=2)
    with pytest.raises(NotFoundError):
        service.monthly_statistics(CHOI, 2024, 3, class_id=2)
    with pytest.raises(NotFoundError):
        service.dashboard(CHOI, class_id=99)


def test_student_without_primary_class_falls_back_to_membership(service, lesson_days):
    _march_first(lesson_days)

    [entry] = service.lessons(CHOI)

    assert entry.attendance_status == AttendanceMark.ABSENT


def test_lessons_respect_the_requested_class_and_range(service, lesson_days):
    _march_first(lesson_days)
    _add_day(lesson_days, 1, date(2024, 3, 5), Period(teacher_id=1, memo="Decimals"))
    _add_day(lesson_days, 2, date(2024, 3, 5), Period(teacher_id=2, memo="Reading"))

    math = service.lessons(PARK, date_from="2024-03-02", date_to="2024-03-31")
    english = service.lessons(PARK, class_id="2")

    assert [e.progress for e in math] == ["Decimals"]
    assert [e.progress for e in english] == ["Reading"]
    assert english[0].teacher_name == "Lee Junho"


def test_classes_lists_memberships_by_name(service):
    assert [c.name for c in service.classes(PARK)] == ["English B", "Math A"]
    assert service.classes(HAN) == []


def test_tests_view_carries_own_score_and_class_stats(service, tests_repo):
    tests_repo.add(_test(1, 1, date(2024, 3, 1), [(1, 90), (2, 70)]))
    tests_repo.add(_test(2, 1, date(2024, 3, 8), [(2, 50)]))

    views = service.tests(PARK)

    assert [v.test.test_id for v in views] == [2, 1]
    assert views[0].my_score is None
    assert views[1].my_score == 90
    assert views[1].stats.average == 80
    assert views[1].stats.max_score == 90


def test_dashboard_uses_full_history_for_rates_and_the_trailing_week_for_recent_items(
    service, lesson_days, tests_repo, fixed_now
):
    _march_first(lesson_days)
    _add_day(
        lesson_days,
        1,
        date(2024, 3, 8),
        Period(
            teacher_id=1,
            memo="Decimals",
            homework_description="Workbook p.20",
            records=(StudentRecord(1, AttendanceMark.PRESENT, HomeworkMark.NOT_DONE, note="Needs review"),),
        ),
    )
    tests_repo.add(_test(1, 1, date(2024, 3, 2), [(1, 88)]))

    dashboard = service.dashboard(PARK)

    assert dashboard.class_group.class_id == 1
    assert dashboard.teacher_names == ["Kim Minji"]
    assert [e.lesson_date for e in dashboard.recent_lessons] == [date(2024, 3, 8), date(2024, 3, 1)]
    assert (dashboard.attendance.total, dashboard.attendance.count) == (2, 2)
    assert (dashboard.homework.total, dashboard.homework.count, dashboard.homework.rate) == (2, 1, 50.0)
    assert [h.homework_description for h in dashboard.recent_homework] == ["Workbook p.20"]
    assert [c.note for c in dashboard.recent_comments] == ["Needs review"]
    assert dashboard.recent_tests[0].my_score == 88


def test_dashboard_for_a_student_without_a_class_is_empty(service, fixed_now):
    dashboard = service.dashboard(HAN)

    assert dashboard.student.name == "Han Yuna"
    assert dashboard.class_group is None
    assert dashboard.recent_lessons == []
    assert (dashboard.homework.total, dashboard.homework.rate) == (0, 0.0)
    assert (dashboard.attendance.total, dashboard.attendance.rate) == (0, 0.0)


def test_staff_monthly_statistics_are_guarded_on_the_resolved_class(service, lesson_days):
    _march_first(lesson_days)

    stats = service.student_monthly_statistics(KIM, 1, 2024, 3)
    assert stats.attendance.count == 1

    with pytest.raises(AuthorizationError):
        service.student_monthly_statistics(LEE, 1, 2024, 3)
    assert service.student_monthly_statistics(LEE, 1, 2024, 3, class_id=2).attendance.total == 0

    with pytest.raises(AuthorizationError):
        service.student_monthly_statistics(PARK, 1, 2024, 3)
    with pytest.raises(NotFoundError):
        service.student_monthly_statistics(KIM, 404, 2024, 3)
    with pytest.raises(NotFoundError):
        service.student_monthly_statistics(KIM, 3, 2024, 3)
