from datetime import date

from src.academy_ledger.academy_ledger.core.enums import AttendanceMark, HomeworkMark, HomeworkStatus
from src.academy_ledger.academy_ledger.ledger.model import LessonDay, Period, StudentRecord
from src.academy_ledger.academy_ledger.statistics.flattening import flatten_lesson_days


def _day(day_id, on, *periods):
    return LessonDay(lesson_day_id=day_id, class_id=1, lesson_date=on, periods=tuple(periods))


def test_entries_follow_day_order_then_period_order():
    days = [
        _day(7, date(2024, 3, 2), Period(teacher_id=1, memo="a"), Period(teacher_id=1, memo="b")),
        _day(5, date(2024, 3, 1), Period(teacher_id=2, memo="c")),
    ]

    entries = flatten_lesson_days(days, student_id=1)

    assert [e.entry_id for e in entries] == ["7-0", "7-1", "5-0"]
    assert [e.period_label for e in entries] == [1, 2, 1]
    assert [e.progress for e in entries] == ["a", "b", "c"]


def test_missing_record_yields_blank_marks():
    period = Period(
        teacher_id=1,
        memo="Unit 4",
        records=(StudentRecord(student_id=1, attendance=AttendanceMark.PRESENT),),
        teacher_name="Kim Minji",
    )

    [entry] = flatten_lesson_days([_day(1, date(2024, 3, 1), period)], student_id=2)

    assert entry.attendance_status == AttendanceMark.UNSET
    assert entry.homework_status == HomeworkStatus.BLANK
    assert entry.homework_done is False
    assert entry.note is None
    assert entry.teacher_name == "Kim Minji"
    assert entry.progress == "Unit 4"


def test_scenario_present_and_done_maps_to_submitted():
    period = Period(
        teacher_id=1,
        homework_description="  p.10  ",
        homework_due_date=date(2024, 3, 4),
        records=(
            StudentRecord(1, AttendanceMark.PRESENT, HomeworkMark.DONE, note="  well done "),
            StudentRecord(2, AttendanceMark.ABSENT, HomeworkMark.NOT_DONE),
        ),
    )
    day = _day(1, date(2024, 3, 1), period)

    [s1] = flatten_lesson_days([day], student_id=1)
    [s2] = flatten_lesson_days([day], student_id=2)

    assert s1.homework_status == HomeworkStatus.SUBMITTED
    assert s1.homework_done is True
    assert s1.attendance_status == AttendanceMark.PRESENT
    assert s1.note == "well done"
    assert s1.homework_description == "p.10"
    assert s1.homework_due_date == date(2024, 3, 4)
    assert s2.homework_status == HomeworkStatus.NOT_SUBMITTED
    assert s2.attendance_status == AttendanceMark.ABSENT


def test_day_without_periods_contributes_nothing():
    assert flatten_lesson_days([_day(1, date(2024, 3, 1))], student_id=1) == []
