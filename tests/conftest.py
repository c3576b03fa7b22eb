from __future__ import annotations

import os
from dataclasses import replace
from datetime import datetime

import pytest

os.environ.setdefault("APP_ENV", "testing")

from src.academy_ledger.academy_ledger.assessments.model import ScoreEntry, TestRecord
from src.academy_ledger.academy_ledger.container import wire_container
from src.academy_ledger.academy_ledger.core.enums import Role
from src.academy_ledger.academy_ledger.core.exceptions import ConflictError
from src.academy_ledger.academy_ledger.ledger.model import LessonDay, LessonDaySummary
from src.academy_ledger.academy_ledger.roster.model import ClassGroup, Student, Teacher
from src.academy_ledger.academy_ledger.users.model import Actor, User

FIXED_NOW = datetime(2024, 3, 10, 9, 0, 0)


class FakeUsersRepo:
    def __init__(self):
        self._next_id = 100
        self.users: dict[int, User] = {}

    def add(self, user: User) -> User:
        self.users[user.user_id] = user
        return user

    def get_by_id(self, user_id):
        return self.users.get(int(user_id))

    def get_by_login_id(self, login_id):
        return next((u for u in self.users.values() if u.login_id == login_id), None)

    def exists_with_role(self, role):
        return any(u.role == role for u in self.users.values())

    def create_user(self, *, login_id, full_name, password_hash, role):
        uid = self._next_id
        self._next_id += 1
        self.users[uid] = User(uid, login_id, full_name, password_hash, role)
        return uid


class FakeRosterRepo:
    def __init__(self):
        self.classes: dict[int, ClassGroup] = {}
        self.teachers: dict[int, Teacher] = {}
        self.students: dict[int, Student] = {}

    def get_class(self, class_id):
        return self.classes.get(int(class_id))

    def list_classes(self):
        return sorted(self.classes.values(), key=lambda c: c.name)

    def list_classes_for_student(self, student_id):
        return [c for c in self.list_classes() if c.has_student(student_id)]

    def list_classes_for_teacher(self, teacher_id):
        return [c for c in self.list_classes() if c.has_teacher(teacher_id)]

    def get_teacher(self, teacher_id):
        return self.teachers.get(int(teacher_id))

    def get_teacher_by_user(self, user_id):
        return next((t for t in self.teachers.values() if t.user_id == int(user_id)), None)

    def get_student(self, student_id):
        return self.students.get(int(student_id))

    def get_student_by_user(self, user_id):
        return next((s for s in self.students.values() if s.user_id == int(user_id)), None)

    def get_student_by_parent_user(self, user_id):
        return next((s for s in self.students.values() if s.parent_user_id == int(user_id)), None)

    def list_students(self, student_ids):
        return [self.students[int(sid)] for sid in student_ids if int(sid) in self.students]

    def add_students(self, *, class_id, student_ids):
        group = self.classes[int(class_id)]
        self.classes[group.class_id] = replace(group, student_ids=group.student_ids + tuple(student_ids))
        for sid in student_ids:
            self.students[sid] = replace(self.students[sid], class_id=group.class_id)

    def remove_student(self, *, class_id, student_id):
        group = self.classes[int(class_id)]
        self.classes[group.class_id] = replace(
            group, student_ids=tuple(s for s in group.student_ids if s != int(student_id))
        )
        student = self.students[int(student_id)]
        if student.class_id == group.class_id:
            self.students[student.student_id] = replace(student, class_id=None)

    def add_teacher(self, *, class_id, teacher_id):
        group = self.classes[int(class_id)]
        self.classes[group.class_id] = replace(group, teacher_ids=group.teacher_ids + (int(teacher_id),))

    def remove_teacher(self, *, class_id, teacher_id):
        group = self.classes[int(class_id)]
        self.classes[group.class_id] = replace(
            group, teacher_ids=tuple(t for t in group.teacher_ids if t != int(teacher_id))
        )


class FakeLessonDaysRepo:
    """Stores lesson days in memory and resolves display names like the MySQL joins do."""

    def __init__(self, roster: FakeRosterRepo):
        self._roster = roster
        self._next_id = 1
        self.days: dict[int, LessonDay] = {}
        self.saves = 0

    def _named(self, day: LessonDay) -> LessonDay:
        group = self._roster.get_class(day.class_id)
        periods = []
        for period in day.periods:
            teacher = self._roster.get_teacher(period.teacher_id)
            records = tuple(
                replace(r, student_name=(self._roster.get_student(r.student_id) or Student(0, 0, None, "")).name)
                for r in period.records
            )
            periods.append(replace(period, teacher_name=teacher.name if teacher else None, records=records))
        return replace(day, periods=tuple(periods), class_name=group.name if group else None)

    def get_by_id(self, lesson_day_id):
        day = self.days.get(int(lesson_day_id))
        return self._named(day) if day else None

    def get_by_class_and_date(self, *, class_id, lesson_date):
        for day in self.days.values():
            if day.class_id == int(class_id) and day.lesson_date == lesson_date:
                return self._named(day)
        return None

    def create(self, *, class_id, lesson_date):
        if self.get_by_class_and_date(class_id=class_id, lesson_date=lesson_date):
            raise ConflictError("A lesson day already exists for this class and date")
        day_id = self._next_id
        self._next_id += 1
        self.days[day_id] = LessonDay(lesson_day_id=day_id, class_id=int(class_id), lesson_date=lesson_date)
        return day_id

    def update_header(self, *, lesson_day_id, class_id, lesson_date):
        day = self.days.get(int(lesson_day_id))
        if not day:
            return False
        self.days[day.lesson_day_id] = replace(day, class_id=int(class_id), lesson_date=lesson_date)
        return True

    def delete(self, *, lesson_day_id):
        return self.days.pop(int(lesson_day_id), None) is not None

    def save_periods(self, *, lesson_day_id, periods):
        day = self.days.get(int(lesson_day_id))
        if not day:
            return False
        self.days[day.lesson_day_id] = replace(day, periods=tuple(periods))
        self.saves += 1
        return True

    def _ordered(self, days):
        return sorted(days, key=lambda d: (d.lesson_date, d.lesson_day_id), reverse=True)

    def list_summaries(self, *, date_from=None, date_to=None, class_ids=None, teacher_id=None):
        result = []
        for day in self._ordered(self.days.values()):
            if class_ids is not None and day.class_id not in class_ids:
                continue
            if date_from and day.lesson_date < date_from or date_to and day.lesson_date > date_to:
                continue
            if teacher_id is not None and not any(p.teacher_id == teacher_id for p in day.periods):
                continue
            named = self._named(day)
            result.append(
                LessonDaySummary(day.lesson_day_id, day.class_id, named.class_name or "", day.lesson_date, len(day.periods))
            )
        return result

    def list_for_class(self, *, class_id, date_from=None, date_to=None):
        return [
            self._named(d)
            for d in self._ordered(self.days.values())
            if d.class_id == int(class_id)
            and (date_from is None or d.lesson_date >= date_from)
            and (date_to is None or d.lesson_date <= date_to)
        ]


class FakeTestsRepo:
    def __init__(self):
        self._next_id = 1
        self.tests: dict[int, TestRecord] = {}

    def add(self, test: TestRecord) -> TestRecord:
        self.tests[test.test_id] = test
        self._next_id = max(self._next_id, test.test_id + 1)
        return test

    def get_by_id(self, test_id):
        return self.tests.get(int(test_id))

    def create(self, *, class_id, test_type, details):
        test_id = self._next_id
        self._next_id += 1
        self.tests[test_id] = TestRecord(
            test_id=test_id,
            class_id=int(class_id),
            test_type=test_type,
            test_date=details.test_date,
            question_count=details.question_count,
            subject=details.subject,
            big_unit=details.big_unit,
            small_unit=details.small_unit,
            source=details.source,
        )
        return test_id

    def update(self, *, test_id, details):
        test = self.tests.get(int(test_id))
        if not test:
            return False
        changes = {k: v for k, v in vars(details).items() if v is not None}
        self.tests[test.test_id] = replace(test, **changes)
        return True

    def delete(self, *, test_id):
        return self.tests.pop(int(test_id), None) is not None

    def upsert_score(self, *, test_id, student_id, score):
        test = self.tests[int(test_id)]
        if test.score_for(student_id) is None:
            scores = test.scores + (ScoreEntry(int(student_id), float(score)),)
        else:
            scores = tuple(
                ScoreEntry(s.student_id, float(score)) if s.student_id == int(student_id) else s for s in test.scores
            )
        self.tests[test.test_id] = replace(test, scores=scores)
        return True

    def list_for_class(self, *, class_id, date_from=None, date_to=None, limit=None):
        tests = sorted(
            (
                t
                for t in self.tests.values()
                if t.class_id == int(class_id)
                and (date_from is None or t.test_date >= date_from)
                and (date_to is None or t.test_date <= date_to)
            ),
            key=lambda t: (t.test_date, t.test_id),
            reverse=True,
        )
        return tests[:limit] if limit else tests


ADMIN = Actor(user_id=1, role=Role.ADMIN, full_name="Admin")
KIM = Actor(user_id=2, role=Role.TEACHER, full_name="Kim Minji")
LEE = Actor(user_id=3, role=Role.TEACHER, full_name="Lee Junho")
PARK = Actor(user_id=4, role=Role.STUDENT, full_name="Park Seoyeon")
CHOI = Actor(user_id=5, role=Role.STUDENT, full_name="Choi Jiwoo")
PARK_PARENT = Actor(user_id=6, role=Role.PARENT, full_name="Park Daehyun")
HAN = Actor(user_id=7, role=Role.STUDENT, full_name="Han Yuna")


@pytest.fixture
def fixed_now(monkeypatch):
    monkeypatch.setattr(
        "src.academy_ledger.academy_ledger.statistics.service.now_local", lambda: FIXED_NOW
    )
    return FIXED_NOW


@pytest.fixture
def roster() -> FakeRosterRepo:
    """Math A (id 1): Kim teaches Park and Choi. English B (id 2): Lee teaches Park.

    Park's primary class is Math A; Choi has no primary link; Han has no class at all.
    """
    repo = FakeRosterRepo()
    repo.teachers = {
        1: Teacher(teacher_id=1, user_id=KIM.user_id, name="Kim Minji"),
        2: Teacher(teacher_id=2, user_id=LEE.user_id, name="Lee Junho"),
    }
    repo.students = {
        1: Student(1, PARK.user_id, PARK_PARENT.user_id, "Park Seoyeon", "Hanbit Middle", "2", class_id=1),
        2: Student(2, CHOI.user_id, None, "Choi Jiwoo", "Hanbit Middle", "2"),
        3: Student(3, HAN.user_id, None, "Han Yuna", "Sejong Middle", "1"),
    }
    repo.classes = {
        1: ClassGroup(1, "Math A", "Evening math", teacher_ids=(1,), student_ids=(1, 2)),
        2: ClassGroup(2, "English B", "Reading", teacher_ids=(2,), student_ids=(1,)),
    }
    return repo


@pytest.fixture
def lesson_days(roster) -> FakeLessonDaysRepo:
    return FakeLessonDaysRepo(roster)


@pytest.fixture
def tests_repo() -> FakeTestsRepo:
    return FakeTestsRepo()


@pytest.fixture
def users_repo() -> FakeUsersRepo:
    return FakeUsersRepo()


@pytest.fixture
def container(users_repo, roster, lesson_days, tests_repo):
    return wire_container(
        users_repo=users_repo, roster_repo=roster, lesson_days_repo=lesson_days, tests_repo=tests_repo
    )
