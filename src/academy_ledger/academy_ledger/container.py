from __future__ import annotations

from dataclasses import dataclass

from .access.guard import AccessGuard
from .assessments.mysql_test_repository import MySQLTestRepository
from .assessments.repository import TestRepository
from .assessments.service import TestService
from .database.connection import DatabaseConnection
from .ledger.mysql_lesson_day_repository import MySQLLessonDayRepository
from .ledger.repository import LessonDayRepository
from .ledger.service import LessonLedgerService
from .roster.directory import RosterDirectory
from .roster.mysql_roster_repository import MySQLRosterRepository
from .roster.repository import RosterRepository
from .roster.service import RosterService
from .statistics.service import StudentDataService
from .users.mysql_user_repository import MySQLUserRepository
from .users.repository import UserRepository
from .users.service import AuthService


@dataclass(frozen=True)
class Container:
    users_repo: UserRepository
    roster_repo: RosterRepository
    lesson_days_repo: LessonDayRepository
    tests_repo: TestRepository

    directory: RosterDirectory
    guard: AccessGuard

    auth_service: AuthService
    roster_service: RosterService
    ledger_service: LessonLedgerService
    test_service: TestService
    student_data_service: StudentDataService


def wire_container(
    *,
    users_repo: UserRepository,
    roster_repo: RosterRepository,
    lesson_days_repo: LessonDayRepository,
    tests_repo: TestRepository,
) -> Container:
    """Assemble services over any repository implementations (MySQL or in-memory)."""
    directory = RosterDirectory(roster_repo)
    guard = AccessGuard(directory)

    return Container(
        users_repo=users_repo,
        roster_repo=roster_repo,
        lesson_days_repo=lesson_days_repo,
        tests_repo=tests_repo,
        directory=directory,
        guard=guard,
        auth_service=AuthService(users_repo),
        roster_service=RosterService(roster_repo, directory, guard),
        ledger_service=LessonLedgerService(lesson_days_repo, roster_repo, directory, guard),
        test_service=TestService(tests_repo, roster_repo, guard),
        student_data_service=StudentDataService(lesson_days_repo, tests_repo, roster_repo, directory, guard),
    )


def build_container(*, db_config: dict) -> Container:
    conn = DatabaseConnection.get_instance(DatabaseConnection.from_settings(db_config))

    return wire_container(
        users_repo=MySQLUserRepository(conn),
        roster_repo=MySQLRosterRepository(conn),
        lesson_days_repo=MySQLLessonDayRepository(conn),
        tests_repo=MySQLTestRepository(conn),
    )
