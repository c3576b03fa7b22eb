from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from ..core.enums import TestType
from .model import TestDetails, TestRecord


class TestRepository(Protocol):
    __test__ = False

    def get_by_id(self, test_id: int) -> Optional[TestRecord]:
        raise NotImplementedError

    def create(self, *, class_id: int, test_type: TestType, details: TestDetails) -> int:
        raise NotImplementedError

    def update(self, *, test_id: int, details: TestDetails) -> bool:
        """Apply the non-None fields of details."""

        raise NotImplementedError

    def delete(self, *, test_id: int) -> bool:
        raise NotImplementedError

    def upsert_score(self, *, test_id: int, student_id: int, score: float) -> bool:
        """Replace the student's score on the test or append a new entry."""

        raise NotImplementedError

    def list_for_class(
        self,
        *,
        class_id: int,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        limit: Optional[int] = None,
    ) -> Sequence[TestRecord]:
        """Tests of a class ordered by date descending (bounds inclusive)."""

        raise NotImplementedError
