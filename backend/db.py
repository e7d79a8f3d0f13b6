"""
Document store for quiz submissions: SQLAlchemy and an in-memory test implementation.
"""

from __future__ import annotations

import copy
import time
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, Optional, Protocol

from sqlalchemy import JSON, Column, Float, String, create_engine, select
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from shared.types import ProfileStatus


class SubmissionNotFound(LookupError):
    """No submission is stored for the given email."""


class InvalidStatusTransition(ValueError):
    """Statuses only move forward: pending -> matched -> contacted."""


class DbClient(Protocol):
    """Interface for submission storage."""

    def get_submission(self, email: str) -> Optional["SubmissionRecord"]:
        ...

    def upsert_submission(
        self,
        *,
        user_id: Optional[str],
        email: str,
        name: Optional[str],
        phone_number: Optional[str],
        answers: dict,
    ) -> "SubmissionRecord":
        ...

    def update_status(self, email: str, status: ProfileStatus) -> "SubmissionRecord":
        ...

    def list_submissions(
        self, status: Optional[ProfileStatus] = None, limit: int = 100
    ) -> list["SubmissionRecord"]:
        ...


def _iso(timestamp: float) -> str:
    return datetime.fromtimestamp(timestamp, timezone.utc).isoformat()


def check_transition(current: ProfileStatus, target: ProfileStatus) -> None:
    if not current.can_transition_to(target):
        raise InvalidStatusTransition(
            f"Cannot move a submission from {current.value} to {target.value}"
        )


@dataclass
class SubmissionRecord:
    email: str
    user_id: Optional[str] = None
    name: Optional[str] = None
    phone_number: Optional[str] = None
    answers: dict = field(default_factory=dict)
    status: ProfileStatus = ProfileStatus.PENDING
    id: str = field(default_factory=lambda: uuid.uuid4().hex)
    created_at: float = field(default_factory=lambda: time.time())
    updated_at: float = field(default_factory=lambda: time.time())

    def as_dict(self) -> dict:
        return {
            "id": self.id,
            "userId": self.user_id,
            "email": self.email,
            "name": self.name,
            "phoneNumber": self.phone_number,
            "answers": self.answers,
            "status": self.status.value,
            "createdAt": _iso(self.created_at),
        }

    def as_profile(self) -> dict:
        """Projection returned by ``GET /user/{email}``."""
        return {
            "id": self.user_id,
            "email": self.email,
            "name": self.name,
            "picture": "",
            "phoneNumber": self.phone_number,
            "answers": self.answers,
            "status": self.status.value,
            "submittedAt": _iso(self.created_at),
        }


class InMemoryDbClient:
    """Simple in-memory store for development and tests."""

    def __init__(self):
        self.submissions: Dict[str, SubmissionRecord] = {}

    def get_submission(self, email: str) -> Optional[SubmissionRecord]:
        record = self.submissions.get(email)
        return copy.deepcopy(record) if record else None

    def upsert_submission(
        self,
        *,
        user_id: Optional[str],
        email: str,
        name: Optional[str],
        phone_number: Optional[str],
        answers: dict,
    ) -> SubmissionRecord:
        record = self.submissions.get(email)
        if record:
            record.answers = copy.deepcopy(answers)
            record.phone_number = phone_number
            record.status = ProfileStatus.PENDING
            record.updated_at = time.time()
        else:
            record = SubmissionRecord(
                user_id=user_id,
                email=email,
                name=name,
                phone_number=phone_number,
                answers=copy.deepcopy(answers),
            )
            self.submissions[email] = record
        return copy.deepcopy(record)

    def update_status(self, email: str, status: ProfileStatus) -> SubmissionRecord:
        record = self.submissions.get(email)
        if not record:
            raise SubmissionNotFound(email)
        check_transition(record.status, status)
        record.status = status
        record.updated_at = time.time()
        return copy.deepcopy(record)

    def list_submissions(
        self, status: Optional[ProfileStatus] = None, limit: int = 100
    ) -> list[SubmissionRecord]:
        records = [
            r for r in self.submissions.values() if status is None or r.status == status
        ]
        records.sort(key=lambda r: r.created_at)
        return [copy.deepcopy(r) for r in records[:limit]]


class PostgresDbClient:
    """
    SQLAlchemy-backed implementation. Accepts any SQLAlchemy URL (e.g., Postgres or SQLite for tests).
    """

    def __init__(self, database_url: str):
        if not database_url:
            raise ValueError("DATABASE_URL is required for PostgresDbClient")
        self.engine = create_engine(
            database_url,
            future=True,
            pool_pre_ping=True,
            pool_recycle=1800,
        )
        self.Session = sessionmaker(
            bind=self.engine, class_=Session, expire_on_commit=False, future=True
        )
        Base.metadata.create_all(self.engine)

    def _to_record(self, row: "SubmissionRow") -> SubmissionRecord:
        return SubmissionRecord(
            id=row.id,
            user_id=row.user_id,
            email=row.email,
            name=row.name,
            phone_number=row.phone_number,
            answers=row.answers or {},
            status=ProfileStatus(row.status),
            created_at=row.created_at,
            updated_at=row.updated_at,
        )

    def _find(self, session: Session, email: str) -> Optional["SubmissionRow"]:
        stmt = select(SubmissionRow).where(SubmissionRow.email == email)
        return session.execute(stmt).scalar_one_or_none()

    def get_submission(self, email: str) -> Optional[SubmissionRecord]:
        with self.Session() as session:
            row = self._find(session, email)
            return self._to_record(row) if row else None

    def upsert_submission(
        self,
        *,
        user_id: Optional[str],
        email: str,
        name: Optional[str],
        phone_number: Optional[str],
        answers: dict,
    ) -> SubmissionRecord:
        now = time.time()
        with self.Session() as session:
            row = self._find(session, email)
            if row:
                row.answers = copy.deepcopy(answers)
                row.phone_number = phone_number
                row.status = ProfileStatus.PENDING.value
                row.updated_at = now
            else:
                row = SubmissionRow(
                    id=uuid.uuid4().hex,
                    user_id=user_id,
                    email=email,
                    name=name,
                    phone_number=phone_number,
                    answers=copy.deepcopy(answers),
                    status=ProfileStatus.PENDING.value,
                    created_at=now,
                    updated_at=now,
                )
                session.add(row)
            session.commit()
            session.refresh(row)
            return self._to_record(row)

    def update_status(self, email: str, status: ProfileStatus) -> SubmissionRecord:
        with self.Session() as session:
            row = self._find(session, email)
            if not row:
                raise SubmissionNotFound(email)
            check_transition(ProfileStatus(row.status), status)
            row.status = status.value
            row.updated_at = time.time()
            session.commit()
            session.refresh(row)
            return self._to_record(row)

    def list_submissions(
        self, status: Optional[ProfileStatus] = None, limit: int = 100
    ) -> list[SubmissionRecord]:
        with self.Session() as session:
            stmt = select(SubmissionRow).order_by(SubmissionRow.created_at.asc())
            if status is not None:
                stmt = stmt.where(SubmissionRow.status == status.value)
            rows = session.execute(stmt.limit(limit)).scalars().all()
            return [self._to_record(row) for row in rows]


Base = declarative_base()


class SubmissionRow(Base):
    __tablename__ = "quiz_submissions"

    id = Column(String, primary_key=True)
    user_id = Column(String, nullable=True)
    email = Column(String, nullable=False, unique=True, index=True)
    name = Column(String, nullable=True)
    phone_number = Column(String, nullable=True)
    answers = Column(JSON, nullable=False)
    status = Column(String, nullable=False, default=ProfileStatus.PENDING.value)
    created_at = Column(Float, nullable=False)
    updated_at = Column(Float, nullable=False)
