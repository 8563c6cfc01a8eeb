"""
Project store abstraction for the hosted SQL store and an in-memory local store.
"""

from __future__ import annotations

import threading
import time
import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Dict, Iterable, Optional, Protocol

from sqlalchemy import Column, Float, String, Text, create_engine, func, select, text
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

EDITABLE_FIELDS = ("title", "description", "image_url", "visit_url")


class ProjectNotFoundError(LookupError):
    """Raised when a project id does not exist in the store."""

    def __init__(self, project_id: str):
        super().__init__("Project not found")
        self.project_id = project_id


class ReadOnlyStoreError(RuntimeError):
    """Raised when a write is attempted against a read-only store."""


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class ProjectRecord:
    id: str
    title: str
    description: str
    image_url: str = ""
    visit_url: str = ""
    created_at: Optional[datetime] = field(default_factory=_utcnow)

    def copy(self) -> "ProjectRecord":
        return replace(self)

    def as_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "imageUrl": self.image_url,
            "visitUrl": self.visit_url,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


@dataclass
class AdminUserRecord:
    user_id: str
    email: str
    password_hash: str
    created_at: float = field(default_factory=lambda: time.time())


class ProjectStore(Protocol):
    """Operations the site needs from a project store."""

    def list_projects(self) -> list[ProjectRecord]:
        ...

    def get_project(self, project_id: str) -> ProjectRecord:
        ...

    def create_project(self, fields: dict) -> ProjectRecord:
        ...

    def update_project(self, project_id: str, fields: dict) -> ProjectRecord:
        ...

    def delete_project(self, project_id: str) -> None:
        ...

    def count_projects(self) -> int:
        ...


def _newest_first(projects: Iterable[ProjectRecord]) -> list[ProjectRecord]:
    epoch = datetime.min.replace(tzinfo=timezone.utc)
    return sorted(projects, key=lambda p: p.created_at or epoch, reverse=True)


class InMemoryProjectStore:
    """Local project store for static mode, development and tests."""

    def __init__(self, seed: Optional[Iterable[ProjectRecord]] = None):
        self._seed = [project.copy() for project in seed or []]
        # Timed-out calls may still touch the store from executor threads.
        self._lock = threading.Lock()
        self.projects: Dict[str, ProjectRecord] = {}
        self.reset()

    def reset(self) -> None:
        """Restore the seed data (useful in tests)."""
        with self._lock:
            self.projects = {project.id: project.copy() for project in self._seed}

    def list_projects(self) -> list[ProjectRecord]:
        with self._lock:
            projects = list(self.projects.values())
        return [p.copy() for p in _newest_first(projects)]

    def get_project(self, project_id: str) -> ProjectRecord:
        with self._lock:
            project = self.projects.get(project_id)
        if project is None:
            raise ProjectNotFoundError(project_id)
        return project.copy()

    def create_project(self, fields: dict) -> ProjectRecord:
        record = ProjectRecord(
            id=uuid.uuid4().hex,
            title=fields["title"],
            description=fields["description"],
            image_url=fields.get("image_url") or "",
            visit_url=fields["visit_url"],
        )
        with self._lock:
            self.projects[record.id] = record
        return record.copy()

    def update_project(self, project_id: str, fields: dict) -> ProjectRecord:
        changes = {name: fields[name] for name in EDITABLE_FIELDS if name in fields}
        with self._lock:
            project = self.projects.get(project_id)
            if project is None:
                raise ProjectNotFoundError(project_id)
            updated = replace(project, **changes)
            self.projects[project_id] = updated
        return updated.copy()

    def delete_project(self, project_id: str) -> None:
        with self._lock:
            removed = self.projects.pop(project_id, None)
        if removed is None:
            raise ProjectNotFoundError(project_id)

    def count_projects(self) -> int:
        with self._lock:
            return len(self.projects)


class SqlProjectStore:
    """
    SQLAlchemy-backed hosted store. Accepts any SQLAlchemy URL (e.g., Postgres or SQLite for tests).
    """

    def __init__(self, database_url: str):
        if not database_url:
            raise ValueError("DATABASE_URL is required for SqlProjectStore")
        engine_kwargs = {"future": True, "pool_pre_ping": True}
        if database_url.startswith("sqlite"):
            # Store calls run on worker threads; in-memory databases need one shared connection.
            engine_kwargs["connect_args"] = {"check_same_thread": False}
            if ":memory:" in database_url or database_url.endswith("://"):
                engine_kwargs["poolclass"] = StaticPool
        else:
            engine_kwargs["pool_recycle"] = 1800
        self.engine = create_engine(database_url, **engine_kwargs)
        self.Session = sessionmaker(
            bind=self.engine, class_=Session, expire_on_commit=False, future=True
        )
        Base.metadata.create_all(self.engine)

    def _to_record(self, row: "ProjectRow") -> ProjectRecord:
        return ProjectRecord(
            id=row.id,
            title=row.title,
            description=row.description,
            image_url=row.image_url or "",
            visit_url=row.visit_url,
            created_at=datetime.fromtimestamp(row.created_at, tz=timezone.utc),
        )

    def ping(self) -> None:
        with self.engine.connect() as conn:
            conn.execute(text("SELECT 1"))

    def list_projects(self) -> list[ProjectRecord]:
        with self.Session() as session:
            stmt = select(ProjectRow).order_by(ProjectRow.created_at.desc())
            rows = session.execute(stmt).scalars().all()
            return [self._to_record(row) for row in rows]

    def get_project(self, project_id: str) -> ProjectRecord:
        with self.Session() as session:
            row = session.get(ProjectRow, project_id)
            if not row:
                raise ProjectNotFoundError(project_id)
            return self._to_record(row)

    def create_project(self, fields: dict) -> ProjectRecord:
        with self.Session() as session:
            row = ProjectRow(
                id=uuid.uuid4().hex,
                title=fields["title"],
                description=fields["description"],
                image_url=fields.get("image_url") or "",
                visit_url=fields["visit_url"],
                created_at=time.time(),
            )
            session.add(row)
            session.commit()
            session.refresh(row)
            return self._to_record(row)

    def insert_project(self, record: ProjectRecord) -> ProjectRecord:
        """Insert a record keeping its id and timestamp (used for seeding)."""
        created_at = record.created_at or _utcnow()
        with self.Session() as session:
            row = ProjectRow(
                id=record.id,
                title=record.title,
                description=record.description,
                image_url=record.image_url,
                visit_url=record.visit_url,
                created_at=created_at.timestamp(),
            )
            session.add(row)
            session.commit()
            return self._to_record(row)

    def update_project(self, project_id: str, fields: dict) -> ProjectRecord:
        with self.Session() as session:
            row = session.get(ProjectRow, project_id)
            if not row:
                raise ProjectNotFoundError(project_id)
            for name in EDITABLE_FIELDS:
                if name in fields:
                    setattr(row, name, fields[name])
            session.commit()
            session.refresh(row)
            return self._to_record(row)

    def delete_project(self, project_id: str) -> None:
        with self.Session() as session:
            row = session.get(ProjectRow, project_id)
            if not row:
                raise ProjectNotFoundError(project_id)
            session.delete(row)
            session.commit()

    def count_projects(self) -> int:
        with self.Session() as session:
            return session.execute(
                select(func.count()).select_from(ProjectRow)
            ).scalar_one()

    def get_admin_user(self, email: str) -> Optional[AdminUserRecord]:
        with self.Session() as session:
            stmt = select(AdminUserRow).where(AdminUserRow.email == email.lower())
            row = session.execute(stmt).scalar_one_or_none()
            if not row:
                return None
            return AdminUserRecord(
                user_id=row.user_id,
                email=row.email,
                password_hash=row.password_hash,
                created_at=row.created_at,
            )

    def save_admin_user(self, email: str, password_hash: str) -> AdminUserRecord:
        """Create the admin user, or replace the password of an existing one."""
        email = email.lower()
        with self.Session() as session:
            stmt = select(AdminUserRow).where(AdminUserRow.email == email)
            row = session.execute(stmt).scalar_one_or_none()
            if row:
                row.password_hash = password_hash
            else:
                row = AdminUserRow(
                    user_id=uuid.uuid4().hex,
                    email=email,
                    password_hash=password_hash,
                    created_at=time.time(),
                )
                session.add(row)
            session.commit()
            return AdminUserRecord(
                user_id=row.user_id,
                email=row.email,
                password_hash=row.password_hash,
                created_at=row.created_at,
            )


Base = declarative_base()


class ProjectRow(Base):
    __tablename__ = "projects"

    id = Column(String, primary_key=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=False)
    image_url = Column("imageUrl", String, nullable=False, default="")
    visit_url = Column("visitUrl", String, nullable=False)
    created_at = Column(Float, nullable=False, index=True)


class AdminUserRow(Base):
    __tablename__ = "admin_users"

    user_id = Column(String, primary_key=True)
    email = Column(String, nullable=False, unique=True, index=True)
    password_hash = Column(String, nullable=False)
    created_at = Column(Float, nullable=False)
