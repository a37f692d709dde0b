"""Persistence adapter for markers and the correction audit log."""
from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Dict, Iterable, Iterator, List, Optional

from sqlalchemy import Engine, create_engine, func, select
from sqlalchemy.orm import Session, sessionmaker

from ..config import Settings, get_settings
from ..extraction.formats import ExtractedVertex
from .records import CorrectionLogEntry, MarkerRecord, MarkerStatus, MarkerType
from .schema import Base, CorrectionRow, MarkerRow

__all__ = ["MarkerNotFoundError", "MarkerStore"]

LOGGER = logging.getLogger(__name__)


class MarkerNotFoundError(LookupError):
    """Raised when a write targets a marker id that does not exist."""

    def __init__(self, marker_id: int) -> None:
        super().__init__(f"marker {marker_id} not found")
        self.marker_id = marker_id


class MarkerStore:
    """Read and write markers through a SQLAlchemy engine.

    Writes issued inside :meth:`transaction` share one session and are
    committed together, or rolled back together when the block raises.  Writes
    issued outside a transaction are committed individually.  The correction
    log is append-only: the store offers no way to edit or delete entries.
    """

    def __init__(self, engine: Engine | str, *, create_schema: bool = True) -> None:
        self.engine = create_engine(engine) if isinstance(engine, str) else engine
        if create_schema:
            Base.metadata.create_all(self.engine)
        self._sessions = sessionmaker(self.engine, expire_on_commit=False)
        self._active: Optional[Session] = None

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "MarkerStore":
        settings = settings or get_settings()
        if settings.database_url.startswith("sqlite:///"):
            settings.data_dir.mkdir(parents=True, exist_ok=True)
        return cls(settings.database_url)

    def dispose(self) -> None:
        self.engine.dispose()

    # ------------------------------------------------------------------
    @contextmanager
    def transaction(self) -> Iterator[Session]:
        """Group writes into a single all-or-nothing unit."""

        if self._active is not None:
            yield self._active
            return
        session = self._sessions()
        self._active = session
        try:
            with session.begin():
                yield session
        finally:
            self._active = None
            session.close()

    @contextmanager
    def _session(self) -> Iterator[Session]:
        if self._active is not None:
            yield self._active
            return
        with self.transaction() as session:
            yield session

    def _row(self, session: Session, marker_id: int) -> MarkerRow:
        row = session.get(MarkerRow, marker_id)
        if row is None:
            raise MarkerNotFoundError(marker_id)
        return row

    # ------------------------------------------------------------------
    # Reads
    def get(self, marker_id: int) -> Optional[MarkerRecord]:
        with self._session() as session:
            row = session.get(MarkerRow, marker_id)
            return MarkerRecord.model_validate(row) if row is not None else None

    def markers(self, *, active_only: bool = True) -> List[MarkerRecord]:
        stmt = select(MarkerRow).order_by(MarkerRow.id)
        if active_only:
            stmt = stmt.where(MarkerRow.active.is_(True))
        with self._session() as session:
            return [MarkerRecord.model_validate(row) for row in session.scalars(stmt)]

    def select_for_correction(self, status: MarkerStatus = MarkerStatus.SURVEYED) -> List[MarkerRecord]:
        """Active markers in ``status`` that carry both coordinates."""

        stmt = (
            select(MarkerRow)
            .where(
                MarkerRow.active.is_(True),
                MarkerRow.status == status,
                MarkerRow.coordinate_e.is_not(None),
                MarkerRow.coordinate_n.is_not(None),
            )
            .order_by(MarkerRow.id)
        )
        with self._session() as session:
            return [MarkerRecord.model_validate(row) for row in session.scalars(stmt)]

    def select_for_validation(self, *, force: bool = False) -> List[MarkerRecord]:
        """Active markers never validated, or every active marker with ``force``."""

        stmt = select(MarkerRow).where(MarkerRow.active.is_(True)).order_by(MarkerRow.id)
        if not force:
            stmt = stmt.where(MarkerRow.validated.is_(None))
        with self._session() as session:
            return [MarkerRecord.model_validate(row) for row in session.scalars(stmt)]

    def status_counts(self) -> Dict[str, int]:
        stmt = (
            select(MarkerRow.status, func.count(MarkerRow.id))
            .where(MarkerRow.active.is_(True))
            .group_by(MarkerRow.status)
        )
        with self._session() as session:
            return {MarkerStatus(status).name: count for status, count in session.execute(stmt)}

    def corrections(self, marker_id: Optional[int] = None) -> List[CorrectionLogEntry]:
        stmt = select(CorrectionRow).order_by(CorrectionRow.id)
        if marker_id is not None:
            stmt = stmt.where(CorrectionRow.marker_id == marker_id)
        with self._session() as session:
            return [CorrectionLogEntry.model_validate(row) for row in session.scalars(stmt)]

    # ------------------------------------------------------------------
    # Writes
    def add_marker(self, record: MarkerRecord) -> int:
        row = MarkerRow(**record.model_dump(exclude={"id"}))
        with self._session() as session:
            session.add(row)
            session.flush()
            return row.id

    def add_vertices(
        self,
        vertices: Iterable[ExtractedVertex],
        *,
        status: MarkerStatus = MarkerStatus.SURVEYED,
    ) -> List[int]:
        """Persist extracted vertices as new markers and return their ids."""

        ids: List[int] = []
        with self._session() as session:
            for vertex in vertices:
                row = MarkerRow(
                    code=vertex.name,
                    type=MarkerType.from_code(vertex.name),
                    coordinate_e=vertex.canonical_e,
                    coordinate_n=vertex.canonical_n,
                    status=status,
                    active=True,
                    lat_original=vertex.lat_original,
                    lon_original=vertex.lon_original,
                )
                session.add(row)
                session.flush()
                ids.append(row.id)
        LOGGER.debug("stored %d vertices", len(ids))
        return ids

    def update_coordinates(self, marker_id: int, e: float, n: float) -> None:
        with self._session() as session:
            row = self._row(session, marker_id)
            row.coordinate_e = e
            row.coordinate_n = n

    def set_status(self, marker_id: int, status: MarkerStatus) -> None:
        with self._session() as session:
            self._row(session, marker_id).status = status

    def set_validation(
        self,
        marker_id: int,
        validated: bool,
        error: Optional[str],
        *,
        when: Optional[datetime] = None,
    ) -> None:
        with self._session() as session:
            row = self._row(session, marker_id)
            row.validated = validated
            row.validation_error = error
            row.validated_at = when or datetime.now(timezone.utc)

    def append_correction(self, entry: CorrectionLogEntry) -> int:
        row = CorrectionRow(**entry.model_dump())
        with self._session() as session:
            self._row(session, entry.marker_id)
            session.add(row)
            session.flush()
            return row.id
