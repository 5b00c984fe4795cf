"""SQLite episode store.

One ``episodes`` table keyed by (podcast_id, number). Inserts never update
existing rows: a conflicting number is ignored and reported as skipped.
"""

import logging
import threading
from collections.abc import Iterable, Iterator
from contextlib import contextmanager, nullcontext
from pathlib import Path
from typing import Protocol

from sqlalchemy import Float, cast, create_engine, delete, event, select
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import NullPool, StaticPool

from podtally.feeds.models import (
    Episode,
    EpisodeNumber,
    episode_number_value,
    format_episode_number,
    parse_episode_number,
)
from podtally.storage.models import Base, EpisodeRow
from podtally.utils.datetime import ensure_aware, parse_iso
from podtally.utils.errors import StoreError

logger = logging.getLogger(__name__)

MEMORY = ":memory:"


class EpisodeRepository(Protocol):
    """Persistence capability used by the sync service."""

    def exists(self, show_id: str, number: EpisodeNumber) -> bool: ...

    def insert_episodes(self, show_id: str, episodes: Iterable[Episode]) -> int: ...

    def latest_episode(self, show_id: str) -> Episode | None: ...

    def list_episodes(self, show_id: str) -> list[Episode]: ...

    def latest_per_show(self) -> dict[str, Episode]: ...

    def delete_show(self, show_id: str) -> int: ...


def _configure_sqlite(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA busy_timeout=30000")
    cursor.close()


def _to_episode(row: EpisodeRow) -> Episode:
    return Episode(
        number=parse_episode_number(row.number),
        title=row.title,
        published=parse_iso(row.published_at),
        link=row.link,
    )


class EpisodeStore:
    """Episode persistence backed by SQLite through SQLAlchemy.

    Example:
        >>> store = EpisodeStore(tmp_path / "podtally.db")
        >>> store.insert_episodes("ze-carioca", episodes)
        3
        >>> store.latest_episode("ze-carioca").number
        3
    """

    def __init__(self, db_path: Path | str) -> None:
        """Open (and create if needed) the store.

        Args:
            db_path: SQLite file path, or ":memory:" for a throwaway store
        """
        self.db_path = db_path
        if str(db_path) == MEMORY:
            # A single shared connection, otherwise every session sees an empty DB
            self.engine = create_engine(
                "sqlite://",
                poolclass=StaticPool,
                connect_args={"check_same_thread": False},
            )
            # Sessions from different threads must not share it at the same time
            self._connection_lock = threading.Lock()
        else:
            path = Path(db_path).expanduser()
            path.parent.mkdir(parents=True, exist_ok=True)
            self.engine = create_engine(
                f"sqlite:///{path}",
                poolclass=NullPool,
                connect_args={"check_same_thread": False, "timeout": 30},
            )
            event.listen(self.engine, "connect", _configure_sqlite)
            self._connection_lock = nullcontext()

        self._sessions = sessionmaker(bind=self.engine, autoflush=False, expire_on_commit=False)

        try:
            Base.metadata.create_all(self.engine)
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to initialize episode store at {db_path}: {e}") from e

    @contextmanager
    def _session(self) -> Iterator[Session]:
        with self._connection_lock:
            session = self._sessions()
            try:
                yield session
                session.commit()
            except SQLAlchemyError as e:
                session.rollback()
                logger.error(f"Episode store error: {e}")
                raise StoreError(f"Episode store error: {e}") from e
            finally:
                session.close()

    def close(self) -> None:
        self.engine.dispose()

    def exists(self, show_id: str, number: EpisodeNumber) -> bool:
        """Whether the show already has an episode with this numeric value."""
        value = episode_number_value(number)
        # SQLite narrows candidates by float value; the exact check is done here
        stmt = (
            select(EpisodeRow.number)
            .where(EpisodeRow.podcast_id == show_id)
            .where(cast(EpisodeRow.number, Float) == float(value))
        )
        with self._session() as session:
            candidates = session.execute(stmt).scalars().all()
        return any(
            episode_number_value(parse_episode_number(text)) == value for text in candidates
        )

    def insert_episodes(self, show_id: str, episodes: Iterable[Episode]) -> int:
        """Insert episodes, ignoring numbers the show already has.

        Returns:
            Number of rows actually inserted
        """
        inserted = 0
        with self._session() as session:
            for episode in episodes:
                stmt = (
                    sqlite_insert(EpisodeRow)
                    .values(
                        podcast_id=show_id,
                        number=format_episode_number(episode.number),
                        title=episode.title,
                        published_at=ensure_aware(episode.published).isoformat(),
                        link=episode.link,
                    )
                    .on_conflict_do_nothing(index_elements=["podcast_id", "number"])
                )
                result = session.execute(stmt)
                if result.rowcount:
                    inserted += 1
                else:
                    logger.debug(f"{show_id}: episode {episode.number} already stored")
        return inserted

    def latest_episode(self, show_id: str) -> Episode | None:
        """Highest-numbered episode of a show, or None if it has none."""
        stmt = (
            select(EpisodeRow)
            .where(EpisodeRow.podcast_id == show_id)
            .order_by(cast(EpisodeRow.number, Float).desc())
            .limit(1)
        )
        with self._session() as session:
            row = session.execute(stmt).scalar_one_or_none()
            return _to_episode(row) if row is not None else None

    def list_episodes(self, show_id: str) -> list[Episode]:
        """All stored episodes of a show, ascending by number."""
        stmt = (
            select(EpisodeRow)
            .where(EpisodeRow.podcast_id == show_id)
            .order_by(cast(EpisodeRow.number, Float).asc())
        )
        with self._session() as session:
            return [_to_episode(row) for row in session.execute(stmt).scalars()]

    def latest_per_show(self) -> dict[str, Episode]:
        """Latest episode of every show that has at least one."""
        stmt = select(EpisodeRow).order_by(
            EpisodeRow.podcast_id, cast(EpisodeRow.number, Float).desc()
        )
        latest: dict[str, Episode] = {}
        with self._session() as session:
            for row in session.execute(stmt).scalars():
                if row.podcast_id not in latest:
                    latest[row.podcast_id] = _to_episode(row)
        return latest

    def delete_show(self, show_id: str) -> int:
        """Delete every stored episode of a show; returns the row count."""
        with self._session() as session:
            result = session.execute(delete(EpisodeRow).where(EpisodeRow.podcast_id == show_id))
            count = result.rowcount or 0
        if count:
            logger.info(f"Deleted {count} stored episode(s) of {show_id}")
        return count
