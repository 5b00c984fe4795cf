"""SQLAlchemy table definitions for the episode store."""

from sqlalchemy import Column, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class EpisodeRow(Base):
    """One persisted episode of one show.

    ``number`` holds the canonical text form ("12", "0.95") and
    ``published_at`` an ISO-8601 timestamp with offset. A show never has two
    rows with the same number.
    """

    __tablename__ = "episodes"

    id = Column(Integer, primary_key=True, autoincrement=True)
    podcast_id = Column(String(100), nullable=False, index=True)
    number = Column(String(32), nullable=False)
    title = Column(Text, nullable=False)
    published_at = Column(String(40), nullable=False)
    link = Column(Text, nullable=True)

    __table_args__ = (UniqueConstraint("podcast_id", "number", name="uq_episodes_podcast_number"),)

    def __repr__(self) -> str:
        return f"<EpisodeRow(podcast_id='{self.podcast_id}', number='{self.number}')>"
