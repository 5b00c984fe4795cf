"""Episode persistence."""

from podtally.storage.models import Base, EpisodeRow
from podtally.storage.store import EpisodeRepository, EpisodeStore

__all__ = ["Base", "EpisodeRepository", "EpisodeRow", "EpisodeStore"]
