from abc import ABC, abstractmethod
from typing import List, Optional

from bloodpact.domain.models.snapshot import WorldSnapshot


class SnapshotRepository(ABC):
    @abstractmethod
    def save(self, snapshot: WorldSnapshot) -> None:
        raise NotImplementedError

    @abstractmethod
    def get(self, snapshot_id: str) -> Optional[WorldSnapshot]:
        raise NotImplementedError

    @abstractmethod
    def list_recent(self, limit: Optional[int] = None) -> List[WorldSnapshot]:
        """Newest first."""
        raise NotImplementedError

    @abstractmethod
    def delete(self, snapshot_id: str) -> bool:
        raise NotImplementedError

    @abstractmethod
    def delete_older_than_limit(self, limit: int) -> int:
        raise NotImplementedError
