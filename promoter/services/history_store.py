"""
Deployment history and lifecycle record storage.

DeploymentHistoryStore keeps the last results of direct operations.
DeploymentStore implementations hold lifecycle records: at most one
running record plus the most recent finished ones.
"""

import json
import threading
from abc import ABC, abstractmethod
from collections import deque
from typing import Deque, List, Optional

import redis

from promoter.constants import HISTORY_LIMIT, REDIS_KEY_PREFIX
from promoter.models.deployment import DeploymentRecord
from promoter.models.results import DeploymentResult


class DeploymentHistoryStore:
    """Bounded, thread-safe ledger of DeploymentResults, oldest first."""

    def __init__(self, limit: int = HISTORY_LIMIT):
        self._results: Deque[DeploymentResult] = deque(maxlen=limit)
        self._total = 0
        self._lock = threading.Lock()

    def add(self, result: DeploymentResult) -> None:
        with self._lock:
            self._results.append(result)
            self._total += 1

    def all(self) -> List[DeploymentResult]:
        with self._lock:
            return list(self._results)

    @property
    def latest(self) -> Optional[DeploymentResult]:
        with self._lock:
            return self._results[-1] if self._results else None

    @property
    def total_count(self) -> int:
        """Results recorded since start, including evicted ones."""
        return self._total

    def __len__(self) -> int:
        return len(self._results)


class DeploymentStore(ABC):
    """Storage for lifecycle records with an atomic single-flight slot."""

    @abstractmethod
    def try_start(self, record: DeploymentRecord) -> bool:
        """Claim the running slot for record. False if another one holds it."""
        pass

    @abstractmethod
    def save(self, record: DeploymentRecord) -> None:
        """Persist progress of the running record."""
        pass

    @abstractmethod
    def finish(self, record: DeploymentRecord) -> None:
        """Release the running slot and retain record as finished."""
        pass

    @abstractmethod
    def get(self, deployment_id: str) -> Optional[DeploymentRecord]:
        pass

    @abstractmethod
    def finished(self) -> List[DeploymentRecord]:
        """Retained finished records, oldest first."""
        pass

    @abstractmethod
    def running(self) -> Optional[DeploymentRecord]:
        pass

    def all(self) -> List[DeploymentRecord]:
        """Finished records then the running one (newest last)."""
        records = self.finished()
        current = self.running()
        if current is not None:
            records.append(current)
        return records

    def is_running(self) -> bool:
        return self.running() is not None


class InMemoryDeploymentStore(DeploymentStore):
    """Process-local store. Records are shared by reference."""

    def __init__(self, limit: int = HISTORY_LIMIT):
        self._lock = threading.Lock()
        self._running: Optional[DeploymentRecord] = None
        self._finished: Deque[DeploymentRecord] = deque(maxlen=limit)

    def try_start(self, record: DeploymentRecord) -> bool:
        with self._lock:
            if self._running is not None:
                return False
            self._running = record
            return True

    def save(self, record: DeploymentRecord) -> None:
        # Same object as the one held in the slot
        pass

    def finish(self, record: DeploymentRecord) -> None:
        with self._lock:
            if self._running is not None and self._running.id == record.id:
                self._running = None
            self._finished.append(record)

    def get(self, deployment_id: str) -> Optional[DeploymentRecord]:
        with self._lock:
            if self._running is not None and self._running.id == deployment_id:
                return self._running
            for record in self._finished:
                if record.id == deployment_id:
                    return record
        return None

    def finished(self) -> List[DeploymentRecord]:
        with self._lock:
            return list(self._finished)

    def running(self) -> Optional[DeploymentRecord]:
        with self._lock:
            return self._running


class RedisDeploymentStore(DeploymentStore):
    """
    Redis-backed store shared by several API processes.

    Layout under the key prefix:
        <prefix>:records   hash of id -> record JSON
        <prefix>:running   id of the running record (SET NX)
        <prefix>:finished  list of finished ids, oldest first
    """

    def __init__(
        self,
        client: redis.Redis,
        prefix: str = REDIS_KEY_PREFIX,
        limit: int = HISTORY_LIMIT,
    ):
        self.client = client
        self.limit = limit
        self.records_key = f"{prefix}:records"
        self.running_key = f"{prefix}:running"
        self.finished_key = f"{prefix}:finished"

    @classmethod
    def from_url(cls, url: str, **kwargs) -> "RedisDeploymentStore":
        return cls(redis.Redis.from_url(url, decode_responses=True), **kwargs)

    def _dump(self, record: DeploymentRecord) -> str:
        return json.dumps(record.to_dict())

    def _load(self, raw: Optional[str]) -> Optional[DeploymentRecord]:
        if not raw:
            return None
        return DeploymentRecord.from_dict(json.loads(raw))

    def try_start(self, record: DeploymentRecord) -> bool:
        if not self.client.set(self.running_key, record.id, nx=True):
            return False
        self.client.hset(self.records_key, record.id, self._dump(record))
        return True

    def save(self, record: DeploymentRecord) -> None:
        self.client.hset(self.records_key, record.id, self._dump(record))

    def finish(self, record: DeploymentRecord) -> None:
        pipe = self.client.pipeline()
        pipe.hset(self.records_key, record.id, self._dump(record))
        pipe.rpush(self.finished_key, record.id)
        pipe.execute()

        if self.client.get(self.running_key) == record.id:
            self.client.delete(self.running_key)

        dropped = self.client.lrange(self.finished_key, 0, -(self.limit + 1))
        if dropped:
            pipe = self.client.pipeline()
            pipe.ltrim(self.finished_key, -self.limit, -1)
            pipe.hdel(self.records_key, *dropped)
            pipe.execute()

    def get(self, deployment_id: str) -> Optional[DeploymentRecord]:
        return self._load(self.client.hget(self.records_key, deployment_id))

    def finished(self) -> List[DeploymentRecord]:
        ids = self.client.lrange(self.finished_key, 0, -1)
        if not ids:
            return []
        raw_records = self.client.hmget(self.records_key, ids)
        return [record for record in map(self._load, raw_records) if record is not None]

    def running(self) -> Optional[DeploymentRecord]:
        deployment_id = self.client.get(self.running_key)
        if not deployment_id:
            return None
        return self.get(deployment_id)


def build_deployment_store(redis_url: Optional[str] = None) -> DeploymentStore:
    """Redis store when a URL is configured, otherwise process-local."""
    if redis_url:
        return RedisDeploymentStore.from_url(redis_url)
    return InMemoryDeploymentStore()
