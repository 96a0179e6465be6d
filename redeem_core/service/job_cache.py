from abc import ABC, abstractmethod
from typing import Optional

import gconf
from cachetools import TTLCache

from redeem_core.data_model.import_job import ImportJob


class JobStatusCache(ABC):
    """Volatile view of import progress, keyed by job id"""

    @abstractmethod
    def get(self, job_id: str) -> Optional[ImportJob]:
        ...

    @abstractmethod
    def set(self, job: ImportJob) -> None:
        ...

    @abstractmethod
    def delete(self, job_id: str) -> None:
        ...


class TTLJobStatusCache(JobStatusCache):
    def __init__(self, max_size: int = None, ttl: float = None):
        self._cache = TTLCache(
            maxsize=max_size or gconf.get("imports.job_cache.max_size", default=1024),
            ttl=ttl or gconf.get("imports.job_cache.ttl_seconds", default=86400),
        )

    def get(self, job_id: str) -> Optional[ImportJob]:
        job = self._cache.get(job_id)
        return job.model_copy() if job else None

    def set(self, job: ImportJob) -> None:
        self._cache[job.id] = job.model_copy()

    def delete(self, job_id: str) -> None:
        self._cache.pop(job_id, None)

    def __len__(self):
        return len(self._cache)
