import math
from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from redeem_core.data_model.base import CamelModel


class ImportStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class ImportJob(BaseModel):
    id: str
    status: ImportStatus = ImportStatus.PENDING
    total_lines: int = 0
    processed_lines: int = 0
    successful_lines: int = 0
    failed_lines: int = 0
    created_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    error_message: Optional[str] = None

    def __str__(self):
        return f"ImportJob[{self.id}, {self.status.value}]"

    @property
    def progress(self) -> int:
        return progress_percent(self.processed_lines, self.total_lines)


class ImportProgress(CamelModel):
    job_id: str
    status: ImportStatus
    progress: int
    total_lines: int
    processed_lines: int
    successful_lines: int
    failed_lines: int
    created_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    error_message: Optional[str] = None

    @classmethod
    def from_job(cls, job: ImportJob) -> "ImportProgress":
        return cls(
            job_id=job.id,
            status=job.status,
            progress=job.progress,
            total_lines=job.total_lines,
            processed_lines=job.processed_lines,
            successful_lines=job.successful_lines,
            failed_lines=job.failed_lines,
            created_at=job.created_at,
            completed_at=job.completed_at,
            error_message=job.error_message,
        )


class CsvUpload(BaseModel):
    csv_data: str = Field(min_length=1, alias="csvData")


class ImportStarted(CamelModel):
    success: bool = True
    job_id: str
    total_lines: int
    message: str


def progress_percent(processed: int, total: int) -> int:
    if total <= 0:
        return 0
    # half-up, so 37.5 % is reported as 38 %
    return min(math.floor(processed / total * 100 + 0.5), 100)
