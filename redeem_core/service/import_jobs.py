import asyncio
import logging
import secrets
import string
import time
from abc import ABC, abstractmethod
from typing import List, Optional, Set

import gconf

from redeem_core import db
from redeem_core.data_model.code import CodeEntry
from redeem_core.data_model.import_job import ImportJob, ImportProgress, ImportStarted, ImportStatus
from redeem_core.db import db_conn
from redeem_core.service.codes import CodeStore
from redeem_core.service.exceptions import CsvEmpty, JobNotFound
from redeem_core.service.job_cache import JobStatusCache
from redeem_core.util.misc import format_error, utc_now

log = logging.getLogger(__name__)


class ImportJobStore(ABC):
    @abstractmethod
    async def get(self, job_id: str) -> Optional[ImportJob]:
        ...

    @abstractmethod
    async def insert(self, job_id: str, total_lines: int) -> None:
        ...

    @abstractmethod
    async def update_progress(
        self, job_id: str, *, processed_lines: int, successful_lines: int, failed_lines: int
    ) -> None:
        ...

    @abstractmethod
    async def mark_completed(
        self, job_id: str, *, total_lines: int, successful_lines: int, failed_lines: int
    ) -> None:
        ...

    @abstractmethod
    async def mark_failed(self, job_id: str, error_message: str) -> None:
        ...


class DbImportJobStore(ImportJobStore):
    async def get(self, job_id: str) -> Optional[ImportJob]:
        async with db_conn() as conn:
            return await db.import_jobs.get(conn, job_id)

    async def insert(self, job_id: str, total_lines: int) -> None:
        async with db_conn() as conn:
            await db.import_jobs.insert(conn, job_id, total_lines)

    async def update_progress(
        self, job_id: str, *, processed_lines: int, successful_lines: int, failed_lines: int
    ) -> None:
        async with db_conn() as conn:
            await db.import_jobs.update_progress(
                conn,
                job_id,
                processed_lines=processed_lines,
                successful_lines=successful_lines,
                failed_lines=failed_lines,
            )

    async def mark_completed(
        self, job_id: str, *, total_lines: int, successful_lines: int, failed_lines: int
    ) -> None:
        async with db_conn() as conn:
            await db.import_jobs.mark_completed(
                conn,
                job_id,
                total_lines=total_lines,
                successful_lines=successful_lines,
                failed_lines=failed_lines,
            )

    async def mark_failed(self, job_id: str, error_message: str) -> None:
        async with db_conn() as conn:
            await db.import_jobs.mark_failed(conn, job_id, error_message)


class ImportService:
    """
    Imports codes from csv text in the background.

    The upload only creates the job record, the lines are then inserted chunk
    by chunk in a separate task. Progress is written to the job record and
    mirrored into a cache after every chunk, so clients can poll either.
    """

    def __init__(
        self,
        store: ImportJobStore,
        codes: CodeStore,
        cache: JobStatusCache,
        chunk_size: int = None,
        chunk_delay: float = None,
    ):
        self.store = store
        self.codes = codes
        self.cache = cache
        self.chunk_size = chunk_size or gconf.get("imports.chunk_size", default=5000)
        self.chunk_delay = (
            chunk_delay
            if chunk_delay is not None
            else gconf.get("imports.chunk_delay_seconds", default=0.1)
        )
        self._running: Set[asyncio.Task] = set()

    async def start_import(self, csv_data: str) -> ImportStarted:
        lines = split_lines(csv_data)
        if not lines:
            raise CsvEmpty

        job_id = make_job_id()
        await self.store.insert(job_id, len(lines))
        self.cache.set(
            ImportJob(id=job_id, status=ImportStatus.PROCESSING, total_lines=len(lines), created_at=utc_now())
        )
        log.info(f"starting import {job_id} with {len(lines)} lines")

        task = asyncio.create_task(self.process_chunks(job_id, lines), name=job_id)
        self._running.add(task)
        task.add_done_callback(self._on_import_done)

        return ImportStarted(
            job_id=job_id,
            total_lines=len(lines),
            message=f"Import started. Processing {len(lines)} lines in chunks of {self.chunk_size}.",
        )

    async def process_chunks(self, job_id: str, lines: List[str], chunk_size: int = None) -> ImportJob:
        chunk_size = chunk_size or self.chunk_size
        cached = self.cache.get(job_id)
        job = ImportJob(
            id=job_id,
            status=ImportStatus.PROCESSING,
            total_lines=len(lines),
            created_at=cached.created_at if cached else utc_now(),
        )
        chunks = [lines[i : i + chunk_size] for i in range(0, len(lines), chunk_size)]

        try:
            for i, chunk in enumerate(chunks):
                inserted = await self._insert_chunk(job_id, i, chunk)
                job.successful_lines += inserted
                job.failed_lines += len(chunk) - inserted
                job.processed_lines = min((i + 1) * chunk_size, job.total_lines)

                await self.store.update_progress(
                    job_id,
                    processed_lines=job.processed_lines,
                    successful_lines=job.successful_lines,
                    failed_lines=job.failed_lines,
                )
                self.cache.set(job)
                log.debug(f"import {job_id}: {job.processed_lines}/{job.total_lines} lines ({job.progress}%)")

                if i < len(chunks) - 1:
                    await asyncio.sleep(self.chunk_delay)

            await self.store.mark_completed(
                job_id,
                total_lines=job.total_lines,
                successful_lines=job.successful_lines,
                failed_lines=job.failed_lines,
            )
            job.status = ImportStatus.COMPLETED
            job.processed_lines = job.total_lines
            job.completed_at = utc_now()
            self.cache.set(job)
            log.info(
                f"import {job_id} completed: {job.successful_lines} imported, {job.failed_lines} failed"
            )
        except Exception as e:
            log.exception(f"import {job_id} failed")
            job.status = ImportStatus.FAILED
            job.error_message = format_error(e)
            job.completed_at = utc_now()
            self.cache.set(job)
            await self.store.mark_failed(job_id, job.error_message)
        return job

    async def _insert_chunk(self, job_id: str, index: int, chunk: List[str]) -> int:
        entries = [entry for entry in map(parse_line, chunk) if entry]
        try:
            return await self.codes.insert_batch(entries)
        except Exception as e:
            log.error(f"import {job_id}: chunk {index} failed: {format_error(e)}")
            return 0

    async def get_job_status(self, job_id: str) -> ImportProgress:
        job = await self.store.get(job_id)
        if not job:
            raise JobNotFound
        return ImportProgress.from_job(job)

    def get_progress(self, job_id: str) -> Optional[ImportProgress]:
        job = self.cache.get(job_id)
        return ImportProgress.from_job(job) if job else None

    @property
    def running_imports(self) -> int:
        return len(self._running)

    async def wait(self):
        if self._running:
            log.info(f"waiting for {len(self._running)} running imports")
            await asyncio.gather(*self._running, return_exceptions=True)

    def _on_import_done(self, task: asyncio.Task):
        self._running.discard(task)
        if not task.cancelled() and task.exception():
            log.error(f"import task {task.get_name()} crashed: {format_error(task.exception())}")


def split_lines(csv_data: str) -> List[str]:
    # only \n separates lines, other line boundaries may be part of a link
    return [line.rstrip("\r") for line in csv_data.split("\n") if line.strip()]


def parse_line(line: str) -> Optional[CodeEntry]:
    """Parse a `CODE,LINK` line, None if either part is missing"""
    code, _, link = line.partition(",")
    code, link = code.strip().upper(), link.strip()
    if not code or not link:
        return None
    return CodeEntry(code=code, link=link)


def make_job_id() -> str:
    suffix = "".join(secrets.choice(string.ascii_lowercase + string.digits) for _ in range(9))
    return f"import_{int(time.time() * 1000)}_{suffix}"
