import asyncio
import logging
import random
import time
from abc import ABC, abstractmethod
from contextlib import suppress
from typing import Awaitable, Callable, Optional

from croniter import croniter, CroniterBadCronError

from redeem_core.util.misc import format_error

log = logging.getLogger(__name__)


class BackgroundTask(ABC):
    """
    Runs an async function repeatedly inside the running event loop
    until stopped. Subclasses decide how long to wait before each run.
    Errors raised by the function are logged and do not end the task.
    """

    def __init__(self, func: Callable[[], Awaitable], name: Optional[str] = None):
        self.func = func
        self.name = name or func.__name__
        self.is_started = False
        self.runs = 0
        self._task: Optional[asyncio.Task] = None

    def start(self):
        if not self.is_started:
            self.is_started = True
            self._task = asyncio.create_task(self._run(), name=self.name)
            log.debug(f"started {type(self).__name__} {self.name}")

    def stop(self):
        if self.is_started:
            self.is_started = False
            self._task.cancel()
            log.debug(f"stopped {type(self).__name__} {self.name}")

    async def wait(self):
        if self._task is None:
            return
        with suppress(asyncio.CancelledError):
            await self._task

    @abstractmethod
    def seconds_until_next_run(self) -> float:
        ...

    async def _run(self):
        while True:
            delay = self.seconds_until_next_run()
            if delay > 0:
                await asyncio.sleep(delay)
            try:
                await self.func()
            except Exception as e:
                log.error(f"error in background task {self.name}: {format_error(e)}")
            self.runs += 1


class PeriodicTask(BackgroundTask):
    def __init__(self, func: Callable[[], Awaitable], delay: float, name: Optional[str] = None):
        super().__init__(func, name)
        self.delay = delay

    def seconds_until_next_run(self) -> float:
        return 0 if self.runs == 0 else self.delay


class CronTask(BackgroundTask):
    def __init__(
        self,
        func: Callable[[], Awaitable],
        cron: str,
        max_random_delay: Optional[float] = None,
        name: Optional[str] = None,
    ):
        try:
            croniter(cron)
        except CroniterBadCronError as e:
            raise TypeError(f"invalid cron expression: {cron}") from e
        super().__init__(func, name)
        self.cron = cron
        self.max_random_delay = max_random_delay

    def seconds_until_next_run(self) -> float:
        next_exec: float = croniter(self.cron).get_next()
        if self.max_random_delay:
            next_exec += random.uniform(0, self.max_random_delay)
        delta = next_exec - time.time()
        log.debug(f"next execution of cron task {self.name} in {delta:.2f} seconds")
        return delta
