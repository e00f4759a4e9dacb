from __future__ import annotations

from dataclasses import dataclass

from contentlab.adapters.clock import SystemClock
from contentlab.adapters.memory import InMemoryContentRepo, InMemoryScheduleRepo
from contentlab.adapters.sqlite.repos import SQLiteContentRepo, SQLiteScheduleRepo
from contentlab.ports.clock import ClockPort
from contentlab.ports.repo import ContentRepoPort, ScheduleRepoPort
from contentlab.rules.models import Rules
from contentlab.services.lifecycle import LifecycleService
from contentlab.services.publisher import PublisherJob
from contentlab.services.scheduling import SchedulingService


@dataclass
class ServiceContext:
    lifecycle_service: LifecycleService
    scheduling_service: SchedulingService
    publisher_job: PublisherJob
    content_repo: ContentRepoPort
    schedule_repo: ScheduleRepoPort
    rules: Rules
    clock: ClockPort

    @classmethod
    def create(cls, db_path: str, rules: Rules, clock: ClockPort | None = None) -> ServiceContext:
        return cls.from_repos(
            SQLiteContentRepo(db_path),
            SQLiteScheduleRepo(db_path),
            rules,
            clock,
        )

    @classmethod
    def in_memory(cls, rules: Rules, clock: ClockPort | None = None) -> ServiceContext:
        return cls.from_repos(InMemoryContentRepo(), InMemoryScheduleRepo(), rules, clock)

    @classmethod
    def from_repos(
        cls,
        content_repo: ContentRepoPort,
        schedule_repo: ScheduleRepoPort,
        rules: Rules,
        clock: ClockPort | None = None,
    ) -> ServiceContext:
        clock = clock or SystemClock()
        return cls(
            lifecycle_service=LifecycleService(content_repo, schedule_repo, clock, rules.content),
            scheduling_service=SchedulingService(
                content_repo, schedule_repo, clock, rules.scheduling
            ),
            publisher_job=PublisherJob(
                content_repo,
                schedule_repo,
                clock,
                batch_limit=rules.scheduling.publisher_batch_limit,
            ),
            content_repo=content_repo,
            schedule_repo=schedule_repo,
            rules=rules,
            clock=clock,
        )
