from functools import lru_cache

from fastapi import Depends

from contentlab.app_shell.config import Settings
from contentlab.app_shell.context import ServiceContext
from contentlab.rules.loader import load_rules
from contentlab.services.lifecycle import LifecycleService
from contentlab.services.publisher import PublisherJob
from contentlab.services.scheduling import SchedulingService


# --- Settings ---
@lru_cache
def get_settings() -> Settings:
    return Settings()


# --- Context ---
@lru_cache
def get_context() -> ServiceContext:
    settings = get_settings()
    rules = load_rules(settings.rules_path)
    return ServiceContext.create(settings.db_path, rules)


# --- Services ---
def get_lifecycle_service(ctx: ServiceContext = Depends(get_context)) -> LifecycleService:
    return ctx.lifecycle_service


def get_scheduling_service(ctx: ServiceContext = Depends(get_context)) -> SchedulingService:
    return ctx.scheduling_service


def get_publisher_job(ctx: ServiceContext = Depends(get_context)) -> PublisherJob:
    return ctx.publisher_job
