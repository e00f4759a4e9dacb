from contentlab.services.lifecycle import LifecycleService
from contentlab.services.publisher import ItemResult, PublisherJob, PublishReport
from contentlab.services.scheduling import SchedulingService

__all__ = [
    "ItemResult",
    "LifecycleService",
    "PublishReport",
    "PublisherJob",
    "SchedulingService",
]
