from fastapi import APIRouter, Depends

from contentlab.api.deps import get_publisher_job
from contentlab.api.schemas import PublishReportResponse
from contentlab.services.publisher import PublisherJob

router = APIRouter()


@router.post("/run", response_model=PublishReportResponse)
def run_publisher(job: PublisherJob = Depends(get_publisher_job)) -> PublishReportResponse:
    """
    Run the publisher once ("run now").

    Individual item failures are reported in the body; only a failed
    due-query makes the request itself fail (503).
    """
    report = job.run()
    return PublishReportResponse.model_validate(report.to_dict())
