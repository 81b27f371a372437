from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse
from bursa_announcements.schemas import AnnouncementsResponse, FailedResponse
from bursa_announcements.services.announcements import AnnouncementService

router = APIRouter()

def get_service(request: Request) -> AnnouncementService:
    return request.app.state.service

@router.get(
    "/announcements",
    response_model=AnnouncementsResponse,
    responses={500: {"model": FailedResponse}},
)
def list_announcements(service: AnnouncementService = Depends(get_service)):
    """
    Fetch the company announcements listing and return it as records.

    Runs on the worker thread pool; the fetcher serializes outbound requests.
    """
    result = service.get_announcements()
    if not result.ok:
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=FailedResponse(error=result.error or "unknown error").model_dump(),
        )
    return JSONResponse(
        status_code=status.HTTP_200_OK,
        content=AnnouncementsResponse(data=result.records).model_dump(),
    )
