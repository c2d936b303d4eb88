from uuid import UUID
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from app.schemas import ApiResponse, PaginatedResponse, RSVPOut
from app.db.session import get_session
from app.db.models.user import User
from app.services.invitation_service import InvitationService
from app.auth import get_current_user
from app.api.v1.pagination import PageParams

router = APIRouter(prefix="/rsvps", tags=["rsvps"])


def get_invitation_service(session: AsyncSession = Depends(get_session)) -> InvitationService:
    return InvitationService(session)


@router.get("", response_model=ApiResponse[PaginatedResponse[RSVPOut]])
async def get_my_rsvps(
    params: PageParams = Depends(),
    user: User = Depends(get_current_user),
    invitation_service: InvitationService = Depends(get_invitation_service)
):
    total, items = await invitation_service.list_rsvps(user.id, params.per_page, params.offset, params.descending)
    return ApiResponse(content=params.wrap(total, items, RSVPOut))


@router.get("/{rsvp_id}", response_model=ApiResponse[RSVPOut])
async def get_rsvp_endpoint(
    rsvp_id: UUID,
    user: User = Depends(get_current_user),
    invitation_service: InvitationService = Depends(get_invitation_service)
):
    rsvp = await invitation_service.get_rsvp_by_id(user.id, rsvp_id)
    return ApiResponse(content=RSVPOut.model_validate(rsvp))


@router.delete("/{rsvp_id}", response_model=ApiResponse[RSVPOut])
async def delete_rsvp_endpoint(
    rsvp_id: UUID,
    user: User = Depends(get_current_user),
    invitation_service: InvitationService = Depends(get_invitation_service)
):
    rsvp = await invitation_service.delete_rsvp(user.id, rsvp_id)
    return ApiResponse(message="RSVP deleted", content=RSVPOut.model_validate(rsvp))
