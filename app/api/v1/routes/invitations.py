from uuid import UUID
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from app.schemas import (
    ApiResponse,
    InvitationCreate,
    InvitationOut,
    PaginatedResponse,
    RSVPCreate,
    RSVPOut,
)
from app.db.session import get_session
from app.db.models.user import User
from app.services.invitation_service import InvitationService
from app.auth import get_current_user
from app.api.v1.pagination import PageParams

router = APIRouter(prefix="/invitations", tags=["invitations"])


def get_invitation_service(session: AsyncSession = Depends(get_session)) -> InvitationService:
    return InvitationService(session)


@router.post("", response_model=ApiResponse[InvitationOut], status_code=status.HTTP_201_CREATED)
async def create_invitation_endpoint(
    payload: InvitationCreate,
    user: User = Depends(get_current_user),
    invitation_service: InvitationService = Depends(get_invitation_service)
):
    """Organizer invites an accepted participant of their event."""
    invitation = await invitation_service.create_invitation(
        user.id, payload.event_id, payload.invitee_id, payload.content
    )
    return ApiResponse(message="Invitation sent", content=InvitationOut.model_validate(invitation))


@router.get("/received", response_model=ApiResponse[PaginatedResponse[InvitationOut]])
async def get_received_invitations(
    params: PageParams = Depends(),
    user: User = Depends(get_current_user),
    invitation_service: InvitationService = Depends(get_invitation_service)
):
    total, items = await invitation_service.list_received_invitations(
        user.id, params.per_page, params.offset, params.descending
    )
    return ApiResponse(content=params.wrap(total, items, InvitationOut))


@router.get("/sent", response_model=ApiResponse[PaginatedResponse[InvitationOut]])
async def get_sent_invitations(
    params: PageParams = Depends(),
    user: User = Depends(get_current_user),
    invitation_service: InvitationService = Depends(get_invitation_service)
):
    total, items = await invitation_service.list_sent_invitations(
        user.id, params.per_page, params.offset, params.descending
    )
    return ApiResponse(content=params.wrap(total, items, InvitationOut))


@router.get("/{invitation_id}", response_model=ApiResponse[InvitationOut])
async def get_invitation_endpoint(
    invitation_id: UUID,
    user: User = Depends(get_current_user),
    invitation_service: InvitationService = Depends(get_invitation_service)
):
    invitation = await invitation_service.get_invitation_by_id(user.id, invitation_id)
    return ApiResponse(content=InvitationOut.model_validate(invitation))


@router.delete("/{invitation_id}", response_model=ApiResponse[InvitationOut])
async def delete_invitation_endpoint(
    invitation_id: UUID,
    user: User = Depends(get_current_user),
    invitation_service: InvitationService = Depends(get_invitation_service)
):
    invitation = await invitation_service.delete_invitation(user.id, invitation_id)
    return ApiResponse(message="Invitation deleted", content=InvitationOut.model_validate(invitation))


@router.post("/{invitation_id}/rsvp", response_model=ApiResponse[RSVPOut], status_code=status.HTTP_201_CREATED)
async def create_rsvp_endpoint(
    invitation_id: UUID,
    payload: RSVPCreate,
    user: User = Depends(get_current_user),
    invitation_service: InvitationService = Depends(get_invitation_service)
):
    """Invitee answers an invitation once with ACCEPTED or DENIED."""
    rsvp = await invitation_service.create_rsvp(user.id, invitation_id, payload.response)
    return ApiResponse(message="RSVP recorded", content=RSVPOut.model_validate(rsvp))
