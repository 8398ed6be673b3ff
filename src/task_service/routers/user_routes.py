"""
Router exposing the caller's own verified identity.
"""
from fastapi import APIRouter, Depends, status

from task_service.dependencies import get_current_principal
from task_service.schemas.auth_schemas import Principal, PrincipalResponse

router = APIRouter(prefix="/api/users", tags=["Users"])


@router.get(
    "/me",
    response_model=PrincipalResponse,
    status_code=status.HTTP_200_OK,
    summary="Describe the authenticated caller",
)
async def read_current_principal(
    principal: Principal = Depends(get_current_principal),
) -> PrincipalResponse:
    """
    Returns the subject and token lifetime of the bearer token used for the
    request. Clients use it to check whether a stored token is still valid.
    """
    return PrincipalResponse(
        id=principal.subject_id,
        subject_id=principal.subject_id,
        issued_at=principal.issued_at,
        expires_at=principal.expires_at,
    )
