"""School API Backend — Sign-in Route (`POST /api/authentication/sign-in`)."""

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from school_api.database import get_db_session
from school_api.features.authentication import SignInCommand, SignInValidator
from school_api.routes.common import build_request, dispatch, read_payload

router = APIRouter(prefix="/api/authentication", tags=["Authentication"])


@router.post("/sign-in", summary="Exchange credentials for an access token")
async def sign_in(request: Request, db: AsyncSession = Depends(get_db_session)):
    command = build_request(SignInCommand, await read_payload(request))
    return await dispatch(command, db, SignInValidator())
