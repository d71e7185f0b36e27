from __future__ import annotations

from fastapi import APIRouter, Depends, Header, Request
from fastapi.responses import PlainTextResponse

from user_gateway.security import require_authentication

router = APIRouter()


@router.get(
    "/user",
    response_class=PlainTextResponse,
    dependencies=[Depends(require_authentication)],
)
async def get_user(
    request: Request,
    authorization: str = Header(),
) -> PlainTextResponse:
    fetcher = request.app.state.username_fetcher
    username = await fetcher.find_username(authorization)
    return PlainTextResponse(username)
