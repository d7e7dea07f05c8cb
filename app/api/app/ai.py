"""AI 라우터 — AI Smart-Fill (설명 초안 생성).

AI Router — Drafts an issue description from its title and category.
Always answers 200; an unconfigured or failing backend yields placeholder
text instead of an error.
"""

from typing import Annotated

from fastapi import APIRouter, Depends

from app.api.deps import get_current_user
from app.schemas.issue import AITextResponse, ExpandDescriptionRequest
from app.schemas.user import UserResponse
from app.services.ai_service import ai_service

router: APIRouter = APIRouter()


@router.post("/expand-description", response_model=AITextResponse)
async def expand_description(
    data: ExpandDescriptionRequest,
    current_user: Annotated[UserResponse, Depends(get_current_user)],
) -> AITextResponse:
    """제목과 카테고리로 설명 초안 생성."""
    text: str = await ai_service.expand_description(data.title, data.category)
    return AITextResponse(text=text)
