from fastapi import APIRouter, Depends
from treasury_chat.config import settings
from treasury_chat.dependencies import get_current_user
from treasury_chat.models.user import User
from treasury_chat.schemas.council import CouncilOut

router = APIRouter()

@router.get("/council", response_model=CouncilOut)
async def get_council(current_user: User = Depends(get_current_user)):
    # A deployment serves a single council
    return CouncilOut(
        name=settings.council_name,
        council_id=settings.council_code,
        financial_year=settings.financial_year,
    )
