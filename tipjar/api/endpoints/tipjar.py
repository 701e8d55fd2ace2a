from typing import List

from fastapi import HTTPException, status

from tipjar.core.router_decorated import APIRouter
from tipjar.core.validators import is_valid_address, normalize_address
from tipjar.schemas.tipjar import CreatorTipJarResponse, RecentTipsResponse, TipJarListResponse
from tipjar.services import blockchain_service

router = APIRouter()
group_tags: List[str] = ["tipjar"]


def _check_address(address: str) -> str:
    if not is_valid_address(address):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid address")
    return normalize_address(address)


@router.get(
    "",
    tags=group_tags,
    response_model=TipJarListResponse,
    status_code=status.HTTP_200_OK,
)
async def list_tip_jars() -> TipJarListResponse:
    tip_jars = await blockchain_service.get_all_tip_jars()
    return TipJarListResponse(tip_jars=tip_jars, total=len(tip_jars))


@router.get(
    "/{creator}",
    tags=group_tags,
    response_model=CreatorTipJarResponse,
    status_code=status.HTTP_200_OK,
)
async def get_creator_tip_jar(creator: str) -> CreatorTipJarResponse:
    """Tip jar of a creator with its on-chain totals, or ``tipJar: null``."""
    creator = _check_address(creator)
    tip_jar_address = await blockchain_service.get_tip_jar_address(creator)
    if tip_jar_address is None:
        return CreatorTipJarResponse(creator=creator, has_tip_jar=False, tip_jar=None)

    info = await blockchain_service.get_tip_jar_info(tip_jar_address)
    return CreatorTipJarResponse(creator=creator, has_tip_jar=True, tip_jar=info)


@router.get(
    "/{creator}/tips",
    tags=group_tags,
    response_model=RecentTipsResponse,
    status_code=status.HTTP_200_OK,
)
async def get_creator_recent_tips(creator: str) -> RecentTipsResponse:
    creator = _check_address(creator)
    tip_jar_address = await blockchain_service.get_tip_jar_address(creator)
    if tip_jar_address is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Tip jar not found")

    tips = await blockchain_service.get_recent_tips(tip_jar_address)
    return RecentTipsResponse(tip_jar=tip_jar_address, tips=tips)
