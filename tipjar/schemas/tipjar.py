from typing import List, Optional

from pydantic import Field

from tipjar.schemas.my_base_model import CustomBaseModel


class TipJarInfo(CustomBaseModel):
    """On-chain tip jar state, amounts in ether"""

    address: str = ""
    creator: str = ""
    min_tip: str = "0"
    total_tips: str = "0"
    tip_counter: int = 0


class TipRecord(CustomBaseModel):
    tipper: str = ""
    amount: str = "0"


class CreatorTipJarResponse(CustomBaseModel):
    creator: str = ""
    has_tip_jar: bool = False
    tip_jar: Optional[TipJarInfo] = None


class RecentTipsResponse(CustomBaseModel):
    tip_jar: str = ""
    tips: List[TipRecord] = Field(default_factory=list)


class TipJarListResponse(CustomBaseModel):
    tip_jars: List[str] = Field(default_factory=list)
    total: int = 0
