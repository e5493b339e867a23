"""
프로모션 API 라우터

사용자용 엔드포인트:
- GET /promotions: 프로모션 목록 (현재 이용 가능 여부 포함)
- POST /promotions/{promotion_id}/activate: 입금과 함께 프로모션 활성화
- GET /promotions/grants: 내 보너스 지급 내역
- POST /promotions/grants/{grant_id}/cancel: 진행 중인 보너스 취소 (보너스 몰수)

관리자용 엔드포인트:
- POST /admin/promotions: 프로모션 등록
- PATCH /admin/promotions/{promotion_id}/status: 활성/비활성 전환
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Path, Query, status

from casinoapi.core.auth import get_current_admin_id, get_current_user_id
from casinoapi.deps import get_promotion_service, get_wallet_service
from casinoapi.models.promotion import GrantStatusEnum
from casinoapi.schemas.balance import BalanceBreakdown
from casinoapi.schemas.promotion import (
    BonusGrantSchema,
    PromotionActivationRequest,
    PromotionActivationResponse,
    PromotionCreate,
    PromotionDefinition,
    PromotionStatusUpdate,
    PromotionSummary,
)
from casinoapi.services.promotion_service import PromotionService
from casinoapi.services.wallet_service import WalletService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["promotions"])


@router.get("/promotions", response_model=List[PromotionSummary])
def list_promotions(
    include_inactive: bool = Query(False, description="비활성 프로모션 포함 여부"),
    promotion_service: PromotionService = Depends(get_promotion_service),
) -> List[PromotionSummary]:
    return promotion_service.list_promotions(only_active=not include_inactive)


@router.post(
    "/promotions/{promotion_id}/activate", response_model=PromotionActivationResponse
)
def activate_promotion(
    request: PromotionActivationRequest,
    promotion_id: int = Path(..., ge=1, description="프로모션 ID"),
    user_id: str = Depends(get_current_user_id),
    wallet_service: WalletService = Depends(get_wallet_service),
) -> PromotionActivationResponse:
    """
    프로모션 활성화

    입금(deposit)과 보너스 지급(bonus)을 하나의 트랜잭션으로 처리한다.
    조건을 만족하지 못하면 입금도 반영되지 않는다 (PROMOTION_001).
    """
    grant, breakdown = wallet_service.activate_promotion(
        user_id, promotion_id, request.deposit_amount
    )
    return PromotionActivationResponse(grant=grant, balance=breakdown)


@router.get("/promotions/grants", response_model=List[BonusGrantSchema])
def list_my_grants(
    grant_status: Optional[GrantStatusEnum] = Query(None, alias="status"),
    user_id: str = Depends(get_current_user_id),
    wallet_service: WalletService = Depends(get_wallet_service),
) -> List[BonusGrantSchema]:
    return wallet_service.list_grants(user_id, grant_status)


@router.post(
    "/promotions/grants/{grant_id}/cancel", response_model=BalanceBreakdown
)
def cancel_grant(
    grant_id: int = Path(..., ge=1, description="보너스 지급 ID"),
    user_id: str = Depends(get_current_user_id),
    wallet_service: WalletService = Depends(get_wallet_service),
) -> BalanceBreakdown:
    return wallet_service.cancel_promotion(user_id, grant_id)


@router.post(
    "/admin/promotions",
    response_model=PromotionDefinition,
    status_code=status.HTTP_201_CREATED,
)
def create_promotion(
    request: PromotionCreate,
    admin_id: str = Depends(get_current_admin_id),
    promotion_service: PromotionService = Depends(get_promotion_service),
) -> PromotionDefinition:
    return promotion_service.create_promotion(request, admin_id)


@router.patch(
    "/admin/promotions/{promotion_id}/status", response_model=PromotionDefinition
)
def set_promotion_status(
    request: PromotionStatusUpdate,
    promotion_id: int = Path(..., ge=1, description="프로모션 ID"),
    admin_id: str = Depends(get_current_admin_id),
    promotion_service: PromotionService = Depends(get_promotion_service),
) -> PromotionDefinition:
    logger.info(f"Admin {admin_id} updating status of promotion {promotion_id}")
    return promotion_service.set_promotion_status(promotion_id, request.is_active)
