"""
잔액 API 라우터

사용자용 엔드포인트:
- GET /balance: 내 잔액 구성 조회
- POST /balance/operations: bet / win / deposit / bonus 적용
- POST /balance/withdrawals: 출금
- GET /balance/transactions: 내 거래 내역 (최신순)
- GET /balance/integrity: 내 잔액 정합성 검증

관리자용 엔드포인트:
- POST /admin/balance/adjust: 사용자 잔액 조정

인증:
- 사용자 ID 는 상위 인증 계층이 설정한 X-User-Id 헤더
- 관리자 엔드포인트는 X-Admin-Id 헤더 필요
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from casinoapi.core.auth import get_current_admin_id, get_current_user_id
from casinoapi.deps import get_wallet_service
from casinoapi.schemas.balance import (
    AdminBalanceAdjustmentRequest,
    BalanceBreakdown,
    BalanceIntegrityResponse,
    BalanceOperationRequest,
    WithdrawalRequest,
)
from casinoapi.schemas.transaction import TransactionRecord
from casinoapi.services.wallet_service import WalletService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["balance"])


@router.get("/balance", response_model=BalanceBreakdown)
def get_my_balance(
    user_id: str = Depends(get_current_user_id),
    wallet_service: WalletService = Depends(get_wallet_service),
) -> BalanceBreakdown:
    """
    내 잔액 조회

    Returns:
        BalanceBreakdown: 총 잔액, 보너스 잔액, 실머니 잔액, 출금 가능액
    """
    return wallet_service.get_balance(user_id)


@router.post("/balance/operations", response_model=BalanceBreakdown)
def apply_balance_operation(
    request: BalanceOperationRequest,
    user_id: str = Depends(get_current_user_id),
    wallet_service: WalletService = Depends(get_wallet_service),
) -> BalanceBreakdown:
    """
    잔액 연산 적용

    - bet: 총 잔액 차감 + 보너스 베팅 요건 진행
    - win / deposit / bonus: 총 잔액 증가

    HTTP Status:
        200: 성공
        400: 잔액 부족 (BALANCE_001)
        422: 잘못된 금액 (BALANCE_002)
        503: 동시성 충돌 재시도 실패 (STORAGE_001)
    """
    return wallet_service.apply_operation(
        user_id, request.amount, request.kind, request.reason
    )


@router.post("/balance/withdrawals", response_model=BalanceBreakdown)
def withdraw(
    request: WithdrawalRequest,
    user_id: str = Depends(get_current_user_id),
    wallet_service: WalletService = Depends(get_wallet_service),
) -> BalanceBreakdown:
    """출금 (진행 중인 보너스가 있으면 BALANCE_003)"""
    return wallet_service.withdraw(user_id, request.amount)


@router.get("/balance/transactions", response_model=List[TransactionRecord])
def get_my_transactions(
    limit: Optional[int] = Query(None, description="조회 건수 (1-100, 기본 20)"),
    user_id: str = Depends(get_current_user_id),
    wallet_service: WalletService = Depends(get_wallet_service),
) -> List[TransactionRecord]:
    # 범위 검증은 TransactionRecorder 가 HISTORY_001 로 처리
    return wallet_service.get_history(user_id, limit)


@router.get("/balance/integrity", response_model=BalanceIntegrityResponse)
def verify_my_balance(
    user_id: str = Depends(get_current_user_id),
    wallet_service: WalletService = Depends(get_wallet_service),
) -> BalanceIntegrityResponse:
    return wallet_service.verify_integrity(user_id)


@router.post("/admin/balance/adjust", response_model=BalanceBreakdown)
def admin_adjust_balance(
    request: AdminBalanceAdjustmentRequest,
    admin_id: str = Depends(get_current_admin_id),
    wallet_service: WalletService = Depends(get_wallet_service),
) -> BalanceBreakdown:
    """
    관리자 잔액 조정

    amount 가 양수면 추가, 음수면 차감. 조정 내역은 adjustment 거래로 원장에 남는다.
    """
    return wallet_service.adjust_balance(
        admin_id, request.user_id, request.amount, request.reason
    )
