from fastapi import Depends, Request
from sqlalchemy.orm import Session

from casinoapi.database.session import get_db
from casinoapi.services.promotion_service import PromotionService
from casinoapi.services.wallet_service import WalletService


def get_wallet_service(request: Request, db: Session = Depends(get_db)) -> WalletService:
    return request.app.container.services.wallet_service(db=db)


def get_promotion_service(
    request: Request, db: Session = Depends(get_db)
) -> PromotionService:
    return request.app.container.services.promotion_service(db=db)
