"""
기본 프로모션 시드 스크립트
웰컴 보너스 / 주말 리로드 보너스 / 프리 스핀을 초기 데이터로 설정
"""

import sys
import os

sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from decimal import Decimal

from sqlalchemy import select

from casinoapi.database.session import get_db_context
from casinoapi.models.promotion import (
    BonusTypeEnum,
    Promotion,
    TurnoverBasisEnum,
)


DEFAULT_PROMOTIONS = [
    {
        "name": "Welcome Bonus",
        "description": "100% match on your deposit up to 500",
        "bonus_type": BonusTypeEnum.PERCENTAGE,
        "bonus_value": Decimal("100.00"),
        "min_deposit": Decimal("20.00"),
        "max_bonus": Decimal("500.00"),
        "turnover_multiplier": Decimal("30.00"),
        "turnover_basis": TurnoverBasisEnum.DEPOSIT_PLUS_BONUS,
        "max_usage_per_day": 1,
        "days_of_week": [0, 1, 2, 3, 4, 5, 6],
    },
    {
        "name": "Weekend Reload",
        "description": "50% reload bonus on Saturdays and Sundays",
        "bonus_type": BonusTypeEnum.PERCENTAGE,
        "bonus_value": Decimal("50.00"),
        "min_deposit": Decimal("10.00"),
        "max_bonus": Decimal("200.00"),
        "turnover_multiplier": Decimal("20.00"),
        "turnover_basis": TurnoverBasisEnum.BONUS_ONLY,
        "max_usage_per_day": 1,
        "days_of_week": [0, 6],
    },
    {
        "name": "Daily Free Spins",
        "description": "20 free spins worth 0.50 each",
        "bonus_type": BonusTypeEnum.FREE_SPINS,
        "bonus_value": Decimal("20"),
        "free_spin_value": Decimal("0.50"),
        "min_deposit": Decimal("10.00"),
        "max_bonus": None,
        "turnover_multiplier": Decimal("10.00"),
        "turnover_basis": TurnoverBasisEnum.BONUS_ONLY,
        "max_usage_per_day": 1,
        "days_of_week": [0, 1, 2, 3, 4, 5, 6],
    },
]


def seed_promotions():
    """기본 프로모션 시드 (이미 있는 이름은 건너뜀)"""
    created = []
    try:
        with get_db_context() as db:
            existing = set(db.execute(select(Promotion.name)).scalars().all())
            for data in DEFAULT_PROMOTIONS:
                if data["name"] in existing:
                    continue
                db.add(Promotion(**data, timezone="UTC", is_active=True, created_by="seed"))
                created.append(data["name"])
    except Exception as e:
        print(f"❌ 프로모션 시드 데이터 생성 실패: {str(e)}")
        raise

    print(f"✅ 프로모션 시드 데이터 생성 완료: {len(created)}개")
    for name in created:
        print(f"   - {name}")


if __name__ == "__main__":
    seed_promotions()
