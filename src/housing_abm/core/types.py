"""핵심 타입 정의 - 열거형과 식별자 상수"""

from enum import IntEnum


# 식별자 상수 (주택/가구 ID는 1부터 시작)
NOBODY = -1            # 거주자/소유자 없음
CONSTRUCTION_ID = 0    # 건설사 소유 (신축)


class MarketType(IntEnum):
    """시장 종류"""
    SALE = 0
    RENTAL = 1


class TenureState(IntEnum):
    """가구 점유 형태"""
    SOCIAL_HOUSING = 0    # 무주택 (사회주택)
    RENTING = 1           # 임차
    OWNER_OCCUPIER = 2    # 자가 거주
    OWNER_INVESTOR = 3    # 자가 + 임대용 주택 보유


class PaymentKind(IntEnum):
    """정기 지급 계약 종류"""
    MORTGAGE = 0
    RENTAL = 1


# 시간 단위
MONTHS_IN_YEAR = 12
DAYS_IN_MONTH = 30
