"""시뮬레이션 페이즈 정의"""

from enum import IntEnum


class Phase(IntEnum):
    """시뮬레이션 단계 (매월 순서대로 실행)"""
    DEMOGRAPHICS = 0       # 출생/사망/상속
    CONSTRUCTION = 1       # 신축 공급, 미분양 가격 인하
    HOUSEHOLD_STEP = 2     # 가구 회계, 주택 관리, 입찰
    MARKET_CLEARING = 3    # 매매 → 임대 청산
    RECORD_STATS = 4       # 통계 기록
    INVARIANT_CHECK = 5    # 불변조건 검사 (설정 시)
    EVENT_PROCESS = 6      # 이벤트 처리


DEFAULT_PHASE_ORDER = list(Phase)
