"""예외 정의 및 불변조건 위반 보고"""

import logging

logger = logging.getLogger(__name__)


class HousingModelError(Exception):
    """모델 예외 기본 클래스"""


class InvariantViolation(HousingModelError):
    """프로그래밍 오류 (주문장/소유관계 불일치 등)"""


class ConfigError(HousingModelError):
    """설정 오류"""


def report_violation(message: str, strict: bool = False):
    """불변조건 위반 보고

    항상 ERROR 로그를 남기고, strict 모드면 InvariantViolation 발생.
    """
    logger.error("Invariant violation: %s", message)
    if strict:
        raise InvariantViolation(message)
