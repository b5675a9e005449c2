"""주택시장 ABM 시뮬레이션

가구 단위 Agent-Based Model: 매매/임대 이중 시장, 은행 대출 심사, 인구 동학

주요 구성요소:
- 품질 구간별 호가 매칭 (경합 시 가격 인상)
- LTV / ITV / LTI / 상환여력 기반 대출 심사
- 가구 행동 규칙 (소비, 매수/매도, 임차, 임대 투자)
- 건설 부문, 출생/사망/상속
"""

from .config.loader import load_scenario, load_scenario_from_dict
from .config.schema import ScenarioConfig
from .core.errors import HousingModelError, InvariantViolation, ConfigError
from .simulation.engine import SimulationEngine
from .simulation.invariants import check_invariants

__all__ = [
    "SimulationEngine",
    "ScenarioConfig",
    "load_scenario",
    "load_scenario_from_dict",
    "check_invariants",
    "HousingModelError",
    "InvariantViolation",
    "ConfigError",
]

__version__ = "0.1.0"
