"""시뮬레이션 엔진 - 모든 컴포넌트 통합"""

import logging
from pathlib import Path
from typing import Optional

import numpy as np

from ..agents.demographics import Demographics
from ..agents.population import Population
from ..config.loader import load_scenario
from ..config.schema import ScenarioConfig
from ..core.errors import report_violation
from ..core.events import EventBus, TRANSACTION
from ..geography.world import RegionSet
from ..housing.stock import HousingStock
from ..institutions.bank import Bank
from ..institutions.income import IncomeModel
from .invariants import check_invariants
from .phases import Phase, DEFAULT_PHASE_ORDER
from .recorder import Recorder

logger = logging.getLogger(__name__)


class SimulationEngine:
    """주택시장 ABM 시뮬레이션 엔진

    난수 생성기는 하나만 쓰고 모든 컴포넌트가 공유한다 (시드 고정 시 재현 가능).
    """

    def __init__(self, config: ScenarioConfig):
        self.config = config
        self.phase_order = DEFAULT_PHASE_ORDER
        self._build()

    def _build(self):
        config = self.config
        self.rng = np.random.default_rng(config.simulation.seed)
        self.current_month = 0
        self.initialized = False

        # Event bus
        self.event_bus = EventBus()

        # Arena
        self.houses = HousingStock()
        self.population = Population()

        # Institutions
        self.bank = Bank(config.bank)
        self.income_model = IncomeModel(config.income)

        # Regions (markets, construction)
        self.world = RegionSet.from_config(config, self.houses, self.population, self.rng, self.event_bus)
        self.demographics = Demographics(config, self.population, self.bank, self.income_model,
                                         self.rng, self.event_bus)

        # Recorder
        self.recorder = Recorder(self.world.n, config.simulation.record_micro_data)
        self.event_bus.subscribe(TRANSACTION, self.recorder.on_transaction)

    @classmethod
    def from_preset(cls, preset_dir: str | Path) -> 'SimulationEngine':
        """프리셋 디렉토리에서 생성"""
        return cls(load_scenario(preset_dir))

    def initialize(self):
        """초기 인구 생성, 초기 주택 재고 공급 (모두 매물)"""
        for region in self.world:
            region.set_month(self.current_month)
            self.demographics.populate(region)
            region.construction.build_initial_stock()
        self.initialized = True
        logger.info("Initialized: %d households, %d houses, %d regions",
                    len(self.population), len(self.houses), self.world.n)

    def step(self):
        """한 달 시뮬레이션"""
        if not self.initialized:
            self.initialize()
        for region in self.world:
            region.set_month(self.current_month)
        for phase in self.phase_order:
            self._execute_phase(phase)
        self.current_month += 1

    def _execute_phase(self, phase: Phase):
        """개별 페이즈 실행"""
        sim = self.config.simulation
        if phase == Phase.DEMOGRAPHICS:
            self.demographics.step(self.world, self.current_month)
        elif phase == Phase.CONSTRUCTION:
            for region in self.world:
                region.construction.step()
        elif phase == Phase.HOUSEHOLD_STEP:
            for region in self.world:
                region.step_households(shuffle=sim.shuffle_households)
        elif phase == Phase.MARKET_CLEARING:
            for region in self.world:
                region.clear_markets()
        elif phase == Phase.RECORD_STATS:
            self.recorder.record(self.current_month, self.world, self.population, self.bank, self.demographics)
        elif phase == Phase.INVARIANT_CHECK:
            if sim.check_invariants:
                for problem in check_invariants(self):
                    report_violation(f"month {self.current_month}: {problem}", sim.strict_invariants)
        elif phase == Phase.EVENT_PROCESS:
            self.event_bus.process()

    def run(self, n_steps: Optional[int] = None, progress: bool = True) -> dict:
        """시뮬레이션 실행

        Args:
            n_steps: 실행할 스텝 수 (None이면 config 기준)
            progress: 진행 상황 출력
        """
        if n_steps is None:
            n_steps = self.config.simulation.num_steps
        interval = self.config.simulation.progress_interval

        if not self.initialized:
            self.initialize()
        if progress:
            print(f"Starting simulation: {n_steps} months, {len(self.population):,} households, "
                  f"{self.world.n} regions")

        for step in range(n_steps):
            self.step()
            if progress and (step + 1) % interval == 0:
                last = self.recorder.history[-1]
                hpi = float(np.mean(last.region_hpi))
                print(f"  Month {step+1:3d}/{n_steps}: hpi={hpi:.3f} "
                      f"sales={int(last.region_sales.sum())} rentals={int(last.region_rentals.sum())} "
                      f"owners={last.owner_occupier_rate + last.investor_rate:.1%} "
                      f"renting={last.renting_rate:.1%} social={last.social_housing_rate:.1%}")

        summary = self.recorder.get_summary()
        if progress:
            print(f"\nSimulation complete. {n_steps} months elapsed.")
            if 'hpi_changes_pct' in summary:
                print("\n  HPI changes:")
                for i, name in enumerate(self.world.get_names()):
                    if i in summary['hpi_changes_pct']:
                        print(f"    {name}: {summary['hpi_changes_pct'][i]:+.2f}%")
            print(f"  Total sales: {summary.get('total_sales', 0):,}")
            print(f"  Total rentals: {summary.get('total_rentals', 0):,}")
            print(f"  Final social housing rate: {summary.get('final_social_housing_rate', 0):.1%}")
        return summary

    def reset(self):
        """초기화 (같은 시드로 처음부터)"""
        self._build()
