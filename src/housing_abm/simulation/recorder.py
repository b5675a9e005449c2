"""통계 기록 - 월간 집계, 거래 마이크로데이터"""

import csv
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import numpy as np

from ..core.events import Event
from ..core.types import TenureState
from ..markets.records import TransactionRecord

logger = logging.getLogger(__name__)


@dataclass
class MonthlyStats:
    """월간 통계"""
    month: int = 0

    # 지역별 시장 (n_regions,)
    region_hpi: Optional[np.ndarray] = None
    region_avg_price: Optional[np.ndarray] = None
    region_avg_rent: Optional[np.ndarray] = None
    region_sales: Optional[np.ndarray] = None
    region_rentals: Optional[np.ndarray] = None
    region_sale_listings: Optional[np.ndarray] = None
    region_rental_listings: Optional[np.ndarray] = None
    region_days_on_market: Optional[np.ndarray] = None
    region_rental_yield: Optional[np.ndarray] = None

    # 가구
    n_households: int = 0
    n_houses: int = 0
    social_housing_rate: float = 0.0
    renting_rate: float = 0.0
    owner_occupier_rate: float = 0.0
    investor_rate: float = 0.0
    bankrupt_count: int = 0
    avg_bank_balance: float = 0.0
    births: int = 0
    deaths: int = 0

    # 은행
    mortgages_approved: int = 0
    mean_ltv: float = 0.0
    ftb_affordability: float = 0.0

    def to_dict(self) -> dict:
        d = {}
        for k, v in self.__dict__.items():
            if isinstance(v, np.ndarray):
                d[k] = v.tolist()
            else:
                d[k] = v
        return d


class Recorder:
    """시뮬레이션 통계 기록기"""

    def __init__(self, n_regions: int, record_micro_data: bool = True):
        self.n_regions = n_regions
        self.record_micro_data = record_micro_data
        self.history: list[MonthlyStats] = []
        self.transactions: list[TransactionRecord] = []
        self._last_approved = 0

    def on_transaction(self, event: Event):
        """이벤트 버스 핸들러"""
        if self.record_micro_data:
            self.transactions.append(event.data['record'])

    def record(self, month: int, world, population, bank, demographics) -> MonthlyStats:
        """한 달치 통계 기록"""
        regions = list(world)
        tenures = np.array([h.tenure for h in population], dtype=np.int32)
        balances = np.array([h.bank_balance for h in population], dtype=np.float64)
        n = len(tenures)

        def share(state: TenureState) -> float:
            return float(np.mean(tenures == state)) if n else 0.0

        bank_stats = bank.get_stats()
        stats = MonthlyStats(
            month=month,
            region_hpi=np.array([r.sale_market.stats.hpi() for r in regions]),
            region_avg_price=np.array([float(np.mean(r.sale_market.stats.avg_price)) for r in regions]),
            region_avg_rent=np.array([float(np.mean(r.rental_market.stats.avg_price)) for r in regions]),
            region_sales=np.array([r.sale_market.n_transactions for r in regions], dtype=np.int32),
            region_rentals=np.array([r.rental_market.n_transactions for r in regions], dtype=np.int32),
            region_sale_listings=np.array([r.sale_market.n_listings for r in regions], dtype=np.int32),
            region_rental_listings=np.array([r.rental_market.n_listings for r in regions], dtype=np.int32),
            region_days_on_market=np.array([float(np.mean(r.sale_market.stats.avg_days_on_market))
                                            for r in regions]),
            region_rental_yield=np.array([r.rental_market.average_sold_gross_yield for r in regions]),

            n_households=n,
            n_houses=sum(r.construction.housing_stock for r in regions),
            social_housing_rate=share(TenureState.SOCIAL_HOUSING),
            renting_rate=share(TenureState.RENTING),
            owner_occupier_rate=share(TenureState.OWNER_OCCUPIER),
            investor_rate=share(TenureState.OWNER_INVESTOR),
            bankrupt_count=sum(1 for h in population if h.is_bankrupt),
            avg_bank_balance=float(np.mean(balances)) if n else 0.0,
            births=demographics.births_this_month,
            deaths=demographics.deaths_this_month,

            mortgages_approved=bank_stats['n_approved'] - self._last_approved,
            mean_ltv=bank_stats['mean_ltv'],
            ftb_affordability=bank_stats['ftb_affordability'],
        )
        self._last_approved = bank_stats['n_approved']
        self.history.append(stats)
        return stats

    def get_hpi_series(self) -> np.ndarray:
        """(n_months, n_regions) 가격지수 시계열"""
        if not self.history:
            return np.array([])
        return np.array([s.region_hpi for s in self.history])

    def get_volume_series(self) -> tuple[np.ndarray, np.ndarray]:
        """(매매, 임대) 월간 거래량 (전 지역 합계)"""
        sales = np.array([int(s.region_sales.sum()) for s in self.history])
        rentals = np.array([int(s.region_rentals.sum()) for s in self.history])
        return sales, rentals

    def export_transactions_csv(self, path: str | Path) -> int:
        """거래 마이크로데이터 CSV 저장, 기록 행 수 반환"""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, 'w', newline='', encoding='utf-8') as f:
            writer = csv.writer(f)
            writer.writerow(TransactionRecord.CSV_HEADER)
            for record in self.transactions:
                writer.writerow(record.to_row())
        logger.info("Wrote %d transactions to %s", len(self.transactions), path)
        return len(self.transactions)

    def get_summary(self) -> dict:
        """최종 요약"""
        if not self.history:
            return {}
        first = self.history[0]
        last = self.history[-1]

        price_changes = {}
        for i in range(self.n_regions):
            if first.region_hpi[i] > 0:
                pct = (last.region_hpi[i] - first.region_hpi[i]) / first.region_hpi[i] * 100
                price_changes[i] = round(float(pct), 2)

        sales, rentals = self.get_volume_series()
        return {
            'months': len(self.history),
            'hpi_changes_pct': price_changes,
            'final_hpi': last.region_hpi.tolist(),
            'final_households': last.n_households,
            'final_houses': last.n_houses,
            'final_social_housing_rate': last.social_housing_rate,
            'final_renting_rate': last.renting_rate,
            'final_owner_occupier_rate': last.owner_occupier_rate,
            'final_investor_rate': last.investor_rate,
            'total_sales': int(sales.sum()),
            'total_rentals': int(rentals.sum()),
            'total_bankruptcies': sum(s.bankrupt_count for s in self.history),
        }
