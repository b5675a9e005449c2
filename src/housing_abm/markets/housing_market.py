"""주택시장 공통 - 주문장, 품질 우선 매칭, 경합 가격 결정

매매시장과 임대시장이 같은 매칭 엔진을 쓴다.
매칭은 스냅샷 기준으로 모두 계산한 뒤 일괄 반영한다.
"""

import logging
import math
from abc import ABC, abstractmethod
from typing import Optional

from ..core.errors import report_violation
from ..core.events import TRANSACTION
from ..core.types import MarketType, DAYS_IN_MONTH
from ..housing.house import House
from .market_stats import QualityPriceStats
from .records import HouseSaleRecord, HouseBuyerRecord, TransactionRecord

logger = logging.getLogger(__name__)


class HousingMarket(ABC):
    """호가 주문장 + 매칭 엔진

    Args:
        region: 소속 지역 (주택/가구 저장소, 난수, 이벤트 버스, 입찰 장부)
        stats: 품질별 가격 통계
        bidup: 경합 1명당 가격 인상률
        strict: True면 불변조건 위반 시 예외
    """
    market_type: MarketType

    def __init__(self, region, stats: QualityPriceStats, bidup: float, strict: bool = False):
        self.region = region
        self.stats = stats
        self.bidup = bidup
        self.strict = strict
        self._asks: dict[int, HouseSaleRecord] = {}
        self._bids: list[HouseBuyerRecord] = []
        self.n_transactions = 0          # 이번 달 거래 수
        self.transaction_volume = 0.0    # 이번 달 거래 금액
        self.volume_history: list[int] = []

    # === 주택 표시 (시장별) ===

    @abstractmethod
    def _get_marker(self, house: House) -> Optional[HouseSaleRecord]:
        ...

    @abstractmethod
    def _set_marker(self, house: House, record: Optional[HouseSaleRecord]):
        ...

    @abstractmethod
    def _get_other_marker(self, house: House) -> Optional[HouseSaleRecord]:
        ...

    # === 호가 ===

    def offer(self, house: House, price: float) -> Optional[HouseSaleRecord]:
        """매물 등록

        Returns:
            등록된 레코드 또는 None (중복/교차 등록, 잘못된 가격)
        """
        name = self.market_type.name.lower()
        if self._get_marker(house) is not None or house.id in self._asks:
            report_violation(f"house {house.id} already on {name} market", self.strict)
            return None
        if self._get_other_marker(house) is not None:
            report_violation(f"house {house.id} offered on {name} market while listed on the other market",
                             self.strict)
            return None
        if not (price > 0 and math.isfinite(price)):
            report_violation(f"house {house.id} offered on {name} market at invalid price {price}", self.strict)
            return None
        record = HouseSaleRecord(
            house_id=house.id,
            quality=house.quality,
            seller_id=house.owner_id,
            initial_price=price,
            price=price,
            t_initial_listing=self.region.month,
        )
        self._asks[house.id] = record
        self._set_marker(house, record)
        return record

    def update_offer(self, record: HouseSaleRecord, new_price: float):
        """호가 변경 (최초 등록 시점은 유지)"""
        if self._asks.get(record.house_id) is not record:
            report_violation(f"update of unknown offer for house {record.house_id}", self.strict)
            return
        if not (new_price > 0 and math.isfinite(new_price)):
            report_violation(f"invalid price {new_price} for house {record.house_id}", self.strict)
            return
        record.price = new_price

    def remove_offer(self, record: HouseSaleRecord) -> bool:
        """매물 철회"""
        if self._asks.get(record.house_id) is not record:
            logger.warning("Removing offer for house %s that is not on the %s market",
                           record.house_id, self.market_type.name.lower())
            return False
        del self._asks[record.house_id]
        self._set_marker(self.region.houses[record.house_id], None)
        return True

    # === 매수 호가 ===

    def bid(self, household, price: float, is_buy_to_let: bool = False) -> Optional[HouseBuyerRecord]:
        """매수(임차) 호가 제출 - 가구당 스텝별 1건"""
        if not (price > 0 and math.isfinite(price)):
            logger.debug("Household %s bid %.2f ignored", household.id, price)
            return None
        if not self.region.register_bidder(household.id):
            report_violation(f"household {household.id} bid twice in one step", self.strict)
            return None
        record = HouseBuyerRecord(household_id=household.id, price=price, is_buy_to_let=is_buy_to_let)
        self._bids.append(record)
        return record

    def withdraw_bids(self, household_id: int) -> int:
        before = len(self._bids)
        self._bids = [b for b in self._bids if b.household_id != household_id]
        return before - len(self._bids)

    # === 조회 ===

    @property
    def asks(self) -> list[HouseSaleRecord]:
        return list(self._asks.values())

    @property
    def bids(self) -> list[HouseBuyerRecord]:
        return list(self._bids)

    @property
    def n_listings(self) -> int:
        return len(self._asks)

    def get_offer(self, house_id: int) -> Optional[HouseSaleRecord]:
        return self._asks.get(house_id)

    def get_average_price(self, quality: int) -> float:
        return float(self.stats.avg_price[quality])

    def get_average_days_on_market(self, quality: int) -> float:
        return float(self.stats.avg_days_on_market[quality])

    def max_quality_given_price(self, price: float) -> int:
        return self.stats.max_quality_given_price(price)

    # === 청산 ===

    def clear_market(self) -> list[TransactionRecord]:
        """월간 청산

        1) 스냅샷 매칭  2) 일괄 반영  3) 미체결 매수 호가 폐기  4) 통계 갱신
        """
        month = self.region.month
        self.n_transactions = 0
        self.transaction_volume = 0.0

        bids = self._ordered_bids(self._bids)
        self._bids = []
        matches = self._match(bids, list(self._asks.values()))

        transactions = []
        for bid, ask, price, payload in matches:
            transactions.append(self._apply_match(month, bid, ask, price, payload))

        # 미체결 매물은 현재 등록일수로 체류일수 통계에 반영
        for ask in self._asks.values():
            self.stats.observe_days_on_market(ask.quality, ask.months_on_market(month) * DAYS_IN_MONTH)
        self.stats.commit_month()
        self.volume_history.append(self.n_transactions)
        self._after_clearing()
        return transactions

    def _ordered_bids(self, bids: list[HouseBuyerRecord]) -> list[HouseBuyerRecord]:
        """가격 내림차순 (동률은 난수 순서)"""
        bids = list(bids)
        self.region.rng.shuffle(bids)
        bids.sort(key=lambda b: -b.price)
        return bids

    def _match(self, bids: list[HouseBuyerRecord], asks: list[HouseSaleRecord]) -> list[tuple]:
        """품질 우선 매칭

        각 라운드에서 미체결 매수자는 감당 가능한 최고 품질 구간의 최저가 매물을 노린다.
        한 매물에 여러 명이 몰리면 최고가 입찰자가 낙찰받고 나머지는 다음 라운드로 넘어간다.
        """
        by_quality: list[list[HouseSaleRecord]] = [[] for _ in range(self.stats.n_quality)]
        for ask in sorted(asks, key=lambda a: (a.price, a.house_id)):
            by_quality[ask.quality].append(ask)

        taken: set[int] = set()
        matches = []
        pending = bids
        while pending:
            targets: dict[int, list[HouseBuyerRecord]] = {}
            chosen: dict[int, HouseSaleRecord] = {}
            for bid in pending:
                ask = self._best_ask(bid, by_quality, taken)
                if ask is None:
                    continue
                targets.setdefault(ask.house_id, []).append(bid)
                chosen[ask.house_id] = ask
            if not targets:
                break

            next_pending = []
            for house_id, competing in targets.items():
                ask = chosen[house_id]
                winner = competing[0]
                price = self._clearing_price(ask, competing)
                payload = self._accept_match(winner, ask, price)
                if payload is None:
                    logger.debug("Match rejected: household %s house %s at %.0f",
                                 winner.household_id, house_id, price)
                else:
                    matches.append((winner, ask, price, payload))
                    taken.add(house_id)
                next_pending.extend(competing[1:])
            pending = self._ordered_bids(next_pending) if next_pending else []
        return matches

    def _best_ask(self, bid: HouseBuyerRecord, by_quality: list[list[HouseSaleRecord]],
                  taken: set[int]) -> Optional[HouseSaleRecord]:
        for quality in range(len(by_quality) - 1, -1, -1):
            for ask in by_quality[quality]:
                if ask.price > bid.price:
                    break
                if ask.house_id in taken:
                    continue
                if ask.seller_id == bid.household_id:
                    continue
                return ask
        return None

    def _clearing_price(self, ask: HouseSaleRecord, competing: list[HouseBuyerRecord]) -> float:
        """단독 입찰은 호가, 경합 시 경쟁자 1명당 (1+bidup)배, 최고 입찰가 상한"""
        if len(competing) == 1:
            return ask.price
        bumped = ask.price * (1.0 + self.bidup) ** (len(competing) - 1)
        return min(bumped, competing[0].price)

    def _apply_match(self, month: int, bid: HouseBuyerRecord, ask: HouseSaleRecord,
                     price: float, payload) -> TransactionRecord:
        house = self.region.houses[ask.house_id]
        del self._asks[ask.house_id]
        self._set_marker(house, None)

        record = self._complete_transaction(month, house, bid, ask, price, payload)

        self.stats.record_transaction(ask.quality, price)
        self.stats.observe_days_on_market(ask.quality, ask.months_on_market(month) * DAYS_IN_MONTH)
        self.n_transactions += 1
        self.transaction_volume += price
        self.region.event_bus.emit(TRANSACTION, month, record=record)
        logger.debug("%s transaction: house %s q=%d price %.0f buyer %s",
                     self.market_type.name.lower(), house.id, house.quality, price, bid.household_id)
        return record

    # === 시장별 구현 ===

    @abstractmethod
    def _accept_match(self, bid: HouseBuyerRecord, ask: HouseSaleRecord, price: float):
        """낙찰 확정 전 검사. None이면 거절, 아니면 거래 반영 시 넘길 값"""

    @abstractmethod
    def _complete_transaction(self, month: int, house: House, bid: HouseBuyerRecord,
                              ask: HouseSaleRecord, price: float, payload) -> TransactionRecord:
        ...

    def _after_clearing(self):
        pass
