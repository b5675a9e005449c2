"""주택 - 품질, 소유자, 거주자, 시장 등록 표시"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

from ..core.types import NOBODY, CONSTRUCTION_ID

if TYPE_CHECKING:
    from ..markets.records import HouseSaleRecord


@dataclass(eq=False)
class House:
    """주택 한 채

    소유자/거주자는 ID로만 참조한다 (가구 객체 직접 참조 없음).
    sale_record/rental_record는 각 시장 주문장에 올라간 호가 레코드.
    """
    id: int
    region_id: int
    quality: int
    owner_id: int = CONSTRUCTION_ID
    resident_id: int = NOBODY
    sale_record: Optional[HouseSaleRecord] = None
    rental_record: Optional[HouseSaleRecord] = None

    @property
    def is_on_sale_market(self) -> bool:
        return self.sale_record is not None

    @property
    def is_on_rental_market(self) -> bool:
        return self.rental_record is not None

    @property
    def is_on_any_market(self) -> bool:
        return self.sale_record is not None or self.rental_record is not None

    @property
    def is_vacant(self) -> bool:
        return self.resident_id == NOBODY

    def __hash__(self):
        return hash(self.id)

    def __repr__(self):
        return (f"House(id={self.id}, region={self.region_id}, q={self.quality}, "
                f"owner={self.owner_id}, resident={self.resident_id})")
