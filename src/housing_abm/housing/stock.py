"""주택 스톡 - ID 기반 주택 저장소"""

from itertools import count
from typing import Iterator, Optional

from .house import House


class HousingStock:
    """주택 스톡 관리

    모든 지역의 주택을 하나의 ID 공간에서 관리한다. ID는 1부터 증가하며 재사용하지 않는다.
    """

    def __init__(self):
        self._houses: dict[int, House] = {}
        self._ids = count(1)

    def build(self, region_id: int, quality: int, owner_id: int) -> House:
        """신규 주택 생성"""
        house = House(id=next(self._ids), region_id=region_id, quality=quality, owner_id=owner_id)
        self._houses[house.id] = house
        return house

    def get(self, house_id: int) -> House:
        return self._houses[house_id]

    def __getitem__(self, house_id: int) -> House:
        return self._houses[house_id]

    def __contains__(self, house_id: int) -> bool:
        return house_id in self._houses

    def __iter__(self) -> Iterator[House]:
        return iter(self._houses.values())

    def __len__(self) -> int:
        return len(self._houses)

    def in_region(self, region_id: int) -> list[House]:
        return [h for h in self._houses.values() if h.region_id == region_id]

    def owned_by(self, owner_id: int) -> list[House]:
        return [h for h in self._houses.values() if h.owner_id == owner_id]

    def get_stats(self, region_id: Optional[int] = None) -> dict:
        """점유 상태 통계"""
        houses = self._houses.values() if region_id is None else self.in_region(region_id)
        total = occupied = for_sale = for_rent = 0
        for h in houses:
            total += 1
            occupied += not h.is_vacant
            for_sale += h.is_on_sale_market
            for_rent += h.is_on_rental_market
        return {
            'total': total,
            'occupied': occupied,
            'vacant': total - occupied,
            'for_sale': for_sale,
            'for_rent': for_rent,
        }
