"""가구 인구 - ID 기반 가구 저장소"""

from itertools import count
from typing import Iterator

from .household import Household


class Population:
    """전체 가구 관리

    ID는 1부터 증가하며 사망 후에도 재사용하지 않는다 (0은 건설사).
    """

    def __init__(self):
        self._households: dict[int, Household] = {}
        self._ids = count(1)

    def next_id(self) -> int:
        return next(self._ids)

    def add(self, household: Household):
        if household.id in self._households:
            raise ValueError(f"duplicate household id {household.id}")
        self._households[household.id] = household

    def remove(self, household_id: int) -> Household:
        return self._households.pop(household_id)

    def get(self, household_id: int) -> Household | None:
        return self._households.get(household_id)

    def __getitem__(self, household_id: int) -> Household:
        return self._households[household_id]

    def __contains__(self, household_id: int) -> bool:
        return household_id in self._households

    def __iter__(self) -> Iterator[Household]:
        return iter(self._households.values())

    def __len__(self) -> int:
        return len(self._households)

    def ids(self) -> list[int]:
        return sorted(self._households)

    def in_region(self, region_id: int) -> list[Household]:
        return [h for h in self._households.values() if h.region.id == region_id]
