"""불변조건 전수 검사 - 주문장, 소유/거주 관계, 계약 상태"""

from ..core.types import NOBODY, CONSTRUCTION_ID, PaymentKind


def check_invariants(engine, check_balances: bool = True) -> list[str]:
    """위반 메시지 목록 반환 (빈 목록이면 정상)"""
    problems: list[str] = []
    houses = engine.houses
    population = engine.population

    # === 주문장 ↔ 주택 표시 ===
    for region in engine.world:
        for market, attr in ((region.sale_market, 'sale_record'), (region.rental_market, 'rental_record')):
            name = market.market_type.name.lower()
            for ask in market.asks:
                house = houses[ask.house_id]
                if getattr(house, attr) is not ask:
                    problems.append(f"{name} ask for house {house.id} not marked on the house")
                if house.region_id != region.id:
                    problems.append(f"house {house.id} listed in foreign region {region.name}")
            seen = set()
            for bid in market.bids:
                if bid.household_id in seen:
                    problems.append(f"household {bid.household_id} holds two {name} bids")
                seen.add(bid.household_id)

    for house in houses:
        region = engine.world[house.region_id]
        if house.sale_record is not None and house.rental_record is not None:
            problems.append(f"house {house.id} listed on both markets")
        if house.sale_record is not None and region.sale_market.get_offer(house.id) is not house.sale_record:
            problems.append(f"house {house.id} marked for sale but missing from the order book")
        if house.rental_record is not None and region.rental_market.get_offer(house.id) is not house.rental_record:
            problems.append(f"house {house.id} marked for rent but missing from the order book")

        # 소유자
        if house.owner_id != CONSTRUCTION_ID:
            owner = population.get(house.owner_id)
            if owner is None:
                problems.append(f"house {house.id} owned by unknown household {house.owner_id}")
            else:
                agreement = owner.payments.get(house.id)
                if agreement is None or agreement.kind != PaymentKind.MORTGAGE:
                    problems.append(f"owner {owner.id} holds no mortgage for house {house.id}")
        # 거주자
        if house.resident_id != NOBODY:
            resident = population.get(house.resident_id)
            if resident is None:
                problems.append(f"house {house.id} occupied by unknown household {house.resident_id}")
            elif resident.home_id != house.id:
                problems.append(f"house {house.id} resident {resident.id} lives elsewhere")
            elif house.owner_id != resident.id:
                if house.owner_id == CONSTRUCTION_ID:
                    problems.append(f"house {house.id} occupied while owned by construction")
                agreement = resident.payments.get(house.id)
                if agreement is None or agreement.kind != PaymentKind.RENTAL:
                    problems.append(f"tenant {resident.id} of house {house.id} has no rental agreement")

    # === 가구 ===
    for household in population:
        if household.home_id != NOBODY:
            if household.home_id not in houses:
                problems.append(f"household {household.id} lives in unknown house {household.home_id}")
            elif houses[household.home_id].resident_id != household.id:
                problems.append(f"household {household.id} home {household.home_id} lists another resident")
        for house_id, agreement in household.payments.items():
            if agreement.n_payments < 0:
                problems.append(f"household {household.id} agreement on {house_id} has negative payments")
            if agreement.kind == PaymentKind.MORTGAGE:
                if agreement.principal < 0:
                    problems.append(f"household {household.id} mortgage on {house_id} has negative principal")
                if houses[house_id].owner_id != household.id:
                    problems.append(f"household {household.id} holds mortgage on house {house_id} it does not own")
            elif house_id != household.home_id:
                problems.append(f"household {household.id} pays rent on house {house_id} it does not live in")
        if check_balances and household.bank_balance < 0:
            problems.append(f"household {household.id} has negative balance {household.bank_balance:.2f}")
    return problems
