"""이벤트 버스 - 거래 완료, 출생/사망 이벤트 전달

발행은 즉시 큐에 쌓이고, 월말 EVENT_PROCESS 페이즈에서 한꺼번에 처리된다.
"""

from collections import Counter, defaultdict
from dataclasses import dataclass, field
from typing import Callable


# 이벤트 타입
TRANSACTION = "market.transaction"
HOUSEHOLD_DIED = "demographics.death"
HOUSEHOLD_BORN = "demographics.birth"
ANY = "*"


@dataclass
class Event:
    """이벤트 (월, 타입, 부가 데이터)"""
    type: str
    month: int
    data: dict = field(default_factory=dict)


Handler = Callable[[Event], None]


class EventBus:
    """발행/구독 이벤트 버스"""

    def __init__(self):
        self._handlers: dict[str, list[Handler]] = defaultdict(list)
        self._pending: list[Event] = []
        self.processed: Counter = Counter()   # 타입별 누적 처리 수

    def subscribe(self, event_type: str, handler: Handler) -> Handler:
        self._handlers[event_type].append(handler)
        return handler

    def unsubscribe(self, event_type: str, handler: Handler) -> bool:
        handlers = self._handlers.get(event_type, [])
        if handler not in handlers:
            return False
        handlers.remove(handler)
        return True

    def publish(self, event: Event):
        self._pending.append(event)

    def emit(self, event_type: str, month: int, **data) -> Event:
        """Event 생성 후 발행"""
        event = Event(type=event_type, month=month, data=data)
        self.publish(event)
        return event

    @property
    def n_pending(self) -> int:
        return len(self._pending)

    def process(self) -> int:
        """대기 이벤트 처리 (처리 중 발행된 이벤트는 다음 호출로 넘어감)

        Returns:
            처리한 이벤트 수
        """
        events, self._pending = self._pending, []
        for event in events:
            for handler in self._handlers.get(event.type, ()):
                handler(event)
            for handler in self._handlers.get(ANY, ()):
                handler(event)
            self.processed[event.type] += 1
        return len(events)

    def clear(self):
        self._pending.clear()
        self._handlers.clear()
        self.processed.clear()
