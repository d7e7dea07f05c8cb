"""인증 이벤트 스트림 — 로그인/로그아웃/비밀번호 복구 이벤트 구독.

Auth event stream. Observers subscribe with a callback and must release
the returned Subscription when they are torn down; the recovery-mail
sender subscribes at application startup and unsubscribes at shutdown.

Usage:
    subscription = auth_events.subscribe(on_auth_event)
    ...
    subscription.unsubscribe()
"""

import inspect
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from app.utils.dates import utcnow


class AuthEventType(str, Enum):
    SIGNED_IN = "SIGNED_IN"
    SIGNED_OUT = "SIGNED_OUT"
    PASSWORD_RECOVERY = "PASSWORD_RECOVERY"
    USER_UPDATED = "USER_UPDATED"


@dataclass(frozen=True)
class AuthEvent:
    """인증 이벤트.

    Attributes:
        type: 이벤트 종류 (Event type)
        user_id: 대상 계정 ID (Identity id)
        email: 대상 이메일 (Identity email)
        token: PASSWORD_RECOVERY일 때 복구 토큰 (Recovery token, recovery events only)
        occurred_at: 발생 시각 UTC (Emission time)
    """

    type: AuthEventType
    user_id: str | None = None
    email: str | None = None
    token: str | None = None
    occurred_at: datetime = field(default_factory=utcnow)


AuthEventCallback = Callable[[AuthEvent], Awaitable[None] | None]


class Subscription:
    """구독 핸들 — unsubscribe()로 해제 (idempotent)."""

    def __init__(self, bus: "AuthEventBus", callback: AuthEventCallback) -> None:
        self._bus: AuthEventBus = bus
        self.callback: AuthEventCallback = callback
        self.active: bool = True

    def unsubscribe(self) -> None:
        if self.active:
            self._bus._remove(self)
            self.active = False


class AuthEventBus:
    """프로세스 내 인증 이벤트 버스 (In-process auth event bus)."""

    def __init__(self) -> None:
        self._subscriptions: list[Subscription] = []

    def subscribe(self, callback: AuthEventCallback) -> Subscription:
        subscription: Subscription = Subscription(self, callback)
        self._subscriptions.append(subscription)
        return subscription

    def _remove(self, subscription: Subscription) -> None:
        if subscription in self._subscriptions:
            self._subscriptions.remove(subscription)

    @property
    def subscriber_count(self) -> int:
        return len(self._subscriptions)

    async def emit(self, event: AuthEvent) -> None:
        """등록 순서대로 모든 구독자에게 전달합니다.

        Deliver the event to every subscriber in registration order.
        Callback errors propagate to the emitter.
        """
        # 전달 중 해제되어도 안전하도록 복사 (snapshot so callbacks may unsubscribe)
        for subscription in list(self._subscriptions):
            result = subscription.callback(event)
            if inspect.isawaitable(result):
                await result


# 싱글턴 인스턴스 / Singleton instance
auth_events: AuthEventBus = AuthEventBus()
