"""In-process push delivery of newly committed family messages.

Subscribers register an async handler for one family. ``publish`` awaits each
handler in registration order, so every subscriber sees a family's messages in
the order they were committed by this process. A handler that fails or does
not finish within ``send_timeout`` seconds is detached.

Subscriptions opened on behalf of a sign-in session carry its id, so signing
out can close them through ``revoke_session``.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any
from uuid import UUID

from familyhub.core.config import get_settings

logger = logging.getLogger(__name__)

MessageHandler = Callable[[Any], Awaitable[None]]
RevokeHandler = Callable[[], Awaitable[None]]


class Subscription:
    def __init__(
        self,
        broker: MessageBroker,
        family_id: UUID,
        handler: MessageHandler,
        *,
        session_id: UUID | None = None,
        on_revoke: RevokeHandler | None = None,
    ):
        self._broker = broker
        self.family_id = family_id
        self.handler = handler
        self.session_id = session_id
        self.on_revoke = on_revoke
        self.closed = False

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        self._broker.unsubscribe(self)


class MessageBroker:
    def __init__(self, send_timeout: float | None = None) -> None:
        self.send_timeout = send_timeout
        self.subscriptions: dict[UUID, list[Subscription]] = {}

    def subscribe(
        self,
        family_id: UUID,
        handler: MessageHandler,
        *,
        session_id: UUID | None = None,
        on_revoke: RevokeHandler | None = None,
    ) -> Subscription:
        subscription = Subscription(
            self,
            family_id,
            handler,
            session_id=session_id,
            on_revoke=on_revoke,
        )
        self.subscriptions.setdefault(family_id, []).append(subscription)
        logger.debug("Subscribed to family %s (%d active)", family_id, len(self.subscriptions[family_id]))
        return subscription

    def unsubscribe(self, subscription: Subscription) -> None:
        active = self.subscriptions.get(subscription.family_id)
        if not active or subscription not in active:
            return
        active.remove(subscription)
        if not active:
            del self.subscriptions[subscription.family_id]
        logger.debug("Unsubscribed from family %s", subscription.family_id)

    def subscriber_count(self, family_id: UUID) -> int:
        return len(self.subscriptions.get(family_id, []))

    async def publish(self, family_id: UUID, payload: Any) -> int:
        delivered = 0
        # Copy: handlers may close their own subscription while we iterate.
        for subscription in list(self.subscriptions.get(family_id, [])):
            try:
                await asyncio.wait_for(subscription.handler(payload), timeout=self.send_timeout)
            except TimeoutError:
                logger.warning(
                    "Message handler for family %s timed out after %ss; detaching it",
                    family_id,
                    self.send_timeout,
                )
                subscription.close()
                continue
            except Exception:
                logger.exception("Message handler failed for family %s; detaching it", family_id)
                subscription.close()
                continue
            delivered += 1
        return delivered

    async def revoke_session(self, session_id: UUID) -> int:
        revoked = [
            subscription
            for active in self.subscriptions.values()
            for subscription in active
            if subscription.session_id == session_id
        ]
        for subscription in revoked:
            subscription.close()
            if subscription.on_revoke is None:
                continue
            try:
                await subscription.on_revoke()
            except Exception:
                logger.exception("Closing revoked subscription for session %s failed", session_id)
        if revoked:
            logger.info("Closed %d subscription(s) for revoked session %s", len(revoked), session_id)
        return len(revoked)


broker = MessageBroker(send_timeout=get_settings().realtime_send_timeout_seconds)


def get_message_broker() -> MessageBroker:
    return broker
