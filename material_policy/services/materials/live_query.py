"""
Live Query Service
Pushes the current result set of a query to subscribers whenever a commit changes it.

After every commit on the application session each subscription belonging to
the current app re-runs its query in a separate read-only session and calls
its callback when the serialized result differs from the last push.
Subscribers never block or fail the committing caller.
"""

import itertools
import threading
from typing import Callable, Dict, Iterable, List, Optional

from flask import current_app
from sqlalchemy import event
from sqlalchemy.orm import Session

from material_policy import db
from material_policy.logger import get_logger

logger = get_logger("material_policy.services.live_query")


def _serialize(rows: Iterable) -> List:
    result = []
    for row in rows:
        if hasattr(row, 'to_dict'):
            result.append(row.to_dict())
        else:
            result.append(row)
    return result


class LiveQuery:
    """
    One subscription.

    Args:
        query_builder: Callable taking a SQLAlchemy Session and returning the rows
        callback: Called with the serialized result list on every change
        app: Flask app whose commits drive this subscription
        name: Label used in log lines
    """

    def __init__(self, subscription_id: int, query_builder: Callable, callback: Callable, app, name: Optional[str] = None):
        self.id = subscription_id
        self.query_builder = query_builder
        self.callback = callback
        self.app = app
        self.name = name or f"live-query-{subscription_id}"
        self.last_result = None
        self.active = True

    def __repr__(self):
        return f'<LiveQuery {self.id} {self.name}>'

    def run(self) -> List:
        session = Session(bind=db.engine)
        try:
            return _serialize(self.query_builder(session))
        finally:
            session.close()

    def refresh(self, force: bool = False) -> bool:
        """Re-run the query and push if the result changed; returns whether a push happened"""
        if not self.active:
            return False
        result = self.run()
        if not force and result == self.last_result:
            return False
        self.last_result = result
        self.callback(result)
        return True


class LiveQueryRegistry:
    """Process-wide set of live subscriptions"""

    _subscriptions: Dict[int, LiveQuery] = {}
    _lock = threading.Lock()
    _ids = itertools.count(1)

    @classmethod
    def subscribe(cls, query_builder: Callable, callback: Callable, name: Optional[str] = None) -> LiveQuery:
        """
        Register a subscription and push the initial result set immediately.

        Must be called inside an application context.
        """
        app = current_app._get_current_object()
        with cls._lock:
            subscription = LiveQuery(next(cls._ids), query_builder, callback, app, name)
            cls._subscriptions[subscription.id] = subscription
        subscription.refresh(force=True)
        logger.debug(f"Subscribed {subscription.name}")
        return subscription

    @classmethod
    def unsubscribe(cls, subscription) -> None:
        subscription_id = subscription.id if isinstance(subscription, LiveQuery) else subscription
        with cls._lock:
            removed = cls._subscriptions.pop(subscription_id, None)
        if removed is not None:
            removed.active = False
            logger.debug(f"Unsubscribed {removed.name}")

    @classmethod
    def active_subscriptions(cls) -> List[LiveQuery]:
        with cls._lock:
            return list(cls._subscriptions.values())

    @classmethod
    def notify(cls) -> None:
        """Refresh every subscription of the current app; listener errors are logged and swallowed"""
        try:
            app = current_app._get_current_object()
        except RuntimeError:
            return
        for subscription in cls.active_subscriptions():
            if subscription.app is not app:
                continue
            try:
                subscription.refresh()
            except Exception:
                logger.error(f"Live query {subscription.name} failed to refresh", exc_info=True)


@event.listens_for(db.session, 'after_commit')
def _push_live_queries(session):
    if not LiveQueryRegistry._subscriptions:
        return
    LiveQueryRegistry.notify()
