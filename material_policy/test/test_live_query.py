"""
Tests for live query subscriptions driven by commits
"""
import pytest

from material_policy.buisness.materials.approval_workflow import ApprovalWorkflow
from material_policy.services.materials.approval_queue_service import ApprovalQueueService
from material_policy.services.materials.live_query import LiveQueryRegistry


@pytest.fixture
def pushes(app):
    """Collects pushed result sets; unsubscribes everything afterwards"""
    received = []
    yield received
    for subscription in LiveQueryRegistry.active_subscriptions():
        LiveQueryRegistry.unsubscribe(subscription)


def names(result):
    return [row['name'] for row in result]


def test_initial_result_is_pushed_on_subscribe(app, submit_new, pushes):
    submit_new(name='Seal A')

    ApprovalQueueService.subscribe_pending(pushes.append)

    assert len(pushes) == 1
    assert names(pushes[0]) == ['Seal A']


def test_commit_that_changes_the_result_is_pushed(app, submit_new, pushes):
    ApprovalQueueService.subscribe_pending(pushes.append, level=1)
    assert pushes == [[]]

    record = submit_new(name='Seal A')
    assert names(pushes[-1]) == ['Seal A']

    ApprovalWorkflow.approve(record.id, 1, approver='approver1')
    assert pushes[-1] == [], "The request left the level 1 queue"
    assert len(pushes) == 3


def test_unrelated_commit_is_not_pushed(app, submit_new, pushes):
    record = submit_new(name='Seal A')
    ApprovalQueueService.subscribe_pending(pushes.append, level=3)

    ApprovalWorkflow.approve(record.id, 1, approver='approver1')

    assert pushes == [[]]


def test_unsubscribed_callback_is_not_called(app, submit_new, pushes):
    subscription = ApprovalQueueService.subscribe_pending(pushes.append)
    LiveQueryRegistry.unsubscribe(subscription)

    submit_new(name='Seal A')

    assert pushes == [[]]
    assert subscription not in LiveQueryRegistry.active_subscriptions()


def test_failing_subscriber_does_not_break_the_commit(app, submit_new, pushes):
    def flaky(result):
        pushes.append(result)
        if len(pushes) > 1:
            raise RuntimeError("client went away")

    healthy = []
    ApprovalQueueService.subscribe_pending(flaky)
    ApprovalQueueService.subscribe_pending(healthy.append)

    record = submit_new(name='Seal A')

    assert record.id is not None
    assert names(pushes[-1]) == ['Seal A']
    assert names(healthy[-1]) == ['Seal A']
