import unittest

from mealcrew.domain.FormResponse import FormResponse
from mealcrew.domain.Plan import Plan
from mealcrew.events import notifications
from mealcrew.events.Event_Bus import (
    EventBus, FORM_LINKS_ISSUED, FORM_RESPONSE_SUBMITTED, PLAN_FINALIZED, publish,
)


class TestEventBus(unittest.TestCase):

    def test_failing_subscriber_does_not_stop_others(self):
        bus = EventBus()
        seen = []

        def broken(name, payload):
            raise RuntimeError('boom')

        bus.subscribe('x', broken)
        bus.subscribe('x', lambda name, payload: seen.append((name, payload)))
        bus.subscribe('x', broken)  # duplicate subscriptions are ignored
        bus.publish('x', 1)
        self.assertEqual(seen, [('x', 1)])

        bus.unsubscribe('x', broken)
        bus.publish('x', 2)
        self.assertEqual(seen[-1], ('x', 2))


class TestNotifications(unittest.TestCase):

    def setUp(self):
        notifications.clear()
        notifications.start()
        self.plan = Plan(id='p1', user_id='owner-1', name='Camp week')

    def test_feed_per_owner(self):
        publish(FORM_RESPONSE_SUBMITTED, {'plan': self.plan, 'response': FormResponse(id='r1', role='co_manager')})
        publish(PLAN_FINALIZED, {'plan': self.plan, 'selections_applied': 3, 'shopping_list_items': 12})

        feed = notifications.get_notifications('owner-1')
        self.assertEqual(feed['unread_count'], 2)
        self.assertEqual(feed['next_cursor'], 2)
        latest, first = feed['notifications']
        self.assertEqual(latest['type'], PLAN_FINALIZED)
        self.assertIn('3 days selected', latest['message'])
        self.assertEqual(first['role'], 'co_manager')
        self.assertTrue(first['message'].startswith('The co-manager'))

        self.assertEqual(notifications.get_notifications('someone-else')['notifications'], [])

    def test_since_cursor_and_mark_read(self):
        publish(FORM_RESPONSE_SUBMITTED, {'plan': self.plan, 'response': FormResponse(id='r1', role='other')})
        publish(FORM_RESPONSE_SUBMITTED, {'plan': self.plan, 'response': FormResponse(id='r2', role='other')})

        newer = notifications.get_notifications('owner-1', since=1)['notifications']
        self.assertEqual([n['id'] for n in newer], [2])

        self.assertEqual(notifications.mark_read('owner-1', ids=[1]), 1)
        self.assertEqual(notifications.mark_read('owner-1', ids=[1]), 0)
        unread = notifications.get_notifications('owner-1', unread_only=True)
        self.assertEqual([n['id'] for n in unread['notifications']], [2])
        self.assertEqual(notifications.mark_read('owner-1', mark_all=True), 1)
        self.assertEqual(notifications.get_notifications('owner-1')['unread_count'], 0)

    def test_reissuing_existing_links_is_silent(self):
        publish(FORM_LINKS_ISSUED, {'plan': self.plan, 'links': [], 'created': 0})
        self.assertEqual(notifications.get_notifications('owner-1')['notifications'], [])
        publish(FORM_LINKS_ISSUED, {'plan': self.plan, 'links': [], 'created': 2})
        self.assertEqual(len(notifications.get_notifications('owner-1')['notifications']), 1)

    def test_feed_is_capped(self):
        for i in range(notifications.MAX_PER_OWNER + 5):
            publish(FORM_RESPONSE_SUBMITTED, {'plan': self.plan, 'response': FormResponse(id=f'r{i}')})
        feed = notifications.get_notifications('owner-1', limit=1000)
        self.assertEqual(len(feed['notifications']), notifications.MAX_PER_OWNER)
        self.assertEqual(feed['notifications'][-1]['id'], 6)


if __name__ == '__main__':
    unittest.main()
