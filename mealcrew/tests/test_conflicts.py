import unittest
from datetime import datetime, timedelta, timezone

from mealcrew.domain.FormResponse import FormResponse
from mealcrew.logic.forms.conflicts import (
    latest_response, resolution_summary, resolve_selections, selections_to_plan_meals,
)

T0 = datetime(2030, 1, 6, 12, 0, tzinfo=timezone.utc)


def response(id, role, selections, minutes=0):
    return FormResponse(id=id, form_link_id=f'link-{role}', plan_id='plan-1', role=role,
                        submitted_at=T0 + timedelta(minutes=minutes), selections=selections)


class TestConflictResolution(unittest.TestCase):

    def test_co_manager_overrides_per_day(self):
        other = response('r1', 'other', {'monday': ['m1'], 'tuesday': ['m2']})
        co = response('r2', 'co_manager', {'monday': ['m3']})
        merged = resolve_selections([co, other])
        self.assertEqual(merged, {'monday': ['m3'], 'tuesday': ['m2']})

    def test_co_manager_wins_even_if_other_is_newer(self):
        co = response('r1', 'co_manager', {'friday': ['m1']})
        other = response('r2', 'other', {'friday': ['m2'], 'sunday': ['m4']}, minutes=30)
        self.assertEqual(resolve_selections([co, other]), {'friday': ['m1'], 'sunday': ['m4']})

    def test_only_latest_response_per_role_counts(self):
        responses = [
            response('r1', 'other', {'monday': ['m1'], 'wednesday': ['m5']}),
            response('r2', 'other', {'monday': ['m2']}, minutes=10),
        ]
        self.assertEqual(resolve_selections(responses), {'monday': ['m2']})

    def test_tie_goes_to_later_stored(self):
        first = response('r1', 'co_manager', {'monday': ['m1']})
        second = response('r2', 'co_manager', {'monday': ['m2']})
        self.assertEqual(latest_response([first, second], 'co_manager').id, 'r2')

    def test_no_responses(self):
        self.assertEqual(resolve_selections([]), {})
        self.assertIsNone(latest_response([], 'other'))

    def test_days_are_ordered(self):
        co = response('r1', 'co_manager', {'sunday': ['m1'], 'monday': ['m2'], 'thursday': ['m3']})
        self.assertEqual(list(resolve_selections([co])), ['monday', 'thursday', 'sunday'])

    def test_plan_meal_rows(self):
        rows = selections_to_plan_meals('plan-1', {'tuesday': ['m1', 'm2', 'm1'], 'monday': ['m1']})
        self.assertEqual(rows, [
            {'plan_id': 'plan-1', 'day': 'monday', 'meal_id': 'm1'},
            {'plan_id': 'plan-1', 'day': 'tuesday', 'meal_id': 'm1'},
            {'plan_id': 'plan-1', 'day': 'tuesday', 'meal_id': 'm2'},
        ])

    def test_resolution_summary(self):
        other = response('r1', 'other', {'monday': ['m1'], 'tuesday': ['m2']})
        co = response('r2', 'co_manager', {'monday': ['m3'], 'tuesday': ['m2']})
        summary = resolution_summary([other, co])
        self.assertEqual(summary['co_manager_response_id'], 'r2')
        self.assertEqual(summary['other_response_id'], 'r1')
        self.assertEqual(summary['overridden_days'], ['monday'])
        self.assertEqual(summary['selections'], {'monday': ['m3'], 'tuesday': ['m2']})


if __name__ == '__main__':
    unittest.main()
