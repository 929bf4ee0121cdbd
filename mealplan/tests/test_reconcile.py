import unittest
from mealplan.domain.Catalog import RecipeCatalog
from mealplan.domain.Plan import PlanRecord
from mealplan.logic.planning.reconcile import reconcile_plan, reconcile_plans


class TestReconcile(unittest.TestCase):
    def setUp(self):
        self.catalog = RecipeCatalog.from_dict({
            "winter_recipes": [
                {"name": "Chili", "section": "Mains", "tags": ["spicy"],
                 "ingredients": [{"name": "Beans", "quantity": "1 can"}]},
            ],
            "summer_recipes": [
                {"name": "Gazpacho", "section": "Soups", "recipe_link": "https://example.org/g"},
            ],
        })

    def test_stale_copy_refreshed_from_winter(self):
        plan = PlanRecord.empty()
        plan.set("Monday", "Dinner", {"name": "Chili", "tags": []})
        self.assertEqual(reconcile_plan(plan, self.catalog), 1)
        slot = plan.get("Monday", "Dinner")
        self.assertEqual(slot.recipe, self.catalog.find_by_name("Chili").to_ref())
        self.assertEqual(slot.recipe["tags"], ["spicy"])
        self.assertEqual(slot.recipe["season"], "winter")

    def test_summer_records_match_too(self):
        plan = PlanRecord.empty()
        plan.set("Friday", "Lunch", {"name": "Gazpacho"})
        reconcile_plan(plan, self.catalog)
        self.assertEqual(plan.get("Friday", "Lunch").recipe["recipe_link"], "https://example.org/g")

    def test_missing_recipe_left_unchanged(self):
        plan = PlanRecord.empty()
        stale = {"name": "Old Stew", "section": "Mains", "tags": ["retired"]}
        plan.set("Tuesday", "Lunch", stale)
        plan.set("Tuesday", "Dinner", {"name": "chili"})  # case differs: no match
        self.assertEqual(reconcile_plan(plan, self.catalog), 0)
        self.assertEqual(plan.get("Tuesday", "Lunch").recipe, stale)
        self.assertEqual(plan.get("Tuesday", "Dinner").name, "chili")

    def test_idempotent(self):
        plan = PlanRecord.empty()
        plan.set("Monday", "Dinner", {"name": "Chili"})
        plan.set("Sunday", "Lunch", {"name": "Unknown"})
        reconcile_plan(plan, self.catalog)
        once = plan.to_dict()
        self.assertEqual(reconcile_plan(plan, self.catalog), 0)
        self.assertEqual(plan.to_dict(), once)

    def test_empty_catalog_changes_nothing(self):
        plan = PlanRecord.empty()
        plan.set("Monday", "Lunch", {"name": "Chili"})
        before = plan.to_dict()
        self.assertEqual(reconcile_plan(plan, RecipeCatalog()), 0)
        self.assertEqual(plan.to_dict(), before)

    def test_reconcile_many_plans(self):
        a, b = PlanRecord.empty(), PlanRecord.empty()
        a.set("Monday", "Lunch", {"name": "Chili"})
        b.set("Monday", "Lunch", {"name": "Gazpacho"})
        b.set("Monday", "Dinner", {"name": "Chili"})
        self.assertEqual(reconcile_plans([a, b], self.catalog), 3)


if __name__ == '__main__':
    unittest.main()
