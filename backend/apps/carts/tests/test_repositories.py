from decimal import Decimal
from unittest.mock import patch

from django.db import IntegrityError
from django.test import TestCase

from apps.carts.models import LineItem
from apps.carts.repositories import LineItemRepository
from apps.catalog.models import Product
from apps.users.models import User


class LineItemRepositoryTests(TestCase):
    def setUp(self):
        self.repo = LineItemRepository()
        self.user = User.objects.create_user(
            username="repo-user", email="repo@example.com", password="pw"
        )
        self.other = User.objects.create_user(
            username="repo-other", email="repo-other@example.com", password="pw"
        )
        self.mug = Product.objects.create(name="Mug", price=Decimal("4.50"), stock=5)
        self.lamp = Product.objects.create(name="Lamp", price=Decimal("30.00"), stock=2)

    def test_add_inserts_then_increments(self):
        first = self.repo.add_quantity(self.user.id, self.mug.id, 2)
        second = self.repo.add_quantity(self.user.id, self.mug.id, 3)
        self.assertEqual(first.pk, second.pk)
        self.assertEqual(second.quantity, 5)
        self.assertEqual(second.product.name, "Mug")
        self.assertEqual(LineItem.objects.filter(user=self.user).count(), 1)

    def test_racing_insert_falls_back_to_increment(self):
        # Another request inserts the row after our increment found nothing.
        LineItem.objects.create(user=self.user, product=self.mug, quantity=2)
        real_increment = self.repo._increment
        calls = []

        def lost_race(user_id, product_id, quantity):
            calls.append(product_id)
            if len(calls) == 1:
                return False
            return real_increment(user_id, product_id, quantity)

        with patch.object(self.repo, "_increment", side_effect=lost_race):
            item = self.repo.add_quantity(self.user.id, self.mug.id, 3)

        self.assertEqual(len(calls), 2)
        self.assertEqual(item.quantity, 5)
        rows = LineItem.objects.filter(user=self.user, product=self.mug)
        self.assertEqual(rows.count(), 1)
        self.assertEqual(rows.get().quantity, 5)

    def test_insert_conflict_without_row_is_raised(self):
        LineItem.objects.create(user=self.user, product=self.mug, quantity=2)
        with patch.object(self.repo, "_increment", return_value=False):
            with self.assertRaises(IntegrityError):
                self.repo.add_quantity(self.user.id, self.mug.id, 1)
        self.assertEqual(LineItem.objects.get(user=self.user, product=self.mug).quantity, 2)

    def test_quantity_of(self):
        self.assertEqual(self.repo.quantity_of(self.user.id, self.mug.id), 0)
        self.repo.add_quantity(self.user.id, self.mug.id, 4)
        self.assertEqual(self.repo.quantity_of(self.user.id, self.mug.id), 4)

    def test_delete_counts(self):
        self.repo.add_quantity(self.user.id, self.mug.id, 1)
        self.repo.add_quantity(self.user.id, self.lamp.id, 1)
        self.repo.add_quantity(self.other.id, self.mug.id, 1)

        self.assertEqual(self.repo.delete_product(self.user.id, self.mug.id), 1)
        self.assertEqual(self.repo.delete_product(self.user.id, self.mug.id), 0)
        self.assertEqual(self.repo.delete_for_user(self.user.id), 1)
        self.assertEqual(self.repo.delete_for_user(self.user.id), 0)
        self.assertEqual(LineItem.objects.filter(user=self.other).count(), 1)

    def test_consume_keeps_quantity_added_after_snapshot(self):
        self.repo.add_quantity(self.user.id, self.mug.id, 5)
        self.repo.add_quantity(self.user.id, self.lamp.id, 1)
        self.repo.add_quantity(self.other.id, self.mug.id, 2)

        removed = self.repo.consume(self.user.id, [(self.mug.id, 3), (self.lamp.id, 1)])

        self.assertEqual(removed, 1)
        self.assertEqual(self.repo.quantity_of(self.user.id, self.mug.id), 2)
        self.assertEqual(self.repo.quantity_of(self.user.id, self.lamp.id), 0)
        self.assertEqual(self.repo.quantity_of(self.other.id, self.mug.id), 2)

    def test_consume_ignores_items_already_gone(self):
        self.repo.add_quantity(self.user.id, self.mug.id, 1)
        removed = self.repo.consume(self.user.id, [(self.mug.id, 1), (self.lamp.id, 2)])
        self.assertEqual(removed, 1)
        self.assertFalse(LineItem.objects.filter(user=self.user).exists())
