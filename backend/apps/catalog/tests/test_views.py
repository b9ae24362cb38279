from decimal import Decimal

from rest_framework import status
from rest_framework.test import APITestCase

from apps.catalog.models import MAX_QUANTITY, Product
from apps.users.models import User


class TestProductRestock(APITestCase):
    def setUp(self):
        self.staff = User.objects.create_user(
            username="stocker", email="stocker@example.com", password="pw", is_staff=True
        )
        self.shopper = User.objects.create_user(
            username="shopper", email="shopper@example.com", password="pw"
        )
        self.product = Product.objects.create(name="Kettle", price=Decimal("25.00"), stock=1)
        self.url = f"/api/products/{self.product.id}/restock/"

    def test_staff_can_restock(self):
        self.client.force_authenticate(self.staff)
        res = self.client.post(self.url, {"quantity": 4}, format="json")
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["productId"], self.product.id)
        self.assertEqual(res.data["stock"], 5)
        self.assertEqual(res.data["price"], "25.00")
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock, 5)

    def test_non_staff_forbidden(self):
        self.client.force_authenticate(self.shopper)
        res = self.client.post(self.url, {"quantity": 4}, format="json")
        self.assertEqual(res.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(res.data["error"]["code"], "FORBIDDEN")
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock, 1)

    def test_anonymous_unauthorized(self):
        res = self.client.post(self.url, {"quantity": 4}, format="json")
        self.assertEqual(res.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_invalid_quantity(self):
        self.client.force_authenticate(self.staff)
        res = self.client.post(self.url, {"quantity": 0}, format="json")
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(res.data["error"]["code"], "VALIDATION_ERROR")
        self.assertIn("quantity", res.data["error"]["details"])

    def test_unknown_product(self):
        self.client.force_authenticate(self.staff)
        res = self.client.post("/api/products/9999/restock/", {"quantity": 1}, format="json")
        self.assertEqual(res.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(res.data["error"]["details"], {"productIds": [9999]})

    def test_quantity_beyond_column_range(self):
        self.client.force_authenticate(self.staff)
        res = self.client.post(self.url, {"quantity": 10**20}, format="json")
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(res.data["error"]["code"], "VALIDATION_ERROR")
        self.assertIn("quantity", res.data["error"]["details"])
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock, 1)

    def test_restock_past_stock_ceiling(self):
        Product.objects.filter(pk=self.product.pk).update(stock=MAX_QUANTITY)
        self.client.force_authenticate(self.staff)
        res = self.client.post(self.url, {"quantity": 1}, format="json")
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(res.data["error"]["code"], "VALIDATION_ERROR")
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock, MAX_QUANTITY)

    def test_product_id_beyond_column_range(self):
        self.client.force_authenticate(self.staff)
        res = self.client.post(
            f"/api/products/{10**20}/restock/", {"quantity": 1}, format="json"
        )
        self.assertEqual(res.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(res.data["error"]["code"], "NOT_FOUND")
