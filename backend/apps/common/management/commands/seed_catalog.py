from decimal import Decimal

from django.core.management.base import BaseCommand, CommandError
from django.core.management.color import no_style
from django.db import connection, transaction

from apps.carts.models import LineItem
from apps.catalog.models import Product
from apps.users.models import User

PRODUCTS = [
    (
        1,
        "Fjallraven - Foldsack No. 1 Backpack, Fits 15 Laptops",
        "109.95",
        "Your perfect pack for everyday use and walks in the forest.",
        25,
    ),
    (
        2,
        "Mens Casual Premium Slim Fit T-Shirts",
        "22.30",
        "Slim-fitting style, contrast raglan long sleeve, three-button henley placket.",
        120,
    ),
    (
        3,
        "Mens Cotton Jacket",
        "55.99",
        "Great outerwear jacket for Spring, Autumn and Winter.",
        40,
    ),
    (
        4,
        "John Hardy Women's Legends Naga Gold & Silver Dragon Station Chain Bracelet",
        "695.00",
        "From our Legends Collection, inspired by the mythical water dragon.",
        3,
    ),
    (
        5,
        "WD 2TB Elements Portable External Hard Drive - USB 3.0",
        "64.00",
        "USB 3.0 and USB 2.0 compatibility, fast data transfers.",
        60,
    ),
    (
        6,
        "SanDisk SSD PLUS 1TB Internal SSD - SATA III 6 Gb/s",
        "109.00",
        "Easy upgrade for faster boot up, shutdown and application load.",
        15,
    ),
    (
        7,
        "Acer SB220Q bi 21.5 inches Full HD IPS Ultra-Thin",
        "599.00",
        "21.5 inch Full HD widescreen IPS display with Radeon FreeSync.",
        5,
    ),
    (
        8,
        "Rain Jacket Women Windbreaker Striped Climbing Raincoats",
        "39.99",
        "Lightweight, breathable and hooded rain jacket.",
        0,
    ),
]

USERS = [
    {
        "id": 1,
        "username": "johnd",
        "email": "john@gmail.com",
        "password": "m38rmF$",
        "first_name": "john",
        "last_name": "doe",
    },
    {
        "id": 2,
        "username": "mor_2314",
        "email": "morrison@gmail.com",
        "password": "83r5^_",
        "first_name": "david",
        "last_name": "morrison",
    },
    {
        "id": 3,
        "username": "kevinryan",
        "email": "kevin@gmail.com",
        "password": "kev02937@",
        "first_name": "kevin",
        "last_name": "ryan",
    },
    {
        "id": 4,
        "username": "stockadmin",
        "email": "stockadmin@example.com",
        "password": "restock-me",
        "first_name": "stock",
        "last_name": "admin",
        "is_staff": True,
    },
]


class Command(BaseCommand):
    help = "Seed a demo catalog with stock levels and demo users."

    def add_arguments(self, parser):
        parser.add_argument(
            "--flush", action="store_true", help="Delete existing data before seeding"
        )

    @staticmethod
    def _validate(pid, price, stock):
        if Decimal(price) < 0:
            raise CommandError(f"Product {pid} has a negative price: {price}")
        if stock < 0:
            raise CommandError(f"Product {pid} has negative stock: {stock}")

    @transaction.atomic
    def handle(self, *args, **options):
        def reset_sequences(models):
            """Reset database sequences for given models (PostgreSQL, etc.)."""
            sql_list = connection.ops.sequence_reset_sql(no_style(), models)
            if not sql_list:
                return
            with connection.cursor() as cursor:
                for sql in sql_list:
                    cursor.execute(sql)

        for pid, _, price, _, stock in PRODUCTS:
            self._validate(pid, price, stock)

        if options["flush"]:
            self.stdout.write("Flushing existing data...")
            LineItem.objects.all().delete()
            User.objects.all().delete()
            Product.objects.all().delete()

        self.stdout.write("Seeding products...")
        for pid, name, price, desc, stock in PRODUCTS:
            Product.objects.get_or_create(
                id=pid,
                defaults=dict(
                    name=name,
                    price=Decimal(price),
                    description=desc,
                    stock=stock,
                ),
            )

        self.stdout.write("Seeding users...")
        for payload in USERS:
            attrs = dict(payload)
            user_id = attrs.pop("id")
            password = attrs.pop("password")
            user, created = User.objects.get_or_create(id=user_id, defaults=attrs)
            if created:
                user.set_password(password)
                user.save(update_fields=["password"])

        reset_sequences([Product, User])
        self.stdout.write(
            self.style.SUCCESS(
                f"Seeded {len(PRODUCTS)} products and {len(USERS)} users."
            )
        )
