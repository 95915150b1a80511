from __future__ import annotations

import random
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand

from modules.carts.dtos import AddCartLineDTO
from modules.carts.repositories.django_repository import CartDjangoRepository
from modules.carts.services import CartService
from modules.catalog.models import Category, Subcategory
from modules.orders.constants import OrderStatus
from modules.orders.dtos import CheckoutDTO
from modules.orders.models import Order
from modules.orders.repositories.django_repository import OrderDjangoRepository
from modules.orders.services import OrderService
from modules.products.models import Product
from modules.products.repositories.django_repository import ProductDjangoRepository

CATALOG = {
    "Electronics": {
        "Monitors": [
            ('Monitor 27"', Decimal("1299.90")),
            ('Monitor 24"', Decimal("899.90")),
        ],
        "Peripherals": [
            ("Mechanical Keyboard", Decimal("399.90")),
            ("Gaming Mouse", Decimal("249.90")),
            ("Headset", Decimal("299.90")),
        ],
    },
    "Furniture": {
        "Desks": [
            ("Office Desk", Decimal("899.00")),
            ("Standing Desk", Decimal("1899.00")),
        ],
        "Chairs": [("Ergonomic Chair", Decimal("1499.00"))],
    },
    "Office": {
        "Paper": [
            ("A4 Paper", Decimal("29.90")),
            ("Notebook", Decimal("19.90")),
            ("Sticky Notes", Decimal("12.90")),
        ],
        "Writing": [
            ("Blue Pen", Decimal("4.90")),
            ("Highlighter", Decimal("9.90")),
        ],
    },
}


class Command(BaseCommand):
    help = "Seed database with realistic development data."

    def handle(self, *args, **options):
        random.seed(42)
        self.stdout.write("Seeding development data...")

        users_created = self._seed_users()
        products = self._seed_catalog()
        orders_created = self._seed_orders(products)

        self.stdout.write(
            self.style.SUCCESS(
                "Seed completed: "
                f"users={users_created}, "
                f"products={len(products)}, "
                f"orders={orders_created}"
            )
        )

    def _seed_users(self) -> int:
        User = get_user_model()
        created = 0
        if not User.objects.filter(username="admin").exists():
            User.objects.create_superuser("admin", password="admin123")
            created += 1
        if not User.objects.filter(username="manager").exists():
            User.objects.create_user("manager", password="manager123", is_staff=True)
            created += 1
        if not User.objects.filter(username="user").exists():
            User.objects.create_user("user", password="user123")
            created += 1
        return created

    def _seed_catalog(self) -> list[Product]:
        self.stdout.write("Creating catalog...")
        products: list[Product] = []
        for category_name, subcategories in CATALOG.items():
            category, _ = Category.objects.get_or_create(name=category_name)
            for subcategory_name, items in subcategories.items():
                subcategory, _ = Subcategory.objects.get_or_create(
                    category=category, name=subcategory_name
                )
                for name, price in items:
                    product, _ = Product.objects.get_or_create(
                        name=name,
                        subcategory=subcategory,
                        defaults={
                            "category": category,
                            "price": price,
                            "stock": random.randint(10, 200),
                        },
                    )
                    products.append(product)
        self.stdout.write(self.style.SUCCESS("Creating catalog... Done!"))
        return products

    def _seed_orders(self, products: list[Product]) -> int:
        """Place a few orders for ``user`` through the cart, like a shopper would."""
        self.stdout.write("Creating orders...")
        user = get_user_model().objects.get(username="user")
        if Order.objects.filter(user=user).exists():
            self.stdout.write(self.style.WARNING("Skipping orders (already seeded)."))
            return 0

        product_repository = ProductDjangoRepository()
        cart_repository = CartDjangoRepository()
        carts = CartService(cart_repository, product_repository)
        orders = OrderService(OrderDjangoRepository(), cart_repository, product_repository)

        progressions = [
            [],
            [OrderStatus.PAID],
            [OrderStatus.PAID, OrderStatus.SHIPPED, OrderStatus.DELIVERED],
            [OrderStatus.CANCELLED],
        ]
        for statuses in progressions:
            for product in random.sample(products, k=random.randint(1, 3)):
                carts.add_line(
                    user.id,
                    AddCartLineDTO(product_id=product.id, quantity=random.randint(1, 3)),
                )
            order = orders.checkout(
                user.id,
                CheckoutDTO(
                    shipping_address="221B Baker Street, London",
                    contact_phone="+44 20 7946 0000",
                ),
            )
            for status in statuses:
                orders.change_status(order.id, status, notes="Seed data")

        self.stdout.write(self.style.SUCCESS("Creating orders... Done!"))
        return len(progressions)
