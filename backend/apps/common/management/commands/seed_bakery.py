from decimal import Decimal

from django.core.management.base import BaseCommand
from django.db import transaction

from apps.catalog.models import (
    Category,
    Product,
    ProductFlavor,
    Promotion,
    Store,
    Subcategory,
)

STORES = [
    ("Indiranagar", "12th Main, HAL 2nd Stage, Bengaluru", "080-41234567"),
    ("Koramangala", "80 Feet Rd, 4th Block, Bengaluru", "080-49876543"),
]

# category -> [(subcategory, display_order)]
CATEGORIES = {
    "Cakes": [("Celebration Cakes", 1), ("Cheesecakes", 2), ("Cupcakes", 3)],
    "Breads": [("Loaves", 1), ("Buns", 2)],
    "Cookies": [("Classic Cookies", 1)],
}

# (subcategory, name, base_price, weights, featured, [(flavor, adjustment, available)])
PRODUCTS = [
    (
        "Celebration Cakes",
        "Celebration Cake",
        "500",
        ["500g", "1kg", "2kg"],
        True,
        [("Chocolate", "50", True), ("Vanilla", "0", True), ("Mango", "80", False)],
    ),
    (
        "Celebration Cakes",
        "Black Forest",
        "650",
        ["500g", "1kg"],
        True,
        [("Classic", "0", True), ("Cherry Overload", "75", True)],
    ),
    (
        "Celebration Cakes",
        "Red Velvet",
        "700",
        ["500g", "1kg"],
        False,
        [("Cream Cheese", "0", True)],
    ),
    (
        "Cheesecakes",
        "Baked New York Cheesecake",
        "850",
        ["750g"],
        False,
        [("Plain", "0", True), ("Blueberry", "120", True)],
    ),
    (
        "Cupcakes",
        "Cupcake Box",
        "360",
        ["Box of 6", "Box of 12"],
        False,
        [("Assorted", "0", True), ("Salted Caramel", "40", True)],
    ),
    ("Loaves", "Sourdough Loaf", "180", ["400g", "800g"], False, []),
    ("Loaves", "Multigrain Loaf", "140", ["400g"], False, []),
    ("Buns", "Cinnamon Rolls", "220", ["Pack of 4"], True, []),
    (
        "Classic Cookies",
        "Choco Chip Cookies",
        "200",
        ["250g", "500g"],
        False,
        [("Dark Chocolate", "0", True), ("Double Chocolate", "30", True)],
    ),
]

# (product name, promotion type, display order)
PROMOTIONS = [
    ("Celebration Cake", Promotion.TOP_DEAL, 1),
    ("Cinnamon Rolls", Promotion.TOP_DEAL, 2),
    ("Black Forest", Promotion.MOST_SELLING, 1),
    ("Choco Chip Cookies", Promotion.MOST_SELLING, 2),
]


class Command(BaseCommand):
    help = "Seed a demo bakery catalog: stores, categories, products with flavors and promotions."

    def add_arguments(self, parser):
        parser.add_argument(
            "--flush", action="store_true", help="Delete existing catalog data before seeding"
        )

    @transaction.atomic
    def handle(self, *args, **options):
        if options["flush"]:
            self.stdout.write("Flushing existing data...")
            Promotion.objects.all().delete()
            ProductFlavor.objects.all().delete()
            Product.objects.all().delete()
            Subcategory.objects.all().delete()
            Category.objects.all().delete()
            Store.objects.all().delete()

        self.stdout.write("Seeding stores...")
        for name, address, phone in STORES:
            Store.objects.get_or_create(name=name, defaults={"address": address, "phone": phone})

        self.stdout.write("Seeding categories...")
        subcategories = {}
        for order, (category_name, subs) in enumerate(CATEGORIES.items(), start=1):
            category, _ = Category.objects.get_or_create(
                name=category_name, defaults={"display_order": order}
            )
            for sub_name, sub_order in subs:
                sub, _ = Subcategory.objects.get_or_create(
                    category=category, name=sub_name, defaults={"display_order": sub_order}
                )
                subcategories[sub_name] = sub

        self.stdout.write("Seeding products...")
        products = {}
        for sub_name, name, price, weights, featured, flavors in PRODUCTS:
            product, created = Product.objects.get_or_create(
                subcategory=subcategories[sub_name],
                name=name,
                defaults={
                    "base_price": Decimal(price),
                    "weight_options": weights,
                    "is_featured": featured,
                },
            )
            products[name] = product
            if not created:
                continue
            for flavor_name, adjustment, available in flavors:
                ProductFlavor.objects.create(
                    product=product,
                    flavor_name=flavor_name,
                    price_adjustment=Decimal(adjustment),
                    is_available=available,
                )

        self.stdout.write("Seeding promotions...")
        for name, promotion_type, order in PROMOTIONS:
            Promotion.objects.get_or_create(
                product=products[name],
                promotion_type=promotion_type,
                defaults={"display_order": order},
            )

        self.stdout.write(
            self.style.SUCCESS(
                f"Seeded {Store.objects.count()} stores, {Category.objects.count()} categories, "
                f"{Product.objects.count()} products, {Promotion.objects.count()} promotions."
            )
        )
