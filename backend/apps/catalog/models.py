from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone


class Store(models.Model):
    name = models.CharField(max_length=150)
    address = models.TextField(blank=True, default="")
    phone = models.CharField(max_length=32, blank=True, default="")
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = "stores"

    def __str__(self):
        return self.name


class Category(models.Model):
    name = models.CharField(max_length=100, unique=True)
    description = models.TextField(blank=True, default="")
    image_url = models.TextField(blank=True, default="")
    display_order = models.IntegerField(default=0)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = "categories"
        indexes = [
            models.Index(fields=["is_active", "display_order"], name="category_active_order_idx"),
        ]

    def __str__(self):
        return self.name


class Subcategory(models.Model):
    category = models.ForeignKey(
        Category, on_delete=models.CASCADE, related_name="subcategories"
    )
    name = models.CharField(max_length=100)
    description = models.TextField(blank=True, default="")
    image_url = models.TextField(blank=True, default="")
    display_order = models.IntegerField(default=0)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = "subcategories"
        indexes = [
            models.Index(fields=["category", "display_order"], name="subcat_cat_order_idx"),
        ]

    def __str__(self):
        return self.name


class Product(models.Model):
    subcategory = models.ForeignKey(
        Subcategory, on_delete=models.CASCADE, related_name="products"
    )
    name = models.CharField(max_length=255)
    description = models.TextField(blank=True, default="")
    base_price = models.DecimalField(
        max_digits=10, decimal_places=2, validators=[MinValueValidator(0)]
    )
    # Ordered labels such as ["500g", "1kg"]; the first one is the storefront default.
    weight_options = models.JSONField(default=list, blank=True)
    image_urls = models.JSONField(default=list, blank=True)
    is_active = models.BooleanField(default=True)
    is_featured = models.BooleanField(default=False)
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = "products"
        indexes = [
            models.Index(fields=["subcategory", "is_active"], name="product_subcat_active_idx"),
            models.Index(fields=["is_featured"], name="product_featured_idx"),
        ]

    def __str__(self):
        return self.name


class ProductFlavor(models.Model):
    product = models.ForeignKey(
        Product, on_delete=models.CASCADE, related_name="flavors"
    )
    flavor_name = models.CharField(max_length=100)
    price_adjustment = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    is_available = models.BooleanField(default=True)
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = "product_flavors"
        # Declaration order drives the resolver's default flavor.
        ordering = ["id"]

    def __str__(self):
        return f"{self.product_id}:{self.flavor_name}"


class Promotion(models.Model):
    TOP_DEAL = "top_deal"
    MOST_SELLING = "most_selling"
    PROMOTION_TYPES = [
        (TOP_DEAL, "Top deal"),
        (MOST_SELLING, "Most selling"),
    ]

    product = models.ForeignKey(
        Product, on_delete=models.CASCADE, related_name="promotions"
    )
    promotion_type = models.CharField(max_length=20, choices=PROMOTION_TYPES)
    display_order = models.IntegerField(default=0)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = "promotions"
        indexes = [
            models.Index(fields=["is_active", "display_order"], name="promotion_active_order_idx"),
        ]

    def __str__(self):
        return f"{self.promotion_type}:{self.product_id}"
