from django.db.models import Prefetch

from apps.common.repository import GenericRepository
from .models import Category, Product, ProductFlavor, Promotion, Store, Subcategory


class StoreRepository(GenericRepository[Store]):
    ordering = ("name",)

    def __init__(self):
        super().__init__(Store)


class CategoryRepository(GenericRepository[Category]):
    ordering = ("display_order", "id")

    def __init__(self):
        super().__init__(Category)


class SubcategoryRepository(GenericRepository[Subcategory]):
    ordering = ("display_order", "id")

    def __init__(self):
        super().__init__(Subcategory)

    def _base_queryset(self):
        return super()._base_queryset().select_related("category")


class ProductRepository(GenericRepository[Product]):
    ordering = ("-created_at", "-id")

    def __init__(self):
        super().__init__(Product)

    def _base_queryset(self):
        """Products with flavors prefetched in declaration order to avoid N+1 during mapping."""
        return (
            super()
            ._base_queryset()
            .select_related("subcategory")
            .prefetch_related(
                Prefetch("flavors", queryset=ProductFlavor.objects.order_by("id"))
            )
        )

    def list_similar(self, product: Product, limit: int = 4):
        return (
            self._base_queryset()
            .filter(subcategory_id=product.subcategory_id, is_active=True)
            .exclude(id=product.id)[:limit]
        )

    def replace_flavors(self, product: Product, flavors):
        """Drop every flavor row of the product and insert ``flavors`` in order."""
        ProductFlavor.objects.filter(product=product).delete()
        rows = [
            ProductFlavor(
                product=product,
                flavor_name=f.name,
                price_adjustment=f.price_adjustment,
                is_available=f.is_available,
            )
            for f in flavors
        ]
        # Inserted one by one so ids follow declaration order on every backend.
        for row in rows:
            row.save()
        return rows

    def refresh(self, product: Product) -> Product:
        return self.get(id=product.id)


class PromotionRepository(GenericRepository[Promotion]):
    ordering = ("display_order", "id")

    def __init__(self):
        super().__init__(Promotion)

    def list_active_with_products(self):
        return (
            self._base_queryset()
            .filter(is_active=True)
            .select_related("product")
            .prefetch_related(
                Prefetch("product__flavors", queryset=ProductFlavor.objects.order_by("id"))
            )
        )
