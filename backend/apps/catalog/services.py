from __future__ import annotations

from typing import Any, Dict, List, Optional, Type, Union

from django.db import IntegrityError, transaction
from rest_framework.pagination import PageNumberPagination
from rest_framework.response import Response

from apps.common import get_logger
from .commands import ProductCreateCommand, ProductUpdateCommand
from .dtos import HomeFeedDTO, ProductDTO
from .mappers import (
    CategoryMapper,
    ProductMapper,
    PromotionMapper,
    StoreMapper,
    SubcategoryMapper,
)
from .models import Promotion
from .protocols import (
    CacheBackendProtocol,
    CategoryRepositoryProtocol,
    ProductRepositoryProtocol,
    PromotionRepositoryProtocol,
    StoreRepositoryProtocol,
    SubcategoryRepositoryProtocol,
)

logger = get_logger(__name__).bind(component="catalog", layer="service")

TOGGLE_FIELDS = ("is_active", "is_featured")


class CategoryAlreadyExistsError(Exception):
    """Raised when a category name is already taken."""


class ProductService:
    def __init__(
        self,
        products: ProductRepositoryProtocol,
        cache_backend: CacheBackendProtocol,
        disable_cache: bool = False,
    ):
        self.products = products
        self.cache = cache_backend
        self.disable_cache = disable_cache
        self.logger = logger.bind(service="ProductService")
        self._cache_prefix = "products:list"
        self._cache_version_key = f"{self._cache_prefix}:version"
        self._default_version = 1

    def _get_cache_version(self) -> int:
        v = self.cache.get(self._cache_version_key)
        return v or self._default_version

    def _bump_cache_version(self) -> None:
        v = self._get_cache_version()
        # Version key never expires; stale list keys age out on their own TTL.
        self.cache.set(self._cache_version_key, v + 1, timeout=None)
        self.logger.debug("Bumped product cache version", new_version=v + 1)

    def _cache_key(
        self,
        subcategory_id: Optional[int],
        category_id: Optional[int],
        featured: Optional[bool],
    ) -> str:
        version = self._get_cache_version()
        sub = subcategory_id if subcategory_id is not None else "all"
        cat = category_id if category_id is not None else "all"
        feat = "featured" if featured else "any"
        return f"{self._cache_prefix}:v{version}:cat-{cat}:sub-{sub}:{feat}"

    @staticmethod
    def _listing_filters(
        subcategory_id: Optional[int],
        category_id: Optional[int],
        featured: Optional[bool],
    ) -> Dict[str, Any]:
        filters: Dict[str, Any] = {"is_active": True}
        if subcategory_id is not None:
            filters["subcategory_id"] = subcategory_id
        if category_id is not None:
            filters["subcategory__category_id"] = category_id
        if featured:
            filters["is_featured"] = True
        return filters

    def products_queryset(
        self,
        *,
        subcategory_id: Optional[int] = None,
        category_id: Optional[int] = None,
        featured: Optional[bool] = None,
    ):
        """Active products for the storefront, flavors prefetched."""
        self.logger.debug(
            "Building product queryset",
            subcategory_id=subcategory_id,
            category_id=category_id,
            featured=featured,
        )
        return self.products.list(
            **self._listing_filters(subcategory_id, category_id, featured)
        )

    def list_products(
        self,
        *,
        subcategory_id: Optional[int] = None,
        category_id: Optional[int] = None,
        featured: Optional[bool] = None,
    ) -> List[ProductDTO]:
        self.logger.debug(
            "Listing products",
            subcategory_id=subcategory_id,
            category_id=category_id,
            featured=featured,
            cache_enabled=not self.disable_cache,
        )
        if self.disable_cache:
            qs = self.products_queryset(
                subcategory_id=subcategory_id, category_id=category_id, featured=featured
            )
            return ProductMapper.many_to_dto(qs)
        key = self._cache_key(subcategory_id, category_id, featured)
        cached = self.cache.get(key)
        if cached is not None:
            self.logger.debug("Product list cache hit", cache_key=key)
            return cached
        self.logger.debug("Product list cache miss", cache_key=key)
        qs = self.products_queryset(
            subcategory_id=subcategory_id, category_id=category_id, featured=featured
        )
        data = ProductMapper.many_to_dto(qs)
        self.cache.set(key, data)
        return data

    def list_products_paginated(
        self,
        request,
        *,
        subcategory_id: Optional[int] = None,
        category_id: Optional[int] = None,
        featured: Optional[bool] = None,
        paginator_class: Optional[Type[PageNumberPagination]] = None,
        serializer_class=None,
        view=None,
    ):
        paginator_cls = paginator_class or PageNumberPagination
        queryset = self.products_queryset(
            subcategory_id=subcategory_id, category_id=category_id, featured=featured
        )
        paginator = paginator_cls()
        page = paginator.paginate_queryset(queryset, request, view=view)
        data_source = page if page is not None else queryset
        dtos = ProductMapper.many_to_dto(data_source)
        if serializer_class is None:
            from .serializers import ProductReadSerializer  # Avoid circular import

            serializer_class = ProductReadSerializer
        serializer = serializer_class(dtos, many=True)
        if page is None:
            return Response(serializer.data)
        return paginator.get_paginated_response(serializer.data)

    def get_product(
        self, product_id: int, *, active_only: bool = False
    ) -> Optional[ProductDTO]:
        self.logger.debug(
            "Fetching product", product_id=product_id, active_only=active_only
        )
        filters: Dict[str, Any] = {"id": product_id}
        if active_only:
            filters["is_active"] = True
        p = self.products.get(**filters)
        if not p:
            self.logger.info("Product not found", product_id=product_id)
        return ProductMapper.to_dto(p) if p else None

    def list_similar_products(
        self, product_id: int, limit: int = 4
    ) -> Optional[List[ProductDTO]]:
        """Active products from the same subcategory, excluding the product itself."""
        product = self.products.get(id=product_id)
        if not product:
            self.logger.info("Similar products requested for missing product", product_id=product_id)
            return None
        similar = ProductMapper.many_to_dto(self.products.list_similar(product, limit=limit))
        self.logger.debug(
            "Resolved similar products", product_id=product_id, count=len(similar)
        )
        return similar

    def create_product(
        self, data: Union[Dict[str, Any], ProductCreateCommand]
    ) -> ProductDTO:
        cmd = (
            data
            if isinstance(data, ProductCreateCommand)
            else ProductCreateCommand.from_raw(data)
        )
        self.logger.info(
            "Creating product",
            name=cmd.name,
            subcategory_id=cmd.subcategory_id,
            flavors=len(cmd.flavors),
        )
        with transaction.atomic():
            product = self.products.create(
                subcategory_id=cmd.subcategory_id,
                name=cmd.name,
                description=cmd.description,
                base_price=cmd.base_price,
                weight_options=cmd.weight_options,
                image_urls=cmd.image_urls,
                is_active=cmd.is_active,
                is_featured=cmd.is_featured,
            )
            if cmd.flavors:
                self.products.replace_flavors(product, cmd.flavors)
        self._bump_cache_version()
        refreshed = self.products.refresh(product) or product
        self.logger.info("Product created", product_id=refreshed.id)
        return ProductMapper.to_dto(refreshed)

    def update_product(
        self,
        product_id: int,
        data: Union[Dict[str, Any], ProductUpdateCommand],
        partial: bool = False,
    ) -> Optional[ProductDTO]:
        cmd = (
            data
            if isinstance(data, ProductUpdateCommand)
            else ProductUpdateCommand.from_raw(product_id, data, partial)
        )
        self.logger.info("Updating product", product_id=product_id, partial=partial)
        product = self.products.get(id=product_id)
        if not product:
            self.logger.warning("Product update failed: not found", product_id=product_id)
            return None
        with transaction.atomic():
            self.products.update_scalar(product, **cmd.scalar_fields())
            if cmd.flavors is not None:
                self.logger.debug(
                    "Replacing product flavors",
                    product_id=product_id,
                    flavors=len(cmd.flavors),
                )
                self.products.replace_flavors(product, cmd.flavors)
        self._bump_cache_version()
        refreshed = self.products.refresh(product) or product
        self.logger.info("Product updated", product_id=product_id)
        return ProductMapper.to_dto(refreshed)

    def toggle_flag(self, product_id: int, field: str) -> Optional[ProductDTO]:
        """Flip ``is_active`` or ``is_featured`` on a product."""
        if field not in TOGGLE_FIELDS:
            raise ValueError(f"Unsupported toggle field: {field}")
        product = self.products.get(id=product_id)
        if not product:
            self.logger.warning(
                "Product toggle failed: not found", product_id=product_id, field=field
            )
            return None
        new_value = not bool(getattr(product, field))
        self.products.update_scalar(product, **{field: new_value})
        self._bump_cache_version()
        self.logger.info(
            "Product flag toggled", product_id=product_id, field=field, value=new_value
        )
        return ProductMapper.to_dto(product)

    def toggle_active(self, product_id: int) -> Optional[ProductDTO]:
        return self.toggle_flag(product_id, "is_active")

    def toggle_featured(self, product_id: int) -> Optional[ProductDTO]:
        return self.toggle_flag(product_id, "is_featured")

    def delete_product(self, product_id: int) -> bool:
        self.logger.info("Deleting product", product_id=product_id)
        product = self.products.get(id=product_id)
        if not product:
            self.logger.warning("Product deletion failed: not found", product_id=product_id)
            return False
        self.products.delete(product)
        self._bump_cache_version()
        self.logger.info("Product deleted", product_id=product_id)
        return True


class CategoryService:
    def __init__(
        self,
        categories: CategoryRepositoryProtocol,
        subcategories: SubcategoryRepositoryProtocol,
    ):
        self.categories = categories
        self.subcategories = subcategories
        self.logger = logger.bind(service="CategoryService")

    def list_categories(self, *, active_only: bool = True):
        self.logger.debug("Listing categories", active_only=active_only)
        qs = self.categories.list(is_active=True) if active_only else self.categories.list()
        return CategoryMapper.many_to_dto(qs)

    def get_category(self, category_id: int):
        category = self.categories.get(id=category_id)
        if not category:
            self.logger.info("Category not found", category_id=category_id)
        return CategoryMapper.to_dto(category) if category else None

    def list_subcategories(self, category_id: int, *, active_only: bool = True):
        """Subcategories of a category; None when the category does not exist."""
        if not self.categories.get(id=category_id):
            self.logger.info("Subcategories requested for missing category", category_id=category_id)
            return None
        filters: Dict[str, Any] = {"category_id": category_id}
        if active_only:
            filters["is_active"] = True
        return SubcategoryMapper.many_to_dto(self.subcategories.list(**filters))

    def create_category(self, data: Dict[str, Any]):
        name = str(data.get("name", "")).strip()
        if not name:
            raise ValueError("Category name is required")
        if self.categories.get(name=name):
            self.logger.warning("Category creation rejected: duplicate name", name=name)
            raise CategoryAlreadyExistsError(f"Category '{name}' already exists")
        try:
            category = self.categories.create(
                name=name,
                description=str(data.get("description") or ""),
                image_url=str(data.get("image_url") or ""),
                display_order=int(data.get("display_order") or 0),
                is_active=bool(data.get("is_active", True)),
            )
        except IntegrityError as exc:
            raise CategoryAlreadyExistsError(f"Category '{name}' already exists") from exc
        self.logger.info("Category created", category_id=category.id)
        return CategoryMapper.to_dto(category)

    def create_subcategory(self, category_id: int, data: Dict[str, Any]):
        if not self.categories.get(id=category_id):
            self.logger.warning("Subcategory creation failed: category missing", category_id=category_id)
            return None
        name = str(data.get("name", "")).strip()
        if not name:
            raise ValueError("Subcategory name is required")
        sub = self.subcategories.create(
            category_id=category_id,
            name=name,
            description=str(data.get("description") or ""),
            image_url=str(data.get("image_url") or ""),
            display_order=int(data.get("display_order") or 0),
            is_active=bool(data.get("is_active", True)),
        )
        self.logger.info("Subcategory created", subcategory_id=sub.id, category_id=category_id)
        return SubcategoryMapper.to_dto(sub)

    def delete_category(self, category_id: int) -> bool:
        category = self.categories.get(id=category_id)
        if not category:
            self.logger.warning("Category deletion failed: not found", category_id=category_id)
            return False
        self.categories.delete(category)
        self.logger.info("Category deleted", category_id=category_id)
        return True


class StorefrontService:
    def __init__(
        self,
        categories: CategoryRepositoryProtocol,
        promotions: PromotionRepositoryProtocol,
        stores: StoreRepositoryProtocol,
        products: ProductRepositoryProtocol,
        promotion_mapper: Optional[PromotionMapper] = None,
    ):
        self.categories = categories
        self.promotions = promotions
        self.stores = stores
        self.products = products
        self.promotion_mapper = promotion_mapper or PromotionMapper()
        self.logger = logger.bind(service="StorefrontService")

    def home_feed(self) -> HomeFeedDTO:
        """Active categories plus promoted products grouped by promotion type."""
        categories = CategoryMapper.many_to_dto(self.categories.list(is_active=True))
        top_deals: List[ProductDTO] = []
        most_selling: List[ProductDTO] = []
        skipped = 0
        for promotion in self.promotions.list_active_with_products():
            product = getattr(promotion, "product", None)
            if product is None or not product.is_active:
                skipped += 1
                continue
            dto = self.promotion_mapper.to_dto(promotion)
            if dto.promotion_type == Promotion.TOP_DEAL:
                top_deals.append(dto.product)
            elif dto.promotion_type == Promotion.MOST_SELLING:
                most_selling.append(dto.product)
        self.logger.debug(
            "Built home feed",
            categories=len(categories),
            top_deals=len(top_deals),
            most_selling=len(most_selling),
            skipped=skipped,
        )
        return HomeFeedDTO(
            categories=categories, top_deals=top_deals, most_selling=most_selling
        )

    def list_stores(self, *, active_only: bool = True):
        qs = self.stores.list(is_active=True) if active_only else self.stores.list()
        return StoreMapper.many_to_dto(qs)

    def create_promotion(
        self, product_id: int, promotion_type: str, display_order: int = 0
    ):
        valid_types = {code for code, _label in Promotion.PROMOTION_TYPES}
        if promotion_type not in valid_types:
            raise ValueError(f"Unknown promotion type: {promotion_type}")
        product = self.products.get(id=product_id)
        if not product:
            self.logger.warning("Promotion creation failed: product missing", product_id=product_id)
            return None
        promotion = self.promotions.create(
            product=product,
            promotion_type=promotion_type,
            display_order=display_order,
            is_active=True,
        )
        self.logger.info(
            "Promotion created",
            promotion_id=promotion.id,
            product_id=product_id,
            promotion_type=promotion_type,
        )
        return self.promotion_mapper.to_dto(promotion)

    def delete_promotion(self, promotion_id: int) -> bool:
        promotion = self.promotions.get(id=promotion_id)
        if not promotion:
            self.logger.warning("Promotion deletion failed: not found", promotion_id=promotion_id)
            return False
        self.promotions.delete(promotion)
        self.logger.info("Promotion deleted", promotion_id=promotion_id)
        return True
