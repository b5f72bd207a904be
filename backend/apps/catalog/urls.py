from django.urls import path
from .views import (
    CategoryDetailView,
    CategoryListView,
    HomeView,
    ProductDetailView,
    ProductListView,
    ProductSimilarView,
    ProductToggleView,
    PromotionDetailView,
    PromotionListView,
    StoreListView,
    SubcategoryListView,
)

urlpatterns = [
	path('home/', HomeView.as_view(), name='api-home'),
	path('stores/', StoreListView.as_view(), name='api-stores-list'),
	path('categories/', CategoryListView.as_view(), name='api-categories-list'),
	path('categories/<int:category_id>/', CategoryDetailView.as_view(), name='api-categories-detail'),
	path('categories/<int:category_id>/subcategories/', SubcategoryListView.as_view(), name='api-subcategories-list'),
	path('products/', ProductListView.as_view(), name='api-products-list'),
	path('products/<int:product_id>/', ProductDetailView.as_view(), name='api-products-detail'),
	path('products/<int:product_id>/toggle/', ProductToggleView.as_view(), name='api-products-toggle'),
	path('products/<int:product_id>/similar/', ProductSimilarView.as_view(), name='api-products-similar'),
	path('promotions/', PromotionListView.as_view(), name='api-promotions-list'),
	path('promotions/<int:promotion_id>/', PromotionDetailView.as_view(), name='api-promotions-detail'),
]
