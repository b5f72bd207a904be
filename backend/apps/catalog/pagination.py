from rest_framework.pagination import PageNumberPagination


class ProductListPagination(PageNumberPagination):
    # Storefront grid is three or four columns wide
    page_size = 12
    # Allow clients to override page size with `?limit=`
    page_size_query_param = 'limit'
    max_page_size = 100
