"""
Pagination wrapped in the API response envelope.
"""

from rest_framework.pagination import PageNumberPagination
from rest_framework.response import Response


class EnvelopePagination(PageNumberPagination):
    """
    Page-number pagination (``?page=``, ``?limit=``) returning
    ``{"success": true, "count": n, "next": url, "previous": url, "data": [...]}``.
    """

    page_size_query_param = 'limit'
    max_page_size = 100

    def get_paginated_response(self, data):
        return Response({
            'success': True,
            'count': self.page.paginator.count,
            'next': self.get_next_link(),
            'previous': self.get_previous_link(),
            'data': data,
        })
