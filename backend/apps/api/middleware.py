from django.utils.deprecation import MiddlewareMixin
from rest_framework.renderers import JSONRenderer
from rest_framework.response import Response

from apps.api.validation import validate_request_context
from apps.common import get_logger

logger = get_logger(__name__).bind(component='api', layer='middleware')


def _render(response):
    # Responses built here never pass through DRF content negotiation.
    if isinstance(response, Response) and not response.is_rendered:
        response.accepted_renderer = JSONRenderer()
        response.accepted_media_type = 'application/json'
        response.renderer_context = {}
        response.render()
    return response


class RequestValidationMiddleware(MiddlewareMixin):
    """
    Runs ``validate_request_context`` for class-based API views before dispatch,
    so malformed cart headers and quote parameters never reach a view.
    """

    def process_view(self, request, view_func, view_args, view_kwargs):
        view_class = getattr(view_func, 'view_class', None)
        if not view_class:
            return None
        view_name = getattr(view_class, '__name__', str(view_class))
        response = validate_request_context(request, view_class, view_kwargs)
        if response is None:
            return None
        logger.info(
            'Request blocked by validation',
            view=view_name,
            method=getattr(request, 'method', None),
            status=getattr(response, 'status_code', None),
        )
        return _render(response)
