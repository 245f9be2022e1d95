from django.utils.functional import SimpleLazyObject

from .utils import get_terminal_session


class TerminalSessionMiddleware:
    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        request.pos_session = SimpleLazyObject(get_terminal_session)
        response = self.get_response(request)
        return response
