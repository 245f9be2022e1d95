"""
API views for assistant app.

The assistant only ever reads the terminal state; a failed call answers
with a fallback message instead of an error.
"""
from rest_framework.decorators import api_view
from rest_framework.response import Response

from apps.terminal.utils import get_terminal_session
from .serializers import AskSerializer
from .services import PharmacistAssistant, build_snapshot


def _session(request):
    return getattr(request, "pos_session", None) or get_terminal_session()


@api_view(["GET"])
def snapshot(request):
    session = _session(request)
    return Response(build_snapshot(session.ledger, session.history))


@api_view(["POST"])
def ask(request):
    serializer = AskSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    session = _session(request)
    reply = PharmacistAssistant().ask(serializer.validated_data["prompt"], session.ledger, session.history)
    return Response({"reply": reply})


@api_view(["GET"])
def inventory_health(request):
    session = _session(request)
    return Response(PharmacistAssistant().inventory_health(session.ledger, session.history))
