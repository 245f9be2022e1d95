from django.conf import settings
from django.http import JsonResponse


def landing_entry_view(request):
    session = request.pos_session
    return JsonResponse(
        {
            "pharmacy": settings.PHARMACY_NAME,
            "medicines": len(session.ledger),
            "sales": len(session.history),
            "persistence_warning": session.persistence_warning,
        }
    )
