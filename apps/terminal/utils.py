from django.apps import apps


def get_terminal_session():
    """
    Return the terminal's session, opening it from storage on first use.
    """
    from apps.storage.gateway import PersistenceGateway
    from .session import PharmacySession

    config = apps.get_app_config("terminal")
    if config.session is None:
        config.session = PharmacySession.open(PersistenceGateway())
    return config.session


def reset_terminal_session():
    """Drop the open session so the next request reloads from storage."""
    apps.get_app_config("terminal").session = None
