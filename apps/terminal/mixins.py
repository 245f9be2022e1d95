from .utils import get_terminal_session


class TerminalSessionMixin:
    """
    Give a view the terminal session it operates on.
    """

    def get_pos_session(self):
        session = getattr(self.request, "pos_session", None)
        if session is None:
            session = get_terminal_session()
        return session

    @property
    def pos_session(self):
        return self.get_pos_session()

    def with_persistence_status(self, payload):
        warning = self.pos_session.persistence_warning
        if warning:
            payload["persistence_warning"] = warning
        return payload
