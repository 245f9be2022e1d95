from django.apps import AppConfig


class TerminalConfig(AppConfig):
    name = "apps.terminal"
    verbose_name = "Pharmacy terminal"
    session = None
