"""
Storage models for the pharmacy terminal.

The terminal state is kept as a handful of JSON documents under fixed keys.
"""
from django.db import models


class KeyValueEntry(models.Model):
    """
    One named JSON document (inventory, sale history, auth flag).
    """
    key = models.CharField(
        max_length=100,
        unique=True,
        help_text="Document key (e.g., pharma_inventory)"
    )
    value = models.JSONField(
        null=True,
        blank=True,
        help_text="Serialized document"
    )
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Stored document"
        verbose_name_plural = "Stored documents"
        ordering = ['key']

    def __str__(self):
        return self.key
