from django.contrib import admin

from .models import KeyValueEntry


@admin.register(KeyValueEntry)
class KeyValueEntryAdmin(admin.ModelAdmin):
    list_display = ['key', 'updated_at']
    search_fields = ['key']
    readonly_fields = ['updated_at']
