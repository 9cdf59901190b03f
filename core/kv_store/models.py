"""
Till KV Store - Relational Storage
====================================
One row per storage key. The value is an opaque text blob; the
store never interprets it.
"""

from __future__ import annotations

from django.db import models


class KeyValueEntry(models.Model):
    key = models.CharField(primary_key=True, max_length=255)
    value = models.TextField()
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "till_kv_entries"
        ordering = ["key"]

    def __str__(self) -> str:
        return f"{self.key} ({len(self.value)} chars)"
