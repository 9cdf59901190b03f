"""
Till KV Store - App Configuration
===================================
DB-backed key-value storage for ledger snapshots.
"""

from django.apps import AppConfig


class CoreKeyValueStoreConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "core.kv_store"
    label = "core_kv_store"
    verbose_name = "Till Key-Value Store"
