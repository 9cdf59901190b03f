"""
Till Django adapter URL routing.
"""

from django.urls import path

from adapters.django_api import views


urlpatterns = [
    path("state", views.ledger_state_view),
    path("dashboard", views.ledger_dashboard_view),
    path("items/add", views.add_item_view),
    path("items/adjust", views.adjust_stock_view),
    path("sales/record", views.record_sale_view),
    path("orders/receive", views.receive_order_view),
    path("orders/quick", views.quick_order_view),
]
