from django.urls import path
from .views import InvoiceCollectionView, InvoiceFinalizeView, InvoiceStatusView, PaymentsPingView, WebhookView
app_name = "payments"

urlpatterns = [
    path("ping/", PaymentsPingView.as_view(), name="ping"),
    path("invoices/", InvoiceCollectionView.as_view(), name="invoices-collection"),
    path("invoices/<str:invoice_id>/status/", InvoiceStatusView.as_view(), name="invoices-status"),
    path("invoices/<str:invoice_id>/finalize/", InvoiceFinalizeView.as_view(), name="invoices-finalize"),
    path("webhook/", WebhookView.as_view(), name="webhook"),
]
