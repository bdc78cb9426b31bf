from django.urls import include, path

urlpatterns = [
    path("api/payments/", include("apps.payments.urls")),
    path("api/", include("apps.monitoring.urls")),
]
