from django.urls import path

from . import views

app_name = "memberships"
urlpatterns = [
    path("plans", views.plans_view, name="plans"),
    path("create-order", views.create_order_view, name="create_order"),
    path("verify-payment", views.verify_payment_view, name="verify_payment"),
    path("status", views.membership_status_view, name="status"),
]
