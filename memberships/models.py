from django.conf import settings
from django.db import models
from django.utils import timezone


class MembershipOrder(models.Model):
    STATUS_PENDING = "pending"
    STATUS_COMPLETED = "completed"
    STATUS_CHOICES = [
        (STATUS_PENDING, "Pending"),
        (STATUS_COMPLETED, "Completed"),
    ]

    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.PROTECT, related_name="membership_orders")
    plan_id = models.CharField(max_length=32, db_index=True)
    plan_name = models.CharField(max_length=64, blank=True, default="")
    amount = models.DecimalField(max_digits=10, decimal_places=2)
    currency = models.CharField(max_length=8, default="INR")
    receipt = models.CharField(max_length=40, blank=True, default="")

    gateway_order_id = models.CharField(max_length=64, unique=True)
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=STATUS_PENDING, db_index=True)
    gateway_payment_id = models.CharField(max_length=64, blank=True, default="")
    gateway_signature = models.CharField(max_length=128, blank=True, default="")
    completed_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ("-created_at",)

    @property
    def is_completed(self) -> bool:
        return self.status == self.STATUS_COMPLETED

    def __str__(self):
        return f"{self.gateway_order_id} {self.plan_id} ({self.status})"


class Membership(models.Model):
    """Membership facet of a user: one row per user, updated in place."""

    STATUS_INACTIVE = "inactive"
    STATUS_ACTIVE = "active"
    STATUS_CHOICES = [
        (STATUS_INACTIVE, "Inactive"),
        (STATUS_ACTIVE, "Active"),
    ]

    user = models.OneToOneField(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="membership")
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=STATUS_INACTIVE)
    plan_id = models.CharField(max_length=32, blank=True, default="")
    expires_at = models.DateTimeField(null=True, blank=True)
    updated_at = models.DateTimeField(auto_now=True)

    @property
    def is_current(self) -> bool:
        # expires_at only means something while active
        return (
            self.status == self.STATUS_ACTIVE
            and self.expires_at is not None
            and self.expires_at > timezone.now()
        )

    def __str__(self):
        return f"{self.user_id} {self.plan_id or '-'} ({self.status})"
