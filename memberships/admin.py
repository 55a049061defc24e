from django.contrib import admin

from .models import Membership, MembershipOrder


@admin.register(MembershipOrder)
class MembershipOrderAdmin(admin.ModelAdmin):
    list_display = ("id", "gateway_order_id", "user", "plan_id", "amount", "currency", "status", "created_at", "completed_at")
    search_fields = ("gateway_order_id", "gateway_payment_id", "user__username", "user__email")
    list_filter = ("status", "plan_id", "created_at")
    # Orders only change through payment verification
    readonly_fields = (
        "user", "plan_id", "plan_name", "amount", "currency", "receipt", "status",
        "gateway_order_id", "gateway_payment_id", "gateway_signature", "completed_at", "created_at", "updated_at",
    )
    ordering = ("-created_at",)

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(Membership)
class MembershipAdmin(admin.ModelAdmin):
    list_display = ("user", "status", "plan_id", "expires_at", "updated_at")
    search_fields = ("user__username", "user__email")
    list_filter = ("status", "plan_id")
    raw_id_fields = ("user",)
    readonly_fields = ("updated_at",)
