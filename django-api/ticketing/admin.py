from django.contrib import admin

from ticketing.models import DiscountCode, Event, Order, Ticket


class TicketInline(admin.TabularInline):
    model = Ticket
    extra = 1
    readonly_fields = ["sold_quantity"]


class DiscountCodeInline(admin.TabularInline):
    model = DiscountCode
    extra = 1
    readonly_fields = ["used_count"]


@admin.register(Event)
class EventAdmin(admin.ModelAdmin):
    list_display = ["name", "location", "created_at"]
    search_fields = ["name", "location"]
    inlines = [TicketInline, DiscountCodeInline]


@admin.register(Ticket)
class TicketAdmin(admin.ModelAdmin):
    list_display = ["name", "event", "price", "max_quantity", "sold_quantity", "is_active"]
    list_filter = ["event", "is_active"]
    readonly_fields = ["sold_quantity"]


@admin.register(DiscountCode)
class DiscountCodeAdmin(admin.ModelAdmin):
    list_display = ["code", "event", "kind", "value", "used_count", "max_uses", "is_active"]
    list_filter = ["event", "kind", "is_active"]
    search_fields = ["code"]
    readonly_fields = ["used_count"]


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    """Orders are settled by payment events only, so the admin is read-only."""

    list_display = ["id", "event", "ticket", "buyer_email", "quantity", "total_amount", "status", "created_at"]
    list_filter = ["status", "event"]
    search_fields = ["buyer_email", "checkout_session_id", "confirmation_id"]

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
