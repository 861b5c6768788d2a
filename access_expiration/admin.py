from django.contrib import admin
from django.contrib.admin import register

from access_expiration.models import Customization, EmailLog, UserMeta


class ReadOnlyAdminMixin:
    # Access expiration data is derived or changed through its own views, never edited here
    def has_delete_permission(self, request, obj=None):
        return False

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False


@register(Customization)
class CustomizationAdmin(ReadOnlyAdminMixin, admin.ModelAdmin):
    list_display = ("name", "value")
    search_fields = ["name"]


@register(UserMeta)
class UserMetaAdmin(ReadOnlyAdminMixin, admin.ModelAdmin):
    list_display = ("user", "key", "value")
    list_filter = ["key"]
    search_fields = ["user__username", "user__email", "value"]
    list_select_related = ["user"]


@register(EmailLog)
class EmailLogAdmin(ReadOnlyAdminMixin, admin.ModelAdmin):
    list_display = ["id", "category", "sender", "to", "subject", "when", "ok"]
    list_filter = ["category", "ok"]
    search_fields = ["subject", "content", "to"]
    date_hierarchy = "when"
