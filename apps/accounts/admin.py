from django.contrib import admin

from .models import AuditLog, PasswordResetToken, User


# -------------------------
# User admin
# -------------------------
@admin.register(User)
class UserAdmin(admin.ModelAdmin):
    list_display = ("id", "email", "name", "role", "social_provider", "is_active", "created_at")
    search_fields = ("email", "name")
    readonly_fields = ("created_at", "updated_at", "last_login_at", "last_password_change_at")
    list_filter = ("role", "is_active", "social_provider")
    ordering = ("-created_at",)
    exclude = ("password", "user_permissions", "groups")

    actions = ["deactivate_users", "promote_to_admin"]

    @admin.action(description="Deactivate selected users")
    def deactivate_users(self, request, queryset):
        updated = queryset.update(is_active=False)
        self.message_user(request, f"{updated} user(s) deactivated.")

    @admin.action(description="Promote selected users to ADMIN")
    def promote_to_admin(self, request, queryset):
        updated = queryset.update(role=User.Role.ADMIN)
        self.message_user(request, f"{updated} user(s) promoted.")


@admin.register(PasswordResetToken)
class PasswordResetTokenAdmin(admin.ModelAdmin):
    list_display = ("id", "user", "expires_at", "created_at")
    search_fields = ("user__email",)
    readonly_fields = ("token",)


@admin.register(AuditLog)
class AuditLogAdmin(admin.ModelAdmin):
    list_display = ("id", "action", "actor_id", "created_at")
    search_fields = ("action",)
    list_filter = ("action",)
    readonly_fields = ("actor_id", "action", "meta", "created_at", "updated_at")
