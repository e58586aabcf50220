from django.contrib import admin
from .models import Form, FormResponse


class FormResponseInline(admin.TabularInline):
    model = FormResponse
    extra = 0
    fields = ('user', 'submitted_at', 'created_at')
    readonly_fields = fields
    can_delete = False
    show_change_link = True


@admin.register(Form)
class FormAdmin(admin.ModelAdmin):
    list_display = ('id', 'title', 'is_active', 'created_by', 'created_at')
    search_fields = ('title', 'description')
    list_filter = ('is_active',)
    inlines = [FormResponseInline]


@admin.register(FormResponse)
class FormResponseAdmin(admin.ModelAdmin):
    list_display = ('id', 'form', 'user', 'submitted_at')
    list_filter = ('form',)
    search_fields = ('user__email', 'user__name')
    readonly_fields = ('form', 'user', 'data', 'submitted_at', 'created_at')
