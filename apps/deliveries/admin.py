"""
Deliveries App - Admin Configuration
"""
from django.contrib import admin

from .models import Delivery, DeliveryItem, EmployeeRecord


@admin.register(EmployeeRecord)
class EmployeeRecordAdmin(admin.ModelAdmin):
    list_display = ['employee_name', 'employee_code', 'is_active', 'created_at']
    list_filter = ['is_active']
    search_fields = ['employee_name', 'employee_code']
    ordering = ['employee_name']


class DeliveryItemInline(admin.TabularInline):
    model = DeliveryItem
    extra = 0
    can_delete = False
    readonly_fields = [
        'equipment_type', 'source_stock_item', 'quantity_delivered', 'status',
        'return_due_date', 'returned_at', 'return_reason'
    ]

    def has_add_permission(self, request, obj=None):
        return False  # Itens nascem apenas pela emissão da entrega


@admin.register(Delivery)
class DeliveryAdmin(admin.ModelAdmin):
    list_display = ['id', 'employee_record', 'warehouse', 'status', 'delivered_at', 'signed_at']
    list_filter = ['status', 'warehouse', 'delivered_at']
    search_fields = ['employee_record__employee_name', 'employee_record__employee_code', 'signature_ref']
    date_hierarchy = 'delivered_at'
    readonly_fields = [
        'id', 'employee_record', 'warehouse', 'responsible', 'status', 'delivered_at',
        'signed_at', 'signature_ref', 'cancelled_at', 'cancel_reason'
    ]
    inlines = [DeliveryItemInline]

    def has_add_permission(self, request):
        return False
