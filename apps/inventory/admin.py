"""
Inventory App - Admin Configuration
"""
from django.contrib import admin
from django.utils.html import format_html

from .models import MovementNote, NoteItem, StockItem, StockMovement, Warehouse


@admin.register(Warehouse)
class WarehouseAdmin(admin.ModelAdmin):
    list_display = ['code', 'name', 'is_active']
    list_filter = ['is_active']
    search_fields = ['code', 'name']
    ordering = ['name']
    list_editable = ['is_active']


@admin.register(StockItem)
class StockItemAdmin(admin.ModelAdmin):
    list_display = ['equipment_type', 'warehouse', 'status', 'balance_display']
    list_filter = ['status', 'warehouse']
    search_fields = ['equipment_type__code', 'equipment_type__name', 'warehouse__code']
    readonly_fields = ['warehouse', 'equipment_type', 'status', 'balance', 'created_at', 'updated_at']

    def balance_display(self, obj):
        color = 'red' if obj.balance < 0 else 'inherit'
        return format_html('<span style="color: {};">{}</span>', color, obj.balance)
    balance_display.short_description = 'Saldo'

    def has_add_permission(self, request):
        return False  # Criados pelo ledger na primeira movimentação


@admin.register(StockMovement)
class StockMovementAdmin(admin.ModelAdmin):
    list_display = [
        'created_at', 'movement_type', 'stock_item', 'quantity',
        'balance_after', 'responsible', 'note'
    ]
    list_filter = ['movement_type', 'created_at']
    search_fields = ['stock_item__equipment_type__code', 'note__number', 'reason']
    date_hierarchy = 'created_at'
    readonly_fields = [
        'id', 'stock_item', 'movement_type', 'quantity', 'balance_after', 'responsible',
        'origin_movement', 'note', 'delivery', 'reason', 'created_at'
    ]
    ordering = ['-created_at']

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


class NoteItemInline(admin.TabularInline):
    model = NoteItem
    extra = 0
    readonly_fields = ['processed_quantity']

    # Itens congelam quando a nota sai do rascunho
    def has_add_permission(self, request, obj=None):
        if obj is not None and not obj.is_draft:
            return False
        return super().has_add_permission(request, obj)

    def has_change_permission(self, request, obj=None):
        if obj is not None and not obj.is_draft:
            return False
        return super().has_change_permission(request, obj)

    def has_delete_permission(self, request, obj=None):
        if obj is not None and not obj.is_draft:
            return False
        return super().has_delete_permission(request, obj)


@admin.register(MovementNote)
class MovementNoteAdmin(admin.ModelAdmin):
    list_display = ['number', 'note_type', 'status', 'origin_warehouse', 'destination_warehouse', 'created_at']
    list_filter = ['note_type', 'status', 'created_at']
    search_fields = ['number', 'notes']
    date_hierarchy = 'created_at'
    readonly_fields = ['number', 'status', 'concluded_at', 'cancelled_at', 'cancel_reason']
    inlines = [NoteItemInline]

    fieldsets = (
        ('Identificação', {
            'fields': ('number', 'note_type', 'status')
        }),
        ('Almoxarifados', {
            'fields': ('origin_warehouse', 'destination_warehouse')
        }),
        ('Ciclo de Vida', {
            'fields': ('concluded_at', 'cancelled_at', 'cancel_reason'),
            'classes': ('collapse',)
        }),
        ('Observações', {
            'fields': ('notes',),
        }),
    )

    def has_add_permission(self, request):
        return False  # Numeração gerada pelo MovementNoteService

    def get_readonly_fields(self, request, obj=None):
        readonly = list(super().get_readonly_fields(request, obj))
        if obj is not None and not obj.is_draft:
            readonly += ['note_type', 'origin_warehouse', 'destination_warehouse']
        return readonly

    def has_delete_permission(self, request, obj=None):
        if obj is not None and not obj.is_draft:
            return False
        return super().has_delete_permission(request, obj)
