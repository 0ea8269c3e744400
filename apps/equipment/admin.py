from django.contrib import admin

from .models import EquipmentType


@admin.register(EquipmentType)
class EquipmentTypeAdmin(admin.ModelAdmin):
    list_display = ['code', 'name', 'ca_number', 'useful_life_days', 'is_active']
    list_filter = ['is_active']
    search_fields = ['code', 'name', 'ca_number']
    list_editable = ['is_active']
    ordering = ['name']
