from rest_framework import serializers

from apps.equipment.models import EquipmentType
from apps.inventory.models import Warehouse

from .models import Delivery, DeliveryItem, EmployeeRecord


class DeliveryItemSerializer(serializers.ModelSerializer):
    equipment_type_code = serializers.ReadOnlyField(source='equipment_type.code')
    is_overdue = serializers.SerializerMethodField()

    class Meta:
        model = DeliveryItem
        fields = [
            'id', 'equipment_type', 'equipment_type_code', 'source_stock_item',
            'quantity_delivered', 'status', 'return_due_date', 'returned_at',
            'return_reason', 'is_overdue'
        ]
        read_only_fields = fields

    def get_is_overdue(self, obj):
        return obj.is_overdue()

class DeliverySerializer(serializers.ModelSerializer):
    items = DeliveryItemSerializer(many=True, read_only=True)
    employee_name = serializers.ReadOnlyField(source='employee_record.employee_name')
    is_fully_returned = serializers.ReadOnlyField()
    devolucao_pendente = serializers.ReadOnlyField()

    class Meta:
        model = Delivery
        fields = [
            'id', 'employee_record', 'employee_name', 'warehouse', 'responsible',
            'status', 'delivered_at', 'signed_at', 'signature_ref', 'cancelled_at',
            'cancel_reason', 'notes', 'is_fully_returned', 'devolucao_pendente', 'items'
        ]
        read_only_fields = fields

# ==========================================
# Input payloads
# ==========================================

class DeliveryLineSerializer(serializers.Serializer):
    equipment_type = serializers.PrimaryKeyRelatedField(queryset=EquipmentType.objects.all())
    quantity = serializers.IntegerField(min_value=1, default=1)

class DeliveryIssueSerializer(serializers.Serializer):
    employee_record = serializers.PrimaryKeyRelatedField(queryset=EmployeeRecord.objects.all())
    warehouse = serializers.PrimaryKeyRelatedField(queryset=Warehouse.objects.all())
    items = DeliveryLineSerializer(many=True, allow_empty=False)
    notes = serializers.CharField(required=False, allow_blank=True, default='')

class DeliverySignSerializer(serializers.Serializer):
    signature_ref = serializers.CharField(required=False, allow_blank=True, default='', max_length=255)

class DeliveryCancelSerializer(serializers.Serializer):
    reason = serializers.CharField()

class DeliveryReturnSerializer(serializers.Serializer):
    item_ids = serializers.ListField(child=serializers.IntegerField(), allow_empty=False)
    reason = serializers.CharField(required=False, allow_blank=True, default='', max_length=255)
