from rest_framework import serializers

from apps.equipment.models import EquipmentType

from .models import MovementNote, NoteItem, NoteType, StockMovement, Warehouse


class NoteItemSerializer(serializers.ModelSerializer):
    equipment_type_code = serializers.ReadOnlyField(source='equipment_type.code')

    class Meta:
        model = NoteItem
        fields = ['id', 'equipment_type', 'equipment_type_code', 'quantity', 'processed_quantity', 'notes']
        read_only_fields = ['processed_quantity']

class MovementNoteSerializer(serializers.ModelSerializer):
    items = NoteItemSerializer(many=True, read_only=True)

    class Meta:
        model = MovementNote
        fields = [
            'id', 'number', 'note_type', 'status', 'origin_warehouse',
            'destination_warehouse', 'responsible', 'notes', 'concluded_at',
            'cancelled_at', 'cancel_reason', 'created_at', 'items'
        ]
        read_only_fields = fields

class StockMovementSerializer(serializers.ModelSerializer):
    signed_quantity = serializers.ReadOnlyField()
    warehouse = serializers.ReadOnlyField(source='stock_item.warehouse_id')
    equipment_type = serializers.ReadOnlyField(source='stock_item.equipment_type_id')
    stock_status = serializers.ReadOnlyField(source='stock_item.status')

    class Meta:
        model = StockMovement
        fields = [
            'id', 'stock_item', 'warehouse', 'equipment_type', 'stock_status',
            'movement_type', 'quantity', 'signed_quantity', 'balance_after',
            'origin_movement', 'note', 'delivery', 'reason', 'created_at'
        ]
        read_only_fields = fields

# ==========================================
# Input payloads
# ==========================================

class NoteCreateSerializer(serializers.Serializer):
    note_type = serializers.ChoiceField(choices=NoteType.choices)
    origin_warehouse = serializers.PrimaryKeyRelatedField(
        queryset=Warehouse.objects.all(), required=False, allow_null=True
    )
    destination_warehouse = serializers.PrimaryKeyRelatedField(
        queryset=Warehouse.objects.all(), required=False, allow_null=True
    )
    notes = serializers.CharField(required=False, allow_blank=True, default='')

class NoteItemAddSerializer(serializers.Serializer):
    equipment_type = serializers.PrimaryKeyRelatedField(queryset=EquipmentType.objects.all())
    quantity = serializers.IntegerField()
    notes = serializers.CharField(required=False, allow_blank=True, default='', max_length=255)

class NoteCancelSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, default='')

class DirectAdjustmentSerializer(serializers.Serializer):
    warehouse = serializers.PrimaryKeyRelatedField(queryset=Warehouse.objects.all())
    equipment_type = serializers.PrimaryKeyRelatedField(queryset=EquipmentType.objects.all())
    new_quantity = serializers.IntegerField(min_value=0)
    reason = serializers.CharField(max_length=255)
