from dataclasses import asdict

from rest_framework import status, views
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from apps.inventory.serializers import (
    DirectAdjustmentSerializer,
    MovementNoteSerializer,
    NoteCancelSerializer,
    NoteCreateSerializer,
    NoteItemAddSerializer,
    NoteItemSerializer,
    StockMovementSerializer,
)
from apps.inventory.services import AdjustmentService, MovementNoteService


class NoteCreateView(views.APIView):
    """
    Creates a draft movement note.
    POST /api/v1/notes/
    """
    permission_classes = [IsAuthenticated]

    def post(self, request, *args, **kwargs):
        serializer = NoteCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        note = MovementNoteService.create_note(
            note_type=data['note_type'],
            responsible=request.user,
            origin=data.get('origin_warehouse'),
            destination=data.get('destination_warehouse'),
            notes=data.get('notes', ''),
        )
        return Response(MovementNoteSerializer(note).data, status=status.HTTP_201_CREATED)


class NoteItemAddView(views.APIView):
    """POST /api/v1/notes/<pk>/items/"""
    permission_classes = [IsAuthenticated]

    def post(self, request, pk, *args, **kwargs):
        serializer = NoteItemAddSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        item = MovementNoteService.add_item(
            pk,
            equipment_type=data['equipment_type'],
            quantity=data['quantity'],
            notes=data.get('notes', ''),
        )
        return Response(NoteItemSerializer(item).data, status=status.HTTP_201_CREATED)


class NoteItemRemoveView(views.APIView):
    """DELETE /api/v1/notes/<pk>/items/<item_pk>/"""
    permission_classes = [IsAuthenticated]

    def delete(self, request, pk, item_pk, *args, **kwargs):
        MovementNoteService.remove_item(pk, item_pk)
        return Response(status=status.HTTP_204_NO_CONTENT)


class NoteConcludeView(views.APIView):
    """
    Concludes a draft note, applying all of its items to the ledger.
    POST /api/v1/notes/<pk>/conclude/
    """
    permission_classes = [IsAuthenticated]

    def post(self, request, pk, *args, **kwargs):
        result = MovementNoteService.conclude(pk, responsible=request.user)
        return Response({
            "note": MovementNoteSerializer(result.note).data,
            "movements_created": StockMovementSerializer(result.movements, many=True).data,
            "items_processed": NoteItemSerializer(result.items_processed, many=True).data,
        }, status=status.HTTP_200_OK)


class NoteCancelView(views.APIView):
    """POST /api/v1/notes/<pk>/cancel/"""
    permission_classes = [IsAuthenticated]

    def post(self, request, pk, *args, **kwargs):
        serializer = NoteCancelSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = MovementNoteService.cancel(
            pk,
            reason=serializer.validated_data.get('reason', ''),
            responsible=request.user,
        )
        return Response({
            "note": MovementNoteSerializer(result.note).data,
            "estoque_ajustado": result.estoque_ajustado,
            "estornos_gerados": [asdict(e) for e in result.estornos],
        }, status=status.HTTP_200_OK)


class DirectAdjustmentView(views.APIView):
    """
    Sets the AVAILABLE balance of an equipment type in a warehouse.
    POST /api/v1/stock/adjustments/
    """
    permission_classes = [IsAuthenticated]

    def post(self, request, *args, **kwargs):
        serializer = DirectAdjustmentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        result = AdjustmentService.direct_adjustment(
            warehouse=data['warehouse'],
            equipment_type=data['equipment_type'],
            new_quantity=data['new_quantity'],
            responsible=request.user,
            reason=data['reason'],
        )
        return Response({
            "movement": StockMovementSerializer(result.movement).data,
            "previous_balance": result.previous_balance,
            "new_balance": result.new_balance,
            "difference": result.difference,
        }, status=status.HTTP_201_CREATED)
