from rest_framework import status, views
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from apps.deliveries.serializers import (
    DeliveryCancelSerializer,
    DeliveryIssueSerializer,
    DeliveryItemSerializer,
    DeliveryReturnSerializer,
    DeliverySerializer,
    DeliverySignSerializer,
)
from apps.deliveries.services import DeliveryService, ReturnService
from apps.inventory.serializers import StockMovementSerializer


class DeliveryIssueView(views.APIView):
    """
    Issues equipment units to an employee record.
    POST /api/v1/deliveries/
    """
    permission_classes = [IsAuthenticated]

    def post(self, request, *args, **kwargs):
        serializer = DeliveryIssueSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        delivery = DeliveryService.issue(
            employee_record=data['employee_record'],
            warehouse=data['warehouse'],
            items=data['items'],
            responsible=request.user,
            notes=data.get('notes', ''),
        )
        return Response(DeliverySerializer(delivery).data, status=status.HTTP_201_CREATED)


class DeliverySignView(views.APIView):
    """POST /api/v1/deliveries/<pk>/sign/"""
    permission_classes = [IsAuthenticated]

    def post(self, request, pk, *args, **kwargs):
        serializer = DeliverySignSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        delivery = DeliveryService.sign(pk, signature_ref=serializer.validated_data.get('signature_ref', ''))
        return Response(DeliverySerializer(delivery).data, status=status.HTTP_200_OK)


class DeliveryCancelView(views.APIView):
    """POST /api/v1/deliveries/<pk>/cancel/"""
    permission_classes = [IsAuthenticated]

    def post(self, request, pk, *args, **kwargs):
        serializer = DeliveryCancelSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = DeliveryService.cancel(pk, reason=serializer.validated_data['reason'], responsible=request.user)
        return Response({
            "delivery": DeliverySerializer(result.delivery).data,
            "estornos_gerados": StockMovementSerializer(result.reversals, many=True).data,
            "items_cancelled": result.items_cancelled,
        }, status=status.HTTP_200_OK)


class DeliveryReturnView(views.APIView):
    """
    Returns units of a signed delivery to inspection-pending stock.
    POST /api/v1/deliveries/<pk>/returns/
    """
    permission_classes = [IsAuthenticated]

    def post(self, request, pk, *args, **kwargs):
        serializer = DeliveryReturnSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        result = ReturnService.process_return(
            pk,
            item_ids=data['item_ids'],
            responsible=request.user,
            reason=data.get('reason', ''),
        )
        return Response({
            "items_processed": DeliveryItemSerializer(result.items_processed, many=True).data,
            "movements_created": StockMovementSerializer(result.movements, many=True).data,
            "fully_returned": result.fully_returned,
        }, status=status.HTTP_200_OK)
