"""
Deliveries App - Issuance, signature, cancellation and returns
"""
import logging
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import List

from django.db import transaction
from django.utils import timezone

from apps.core.exceptions import BusinessError, InsufficientStockError, NotFoundError
from apps.core.services import PolicyConfig
from apps.deliveries.models import Delivery, DeliveryItem, DeliveryItemStatus, DeliveryStatus
from apps.inventory.models import MovementType, StockItem, StockMovement, StockStatus
from apps.inventory.services.ledger import StockLedger
from apps.inventory.services.reversal import ReversalEngine

logger = logging.getLogger(__name__)


def _get_delivery(delivery_id, lock=False) -> Delivery:
    qs = Delivery.objects.select_for_update() if lock else Delivery.objects.all()
    delivery = qs.filter(pk=delivery_id).first()
    if delivery is None:
        raise NotFoundError('Entrega', delivery_id)
    return delivery


@dataclass
class DeliveryCancelResult:
    delivery: Delivery
    reversals: List[StockMovement] = field(default_factory=list)
    items_cancelled: int = 0


@dataclass
class ReturnResult:
    delivery: Delivery
    items_processed: List[DeliveryItem] = field(default_factory=list)
    movements: List[StockMovement] = field(default_factory=list)
    fully_returned: bool = False


class DeliveryService:

    @staticmethod
    def _requested_units(items) -> 'OrderedDict':
        """
        [{'equipment_type': <EquipmentType>, 'quantity': n}, ...] ->
        {equipment_type: total}, ordered by primary key.
        """
        if not items:
            raise BusinessError('Entrega deve ter pelo menos um item')
        totals = {}
        for line in items:
            equipment_type = line['equipment_type']
            quantity = line.get('quantity', 1)
            if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
                raise BusinessError('Quantidade deve ser um inteiro positivo')
            if not equipment_type.is_active:
                raise BusinessError(f'Tipo de EPI {equipment_type.code} está inativo')
            totals[equipment_type] = totals.get(equipment_type, 0) + quantity
        return OrderedDict(sorted(totals.items(), key=lambda kv: kv[0].pk))

    @classmethod
    def issue(cls, employee_record, warehouse, items, responsible=None, notes='', delivered_at=None) -> Delivery:
        """
        Issues one DeliveryItem per physical unit, each backed by a
        SAIDA_ENTREGA of 1 from the AVAILABLE stock of `warehouse`.
        Either every unit is issued or none is.
        """
        if not employee_record.is_active:
            raise BusinessError('Ficha do colaborador está inativa')
        if not warehouse.is_active:
            raise BusinessError(f'Almoxarifado {warehouse.code} está inativo')
        requested = cls._requested_units(items)
        delivered_at = delivered_at or timezone.now()
        issue_date = timezone.localdate(delivered_at)

        with transaction.atomic():
            policy = PolicyConfig.load()

            # Source every unit before touching any balance
            sources = {}
            for equipment_type, required in requested.items():
                stock_item = StockItem.objects.select_for_update().filter(
                    warehouse=warehouse,
                    equipment_type=equipment_type,
                    status=StockStatus.DISPONIVEL,
                ).first()
                available = stock_item.balance if stock_item else 0
                if available < required:
                    logger.warning(
                        f"Entrega recusada: {equipment_type.code} @ {warehouse.code} "
                        f"disponível {available}, solicitado {required}"
                    )
                    raise InsufficientStockError(required=required, available=available, stock_item=stock_item)
                sources[equipment_type] = stock_item

            delivery = Delivery.objects.create(
                employee_record=employee_record,
                warehouse=warehouse,
                responsible=responsible,
                delivered_at=delivered_at,
                notes=notes or '',
            )

            for equipment_type, required in requested.items():
                stock_item = sources[equipment_type]
                due_date = equipment_type.return_due_date(issue_date)
                for _ in range(required):
                    StockLedger.apply_to_item(
                        stock_item,
                        movement_type=MovementType.SAIDA_ENTREGA,
                        quantity=1,
                        policy=policy,
                        responsible=responsible,
                        delivery=delivery,
                        reason=f'Entrega para {employee_record.employee_name}',
                    )
                    DeliveryItem.objects.create(
                        delivery=delivery,
                        source_stock_item=stock_item,
                        equipment_type=equipment_type,
                        quantity_delivered=1,
                        return_due_date=due_date,
                    )

        logger.info(
            f"Entrega {delivery.pk} emitida para {employee_record.employee_code}: "
            f"{sum(requested.values())} unidades"
        )
        return delivery

    @staticmethod
    def sign(delivery_id, signature_ref='') -> Delivery:
        with transaction.atomic():
            delivery = _get_delivery(delivery_id, lock=True)
            if delivery.is_cancelled:
                raise BusinessError('Entrega cancelada não pode ser assinada')
            if delivery.is_signed:
                raise BusinessError('Entrega já está assinada')
            if not delivery.employee_record.is_active:
                raise BusinessError('Ficha do colaborador está inativa')

            delivery.status = DeliveryStatus.ASSINADA
            delivery.signed_at = timezone.now()
            delivery.signature_ref = signature_ref or ''
            delivery.save(update_fields=['status', 'signed_at', 'signature_ref', 'updated_at'])

        logger.info(f"Entrega {delivery.pk} assinada")
        return delivery

    @staticmethod
    def cancel(delivery_id, reason, responsible=None) -> DeliveryCancelResult:
        """
        Reverses every SAIDA_ENTREGA of the delivery and cancels the units
        still with the employee. Not allowed once any unit was returned.
        """
        if not reason or not reason.strip():
            raise BusinessError('Motivo do cancelamento é obrigatório')

        with transaction.atomic():
            policy = PolicyConfig.load()
            delivery = _get_delivery(delivery_id, lock=True)
            if delivery.is_cancelled:
                raise BusinessError('Entrega já está cancelada')
            if delivery.items.returned().exists():
                raise BusinessError('Entrega possui itens devolvidos e não pode ser cancelada')

            result = DeliveryCancelResult(delivery=delivery)
            exits = (
                delivery.movements.originals()
                .filter(movement_type=MovementType.SAIDA_ENTREGA)
                .select_related('stock_item')
                .order_by('created_at')
            )
            for movement in exits:
                result.reversals.append(ReversalEngine.reverse(
                    movement,
                    policy=policy,
                    responsible=responsible,
                    reason=f'Cancelamento da entrega: {reason.strip()}'[:255],
                ))

            result.items_cancelled = delivery.items.with_employee().update(status=DeliveryItemStatus.CANCELADO)

            delivery.status = DeliveryStatus.CANCELADA
            delivery.cancelled_at = timezone.now()
            delivery.cancel_reason = reason.strip()
            delivery.save(update_fields=['status', 'cancelled_at', 'cancel_reason', 'updated_at'])

        logger.info(f"Entrega {delivery.pk} cancelada ({len(result.reversals)} estornos)")
        return result


class ReturnService:

    @staticmethod
    def process_return(delivery_id, item_ids, responsible=None, reason='') -> ReturnResult:
        """
        Returns units to the AWAITING_INSPECTION stock of the delivery's
        warehouse. All items are validated before any change.
        """
        item_ids = list(item_ids or [])
        if not item_ids:
            raise BusinessError('Informe ao menos um item para devolução')
        if len(set(item_ids)) != len(item_ids):
            raise BusinessError('Item repetido na devolução')

        with transaction.atomic():
            policy = PolicyConfig.load()
            delivery = _get_delivery(delivery_id, lock=True)
            if not delivery.is_signed:
                raise BusinessError('Apenas entregas assinadas podem ter itens devolvidos')

            found = {
                item.pk: item
                for item in DeliveryItem.objects.select_for_update().filter(pk__in=item_ids)
            }
            items = []
            for item_id in item_ids:
                item = found.get(item_id)
                if item is None:
                    raise NotFoundError('Item da entrega', item_id)
                if item.delivery_id != delivery.pk:
                    raise BusinessError(f'Item {item_id} não pertence à entrega')
                if item.status == DeliveryItemStatus.DEVOLVIDO:
                    raise BusinessError(f'Item {item_id} já foi devolvido')
                if not item.is_with_employee:
                    raise BusinessError(f'Item {item_id} não está com o colaborador')
                items.append(item)

            result = ReturnResult(delivery=delivery)
            returned_at = timezone.now()
            for item in items:
                result.movements.append(StockLedger.apply(
                    warehouse=delivery.warehouse,
                    equipment_type=item.equipment_type,
                    status=StockStatus.AGUARDANDO_INSPECAO,
                    movement_type=MovementType.ENTRADA_DEVOLUCAO,
                    quantity=1,
                    policy=policy,
                    responsible=responsible,
                    delivery=delivery,
                    reason=(reason or 'Devolução')[:255],
                ))
                item.status = DeliveryItemStatus.DEVOLVIDO
                item.returned_at = returned_at
                item.return_reason = (reason or '')[:255]
                item.save(update_fields=['status', 'returned_at', 'return_reason'])
                result.items_processed.append(item)

            result.fully_returned = delivery.is_fully_returned

        logger.info(
            f"Devolução na entrega {delivery.pk}: {len(result.items_processed)} itens"
            f"{' (entrega totalmente devolvida)' if result.fully_returned else ''}"
        )
        return result
