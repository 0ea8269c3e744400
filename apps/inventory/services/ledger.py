"""
StockLedger: the only writer of StockItem balances.
"""
import logging

from django.db import transaction

from apps.core.exceptions import BusinessError, InsufficientStockError
from apps.inventory.models import StockItem, StockMovement, StockStatus, signed_delta

logger = logging.getLogger(__name__)


class StockLedger:
    @staticmethod
    def lock_item(warehouse, equipment_type, status=StockStatus.DISPONIVEL) -> StockItem:
        """Resolves (or lazily creates) the stock item and locks its row."""
        item, _ = StockItem.objects.get_or_create(
            warehouse=warehouse,
            equipment_type=equipment_type,
            status=status,
        )
        return StockItem.objects.select_for_update().get(pk=item.pk)

    @classmethod
    def lock_items(cls, keys) -> list:
        """Locks every (warehouse, equipment_type, status) row of a batch in pk order."""
        unique_keys = {(w.pk, et.pk, status): (w, et, status) for w, et, status in keys}
        return [cls.lock_item(*unique_keys[key]) for key in sorted(unique_keys)]

    @staticmethod
    def current_balance(warehouse, equipment_type, status=StockStatus.DISPONIVEL) -> int:
        return StockItem.objects.filter(
            warehouse=warehouse, equipment_type=equipment_type, status=status
        ).values_list('balance', flat=True).first() or 0

    @classmethod
    @transaction.atomic
    def apply(
        cls,
        *,
        warehouse,
        equipment_type,
        movement_type,
        quantity,
        policy,
        status=StockStatus.DISPONIVEL,
        responsible=None,
        note=None,
        delivery=None,
        origin_movement=None,
        reason='',
    ) -> StockMovement:
        """
        Apply a movement to the (warehouse, equipment_type, status) balance.
        """
        stock_item = cls.lock_item(warehouse, equipment_type, status)
        return cls.apply_to_item(
            stock_item,
            movement_type=movement_type,
            quantity=quantity,
            policy=policy,
            responsible=responsible,
            note=note,
            delivery=delivery,
            origin_movement=origin_movement,
            reason=reason,
        )

    @staticmethod
    @transaction.atomic
    def apply_to_item(
        stock_item,
        *,
        movement_type,
        quantity,
        policy,
        responsible=None,
        note=None,
        delivery=None,
        origin_movement=None,
        reason='',
    ) -> StockMovement:
        """
        Same as apply() for an already resolved stock item. The row is
        (re)locked here, so callers may pass an unlocked instance.
        """
        quantity = int(quantity)
        if quantity <= 0:
            raise BusinessError('Quantidade da movimentação deve ser positiva')

        stock_item = StockItem.objects.select_for_update().get(pk=stock_item.pk)
        delta = signed_delta(movement_type, quantity)
        new_balance = stock_item.balance + delta

        if delta < 0 and new_balance < 0 and not policy.allow_negative_stock:
            logger.warning(
                f"Estoque insuficiente para {movement_type} em StockItem {stock_item.pk}: "
                f"disponível {stock_item.balance}, solicitado {quantity}"
            )
            raise InsufficientStockError(
                required=quantity,
                available=stock_item.balance,
                stock_item=stock_item,
            )

        stock_item.balance = new_balance
        stock_item._allow_balance_change = True  # Unlock ledger for this authorized movement
        stock_item.save(update_fields=['balance', 'updated_at'])
        stock_item._allow_balance_change = False

        return StockMovement.objects.create(
            stock_item=stock_item,
            movement_type=movement_type,
            quantity=quantity,
            balance_after=new_balance,
            responsible=responsible,
            origin_movement=origin_movement,
            note=note,
            delivery=delivery,
            reason=reason,
        )
