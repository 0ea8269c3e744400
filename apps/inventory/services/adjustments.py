"""
Direct adjustments (without a note) and inventory counts.
"""
import logging
from dataclasses import dataclass

from django.db import transaction

from apps.core.exceptions import BusinessError
from apps.core.services import PolicyConfig
from apps.inventory.models import MovementType, StockMovement
from apps.inventory.services.ledger import StockLedger

logger = logging.getLogger(__name__)


@dataclass
class AdjustmentResult:
    movement: StockMovement
    previous_balance: int
    new_balance: int
    difference: int


class AdjustmentService:
    @staticmethod
    def _validate_quantity(new_quantity):
        if isinstance(new_quantity, bool) or not isinstance(new_quantity, int) or new_quantity < 0:
            raise BusinessError('Nova quantidade deve ser um inteiro maior ou igual a zero')

    @staticmethod
    def _check_allowed(policy, warehouse):
        if not policy.allow_forced_adjustments:
            raise BusinessError('Ajustes forçados não estão habilitados')
        if not warehouse.is_active:
            raise BusinessError(f'Almoxarifado {warehouse.code} está inativo')

    @staticmethod
    def _adjust(warehouse, equipment_type, new_quantity, policy, responsible, reason):
        stock_item = StockLedger.lock_item(warehouse, equipment_type)
        previous = stock_item.balance
        difference = new_quantity - previous
        if difference == 0:
            return None
        movement = StockLedger.apply_to_item(
            stock_item,
            movement_type=MovementType.AJUSTE_POSITIVO if difference > 0 else MovementType.AJUSTE_NEGATIVO,
            quantity=abs(difference),
            policy=policy,
            responsible=responsible,
            reason=reason,
        )
        return AdjustmentResult(
            movement=movement,
            previous_balance=previous,
            new_balance=movement.balance_after,
            difference=difference,
        )

    @classmethod
    def direct_adjustment(cls, warehouse, equipment_type, new_quantity, responsible=None, reason='') -> AdjustmentResult:
        """Sets the AVAILABLE balance to `new_quantity` with a single AJUSTE movement."""
        if not reason or not reason.strip():
            raise BusinessError('Motivo do ajuste é obrigatório')
        cls._validate_quantity(new_quantity)

        with transaction.atomic():
            policy = PolicyConfig.load()
            cls._check_allowed(policy, warehouse)
            result = cls._adjust(warehouse, equipment_type, new_quantity, policy, responsible, reason.strip())
            if result is None:
                raise BusinessError('Nova quantidade é igual ao saldo atual')

        logger.info(
            f"Ajuste direto {equipment_type.code} @ {warehouse.code}: "
            f"{result.previous_balance} -> {result.new_balance}"
        )
        return result

    @classmethod
    def inventory_count(cls, warehouse, counts, responsible=None, reason='Inventário') -> dict:
        """
        Applies a physical count {equipment_type: counted_quantity} in one
        transaction. Items whose count matches the balance are skipped.
        """
        if not counts:
            raise BusinessError('Contagem de inventário vazia')
        for counted in counts.values():
            cls._validate_quantity(counted)

        adjustments = []
        with transaction.atomic():
            policy = PolicyConfig.load()
            cls._check_allowed(policy, warehouse)
            for equipment_type in sorted(counts, key=lambda et: et.pk):
                result = cls._adjust(
                    warehouse, equipment_type, counts[equipment_type], policy, responsible, reason
                )
                if result is not None:
                    adjustments.append(result)

        summary = {
            'adjustments': adjustments,
            'total_items': len(counts),
            'total_adjusted': len(adjustments),
            'total_difference': sum(a.difference for a in adjustments),
        }
        logger.info(
            f"Inventário {warehouse.code}: {summary['total_adjusted']}/{summary['total_items']} itens ajustados"
        )
        return summary
