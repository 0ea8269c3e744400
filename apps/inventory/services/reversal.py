"""
ReversalEngine: compensating movements (estornos).
"""
import logging

from django.db import transaction

from apps.core.exceptions import BusinessError, NotFoundError
from apps.core.services import PolicyConfig
from apps.inventory.models import REVERSAL_TYPES, StockMovement
from apps.inventory.services.ledger import StockLedger

logger = logging.getLogger(__name__)


class ReversalEngine:
    @staticmethod
    def reversal_type_for(movement):
        if movement.is_reversal or movement.movement_type not in REVERSAL_TYPES:
            raise BusinessError(f'Movimentação {movement.pk} não pode ser estornada')
        return REVERSAL_TYPES[movement.movement_type]

    @classmethod
    @transaction.atomic
    def reverse(cls, movement, *, policy, responsible=None, reason='') -> StockMovement:
        """
        Creates the estorno of `movement` on the same stock item.
        The original record is never touched.
        """
        reversal_type = cls.reversal_type_for(movement)
        reversal = StockLedger.apply_to_item(
            movement.stock_item,
            movement_type=reversal_type,
            quantity=movement.quantity,
            policy=policy,
            responsible=responsible,
            note=movement.note,
            delivery=movement.delivery,
            origin_movement=movement,
            reason=reason or f'Estorno de {movement.get_movement_type_display()}',
        )
        logger.debug(f"Estorno {reversal.pk} gerado para movimentação {movement.pk}")
        return reversal

    @classmethod
    def reverse_direct(cls, movement_id, responsible=None, reason='') -> StockMovement:
        """
        Reverses a movement that belongs to no note or delivery,
        e.g. a direct adjustment.
        """
        if not reason or not reason.strip():
            raise BusinessError('Motivo do estorno é obrigatório')

        with transaction.atomic():
            policy = PolicyConfig.load()
            movement = StockMovement.objects.select_related('stock_item').filter(pk=movement_id).first()
            if movement is None:
                raise NotFoundError('Movimentação', movement_id)
            if movement.note_id is not None:
                raise BusinessError('Movimentações de nota devem ser estornadas pelo cancelamento da nota')
            if movement.delivery_id is not None:
                raise BusinessError('Movimentações de entrega devem ser estornadas pelo cancelamento da entrega')

            reversal = cls.reverse(movement, policy=policy, responsible=responsible, reason=reason.strip())

        logger.info(f"Movimentação {movement.pk} estornada diretamente ({reversal.movement_type})")
        return reversal
