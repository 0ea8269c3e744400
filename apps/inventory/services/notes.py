"""
MovementNoteService: draft management and the note state machine
(RASCUNHO -> CONCLUIDA -> CANCELADA, RASCUNHO -> CANCELADA).
"""
import logging
from collections import defaultdict
from dataclasses import dataclass, field
from typing import List

from django.db import IntegrityError, transaction
from django.utils import timezone

from apps.core.exceptions import BusinessError, ConflictError, NotFoundError
from apps.core.services import PolicyConfig
from apps.inventory.models import (
    NOTE_NOT_EDITABLE,
    NOTE_NUMBER_PREFIX,
    REVERSAL_TYPES,
    MovementNote,
    NoteItem,
    NoteStatus,
    NoteType,
    StockItem,
    StockMovement,
    StockStatus,
    signed_delta,
)
from apps.inventory.services.ledger import StockLedger
from apps.inventory.services.movements import (
    ORIGIN,
    plan_movements,
    validate_item_quantity,
    validate_warehouses,
)
from apps.inventory.services.reversal import ReversalEngine

logger = logging.getLogger(__name__)

NUMBERING_ATTEMPTS = 3


@dataclass
class ConcludeResult:
    note: MovementNote
    movements: List[StockMovement] = field(default_factory=list)
    items_processed: List[NoteItem] = field(default_factory=list)


@dataclass
class ReversalRecord:
    original_movement_id: object
    reversal_movement_id: object
    stock_item_id: int
    equipment_type_id: int
    quantity: int


@dataclass
class CancelResult:
    note: MovementNote
    estoque_ajustado: bool = False
    estornos: List[ReversalRecord] = field(default_factory=list)


class MovementNoteService:

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    @staticmethod
    def get_note(note_id, lock=False) -> MovementNote:
        if lock:
            qs = MovementNote.objects.select_for_update()
        else:
            qs = MovementNote.objects.select_related('origin_warehouse', 'destination_warehouse')
        note = qs.filter(pk=note_id).first()
        if note is None:
            raise NotFoundError('Nota de movimentação', note_id)
        return note

    @classmethod
    def _get_editable(cls, note_id) -> MovementNote:
        note = cls.get_note(note_id, lock=True)
        if not note.is_draft:
            raise BusinessError(NOTE_NOT_EDITABLE)
        return note

    @staticmethod
    def _get_item(note, item_id) -> NoteItem:
        item = note.items.select_related('equipment_type').filter(pk=item_id).first()
        if item is None:
            raise BusinessError('Item não encontrado na nota')
        return item

    @staticmethod
    def next_number(note_type) -> str:
        """<PREFIX>-<YEAR>-<NNNNNN>, sequential per type and year."""
        prefix = NOTE_NUMBER_PREFIX[note_type]
        base = f'{prefix}-{timezone.localdate().year}-'
        last = (
            MovementNote.objects.filter(number__startswith=base)
            .order_by('-number')
            .values_list('number', flat=True)
            .first()
        )
        sequence = int(last.rsplit('-', 1)[1]) + 1 if last else 1
        return f'{base}{sequence:06d}'

    @staticmethod
    def _warehouse_for(note, step):
        return note.origin_warehouse if step.side == ORIGIN else note.destination_warehouse

    @staticmethod
    def _check_active(origin, destination):
        if origin is not None and not origin.is_active:
            raise BusinessError(f'Almoxarifado de origem {origin.code} está inativo')
        if destination is not None and not destination.is_active:
            raise BusinessError(f'Almoxarifado de destino {destination.code} está inativo')

    # ------------------------------------------------------------------
    # Draft management
    # ------------------------------------------------------------------

    @classmethod
    @transaction.atomic
    def create_note(cls, note_type, responsible=None, origin=None, destination=None, notes='') -> MovementNote:
        if note_type not in NoteType.values:
            raise BusinessError(f'Tipo de nota inválido: {note_type}')
        validate_warehouses(note_type, origin, destination)
        cls._check_active(origin, destination)

        for attempt in range(1, NUMBERING_ATTEMPTS + 1):
            number = cls.next_number(note_type)
            try:
                with transaction.atomic():
                    note = MovementNote.objects.create(
                        number=number,
                        note_type=note_type,
                        origin_warehouse=origin,
                        destination_warehouse=destination,
                        responsible=responsible,
                        notes=notes or '',
                    )
                break
            except IntegrityError:
                # Another note took this number concurrently
                logger.warning(f"Número {number} já utilizado (tentativa {attempt})")
        else:
            raise ConflictError(f'Não foi possível numerar a nota {note_type}, tente novamente')

        logger.info(f"Nota {note.number} criada em rascunho ({note.note_type})")
        return note

    @classmethod
    @transaction.atomic
    def add_item(cls, note_id, equipment_type, quantity, notes='') -> NoteItem:
        note = cls._get_editable(note_id)
        if not equipment_type.is_active:
            raise BusinessError(f'Tipo de EPI {equipment_type.code} está inativo')
        validate_item_quantity(note.note_type, quantity)
        if note.items.filter(equipment_type=equipment_type).exists():
            raise BusinessError(f'Tipo de EPI {equipment_type.code} já está na nota')
        return NoteItem.objects.create(
            note=note,
            equipment_type=equipment_type,
            quantity=quantity,
            notes=notes or '',
        )

    @classmethod
    @transaction.atomic
    def update_item_quantity(cls, note_id, item_id, quantity) -> NoteItem:
        note = cls._get_editable(note_id)
        item = cls._get_item(note, item_id)
        validate_item_quantity(note.note_type, quantity)
        item.quantity = quantity
        item.save(update_fields=['quantity'])
        return item

    @classmethod
    @transaction.atomic
    def remove_item(cls, note_id, item_id):
        note = cls._get_editable(note_id)
        cls._get_item(note, item_id).delete()

    @classmethod
    @transaction.atomic
    def update_notes(cls, note_id, notes) -> MovementNote:
        note = cls._get_editable(note_id)
        note.notes = notes or ''
        note.save(update_fields=['notes', 'updated_at'])
        return note

    @classmethod
    @transaction.atomic
    def delete_draft(cls, note_id):
        note = cls.get_note(note_id, lock=True)
        if not note.is_draft:
            raise BusinessError('Apenas notas em rascunho podem ser excluídas')
        number = note.number
        note.delete()
        logger.info(f"Rascunho {number} excluído")

    # ------------------------------------------------------------------
    # State transitions
    # ------------------------------------------------------------------

    @classmethod
    def conclude(cls, note_id, responsible=None) -> ConcludeResult:
        """
        Applies every item of the note to the ledger and flips it to
        CONCLUIDA. Any failure rolls back the whole note.
        """
        with transaction.atomic():
            policy = PolicyConfig.load()
            note = cls.get_note(note_id, lock=True)
            if not note.is_draft:
                raise BusinessError('Nota não está em rascunho')

            items = list(note.items.select_related('equipment_type').order_by('equipment_type_id'))
            if not items:
                raise BusinessError('Nota não possui itens')

            validate_warehouses(note.note_type, note.origin_warehouse, note.destination_warehouse)
            cls._check_active(note.origin_warehouse, note.destination_warehouse)
            if note.is_adjustment and not policy.allow_forced_adjustments:
                raise BusinessError('Ajustes forçados não estão habilitados')

            plans = [(item, plan_movements(note.note_type, item.quantity)) for item in items]
            StockLedger.lock_items(
                (cls._warehouse_for(note, step), item.equipment_type, StockStatus.DISPONIVEL)
                for item, planned in plans
                for step in planned
            )

            result = ConcludeResult(note=note)
            for item, planned in plans:
                for step in planned:
                    result.movements.append(StockLedger.apply(
                        warehouse=cls._warehouse_for(note, step),
                        equipment_type=item.equipment_type,
                        movement_type=step.movement_type,
                        quantity=step.quantity,
                        policy=policy,
                        responsible=responsible or note.responsible,
                        note=note,
                        reason=f'Nota {note.number}',
                    ))
                item.processed_quantity = item.quantity
                item.save(update_fields=['processed_quantity'])
                result.items_processed.append(item)

            note.status = NoteStatus.CONCLUIDA
            note.concluded_at = timezone.now()
            note.save(update_fields=['status', 'concluded_at', 'updated_at'])

        logger.info(
            f"Nota {note.number} concluída: {len(result.items_processed)} itens, "
            f"{len(result.movements)} movimentações"
        )
        return result

    @classmethod
    def cancel(cls, note_id, reason='', responsible=None) -> CancelResult:
        """
        Drafts are cancelled without stock effect. Concluded notes get one
        estorno per movement they produced.
        """
        with transaction.atomic():
            policy = PolicyConfig.load()
            note = cls.get_note(note_id, lock=True)
            if note.is_cancelled:
                raise BusinessError('Nota já está cancelada')

            result = CancelResult(note=note)
            if note.is_concluded:
                originals = list(
                    note.movements.originals()
                    .select_related('stock_item')
                    .order_by('created_at')
                )
                if not originals:
                    raise BusinessError('Nota não possui movimentações para estornar')
                list(
                    StockItem.objects.select_for_update()
                    .filter(pk__in={m.stock_item_id for m in originals})
                    .order_by('warehouse_id', 'equipment_type_id', 'status')
                )

                estorno_reason = f"Estorno por cancelamento da nota {note.number}. Motivo: {reason or 'Não informado'}"
                for movement in originals:
                    reversal = ReversalEngine.reverse(
                        movement,
                        policy=policy,
                        responsible=responsible or note.responsible,
                        reason=estorno_reason[:255],
                    )
                    result.estornos.append(ReversalRecord(
                        original_movement_id=movement.pk,
                        reversal_movement_id=reversal.pk,
                        stock_item_id=movement.stock_item_id,
                        equipment_type_id=movement.stock_item.equipment_type_id,
                        quantity=movement.quantity,
                    ))
                result.estoque_ajustado = bool(result.estornos)

            note.status = NoteStatus.CANCELADA
            note.cancelled_at = timezone.now()
            note.cancel_reason = reason or ''
            note.save(update_fields=['status', 'cancelled_at', 'cancel_reason', 'updated_at'])

        logger.info(f"Nota {note.number} cancelada ({len(result.estornos)} estornos)")
        return result

    @staticmethod
    def cancellation_check(note_id) -> dict:
        """Read-only preview of cancel()."""
        note = MovementNote.objects.filter(pk=note_id).first()
        if note is None:
            return {
                'can_cancel': False,
                'reason': 'Nota não encontrada',
                'requires_reversal': False,
                'affected_movements': 0,
            }
        if note.is_cancelled:
            return {
                'can_cancel': False,
                'reason': 'Nota já está cancelada',
                'requires_reversal': False,
                'affected_movements': 0,
            }

        movements = list(note.movements.originals().select_related('stock_item'))
        requires_reversal = note.is_concluded and bool(movements)
        check = {
            'can_cancel': True,
            'reason': None,
            'requires_reversal': requires_reversal,
            'affected_movements': len(movements) if requires_reversal else 0,
        }
        if not requires_reversal:
            return check

        if any(m.is_reversal or m.movement_type not in REVERSAL_TYPES for m in movements):
            check.update(can_cancel=False, reason='Nota possui movimentações que não podem ser estornadas')
            return check

        if not PolicyConfig.load().allow_negative_stock:
            deltas = defaultdict(int)
            items = {}
            for m in movements:
                deltas[m.stock_item_id] += signed_delta(REVERSAL_TYPES[m.movement_type], m.quantity)
                items[m.stock_item_id] = m.stock_item
            for stock_item_id, delta in deltas.items():
                if items[stock_item_id].balance + delta < 0:
                    check.update(
                        can_cancel=False,
                        reason=f'Estoque insuficiente para estornar (item de estoque {stock_item_id})',
                    )
                    return check
        return check
