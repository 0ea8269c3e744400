import pytest
from django.utils import timezone

from apps.core.exceptions import BusinessError, ConflictError, InsufficientStockError, NotFoundError
from apps.inventory.models import (
    MovementNote,
    MovementType,
    NoteItem,
    NoteStatus,
    NoteType,
    StockMovement,
    StockStatus,
)
from apps.inventory.services import MovementNoteService, StockLedger
from tests.factories import (
    EquipmentTypeFactory,
    MovementNoteFactory,
    NoteItemFactory,
    WarehouseFactory,
)


@pytest.mark.django_db
class TestDraftManagement:
    def test_numbering_is_sequential_per_type(self, user, warehouse, other_warehouse):
        year = timezone.localdate().year

        first = MovementNoteService.create_note(NoteType.ENTRADA, user, destination=warehouse)
        second = MovementNoteService.create_note(NoteType.ENTRADA, user, destination=warehouse)
        transfer = MovementNoteService.create_note(
            NoteType.TRANSFERENCIA, user, origin=warehouse, destination=other_warehouse
        )

        assert first.number == f'ENT-{year}-000001'
        assert second.number == f'ENT-{year}-000002'
        assert transfer.number == f'TRF-{year}-000001'
        assert first.status == NoteStatus.RASCUNHO

    def test_create_validates_warehouses_for_type(self, user, warehouse):
        with pytest.raises(BusinessError, match='origem'):
            MovementNoteService.create_note(NoteType.ENTRADA, user, origin=warehouse, destination=warehouse)
        with pytest.raises(BusinessError, match='diferentes'):
            MovementNoteService.create_note(NoteType.TRANSFERENCIA, user, origin=warehouse, destination=warehouse)
        with pytest.raises(BusinessError, match='inválido'):
            MovementNoteService.create_note('SAIDA', user, origin=warehouse)

    def test_create_rejects_inactive_warehouse(self, user):
        inactive = WarehouseFactory(is_active=False)
        with pytest.raises(BusinessError, match='inativo'):
            MovementNoteService.create_note(NoteType.ENTRADA, user, destination=inactive)

    def test_item_lifecycle_in_draft(self, user, warehouse, equipment_type):
        note = MovementNoteService.create_note(NoteType.ENTRADA, user, destination=warehouse)

        item = MovementNoteService.add_item(note.pk, equipment_type, 5)
        MovementNoteService.update_item_quantity(note.pk, item.pk, 8)
        MovementNoteService.update_notes(note.pk, 'NF 1234')

        item.refresh_from_db()
        note.refresh_from_db()
        assert item.quantity == 8
        assert note.notes == 'NF 1234'

        MovementNoteService.remove_item(note.pk, item.pk)
        assert not note.items.exists()

    def test_add_item_rules(self, user, warehouse, equipment_type):
        note = MovementNoteService.create_note(NoteType.ENTRADA, user, destination=warehouse)
        MovementNoteService.add_item(note.pk, equipment_type, 5)

        with pytest.raises(BusinessError, match='já está na nota'):
            MovementNoteService.add_item(note.pk, equipment_type, 1)
        with pytest.raises(BusinessError, match='positiva'):
            MovementNoteService.add_item(note.pk, EquipmentTypeFactory(), 0)
        with pytest.raises(BusinessError, match='inativo'):
            MovementNoteService.add_item(note.pk, EquipmentTypeFactory(is_active=False), 1)

    def test_remove_item_from_other_note(self, user, warehouse, equipment_type):
        note_a = MovementNoteService.create_note(NoteType.ENTRADA, user, destination=warehouse)
        note_b = MovementNoteService.create_note(NoteType.ENTRADA, user, destination=warehouse)
        item = MovementNoteService.add_item(note_a.pk, equipment_type, 5)

        with pytest.raises(BusinessError, match='não encontrado'):
            MovementNoteService.remove_item(note_b.pk, item.pk)

    def test_draft_operations_rejected_after_conclusion(self, user, warehouse, equipment_type):
        note = MovementNoteService.create_note(NoteType.ENTRADA, user, destination=warehouse)
        item = MovementNoteService.add_item(note.pk, equipment_type, 5)
        MovementNoteService.conclude(note.pk, user)

        with pytest.raises(BusinessError, match='modo de edição'):
            MovementNoteService.add_item(note.pk, EquipmentTypeFactory(), 1)
        with pytest.raises(BusinessError, match='modo de edição'):
            MovementNoteService.remove_item(note.pk, item.pk)
        with pytest.raises(BusinessError, match='modo de edição'):
            MovementNoteService.update_item_quantity(note.pk, item.pk, 2)
        with pytest.raises(BusinessError, match='rascunho'):
            MovementNoteService.delete_draft(note.pk)

    def test_delete_draft(self, user, warehouse, equipment_type):
        note = MovementNoteService.create_note(NoteType.ENTRADA, user, destination=warehouse)
        MovementNoteService.add_item(note.pk, equipment_type, 5)

        MovementNoteService.delete_draft(note.pk)

        assert not MovementNote.objects.exists()


@pytest.mark.django_db
class TestConcludeNote:
    def test_entrada_increases_available_balance(self, user, warehouse, equipment_type):
        """Scenario: ENTRADA of 50 -> +50 and one ENTRADA_NOTA record"""
        note = MovementNoteService.create_note(NoteType.ENTRADA, user, destination=warehouse)
        MovementNoteService.add_item(note.pk, equipment_type, 50)

        result = MovementNoteService.conclude(note.pk, user)

        assert result.note.status == NoteStatus.CONCLUIDA
        assert result.note.concluded_at is not None
        assert len(result.movements) == 1
        assert result.movements[0].movement_type == MovementType.ENTRADA_NOTA
        assert result.movements[0].quantity == 50
        assert StockLedger.current_balance(warehouse, equipment_type) == 50
        assert [i.processed_quantity for i in result.items_processed] == [50]

    def test_transfer_conserves_total(self, user, warehouse, other_warehouse, equipment_type, stock_in):
        """Scenario: transfer 10 from a balance of 100"""
        stock_in(warehouse, equipment_type, 100)
        note = MovementNoteService.create_note(
            NoteType.TRANSFERENCIA, user, origin=warehouse, destination=other_warehouse
        )
        MovementNoteService.add_item(note.pk, equipment_type, 10)

        result = MovementNoteService.conclude(note.pk, user)

        assert StockLedger.current_balance(warehouse, equipment_type) == 90
        assert StockLedger.current_balance(other_warehouse, equipment_type) == 10
        assert sorted(m.movement_type for m in result.movements) == [
            MovementType.ENTRADA_TRANSFERENCIA,
            MovementType.SAIDA_TRANSFERENCIA,
        ]
        assert {m.quantity for m in result.movements} == {10}

    def test_exit_over_balance_fails(self, user, warehouse, equipment_type, stock_in):
        """Scenario: outgoing note above the available balance"""
        stock_in(warehouse, equipment_type, 5)
        note = MovementNoteService.create_note(NoteType.DESCARTE, user, origin=warehouse)
        MovementNoteService.add_item(note.pk, equipment_type, 6)

        with pytest.raises(InsufficientStockError) as exc_info:
            MovementNoteService.conclude(note.pk, user)

        assert exc_info.value.required == 6
        assert exc_info.value.available == 5
        note.refresh_from_db()
        assert note.status == NoteStatus.RASCUNHO
        assert StockLedger.current_balance(warehouse, equipment_type) == 5

    def test_negative_adjustment(self, user, warehouse, equipment_type, stock_in, forced_adjustments):
        """Scenario: ENTRADA_AJUSTE of -20 on a balance of 100"""
        stock_in(warehouse, equipment_type, 100)
        note = MovementNoteService.create_note(NoteType.ENTRADA_AJUSTE, user, destination=warehouse)
        MovementNoteService.add_item(note.pk, equipment_type, -20)

        result = MovementNoteService.conclude(note.pk, user)

        (movement,) = result.movements
        assert movement.movement_type == MovementType.AJUSTE_NEGATIVO
        assert movement.quantity == 20
        assert movement.balance_after == 80
        assert result.items_processed[0].processed_quantity == -20

    def test_adjustment_notes_require_forced_adjustments(self, user, warehouse, equipment_type, stock_in):
        stock_in(warehouse, equipment_type, 10)
        note = MovementNoteService.create_note(NoteType.SAIDA_AJUSTE, user, origin=warehouse)
        MovementNoteService.add_item(note.pk, equipment_type, 3)

        with pytest.raises(BusinessError, match='Ajustes forçados'):
            MovementNoteService.conclude(note.pk, user)

    def test_saida_ajuste(self, user, warehouse, equipment_type, stock_in, forced_adjustments):
        stock_in(warehouse, equipment_type, 10)
        note = MovementNoteService.create_note(NoteType.SAIDA_AJUSTE, user, origin=warehouse)
        MovementNoteService.add_item(note.pk, equipment_type, 3)

        (movement,) = MovementNoteService.conclude(note.pk, user).movements

        assert movement.movement_type == MovementType.AJUSTE_NEGATIVO
        assert StockLedger.current_balance(warehouse, equipment_type) == 7

    def test_mid_batch_failure_rolls_back_previous_items(self, user, warehouse, stock_in):
        first_type = EquipmentTypeFactory()
        second_type = EquipmentTypeFactory()
        stock_in(warehouse, first_type, 10)
        stock_in(warehouse, second_type, 1)
        note = MovementNoteService.create_note(NoteType.DESCARTE, user, origin=warehouse)
        MovementNoteService.add_item(note.pk, first_type, 4)
        MovementNoteService.add_item(note.pk, second_type, 3)

        with pytest.raises(InsufficientStockError):
            MovementNoteService.conclude(note.pk, user)

        assert StockLedger.current_balance(warehouse, first_type) == 10
        assert StockLedger.current_balance(warehouse, second_type) == 1
        assert not StockMovement.objects.for_note(note).exists()
        assert not note.items.filter(processed_quantity__gt=0).exists()

    def test_conclude_requires_items_and_draft(self, user, warehouse, equipment_type):
        note = MovementNoteService.create_note(NoteType.ENTRADA, user, destination=warehouse)

        with pytest.raises(BusinessError, match='não possui itens'):
            MovementNoteService.conclude(note.pk, user)

        MovementNoteService.add_item(note.pk, equipment_type, 1)
        MovementNoteService.conclude(note.pk, user)
        with pytest.raises(BusinessError, match='não está em rascunho'):
            MovementNoteService.conclude(note.pk, user)

    def test_conclude_unknown_note(self):
        with pytest.raises(NotFoundError):
            MovementNoteService.conclude(987654)


@pytest.mark.django_db
class TestCancelNote:
    def test_cancel_draft_has_no_stock_effect(self, user, warehouse, equipment_type):
        note = MovementNoteService.create_note(NoteType.ENTRADA, user, destination=warehouse)
        MovementNoteService.add_item(note.pk, equipment_type, 5)

        result = MovementNoteService.cancel(note.pk, reason='Digitado errado')

        assert result.note.status == NoteStatus.CANCELADA
        assert result.note.cancel_reason == 'Digitado errado'
        assert result.estoque_ajustado is False
        assert result.estornos == []
        assert not StockMovement.objects.exists()

    def test_cancel_twice_fails(self, user, warehouse):
        note = MovementNoteService.create_note(NoteType.ENTRADA, user, destination=warehouse)
        MovementNoteService.cancel(note.pk)

        with pytest.raises(BusinessError, match='já está cancelada'):
            MovementNoteService.cancel(note.pk)

    def test_failed_reversal_keeps_note_concluded(self, user, warehouse, equipment_type):
        entry = MovementNoteService.create_note(NoteType.ENTRADA, user, destination=warehouse)
        MovementNoteService.add_item(entry.pk, equipment_type, 50)
        MovementNoteService.conclude(entry.pk, user)

        discard = MovementNoteService.create_note(NoteType.DESCARTE, user, origin=warehouse)
        MovementNoteService.add_item(discard.pk, equipment_type, 30)
        MovementNoteService.conclude(discard.pk, user)

        check = MovementNoteService.cancellation_check(entry.pk)
        assert check['can_cancel'] is False
        assert check['requires_reversal'] is True

        with pytest.raises(InsufficientStockError):
            MovementNoteService.cancel(entry.pk, reason='Nota duplicada')

        entry.refresh_from_db()
        assert entry.status == NoteStatus.CONCLUIDA
        assert StockLedger.current_balance(warehouse, equipment_type) == 20


@pytest.mark.django_db
class TestCancellationCheck:
    def test_unknown_note(self):
        check = MovementNoteService.cancellation_check(123456)
        assert check['can_cancel'] is False
        assert check['reason'] == 'Nota não encontrada'

    def test_draft_needs_no_reversal(self, user, warehouse):
        note = MovementNoteService.create_note(NoteType.ENTRADA, user, destination=warehouse)
        check = MovementNoteService.cancellation_check(note.pk)
        assert check == {
            'can_cancel': True,
            'reason': None,
            'requires_reversal': False,
            'affected_movements': 0,
        }

    def test_concluded_transfer_reports_affected_movements(self, user, warehouse, other_warehouse, equipment_type, stock_in):
        stock_in(warehouse, equipment_type, 20)
        note = MovementNoteService.create_note(
            NoteType.TRANSFERENCIA, user, origin=warehouse, destination=other_warehouse
        )
        MovementNoteService.add_item(note.pk, equipment_type, 5)
        MovementNoteService.conclude(note.pk, user)

        check = MovementNoteService.cancellation_check(note.pk)

        assert check['can_cancel'] is True
        assert check['requires_reversal'] is True
        assert check['affected_movements'] == 2

    def test_cancelled_note(self, user, warehouse):
        note = MovementNoteService.create_note(NoteType.ENTRADA, user, destination=warehouse)
        MovementNoteService.cancel(note.pk)
        assert MovementNoteService.cancellation_check(note.pk)['can_cancel'] is False


@pytest.mark.django_db
class TestNoteItemFreeze:
    def test_items_cannot_change_after_draft(self):
        item = NoteItemFactory(quantity=5)
        MovementNote.objects.filter(pk=item.note_id).update(status=NoteStatus.CONCLUIDA)

        item.quantity = 999
        with pytest.raises(BusinessError, match='modo de edição'):
            item.save()
        with pytest.raises(BusinessError, match='modo de edição'):
            item.delete()

        assert NoteItem.objects.get(pk=item.pk).quantity == 5

    def test_items_cannot_be_added_to_cancelled_note(self, equipment_type):
        note = MovementNoteFactory(status=NoteStatus.CANCELADA)

        with pytest.raises(BusinessError, match='modo de edição'):
            NoteItem.objects.create(note=note, equipment_type=equipment_type, quantity=1)

        assert not note.items.exists()


@pytest.mark.django_db
class TestNoteNumberingClash:
    def test_taken_number_is_retried(self, user, warehouse, monkeypatch):
        year = timezone.localdate().year
        first = MovementNoteService.create_note(NoteType.ENTRADA, user, destination=warehouse)
        real_next_number = MovementNoteService.next_number
        stale = [first.number]

        def next_number(note_type):
            # First answer is the number another request already used
            return stale.pop() if stale else real_next_number(note_type)

        monkeypatch.setattr(MovementNoteService, 'next_number', staticmethod(next_number))

        second = MovementNoteService.create_note(NoteType.ENTRADA, user, destination=warehouse)

        assert second.number == f'ENT-{year}-000002'
        assert MovementNote.objects.count() == 2

    def test_gives_up_with_conflict(self, user, warehouse, monkeypatch):
        first = MovementNoteService.create_note(NoteType.ENTRADA, user, destination=warehouse)
        monkeypatch.setattr(MovementNoteService, 'next_number', staticmethod(lambda note_type: first.number))

        with pytest.raises(ConflictError):
            MovementNoteService.create_note(NoteType.ENTRADA, user, destination=warehouse)

        assert MovementNote.objects.count() == 1


@pytest.mark.django_db
class TestLockOrder:
    def test_transfer_locks_rows_in_warehouse_order(self, user, equipment_type, stock_in, monkeypatch):
        destination = WarehouseFactory()
        origin = WarehouseFactory()
        assert destination.pk < origin.pk
        stock_in(origin, equipment_type, 10)

        locked = []
        real_lock_item = StockLedger.lock_item

        def lock_item(warehouse, equipment_type, status=StockStatus.DISPONIVEL):
            locked.append(warehouse.pk)
            return real_lock_item(warehouse, equipment_type, status)

        monkeypatch.setattr(StockLedger, 'lock_item', staticmethod(lock_item))

        note = MovementNoteService.create_note(
            NoteType.TRANSFERENCIA, user, origin=origin, destination=destination
        )
        MovementNoteService.add_item(note.pk, equipment_type, 4)
        MovementNoteService.conclude(note.pk, user)

        # Both rows are locked lowest pk first, before origin is debited
        assert locked[:2] == [destination.pk, origin.pk]
        assert StockLedger.current_balance(origin, equipment_type) == 6
        assert StockLedger.current_balance(destination, equipment_type) == 4
