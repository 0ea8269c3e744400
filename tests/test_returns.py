from datetime import date, timedelta

import pytest

from apps.core.exceptions import BusinessError, NotFoundError
from apps.deliveries.models import DeliveryItemStatus
from apps.deliveries.services import DeliveryService, ReturnService
from apps.inventory.models import MovementType, StockMovement, StockStatus
from apps.inventory.services import StockLedger
from tests.factories import EmployeeRecordFactory


@pytest.fixture
def signed(user, warehouse, equipment_type, stock_in):
    stock_in(warehouse, equipment_type, 10)
    delivery = DeliveryService.issue(
        EmployeeRecordFactory(), warehouse, [{'equipment_type': equipment_type, 'quantity': 2}], responsible=user
    )
    return DeliveryService.sign(delivery.pk, signature_ref='ok')


@pytest.mark.django_db
class TestProcessReturn:
    def test_overdue_return_goes_to_inspection(self, user, signed, warehouse, equipment_type):
        """Scenario: unit returned after its due date"""
        item = signed.items.first()
        after_due = item.return_due_date + timedelta(days=1)
        assert item.is_overdue(today=after_due)

        result = ReturnService.process_return(signed.pk, [item.pk], responsible=user, reason='Desgaste')

        item.refresh_from_db()
        assert item.status == DeliveryItemStatus.DEVOLVIDO
        assert item.returned_at is not None
        assert item.return_reason == 'Desgaste'
        assert item.is_overdue(today=after_due) is False

        (movement,) = result.movements
        assert movement.movement_type == MovementType.ENTRADA_DEVOLUCAO
        assert movement.quantity == 1
        assert movement.stock_item.status == StockStatus.AGUARDANDO_INSPECAO
        assert movement.delivery_id == signed.pk

        assert StockLedger.current_balance(warehouse, equipment_type, StockStatus.AGUARDANDO_INSPECAO) == 1
        assert StockLedger.current_balance(warehouse, equipment_type) == 8
        assert result.fully_returned is False

    def test_returning_every_unit_marks_fully_returned(self, signed):
        ids = list(signed.items.values_list('pk', flat=True))

        result = ReturnService.process_return(signed.pk, ids)

        assert result.fully_returned is True
        assert signed.is_fully_returned is True
        assert signed.has_pending_return(today=date(2100, 1, 1)) is False
        assert len(result.items_processed) == 2

    def test_unsigned_delivery_cannot_be_returned(self, user, warehouse, equipment_type, stock_in):
        stock_in(warehouse, equipment_type, 1)
        delivery = DeliveryService.issue(
            EmployeeRecordFactory(), warehouse, [{'equipment_type': equipment_type, 'quantity': 1}]
        )

        with pytest.raises(BusinessError, match='assinadas'):
            ReturnService.process_return(delivery.pk, [delivery.items.get().pk])

    def test_item_from_another_delivery(self, signed, user, warehouse, equipment_type):
        other = DeliveryService.issue(
            EmployeeRecordFactory(), warehouse, [{'equipment_type': equipment_type, 'quantity': 1}]
        )

        with pytest.raises(BusinessError, match='não pertence'):
            ReturnService.process_return(signed.pk, [other.items.get().pk])

    def test_already_returned(self, signed):
        item = signed.items.first()
        ReturnService.process_return(signed.pk, [item.pk])

        with pytest.raises(BusinessError, match='já foi devolvido'):
            ReturnService.process_return(signed.pk, [item.pk])

    def test_duplicate_and_empty_ids(self, signed):
        item = signed.items.first()
        with pytest.raises(BusinessError, match='repetido'):
            ReturnService.process_return(signed.pk, [item.pk, item.pk])
        with pytest.raises(BusinessError, match='ao menos um item'):
            ReturnService.process_return(signed.pk, [])

    def test_unknown_item(self, signed):
        with pytest.raises(NotFoundError):
            ReturnService.process_return(signed.pk, [999999])

    def test_invalid_item_rolls_back_whole_batch(self, signed, warehouse, equipment_type):
        first, second = signed.items.all()
        ReturnService.process_return(signed.pk, [second.pk])

        with pytest.raises(BusinessError):
            ReturnService.process_return(signed.pk, [first.pk, second.pk])

        first.refresh_from_db()
        assert first.status == DeliveryItemStatus.COM_COLABORADOR
        assert StockMovement.objects.filter(movement_type=MovementType.ENTRADA_DEVOLUCAO).count() == 1
        assert StockLedger.current_balance(warehouse, equipment_type, StockStatus.AGUARDANDO_INSPECAO) == 1
