import pytest

from apps.core.exceptions import BusinessError
from apps.core.models import ConfigKey, SystemConfiguration
from apps.inventory.models import MovementType, StockMovement
from apps.inventory.services import AdjustmentService, StockLedger
from tests.factories import EquipmentTypeFactory, WarehouseFactory


@pytest.mark.django_db
class TestDirectAdjustment:
    def test_requires_forced_adjustments_flag(self, user, warehouse, equipment_type, stock_in):
        stock_in(warehouse, equipment_type, 10)

        with pytest.raises(BusinessError, match='Ajustes forçados'):
            AdjustmentService.direct_adjustment(warehouse, equipment_type, 4, user, 'Contagem')

        assert StockLedger.current_balance(warehouse, equipment_type) == 10

    def test_flag_from_database(self, user, warehouse, equipment_type, stock_in):
        SystemConfiguration.set_flag(ConfigKey.PERMITIR_AJUSTES_FORCADOS, True)
        stock_in(warehouse, equipment_type, 10)

        result = AdjustmentService.direct_adjustment(warehouse, equipment_type, 12, user, 'Sobra')

        assert result.movement.movement_type == MovementType.AJUSTE_POSITIVO
        assert result.movement.quantity == 2
        assert result.movement.note is None

    def test_negative_difference(self, user, warehouse, equipment_type, stock_in, forced_adjustments):
        stock_in(warehouse, equipment_type, 10)

        result = AdjustmentService.direct_adjustment(warehouse, equipment_type, 4, user, 'Perda')

        assert result.previous_balance == 10
        assert result.new_balance == 4
        assert result.difference == -6
        assert result.movement.movement_type == MovementType.AJUSTE_NEGATIVO
        assert result.movement.quantity == 6

    def test_adjustment_on_empty_stock_creates_item(self, user, warehouse, equipment_type, forced_adjustments):
        result = AdjustmentService.direct_adjustment(warehouse, equipment_type, 7, user, 'Implantação')
        assert result.previous_balance == 0
        assert StockLedger.current_balance(warehouse, equipment_type) == 7

    @pytest.mark.parametrize('new_quantity, reason, message', [
        (10, 'Contagem', 'igual ao saldo'),
        (-1, 'Contagem', 'maior ou igual a zero'),
        (5, '', 'Motivo'),
    ])
    def test_validation(self, user, warehouse, equipment_type, stock_in, forced_adjustments,
                        new_quantity, reason, message):
        stock_in(warehouse, equipment_type, 10)

        with pytest.raises(BusinessError, match=message):
            AdjustmentService.direct_adjustment(warehouse, equipment_type, new_quantity, user, reason)

    def test_inactive_warehouse(self, user, equipment_type, forced_adjustments):
        inactive = WarehouseFactory(is_active=False)
        with pytest.raises(BusinessError, match='inativo'):
            AdjustmentService.direct_adjustment(inactive, equipment_type, 3, user, 'Contagem')


@pytest.mark.django_db
class TestInventoryCount:
    def test_applies_only_differences(self, user, warehouse, stock_in, forced_adjustments):
        gloves = EquipmentTypeFactory(code='LUVA')
        boots = EquipmentTypeFactory(code='BOTA')
        helmets = EquipmentTypeFactory(code='CAPACETE')
        stock_in(warehouse, gloves, 10)
        stock_in(warehouse, boots, 5)

        summary = AdjustmentService.inventory_count(
            warehouse, {gloves: 8, boots: 5, helmets: 2}, responsible=user
        )

        assert summary['total_items'] == 3
        assert summary['total_adjusted'] == 2
        assert summary['total_difference'] == 0
        assert StockLedger.current_balance(warehouse, gloves) == 8
        assert StockLedger.current_balance(warehouse, boots) == 5
        assert StockLedger.current_balance(warehouse, helmets) == 2

    def test_invalid_count_aborts_whole_batch(self, user, warehouse, stock_in, forced_adjustments):
        gloves = EquipmentTypeFactory()
        boots = EquipmentTypeFactory()
        stock_in(warehouse, gloves, 10)

        with pytest.raises(BusinessError):
            AdjustmentService.inventory_count(warehouse, {gloves: 3, boots: -1}, responsible=user)

        assert StockLedger.current_balance(warehouse, gloves) == 10
        assert not StockMovement.objects.filter(movement_type=MovementType.AJUSTE_NEGATIVO).exists()

    def test_empty_count(self, warehouse, forced_adjustments):
        with pytest.raises(BusinessError, match='vazia'):
            AdjustmentService.inventory_count(warehouse, {})
