import pytest
from rest_framework.test import APIClient

from apps.core.services import PolicyConfig
from apps.inventory.models import MovementType, StockStatus
from apps.inventory.services.ledger import StockLedger
from tests.factories import EquipmentTypeFactory, UserFactory, WarehouseFactory


@pytest.fixture
def client():
    return APIClient()

@pytest.fixture
def user():
    return UserFactory()

@pytest.fixture
def auth_client(client, user):
    client.force_authenticate(user=user)
    return client

@pytest.fixture
def warehouse():
    return WarehouseFactory()

@pytest.fixture
def other_warehouse():
    return WarehouseFactory()

@pytest.fixture
def equipment_type():
    return EquipmentTypeFactory(useful_life_days=180)

@pytest.fixture
def strict_policy():
    return PolicyConfig(allow_negative_stock=False, allow_forced_adjustments=False)

@pytest.fixture
def forced_adjustments(settings):
    settings.PERMITIR_AJUSTES_FORCADOS = True

@pytest.fixture
def negative_stock(settings):
    settings.PERMITIR_ESTOQUE_NEGATIVO = True

@pytest.fixture
def stock_in(user):
    """Puts `quantity` units into a warehouse through the ledger."""
    def _stock_in(warehouse, equipment_type, quantity, status=StockStatus.DISPONIVEL):
        return StockLedger.apply(
            warehouse=warehouse,
            equipment_type=equipment_type,
            status=status,
            movement_type=MovementType.ENTRADA_NOTA,
            quantity=quantity,
            policy=PolicyConfig(),
            responsible=user,
            reason='Saldo inicial',
        )
    return _stock_in
