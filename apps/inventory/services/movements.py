"""
Movement factory: maps a note item to the ledger entries it produces.
Pure functions, no database access.
"""
from dataclasses import dataclass
from typing import List

from apps.core.exceptions import BusinessError
from apps.inventory.models import MovementType, NoteType

ORIGIN = 'origin'
DESTINATION = 'destination'

# note type -> (requires origin, requires destination)
WAREHOUSE_RULES = {
    NoteType.ENTRADA: (False, True),
    NoteType.TRANSFERENCIA: (True, True),
    NoteType.DESCARTE: (True, False),
    NoteType.ENTRADA_AJUSTE: (False, True),
    NoteType.SAIDA_AJUSTE: (True, False),
}


@dataclass(frozen=True)
class PlannedMovement:
    movement_type: str
    quantity: int
    side: str


def validate_item_quantity(note_type, quantity) -> int:
    if isinstance(quantity, bool) or not isinstance(quantity, int):
        raise BusinessError('Quantidade deve ser um número inteiro')
    if note_type == NoteType.ENTRADA_AJUSTE:
        if quantity == 0:
            raise BusinessError('Quantidade do ajuste não pode ser zero')
    elif quantity <= 0:
        raise BusinessError('Quantidade deve ser positiva')
    return quantity


def validate_warehouses(note_type, origin, destination):
    """Checks the origin/destination combination allowed for the note type."""
    if note_type not in WAREHOUSE_RULES:
        raise BusinessError(f'Tipo de nota inválido: {note_type}')
    needs_origin, needs_destination = WAREHOUSE_RULES[note_type]

    if needs_origin and origin is None:
        raise BusinessError('Almoxarifado de origem é obrigatório para este tipo de nota')
    if not needs_origin and origin is not None:
        raise BusinessError('Este tipo de nota não aceita almoxarifado de origem')
    if needs_destination and destination is None:
        raise BusinessError('Almoxarifado de destino é obrigatório para este tipo de nota')
    if not needs_destination and destination is not None:
        raise BusinessError('Este tipo de nota não aceita almoxarifado de destino')
    if origin is not None and destination is not None and origin == destination:
        raise BusinessError('Almoxarifados de origem e destino devem ser diferentes')


def plan_movements(note_type, quantity) -> List[PlannedMovement]:
    """
    (note type, item quantity) -> ledger entries.
    Transfers produce a linked pair with the same magnitude.
    """
    quantity = validate_item_quantity(note_type, quantity)

    if note_type == NoteType.ENTRADA:
        return [PlannedMovement(MovementType.ENTRADA_NOTA, quantity, DESTINATION)]
    if note_type == NoteType.TRANSFERENCIA:
        return [
            PlannedMovement(MovementType.SAIDA_TRANSFERENCIA, quantity, ORIGIN),
            PlannedMovement(MovementType.ENTRADA_TRANSFERENCIA, quantity, DESTINATION),
        ]
    if note_type == NoteType.DESCARTE:
        return [PlannedMovement(MovementType.SAIDA_DESCARTE, quantity, ORIGIN)]
    if note_type == NoteType.ENTRADA_AJUSTE:
        movement_type = MovementType.AJUSTE_POSITIVO if quantity > 0 else MovementType.AJUSTE_NEGATIVO
        return [PlannedMovement(movement_type, abs(quantity), DESTINATION)]
    if note_type == NoteType.SAIDA_AJUSTE:
        return [PlannedMovement(MovementType.AJUSTE_NEGATIVO, quantity, ORIGIN)]

    raise BusinessError(f'Tipo de nota inválido: {note_type}')
