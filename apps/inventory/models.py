"""
Inventory App - Stock ledger, movement notes and warehouses
"""
import uuid

from django.conf import settings
from django.db import models
from django.db.models import Case, F, Sum, When
from django.db.models.functions import Coalesce

from apps.core.exceptions import BusinessError
from apps.equipment.models import EquipmentType

# ==========================================
# 1. Choices & Enums
# ==========================================

class StockStatus(models.TextChoices):
    DISPONIVEL = 'DISPONIVEL', 'Disponível'
    RESERVADO = 'RESERVADO', 'Reservado'
    AGUARDANDO_INSPECAO = 'AGUARDANDO_INSPECAO', 'Aguardando Inspeção'
    QUARENTENA = 'QUARENTENA', 'Quarentena'

class MovementType(models.TextChoices):
    ENTRADA_NOTA = 'ENTRADA_NOTA', 'Entrada por Nota'
    SAIDA_ENTREGA = 'SAIDA_ENTREGA', 'Saída por Entrega'
    SAIDA_TRANSFERENCIA = 'SAIDA_TRANSFERENCIA', 'Saída por Transferência'
    ENTRADA_TRANSFERENCIA = 'ENTRADA_TRANSFERENCIA', 'Entrada por Transferência'
    SAIDA_DESCARTE = 'SAIDA_DESCARTE', 'Saída por Descarte'
    AJUSTE_POSITIVO = 'AJUSTE_POSITIVO', 'Ajuste Positivo'
    AJUSTE_NEGATIVO = 'AJUSTE_NEGATIVO', 'Ajuste Negativo'
    ENTRADA_DEVOLUCAO = 'ENTRADA_DEVOLUCAO', 'Entrada por Devolução'
    ESTORNO_ENTRADA_NOTA = 'ESTORNO_ENTRADA_NOTA', 'Estorno de Entrada por Nota'
    ESTORNO_SAIDA_ENTREGA = 'ESTORNO_SAIDA_ENTREGA', 'Estorno de Saída por Entrega'
    ESTORNO_SAIDA_TRANSFERENCIA = 'ESTORNO_SAIDA_TRANSFERENCIA', 'Estorno de Saída por Transferência'
    ESTORNO_ENTRADA_TRANSFERENCIA = 'ESTORNO_ENTRADA_TRANSFERENCIA', 'Estorno de Entrada por Transferência'
    ESTORNO_SAIDA_DESCARTE = 'ESTORNO_SAIDA_DESCARTE', 'Estorno de Saída por Descarte'
    ESTORNO_AJUSTE_POSITIVO = 'ESTORNO_AJUSTE_POSITIVO', 'Estorno de Ajuste Positivo'
    ESTORNO_AJUSTE_NEGATIVO = 'ESTORNO_AJUSTE_NEGATIVO', 'Estorno de Ajuste Negativo'
    ESTORNO_ENTRADA_DEVOLUCAO = 'ESTORNO_ENTRADA_DEVOLUCAO', 'Estorno de Entrada por Devolução'

# Types that increase the balance. Everything else decreases it.
POSITIVE_MOVEMENT_TYPES = frozenset({
    MovementType.ENTRADA_NOTA,
    MovementType.ENTRADA_TRANSFERENCIA,
    MovementType.AJUSTE_POSITIVO,
    MovementType.ENTRADA_DEVOLUCAO,
    MovementType.ESTORNO_SAIDA_ENTREGA,
    MovementType.ESTORNO_SAIDA_TRANSFERENCIA,
    MovementType.ESTORNO_SAIDA_DESCARTE,
    MovementType.ESTORNO_AJUSTE_NEGATIVO,
})

REVERSAL_TYPES = {
    MovementType.ENTRADA_NOTA: MovementType.ESTORNO_ENTRADA_NOTA,
    MovementType.SAIDA_ENTREGA: MovementType.ESTORNO_SAIDA_ENTREGA,
    MovementType.SAIDA_TRANSFERENCIA: MovementType.ESTORNO_SAIDA_TRANSFERENCIA,
    MovementType.ENTRADA_TRANSFERENCIA: MovementType.ESTORNO_ENTRADA_TRANSFERENCIA,
    MovementType.SAIDA_DESCARTE: MovementType.ESTORNO_SAIDA_DESCARTE,
    MovementType.AJUSTE_POSITIVO: MovementType.ESTORNO_AJUSTE_POSITIVO,
    MovementType.AJUSTE_NEGATIVO: MovementType.ESTORNO_AJUSTE_NEGATIVO,
    MovementType.ENTRADA_DEVOLUCAO: MovementType.ESTORNO_ENTRADA_DEVOLUCAO,
}


def signed_delta(movement_type, quantity: int) -> int:
    """Balance effect of a movement of `quantity` units."""
    return quantity if movement_type in POSITIVE_MOVEMENT_TYPES else -quantity


class NoteType(models.TextChoices):
    ENTRADA = 'ENTRADA', 'Entrada'
    TRANSFERENCIA = 'TRANSFERENCIA', 'Transferência'
    DESCARTE = 'DESCARTE', 'Descarte'
    ENTRADA_AJUSTE = 'ENTRADA_AJUSTE', 'Ajuste'
    SAIDA_AJUSTE = 'SAIDA_AJUSTE', 'Ajuste de Saída'

NOTE_NUMBER_PREFIX = {
    NoteType.ENTRADA: 'ENT',
    NoteType.TRANSFERENCIA: 'TRF',
    NoteType.DESCARTE: 'DSC',
    NoteType.ENTRADA_AJUSTE: 'AJE',
    NoteType.SAIDA_AJUSTE: 'AJS',
}

class NoteStatus(models.TextChoices):
    RASCUNHO = 'RASCUNHO', 'Rascunho'
    CONCLUIDA = 'CONCLUIDA', 'Concluída'
    CANCELADA = 'CANCELADA', 'Cancelada'

NOTE_NOT_EDITABLE = 'Nota não está em modo de edição'

# ==========================================
# 2. Warehouses & Balances
# ==========================================

class Warehouse(models.Model):
    """Almoxarifado"""
    code = models.CharField(max_length=20, unique=True, verbose_name='Código', help_text='Ex: ALM-001')
    name = models.CharField(max_length=100, verbose_name='Nome')
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = 'Almoxarifado'
        verbose_name_plural = 'Almoxarifados'
        ordering = ['name']

    def __str__(self):
        return f'{self.code} - {self.name}'


class StockItem(models.Model):
    """
    Saldo por (almoxarifado, tipo de EPI, status).
    Only StockLedger may change `balance`; plain saves keep it locked.
    """
    _allow_balance_change = False

    warehouse = models.ForeignKey(Warehouse, on_delete=models.PROTECT, related_name='stock_items')
    equipment_type = models.ForeignKey(EquipmentType, on_delete=models.PROTECT, related_name='stock_items')
    status = models.CharField(max_length=20, choices=StockStatus.choices, default=StockStatus.DISPONIVEL)
    balance = models.IntegerField(default=0, verbose_name='Saldo')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = 'Item de Estoque'
        verbose_name_plural = 'Itens de Estoque'
        unique_together = ['warehouse', 'equipment_type', 'status']
        ordering = ['warehouse', 'equipment_type', 'status']

    def __str__(self):
        return f'{self.equipment_type.code} @ {self.warehouse.code} [{self.get_status_display()}]: {self.balance}'

    def save(self, *args, **kwargs):
        # LOCKDOWN: saldo só muda via StockLedger
        if not self._state.adding and not self._allow_balance_change:
            stored = StockItem.objects.filter(pk=self.pk).values_list('balance', flat=True).first()
            if stored is not None and stored != self.balance:
                raise BusinessError('Saldo de estoque só pode ser alterado por movimentação')
        super().save(*args, **kwargs)

    def ledger_balance(self) -> int:
        """Signed sum of every movement recorded against this item."""
        return self.movements.aggregate(
            total=Coalesce(Sum(Case(
                When(movement_type__in=list(POSITIVE_MOVEMENT_TYPES), then=F('quantity')),
                default=-F('quantity'),
                output_field=models.IntegerField(),
            )), 0)
        )['total']

# ==========================================
# 3. Movement Notes
# ==========================================

class MovementNote(models.Model):
    """Nota de movimentação: documento que agrupa itens de um mesmo tipo"""
    number = models.CharField(max_length=30, unique=True, verbose_name='Número')
    note_type = models.CharField(max_length=20, choices=NoteType.choices, verbose_name='Tipo')
    status = models.CharField(max_length=20, choices=NoteStatus.choices, default=NoteStatus.RASCUNHO)
    origin_warehouse = models.ForeignKey(
        Warehouse, on_delete=models.PROTECT, null=True, blank=True, related_name='outgoing_notes',
        verbose_name='Almoxarifado de Origem'
    )
    destination_warehouse = models.ForeignKey(
        Warehouse, on_delete=models.PROTECT, null=True, blank=True, related_name='incoming_notes',
        verbose_name='Almoxarifado de Destino'
    )
    responsible = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True)
    notes = models.TextField(blank=True, verbose_name='Observações')
    concluded_at = models.DateTimeField(null=True, blank=True)
    cancelled_at = models.DateTimeField(null=True, blank=True)
    cancel_reason = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']
        verbose_name = 'Nota de Movimentação'
        verbose_name_plural = 'Notas de Movimentação'

    def __str__(self):
        return f'{self.number} ({self.get_status_display()})'

    @property
    def is_draft(self):
        return self.status == NoteStatus.RASCUNHO

    @property
    def is_concluded(self):
        return self.status == NoteStatus.CONCLUIDA

    @property
    def is_cancelled(self):
        return self.status == NoteStatus.CANCELADA

    @property
    def is_adjustment(self):
        return self.note_type in (NoteType.ENTRADA_AJUSTE, NoteType.SAIDA_AJUSTE)


class NoteItem(models.Model):
    note = models.ForeignKey(MovementNote, on_delete=models.CASCADE, related_name='items')
    equipment_type = models.ForeignKey(EquipmentType, on_delete=models.PROTECT, related_name='note_items')
    quantity = models.IntegerField(verbose_name='Quantidade')
    processed_quantity = models.IntegerField(default=0, verbose_name='Quantidade Processada')
    notes = models.CharField(max_length=255, blank=True)

    class Meta:
        unique_together = ['note', 'equipment_type']
        ordering = ['id']
        verbose_name = 'Item da Nota'
        verbose_name_plural = 'Itens da Nota'

    def __str__(self):
        return f'{self.note.number}: {self.quantity}x {self.equipment_type.code}'

    def _check_note_is_draft(self):
        # Itens só mudam enquanto a nota está em rascunho
        if not MovementNote.objects.filter(pk=self.note_id, status=NoteStatus.RASCUNHO).exists():
            raise BusinessError(NOTE_NOT_EDITABLE)

    def save(self, *args, **kwargs):
        self._check_note_is_draft()
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        self._check_note_is_draft()
        return super().delete(*args, **kwargs)

# ==========================================
# 4. Ledger
# ==========================================

class StockMovementQuerySet(models.QuerySet):
    def for_stock_item(self, stock_item):
        return self.filter(stock_item=stock_item)

    def for_note(self, note):
        return self.filter(note=note)

    def reversals_of(self, movement):
        return self.filter(origin_movement=movement)

    def originals(self):
        return self.filter(origin_movement__isnull=True)

    def delete(self):
        raise BusinessError('Movimentações de estoque não podem ser excluídas')


class StockMovement(models.Model):
    """Immutable record of any stock change"""
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    stock_item = models.ForeignKey(StockItem, on_delete=models.PROTECT, related_name='movements')
    movement_type = models.CharField(max_length=40, choices=MovementType.choices)
    quantity = models.PositiveIntegerField()
    balance_after = models.IntegerField(default=0)
    responsible = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True)
    origin_movement = models.ForeignKey(
        'self', on_delete=models.PROTECT, null=True, blank=True, related_name='reversals'
    )
    note = models.ForeignKey(
        MovementNote, on_delete=models.PROTECT, null=True, blank=True, related_name='movements'
    )
    delivery = models.ForeignKey(
        'deliveries.Delivery', on_delete=models.PROTECT, null=True, blank=True, related_name='movements'
    )
    reason = models.CharField(max_length=255, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    objects = StockMovementQuerySet.as_manager()

    class Meta:
        ordering = ['created_at']
        verbose_name = "Movimentação"
        verbose_name_plural = "Movimentações"

    def __str__(self):
        return f"{self.get_movement_type_display()} {self.signed_quantity:+d} ({self.stock_item_id})"

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise BusinessError('Movimentações de estoque são imutáveis')
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise BusinessError('Movimentações de estoque não podem ser excluídas')

    @property
    def signed_quantity(self) -> int:
        return signed_delta(self.movement_type, self.quantity)

    @property
    def is_reversal(self) -> bool:
        return self.movement_type.startswith('ESTORNO_')
