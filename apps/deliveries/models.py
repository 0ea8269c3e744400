"""
Deliveries App - Employee records (fichas), deliveries and per-unit possession
"""
import uuid
from datetime import date
from typing import Optional

from django.conf import settings
from django.db import models
from django.db.models import Q
from django.utils import timezone

from apps.core.exceptions import ConflictError
from apps.equipment.models import EquipmentType
from apps.inventory.models import StockItem, Warehouse


class DeliveryStatus(models.TextChoices):
    PENDENTE_ASSINATURA = 'PENDENTE_ASSINATURA', 'Pendente de Assinatura'
    ASSINADA = 'ASSINADA', 'Assinada'
    CANCELADA = 'CANCELADA', 'Cancelada'

class DeliveryItemStatus(models.TextChoices):
    COM_COLABORADOR = 'COM_COLABORADOR', 'Com o Colaborador'
    DEVOLVIDO = 'DEVOLVIDO', 'Devolvido'
    CANCELADO = 'CANCELADO', 'Cancelado'


class EmployeeRecord(models.Model):
    """Ficha de EPI: one active record per employee"""
    employee_name = models.CharField(max_length=200, verbose_name='Colaborador')
    employee_code = models.CharField(max_length=50, verbose_name='Matrícula')
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = 'Ficha de EPI'
        verbose_name_plural = 'Fichas de EPI'
        ordering = ['employee_name']
        constraints = [
            models.UniqueConstraint(
                fields=['employee_code'],
                condition=Q(is_active=True),
                name='unique_active_employee_record',
            ),
        ]

    def __str__(self):
        return f'{self.employee_name} ({self.employee_code})'

    @classmethod
    def open_for(cls, employee_code: str, employee_name: str) -> 'EmployeeRecord':
        if cls.objects.filter(employee_code=employee_code, is_active=True).exists():
            raise ConflictError(f'Colaborador {employee_code} já possui ficha ativa')
        return cls.objects.create(employee_code=employee_code, employee_name=employee_name)

    def has_pending_return(self, today: Optional[date] = None) -> bool:
        return DeliveryItem.objects.filter(delivery__employee_record=self).overdue(today).exists()

    @property
    def devolucao_pendente(self) -> bool:
        return self.has_pending_return()


class Delivery(models.Model):
    """Entrega de EPIs a um colaborador"""
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    employee_record = models.ForeignKey(EmployeeRecord, on_delete=models.PROTECT, related_name='deliveries')
    warehouse = models.ForeignKey(Warehouse, on_delete=models.PROTECT, related_name='deliveries')
    responsible = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True)
    status = models.CharField(
        max_length=20, choices=DeliveryStatus.choices, default=DeliveryStatus.PENDENTE_ASSINATURA
    )
    delivered_at = models.DateTimeField(default=timezone.now, verbose_name='Data da Entrega')
    signed_at = models.DateTimeField(null=True, blank=True)
    signature_ref = models.CharField(max_length=255, blank=True, verbose_name='Referência da Assinatura')
    cancelled_at = models.DateTimeField(null=True, blank=True)
    cancel_reason = models.TextField(blank=True)
    notes = models.TextField(blank=True, verbose_name='Observações')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-delivered_at']
        verbose_name = 'Entrega'
        verbose_name_plural = 'Entregas'

    def __str__(self):
        return f'Entrega {self.pk} - {self.employee_record} [{self.get_status_display()}]'

    @property
    def is_pending_signature(self):
        return self.status == DeliveryStatus.PENDENTE_ASSINATURA

    @property
    def is_signed(self):
        return self.status == DeliveryStatus.ASSINADA

    @property
    def is_cancelled(self):
        return self.status == DeliveryStatus.CANCELADA

    @property
    def is_fully_returned(self) -> bool:
        """Derived: every unit is DEVOLVIDO or CANCELADO."""
        items = self.items.all()
        return items.exists() and not items.with_employee().exists()

    def has_pending_return(self, today: Optional[date] = None) -> bool:
        return self.items.overdue(today).exists()

    @property
    def devolucao_pendente(self) -> bool:
        return self.has_pending_return()


class DeliveryItemQuerySet(models.QuerySet):
    def with_employee(self):
        return self.filter(status=DeliveryItemStatus.COM_COLABORADOR)

    def returned(self):
        return self.filter(status=DeliveryItemStatus.DEVOLVIDO)

    def overdue(self, today: Optional[date] = None):
        today = today or timezone.localdate()
        return self.with_employee().filter(return_due_date__isnull=False, return_due_date__lt=today)


class DeliveryItem(models.Model):
    """One physical unit handed to the employee"""
    delivery = models.ForeignKey(Delivery, on_delete=models.CASCADE, related_name='items')
    source_stock_item = models.ForeignKey(StockItem, on_delete=models.PROTECT, related_name='delivery_items')
    equipment_type = models.ForeignKey(EquipmentType, on_delete=models.PROTECT, related_name='delivery_items')
    quantity_delivered = models.PositiveSmallIntegerField(default=1)
    status = models.CharField(
        max_length=20, choices=DeliveryItemStatus.choices, default=DeliveryItemStatus.COM_COLABORADOR
    )
    return_due_date = models.DateField(null=True, blank=True, verbose_name='Devolução Prevista')
    returned_at = models.DateTimeField(null=True, blank=True)
    return_reason = models.CharField(max_length=255, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    objects = DeliveryItemQuerySet.as_manager()

    class Meta:
        ordering = ['id']
        verbose_name = 'Item da Entrega'
        verbose_name_plural = 'Itens da Entrega'

    def __str__(self):
        return f'{self.equipment_type.code} [{self.get_status_display()}]'

    @property
    def is_with_employee(self):
        return self.status == DeliveryItemStatus.COM_COLABORADOR

    def is_overdue(self, today: Optional[date] = None) -> bool:
        today = today or timezone.localdate()
        return (
            self.is_with_employee
            and self.return_due_date is not None
            and self.return_due_date < today
        )
