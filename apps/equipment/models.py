"""
Equipment App - PPE catalog (tipos de EPI)
"""
from datetime import date, timedelta
from typing import Optional

from django.db import models


class EquipmentType(models.Model):
    """
    Tipo de EPI. `useful_life_days` define o prazo de devolução de cada
    unidade entregue; vazio significa sem prazo.
    """
    code = models.CharField(max_length=30, unique=True, verbose_name="Código")
    name = models.CharField(max_length=255, verbose_name="Nome do EPI")
    ca_number = models.CharField(max_length=20, blank=True, verbose_name="Número do CA")
    description = models.TextField(blank=True, verbose_name="Descrição")
    useful_life_days = models.PositiveIntegerField(null=True, blank=True, verbose_name="Vida Útil (dias)")
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Tipo de EPI"
        verbose_name_plural = "Tipos de EPI"
        ordering = ['name']

    def __str__(self):
        return f"{self.code} - {self.name}"

    def return_due_date(self, issue_date: date) -> Optional[date]:
        if self.useful_life_days is None:
            return None
        return issue_date + timedelta(days=self.useful_life_days)
