"""
Core App - Shared utilities and system-wide settings
"""
from django.db import models


class ConfigKey(models.TextChoices):
    PERMITIR_ESTOQUE_NEGATIVO = 'PERMITIR_ESTOQUE_NEGATIVO', 'Permitir estoque negativo'
    PERMITIR_AJUSTES_FORCADOS = 'PERMITIR_AJUSTES_FORCADOS', 'Permitir ajustes forçados'


class SystemConfiguration(models.Model):
    """Key/value system flags. Values are stored as 'true'/'false' strings."""
    key = models.CharField(max_length=60, unique=True, verbose_name="Chave")
    value = models.CharField(max_length=255, verbose_name="Valor")
    description = models.TextField(blank=True, verbose_name="Descrição")
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Configuração do Sistema"
        verbose_name_plural = "Configurações do Sistema"
        ordering = ['key']

    def __str__(self):
        return f"{self.key} = {self.value}"

    @property
    def as_bool(self) -> bool:
        return self.value.strip().lower() == 'true'

    @classmethod
    def get_flag(cls, key):
        """Returns the stored boolean or None when the key is not persisted."""
        row = cls.objects.filter(key=key).first()
        if row is None:
            return None
        return row.as_bool

    @classmethod
    def set_flag(cls, key, value: bool, description: str = ''):
        obj, _ = cls.objects.update_or_create(
            key=key,
            defaults={
                'value': 'true' if value else 'false',
                'description': description,
            }
        )
        return obj

    @classmethod
    def seed_defaults(cls):
        defaults = [
            (ConfigKey.PERMITIR_ESTOQUE_NEGATIVO, 'false',
             'Permite ou não que o saldo de estoque fique negativo'),
            (ConfigKey.PERMITIR_AJUSTES_FORCADOS, 'false',
             'Habilita ou desabilita ajustes manuais de inventário'),
        ]
        created = []
        for key, value, description in defaults:
            obj, was_created = cls.objects.get_or_create(
                key=key,
                defaults={'value': value, 'description': description}
            )
            if was_created:
                created.append(obj)
        return created
