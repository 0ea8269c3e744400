# Generated manually for EPI Control

from django.db import migrations, models


class Migration(migrations.Migration):
    """
    Migração inicial do app Equipment.

    Cria:
    - EquipmentType (Tipos de EPI)
    """

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='EquipmentType',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('code', models.CharField(max_length=30, unique=True, verbose_name='Código')),
                ('name', models.CharField(max_length=255, verbose_name='Nome do EPI')),
                ('ca_number', models.CharField(blank=True, max_length=20, verbose_name='Número do CA')),
                ('description', models.TextField(blank=True, verbose_name='Descrição')),
                ('useful_life_days', models.PositiveIntegerField(blank=True, null=True, verbose_name='Vida Útil (dias)')),
                ('is_active', models.BooleanField(default=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'verbose_name': 'Tipo de EPI',
                'verbose_name_plural': 'Tipos de EPI',
                'ordering': ['name'],
            },
        ),
    ]
