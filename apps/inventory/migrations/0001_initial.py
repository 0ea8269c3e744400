# Generated manually for EPI Control

import uuid

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):
    """
    Migração inicial do app Inventory.

    Cria:
    - Warehouse (Almoxarifados)
    - StockItem (Saldos por almoxarifado/tipo/status)
    - MovementNote / NoteItem (Notas de movimentação)
    - StockMovement (Ledger imutável)
    """

    initial = True

    dependencies = [
        ('equipment', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        # =================================================================
        # 1. WAREHOUSE
        # =================================================================
        migrations.CreateModel(
            name='Warehouse',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('code', models.CharField(help_text='Ex: ALM-001', max_length=20, unique=True, verbose_name='Código')),
                ('name', models.CharField(max_length=100, verbose_name='Nome')),
                ('is_active', models.BooleanField(default=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'verbose_name': 'Almoxarifado',
                'verbose_name_plural': 'Almoxarifados',
                'ordering': ['name'],
            },
        ),

        # =================================================================
        # 2. STOCK ITEM
        # =================================================================
        migrations.CreateModel(
            name='StockItem',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('status', models.CharField(
                    choices=[
                        ('DISPONIVEL', 'Disponível'),
                        ('RESERVADO', 'Reservado'),
                        ('AGUARDANDO_INSPECAO', 'Aguardando Inspeção'),
                        ('QUARENTENA', 'Quarentena'),
                    ],
                    default='DISPONIVEL',
                    max_length=20
                )),
                ('balance', models.IntegerField(default=0, verbose_name='Saldo')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('equipment_type', models.ForeignKey(
                    on_delete=django.db.models.deletion.PROTECT,
                    related_name='stock_items',
                    to='equipment.equipmenttype'
                )),
                ('warehouse', models.ForeignKey(
                    on_delete=django.db.models.deletion.PROTECT,
                    related_name='stock_items',
                    to='inventory.warehouse'
                )),
            ],
            options={
                'verbose_name': 'Item de Estoque',
                'verbose_name_plural': 'Itens de Estoque',
                'ordering': ['warehouse', 'equipment_type', 'status'],
                'unique_together': {('warehouse', 'equipment_type', 'status')},
            },
        ),

        # =================================================================
        # 3. MOVEMENT NOTE
        # =================================================================
        migrations.CreateModel(
            name='MovementNote',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('number', models.CharField(max_length=30, unique=True, verbose_name='Número')),
                ('note_type', models.CharField(
                    choices=[
                        ('ENTRADA', 'Entrada'),
                        ('TRANSFERENCIA', 'Transferência'),
                        ('DESCARTE', 'Descarte'),
                        ('ENTRADA_AJUSTE', 'Ajuste'),
                        ('SAIDA_AJUSTE', 'Ajuste de Saída'),
                    ],
                    max_length=20,
                    verbose_name='Tipo'
                )),
                ('status', models.CharField(
                    choices=[
                        ('RASCUNHO', 'Rascunho'),
                        ('CONCLUIDA', 'Concluída'),
                        ('CANCELADA', 'Cancelada'),
                    ],
                    default='RASCUNHO',
                    max_length=20
                )),
                ('notes', models.TextField(blank=True, verbose_name='Observações')),
                ('concluded_at', models.DateTimeField(blank=True, null=True)),
                ('cancelled_at', models.DateTimeField(blank=True, null=True)),
                ('cancel_reason', models.TextField(blank=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('destination_warehouse', models.ForeignKey(
                    blank=True,
                    null=True,
                    on_delete=django.db.models.deletion.PROTECT,
                    related_name='incoming_notes',
                    to='inventory.warehouse',
                    verbose_name='Almoxarifado de Destino'
                )),
                ('origin_warehouse', models.ForeignKey(
                    blank=True,
                    null=True,
                    on_delete=django.db.models.deletion.PROTECT,
                    related_name='outgoing_notes',
                    to='inventory.warehouse',
                    verbose_name='Almoxarifado de Origem'
                )),
                ('responsible', models.ForeignKey(
                    blank=True,
                    null=True,
                    on_delete=django.db.models.deletion.SET_NULL,
                    to=settings.AUTH_USER_MODEL
                )),
            ],
            options={
                'verbose_name': 'Nota de Movimentação',
                'verbose_name_plural': 'Notas de Movimentação',
                'ordering': ['-created_at'],
            },
        ),
        migrations.CreateModel(
            name='NoteItem',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('quantity', models.IntegerField(verbose_name='Quantidade')),
                ('processed_quantity', models.IntegerField(default=0, verbose_name='Quantidade Processada')),
                ('notes', models.CharField(blank=True, max_length=255)),
                ('equipment_type', models.ForeignKey(
                    on_delete=django.db.models.deletion.PROTECT,
                    related_name='note_items',
                    to='equipment.equipmenttype'
                )),
                ('note', models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name='items',
                    to='inventory.movementnote'
                )),
            ],
            options={
                'verbose_name': 'Item da Nota',
                'verbose_name_plural': 'Itens da Nota',
                'ordering': ['id'],
                'unique_together': {('note', 'equipment_type')},
            },
        ),

        # =================================================================
        # 4. STOCK MOVEMENT (Ledger)
        # =================================================================
        migrations.CreateModel(
            name='StockMovement',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('movement_type', models.CharField(
                    choices=[
                        ('ENTRADA_NOTA', 'Entrada por Nota'),
                        ('SAIDA_ENTREGA', 'Saída por Entrega'),
                        ('SAIDA_TRANSFERENCIA', 'Saída por Transferência'),
                        ('ENTRADA_TRANSFERENCIA', 'Entrada por Transferência'),
                        ('SAIDA_DESCARTE', 'Saída por Descarte'),
                        ('AJUSTE_POSITIVO', 'Ajuste Positivo'),
                        ('AJUSTE_NEGATIVO', 'Ajuste Negativo'),
                        ('ENTRADA_DEVOLUCAO', 'Entrada por Devolução'),
                        ('ESTORNO_ENTRADA_NOTA', 'Estorno de Entrada por Nota'),
                        ('ESTORNO_SAIDA_ENTREGA', 'Estorno de Saída por Entrega'),
                        ('ESTORNO_SAIDA_TRANSFERENCIA', 'Estorno de Saída por Transferência'),
                        ('ESTORNO_ENTRADA_TRANSFERENCIA', 'Estorno de Entrada por Transferência'),
                        ('ESTORNO_SAIDA_DESCARTE', 'Estorno de Saída por Descarte'),
                        ('ESTORNO_AJUSTE_POSITIVO', 'Estorno de Ajuste Positivo'),
                        ('ESTORNO_AJUSTE_NEGATIVO', 'Estorno de Ajuste Negativo'),
                        ('ESTORNO_ENTRADA_DEVOLUCAO', 'Estorno de Entrada por Devolução'),
                    ],
                    max_length=40
                )),
                ('quantity', models.PositiveIntegerField()),
                ('balance_after', models.IntegerField(default=0)),
                ('reason', models.CharField(blank=True, max_length=255)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('note', models.ForeignKey(
                    blank=True,
                    null=True,
                    on_delete=django.db.models.deletion.PROTECT,
                    related_name='movements',
                    to='inventory.movementnote'
                )),
                ('origin_movement', models.ForeignKey(
                    blank=True,
                    null=True,
                    on_delete=django.db.models.deletion.PROTECT,
                    related_name='reversals',
                    to='inventory.stockmovement'
                )),
                ('responsible', models.ForeignKey(
                    blank=True,
                    null=True,
                    on_delete=django.db.models.deletion.SET_NULL,
                    to=settings.AUTH_USER_MODEL
                )),
                ('stock_item', models.ForeignKey(
                    on_delete=django.db.models.deletion.PROTECT,
                    related_name='movements',
                    to='inventory.stockitem'
                )),
            ],
            options={
                'verbose_name': 'Movimentação',
                'verbose_name_plural': 'Movimentações',
                'ordering': ['created_at'],
            },
        ),
    ]
