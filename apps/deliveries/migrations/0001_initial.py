# Generated manually for EPI Control

import uuid

import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):
    """
    Migração inicial do app Deliveries.

    Cria:
    - EmployeeRecord (Fichas de EPI)
    - Delivery (Entregas)
    - DeliveryItem (Unidades entregues)
    """

    initial = True

    dependencies = [
        ('equipment', '0001_initial'),
        ('inventory', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        # =================================================================
        # 1. EMPLOYEE RECORD (Ficha)
        # =================================================================
        migrations.CreateModel(
            name='EmployeeRecord',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('employee_name', models.CharField(max_length=200, verbose_name='Colaborador')),
                ('employee_code', models.CharField(max_length=50, verbose_name='Matrícula')),
                ('is_active', models.BooleanField(default=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'verbose_name': 'Ficha de EPI',
                'verbose_name_plural': 'Fichas de EPI',
                'ordering': ['employee_name'],
            },
        ),
        migrations.AddConstraint(
            model_name='employeerecord',
            constraint=models.UniqueConstraint(
                condition=models.Q(('is_active', True)),
                fields=('employee_code',),
                name='unique_active_employee_record'
            ),
        ),

        # =================================================================
        # 2. DELIVERY
        # =================================================================
        migrations.CreateModel(
            name='Delivery',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('status', models.CharField(
                    choices=[
                        ('PENDENTE_ASSINATURA', 'Pendente de Assinatura'),
                        ('ASSINADA', 'Assinada'),
                        ('CANCELADA', 'Cancelada'),
                    ],
                    default='PENDENTE_ASSINATURA',
                    max_length=20
                )),
                ('delivered_at', models.DateTimeField(default=django.utils.timezone.now, verbose_name='Data da Entrega')),
                ('signed_at', models.DateTimeField(blank=True, null=True)),
                ('signature_ref', models.CharField(blank=True, max_length=255, verbose_name='Referência da Assinatura')),
                ('cancelled_at', models.DateTimeField(blank=True, null=True)),
                ('cancel_reason', models.TextField(blank=True)),
                ('notes', models.TextField(blank=True, verbose_name='Observações')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('employee_record', models.ForeignKey(
                    on_delete=django.db.models.deletion.PROTECT,
                    related_name='deliveries',
                    to='deliveries.employeerecord'
                )),
                ('responsible', models.ForeignKey(
                    blank=True,
                    null=True,
                    on_delete=django.db.models.deletion.SET_NULL,
                    to=settings.AUTH_USER_MODEL
                )),
                ('warehouse', models.ForeignKey(
                    on_delete=django.db.models.deletion.PROTECT,
                    related_name='deliveries',
                    to='inventory.warehouse'
                )),
            ],
            options={
                'verbose_name': 'Entrega',
                'verbose_name_plural': 'Entregas',
                'ordering': ['-delivered_at'],
            },
        ),

        # =================================================================
        # 3. DELIVERY ITEM
        # =================================================================
        migrations.CreateModel(
            name='DeliveryItem',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('quantity_delivered', models.PositiveSmallIntegerField(default=1)),
                ('status', models.CharField(
                    choices=[
                        ('COM_COLABORADOR', 'Com o Colaborador'),
                        ('DEVOLVIDO', 'Devolvido'),
                        ('CANCELADO', 'Cancelado'),
                    ],
                    default='COM_COLABORADOR',
                    max_length=20
                )),
                ('return_due_date', models.DateField(blank=True, null=True, verbose_name='Devolução Prevista')),
                ('returned_at', models.DateTimeField(blank=True, null=True)),
                ('return_reason', models.CharField(blank=True, max_length=255)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('delivery', models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name='items',
                    to='deliveries.delivery'
                )),
                ('equipment_type', models.ForeignKey(
                    on_delete=django.db.models.deletion.PROTECT,
                    related_name='delivery_items',
                    to='equipment.equipmenttype'
                )),
                ('source_stock_item', models.ForeignKey(
                    on_delete=django.db.models.deletion.PROTECT,
                    related_name='delivery_items',
                    to='inventory.stockitem'
                )),
            ],
            options={
                'verbose_name': 'Item da Entrega',
                'verbose_name_plural': 'Itens da Entrega',
                'ordering': ['id'],
            },
        ),
    ]
