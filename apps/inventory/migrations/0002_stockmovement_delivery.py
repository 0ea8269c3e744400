# Generated manually for EPI Control

import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):
    """
    Liga movimentações às entregas (SAIDA_ENTREGA, ENTRADA_DEVOLUCAO e estornos).
    Separada da 0001 porque deliveries depende de inventory.
    """

    dependencies = [
        ('inventory', '0001_initial'),
        ('deliveries', '0001_initial'),
    ]

    operations = [
        migrations.AddField(
            model_name='stockmovement',
            name='delivery',
            field=models.ForeignKey(
                blank=True,
                null=True,
                on_delete=django.db.models.deletion.PROTECT,
                related_name='movements',
                to='deliveries.delivery'
            ),
        ),
    ]
