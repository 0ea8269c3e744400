# Generated manually for EPI Control

from django.db import migrations, models


class Migration(migrations.Migration):
    """
    Migração inicial do app Core.

    Cria:
    - SystemConfiguration (flags de política do sistema)
    """

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='SystemConfiguration',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('key', models.CharField(max_length=60, unique=True, verbose_name='Chave')),
                ('value', models.CharField(max_length=255, verbose_name='Valor')),
                ('description', models.TextField(blank=True, verbose_name='Descrição')),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'verbose_name': 'Configuração do Sistema',
                'verbose_name_plural': 'Configurações do Sistema',
                'ordering': ['key'],
            },
        ),
    ]
