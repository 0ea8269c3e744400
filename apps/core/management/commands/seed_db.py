from django.core.management.base import BaseCommand
from django.contrib.auth import get_user_model
from apps.core.models import SystemConfiguration
from decouple import config


class Command(BaseCommand):
    help = 'Inicializa as configurações de política e o superusuário'

    def handle(self, *args, **options):
        self.stdout.write('🔄 Iniciando seed_db...')

        # 1. Flags de política
        created = SystemConfiguration.seed_defaults()
        for flag in created:
            self.stdout.write(f'  + {flag.key} = {flag.value}')

        # 2. Superusuário (lendo do .env)
        User = get_user_model()
        u = config('DJANGO_SUPERUSER_USERNAME', default='admin')
        e = config('DJANGO_SUPERUSER_EMAIL', default='admin@example.com')
        p = config('DJANGO_SUPERUSER_PASSWORD', default='admin123')

        if not User.objects.filter(username=u).exists():
            User.objects.create_superuser(u, e, p)
            self.stdout.write(self.style.SUCCESS(f'✅ Superuser "{u}" criado com sucesso!'))
        else:
            self.stdout.write(self.style.WARNING(f'ℹ️ Superuser "{u}" já existe.'))
