# Create Admin Management Command
import os

from django.core.management.base import BaseCommand, CommandError
from django.core.exceptions import ValidationError
from django.contrib.auth.password_validation import validate_password

from core.models import Account, Role


class Command(BaseCommand):
    help = 'Creates an administrator account, or promotes an existing account to admin.'

    def add_arguments(self, parser):
        parser.add_argument(
            '--email',
            default=os.environ.get('ADMIN_EMAIL'),
            help='Administrator email (defaults to $ADMIN_EMAIL).',
        )
        parser.add_argument(
            '--password',
            default=os.environ.get('ADMIN_PASSWORD'),
            help='Administrator password (defaults to $ADMIN_PASSWORD).',
        )
        parser.add_argument(
            '--promote',
            action='store_true',
            help='Promote the account to admin if it already exists.',
        )

    def handle(self, *args, **options):
        email = (options['email'] or '').lower().strip()
        password = options['password']

        if not email:
            raise CommandError('An email is required (--email or $ADMIN_EMAIL).')

        account = Account.objects.filter(email__iexact=email).first()

        if account is not None:
            if account.role == Role.ADMIN:
                self.stdout.write(self.style.WARNING(f'{email} is already an administrator.'))
                return

            if not options['promote']:
                raise CommandError(f'{email} already exists. Use --promote to make it an administrator.')

            account.role = Role.ADMIN
            account.save()
            self.stdout.write(self.style.SUCCESS(f'{email} promoted to administrator.'))
            return

        if not password:
            raise CommandError('A password is required (--password or $ADMIN_PASSWORD).')

        try:
            validate_password(password)
        except ValidationError as e:
            raise CommandError(' '.join(e.messages))

        Account.objects.create_superuser(email=email, password=password)
        self.stdout.write(self.style.SUCCESS(f'Administrator {email} created.'))
