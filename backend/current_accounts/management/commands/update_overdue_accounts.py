from django.core.management.base import BaseCommand
from django.utils import timezone
from backend.core.models import Organization
from backend.current_accounts.models import CurrentAccount
from backend.current_accounts.services import refresh_overdue_accounts


class Command(BaseCommand):
    help = 'Mark ACTIVE current accounts whose next due date already passed as OVERDUE'

    def add_arguments(self, parser):
        parser.add_argument(
            '--organization',
            type=str,
            help='Only process the organization with this slug',
        )
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='List the accounts that would be updated without changing them',
        )

    def handle(self, *args, **options):
        organization = None
        if options.get('organization'):
            try:
                organization = Organization.objects.get(slug=options['organization'])
            except Organization.DoesNotExist:
                self.stdout.write(self.style.ERROR(f"Organization '{options['organization']}' not found"))
                return

        today = timezone.localdate()
        if options['dry_run']:
            queryset = CurrentAccount.objects.filter(status='ACTIVE', next_due_date__lt=today)
            if organization is not None:
                queryset = queryset.filter(organization=organization)
            for account in queryset.select_related('client'):
                self.stdout.write(f'  CC #{account.id} {account.client} due {account.next_due_date}')
            self.stdout.write(self.style.WARNING(f'DRY RUN: {queryset.count()} account(s) would be marked OVERDUE'))
            return

        updated = refresh_overdue_accounts(organization=organization, today=today)
        self.stdout.write(self.style.SUCCESS(f'{updated} account(s) marked OVERDUE'))
