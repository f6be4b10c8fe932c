from datetime import timedelta

from django.apps import apps
from django.conf import settings
from django.core.management.base import BaseCommand
from django.utils import timezone


class Command(BaseCommand):
    help = "Cancel pending orders that never received a payment session."

    def add_arguments(self, parser):
        parser.add_argument(
            "--older-than-minutes",
            type=int,
            default=settings.PENDING_ORDER_TTL_MINUTES,
            help="Only expire orders created at least this many minutes ago.",
        )

    def handle(self, *args, **options):
        service = apps.get_app_config("ticketing").order_service
        expired = service.expire_stale_pending(
            timedelta(minutes=options["older_than_minutes"]), timezone.now()
        )
        self.stdout.write(self.style.SUCCESS(f"Expired {len(expired)} pending orders"))
