from django.core.management.base import BaseCommand

from apps.domains.results.services.attempt_service import close_expired_attempts


class Command(BaseCommand):
    help = "Auto-submit in-progress attempts whose time limit (plus grace) has passed."

    def handle(self, *args, **options):
        closed = close_expired_attempts()
        self.stdout.write(self.style.SUCCESS(f"closed={closed}"))
