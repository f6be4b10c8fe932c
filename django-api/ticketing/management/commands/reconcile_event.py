import json
import sys

from django.core.management.base import BaseCommand, CommandError

from ticketing.handlers.bus import handle_bus_event


class Command(BaseCommand):
    help = "Replay a payment event envelope (JSON file, or - for stdin) through reconciliation."

    def add_arguments(self, parser):
        parser.add_argument("path", help="Path to a JSON envelope, or - to read stdin.")

    def handle(self, *args, **options):
        path = options["path"]
        try:
            if path == "-":
                envelope = json.load(sys.stdin)
            else:
                with open(path, encoding="utf-8") as fh:
                    envelope = json.load(fh)
        except (OSError, ValueError) as exc:
            raise CommandError(f"Could not read envelope: {exc}") from exc

        outcome = handle_bus_event(envelope)
        self.stdout.write(self.style.SUCCESS(f"Outcome: {outcome}"))
