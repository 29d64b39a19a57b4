# sequences/management/commands/sync_counters.py

from django.apps import apps
from django.core.management.base import BaseCommand, CommandError

from sequences.services.allocator import counter_total, raise_counter_to
from sequences.services.numbering import DOCUMENT_SERIES, get_series, parse_document_number


def _highest_sequence(series) -> int:
    model = apps.get_model(series.model_label)
    field = series.number_field
    stem = f"{series.prefix}-"

    highest = 0
    numbers = (
        model.objects.filter(**{f"{field}__startswith": stem})
        .values_list(field, flat=True)
        .iterator()
    )
    for number in numbers:
        try:
            _, _, seq = parse_document_number(number)
        except ValueError:
            continue
        highest = max(highest, seq)
    return highest


class Command(BaseCommand):
    help = (
        "Raise document counters to the highest number already stored "
        "(legacy data numbered by range scan). Counters are never lowered."
    )

    def add_arguments(self, parser):
        parser.add_argument(
            "--series",
            action="append",
            dest="series",
            help="Series key to sync (repeatable). Default: all series.",
        )
        parser.add_argument(
            "--dry-run",
            action="store_true",
            help="Report what would change without writing.",
        )

    def handle(self, *args, **options):
        keys = options.get("series") or list(DOCUMENT_SERIES.keys())
        dry_run = options.get("dry_run", False)

        for key in keys:
            try:
                series = get_series(key)
            except ValueError as exc:
                raise CommandError(str(exc)) from exc

            highest = _highest_sequence(series)
            current = counter_total(series.counter_name)

            if highest <= current:
                self.stdout.write(
                    f"{key}: counter '{series.counter_name}' at {current} (highest stored {highest}) - ok"
                )
                continue

            if dry_run:
                self.stdout.write(
                    f"{key}: would raise '{series.counter_name}' {current} -> {highest}"
                )
                continue

            raise_counter_to(series.counter_name, highest)
            self.stdout.write(
                self.style.SUCCESS(
                    f"✔ {key}: raised '{series.counter_name}' {current} -> {highest}"
                )
            )
