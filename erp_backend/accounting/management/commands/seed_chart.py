# accounting/management/commands/seed_chart.py

from django.core.management.base import BaseCommand

from accounting.models import CompanyProfile
from accounting.services.chart_seed import seed_chart_of_accounts


class Command(BaseCommand):
    help = "Seed the default Chart of Accounts (groups + ledgers). Safe to re-run."

    def add_arguments(self, parser):
        parser.add_argument(
            "--primary-upi",
            dest="primary_upi",
            default=None,
            help="Set the company's primary UPI id (selects the bank ledger for advances).",
        )

    def handle(self, *args, **options):
        self.stdout.write("Seeding Chart of Accounts...")

        summary = seed_chart_of_accounts()

        upi = options.get("primary_upi")
        if upi is not None:
            profile = CompanyProfile.current() or CompanyProfile()
            profile.primary_upi_id = upi
            profile.save()
            self.stdout.write(f"Primary UPI id set to '{profile.primary_upi_id}'")

        self.stdout.write(
            self.style.SUCCESS(
                "✔ Chart ready "
                f"(groups: {summary['groups_created']} created, {summary['groups_updated']} updated; "
                f"ledgers: {summary['ledgers_created']} created, {summary['ledgers_updated']} updated)"
            )
        )
