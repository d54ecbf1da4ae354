# core/management/commands/reconcile_ledgers.py

from __future__ import annotations

from datetime import datetime

from django.core.management.base import BaseCommand

from core.services.reconciliation import run_reconciliation


def _parse_date(s: str | None):
    """
    Parse YYYY-MM-DD into a date, or None.
    """
    if not s:
        return None
    try:
        return datetime.strptime(s, "%Y-%m-%d").date()
    except ValueError:
        return None


class Command(BaseCommand):
    help = "Rebuild stock balances and receivable balances from their source ledgers."

    def add_arguments(self, parser):
        parser.add_argument(
            "--dry-run",
            action="store_true",
            help="Report what would be corrected without committing anything.",
        )
        parser.add_argument(
            "--today",
            dest="today",
            help="Evaluate overdue invoices as of YYYY-MM-DD (default: today).",
        )
        parser.add_argument(
            "--strict",
            action="store_true",
            help="Fail (non-zero exit) if any drift was found.",
        )

    def handle(self, *args, **options):
        dry_run = bool(options.get("dry_run"))
        strict = bool(options.get("strict"))

        today = _parse_date(options.get("today"))
        if options.get("today") and not today:
            self.stderr.write(self.style.ERROR("Invalid --today date. Use YYYY-MM-DD"))
            return self._exit(True)

        self.stdout.write(self.style.MIGRATE_HEADING("Ledger Reconciliation"))
        if dry_run:
            self.stdout.write("Mode: DRY RUN (no changes committed)")

        report = run_reconciliation(today=today, dry_run=dry_run)

        for label, value in report.as_dict().items():
            line = f"{label.replace('_', ' ').capitalize():<22} {value}"
            if value:
                self.stdout.write(self.style.WARNING(line))
            else:
                self.stdout.write(line)

        self.stdout.write("")
        if report.changed:
            verb = "would be corrected" if dry_run else "corrected"
            self.stdout.write(self.style.WARNING(f"Drift found and {verb}."))
        else:
            self.stdout.write(self.style.SUCCESS("[OK] Ledgers are consistent"))

        return self._exit(strict and report.changed)

    def _exit(self, fail: bool):
        if fail:
            raise SystemExit(1)
        return None
