# finance/management/commands/import_documents.py
# ─────────────────────────────────────────────────────────────────────────────
# 📦 Load a JSON document export into Income / Expense rows for one user.
#
#    python manage.py import_documents export.json --owner alice
#
#    Export shape:
#      {"incomes":  [{"amount": 500, "source": "Salary", "date": …, "title": …}, …],
#       "expenses": [{"amount": 40, "category": "Food", "date": …}, …]}
#    Dates may be ISO text, {"seconds": …} wrappers or anything the date
#    normalizer understands; an unreadable date is stored as NULL (kept, but
#    never counted). Amounts that are missing, non-numeric or ≤ 0 are skipped.
# ─────────────────────────────────────────────────────────────────────────────

import json

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand, CommandError

from finance.aggregation import coerce_amount
from finance.forms import CENT, MAX_AMOUNT
from finance.models import EXPENSE, INCOME
from finance.store import StoreUnavailable, create_record, entry_from_document

SECTIONS = (("incomes", INCOME), ("expenses", EXPENSE))


class Command(BaseCommand):
    help = "Import incomes/expenses from a JSON document export for one user."

    def add_arguments(self, parser):
        parser.add_argument("path", help="JSON export file")
        parser.add_argument("--owner", required=True, help="username that will own the records")
        parser.add_argument("--dry-run", action="store_true", help="validate only, write nothing")

    def handle(self, *args, **options):
        User = get_user_model()
        try:
            owner = User.objects.get(username=options["owner"])
        except User.DoesNotExist:
            raise CommandError(f"No user named {options['owner']!r}")

        try:
            with open(options["path"], encoding="utf-8") as fh:
                payload = json.load(fh)
        except (OSError, json.JSONDecodeError) as exc:
            raise CommandError(f"Could not read {options['path']}: {exc}")
        if not isinstance(payload, dict):
            raise CommandError("Export must be a JSON object with 'incomes' and/or 'expenses'.")

        saved = skipped = undated = failed = 0
        for section, kind in SECTIONS:
            docs = payload.get(section) or []
            if not isinstance(docs, list):
                raise CommandError(f"'{section}' must be a list.")
            for doc in docs:
                if not isinstance(doc, dict):
                    skipped += 1
                    continue
                entry = entry_from_document(kind, doc)
                amount = coerce_amount(entry.amount)
                if amount <= 0 or amount > MAX_AMOUNT:
                    skipped += 1
                    continue
                if entry.occurred_at is None:
                    undated += 1
                if options["dry_run"]:
                    saved += 1
                    continue
                try:
                    create_record(
                        owner,
                        kind,
                        amount=amount.quantize(CENT),
                        occurred_at=entry.occurred_at,
                        label=(entry.label or "Other")[:60],
                        title=entry.title[:200],
                    )
                except StoreUnavailable as exc:
                    failed += 1
                    self.stderr.write(f"{section}: {exc}")
                else:
                    saved += 1

        verb = "Would import" if options["dry_run"] else "Imported"
        self.stdout.write(self.style.SUCCESS(
            f"{verb} {saved} record(s); skipped {skipped}; undated {undated}; failed {failed}."
        ))
