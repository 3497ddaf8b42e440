from django.core.management.base import BaseCommand
from django.utils import timezone
from inventory.selectors import overdue_days, overdue_loans


class Command(BaseCommand):
    help = "List completed borrows that are still out past the overdue window."

    def handle(self, *args, **options):
        now = timezone.now()
        count = 0
        for trx in overdue_loans(now=now):
            days_out = (now - trx.timestamp).days
            contact = trx.user.whatsapp_url or trx.user.email
            self.stdout.write(
                f"#{trx.id} {trx.item.sku} x{abs(trx.qty_change)} "
                f"borrowed by {trx.user.display_name} ({contact}) {days_out} days ago"
            )
            count += 1
        self.stdout.write(self.style.SUCCESS(f"Overdue loans (>{overdue_days()} days): {count}"))
