from django.core.management.base import BaseCommand
from django.db import transaction

from accounts.models import User
from scheduling.data.models import Card, Deck


class Command(BaseCommand):
    help = "Reset users and load a demo learner with decks of new cards"

    def add_arguments(self, parser):
        parser.add_argument("--decks", type=int, default=2, help="Number of decks to create")
        parser.add_argument("--cards", type=int, default=30, help="Cards per deck")
        parser.add_argument("--username", default="testuser")

    @transaction.atomic
    def handle(self, *args, **options):
        User.objects.all().delete()
        self.stdout.write(self.style.SUCCESS("All existing user data has been deleted"))

        user = User.objects.create_user(
            options["username"], email=f"{options['username']}@example.com"
        )
        for d in range(1, options["decks"] + 1):
            deck = Deck.objects.create(user=user, name=f"Demo deck {d}")
            Card.objects.bulk_create(
                Card(deck=deck, question=f"Question {d}.{n}", answer=f"Answer {d}.{n}")
                for n in range(1, options["cards"] + 1)
            )
            self.stdout.write(f"{deck.id} {deck.name}")

        self.stdout.write(
            self.style.SUCCESS(f"Demo data loaded for {user.username}")
        )
