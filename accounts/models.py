from django.contrib.auth.models import AbstractUser


class User(AbstractUser):
    """
    Learner account. Decks, sessions, lessons and review history all hang off it.
    """

    pass
