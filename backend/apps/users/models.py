from django.contrib.auth.models import AbstractUser
from django.db import models


class User(AbstractUser):
    # id, username, password, is_staff, is_superuser... are inherited.
    # Accounts are provisioned by the identity service; the engine only reads ids.
    email = models.EmailField(unique=True)

    def __str__(self):
        return self.username
