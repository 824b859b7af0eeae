from django.contrib.auth.models import AbstractUser
from django.db import models


class User(AbstractUser):
    """Back-office users: managers run the shop, staff take orders."""

    class Role(models.TextChoices):
        MANAGER = 'manager', 'Manager'
        STAFF = 'staff', 'Staff'

    email = models.EmailField(unique=True)
    role = models.CharField(max_length=20, choices=Role.choices, default=Role.STAFF)

    class Meta:
        db_table = 'accounts_user'

    @property
    def is_manager(self):
        return self.role == self.Role.MANAGER
