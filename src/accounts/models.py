from django.contrib.auth.models import (
    AbstractBaseUser,
    BaseUserManager,
    PermissionsMixin,
)
from django.db import models
from django.utils import timezone


class UserManager(BaseUserManager):
    """Custom manager for admin accounts that uses email as the unique identifier."""

    def create_user(self, email, password=None, **extra_fields):
        if not email:
            raise ValueError("An email address is required.")
        email = self.normalize_email(email).lower()
        extra_fields.setdefault("username", email.split("@")[0])
        user = self.model(email=email, **extra_fields)
        user.set_password(password)
        user.save(using=self._db)
        return user

    def create_superuser(self, email, password=None, **extra_fields):
        extra_fields.setdefault("role", User.Role.SUPER_ADMIN)
        extra_fields.setdefault("is_staff", True)
        extra_fields.setdefault("is_superuser", True)

        if extra_fields.get("is_staff") is not True:
            raise ValueError("A superuser must have is_staff=True.")
        if extra_fields.get("is_superuser") is not True:
            raise ValueError("A superuser must have is_superuser=True.")

        return self.create_user(email, password, **extra_fields)


class User(AbstractBaseUser, PermissionsMixin):
    """
    Back-office administrator account.

    Besides credentials it carries the account lock state: ``status``,
    ``account_locked_until``, ``account_lock_reason`` and the
    ``failed_login_attempts`` counter. Transitions live in
    :mod:`accounts.lockout`; this model only stores them.
    """

    class Role(models.TextChoices):
        ADMIN = "admin", "Admin"
        SUPER_ADMIN = "super_admin", "Super admin"

    class Status(models.TextChoices):
        ACTIVE = "active", "Active"
        INACTIVE = "inactive", "Inactive"

    username = models.CharField(
        "username",
        max_length=150,
        unique=True,
        error_messages={
            "unique": "An admin with this username already exists.",
        },
    )
    email = models.EmailField(
        "email address",
        unique=True,
        error_messages={
            "unique": "An admin with this email address already exists.",
        },
    )
    phone = models.CharField("phone", max_length=30, blank=True, default="")
    address = models.CharField("address", max_length=255, blank=True, default="")
    role = models.CharField(
        "role",
        max_length=20,
        choices=Role.choices,
        default=Role.ADMIN,
        db_index=True,
    )
    is_staff = models.BooleanField("staff status", default=False)
    date_joined = models.DateTimeField("date joined", default=timezone.now)
    last_login_ip = models.GenericIPAddressField("last login IP", null=True, blank=True)

    # Lock state
    status = models.CharField(
        "status",
        max_length=10,
        choices=Status.choices,
        default=Status.ACTIVE,
        db_index=True,
    )
    account_locked_until = models.DateTimeField("locked until", null=True, blank=True)
    account_lock_reason = models.CharField("lock reason", max_length=255, blank=True, default="")
    failed_login_attempts = models.PositiveIntegerField("failed login attempts", default=0)

    meta = models.JSONField("metadata", default=dict, blank=True)

    objects = UserManager()

    USERNAME_FIELD = "email"
    REQUIRED_FIELDS = ["username"]

    class Meta:
        verbose_name = "admin"
        verbose_name_plural = "admins"
        ordering = ["-date_joined"]
        indexes = [
            models.Index(fields=["status", "account_locked_until"], name="user_lock_state_idx"),
        ]

    def __str__(self):
        return self.username or self.email

    def get_full_name(self):
        return self.username

    def get_short_name(self):
        return self.username

    @property
    def is_active(self):
        return self.status == self.Status.ACTIVE

    @property
    def is_super_admin(self):
        return self.is_superuser or self.role == self.Role.SUPER_ADMIN
