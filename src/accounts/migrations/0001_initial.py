import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("auth", "0012_alter_user_first_name_max_length"),
    ]

    operations = [
        migrations.CreateModel(
            name="User",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("password", models.CharField(max_length=128, verbose_name="password")),
                ("last_login", models.DateTimeField(blank=True, null=True, verbose_name="last login")),
                ("is_superuser", models.BooleanField(default=False, help_text="Designates that this user has all permissions without explicitly assigning them.", verbose_name="superuser status")),
                ("username", models.CharField(error_messages={"unique": "An admin with this username already exists."}, max_length=150, unique=True, verbose_name="username")),
                ("email", models.EmailField(error_messages={"unique": "An admin with this email address already exists."}, max_length=254, unique=True, verbose_name="email address")),
                ("phone", models.CharField(blank=True, default="", max_length=30, verbose_name="phone")),
                ("address", models.CharField(blank=True, default="", max_length=255, verbose_name="address")),
                ("role", models.CharField(choices=[("admin", "Admin"), ("super_admin", "Super admin")], db_index=True, default="admin", max_length=20, verbose_name="role")),
                ("is_staff", models.BooleanField(default=False, verbose_name="staff status")),
                ("date_joined", models.DateTimeField(default=django.utils.timezone.now, verbose_name="date joined")),
                ("last_login_ip", models.GenericIPAddressField(blank=True, null=True, verbose_name="last login IP")),
                ("status", models.CharField(choices=[("active", "Active"), ("inactive", "Inactive")], db_index=True, default="active", max_length=10, verbose_name="status")),
                ("account_locked_until", models.DateTimeField(blank=True, null=True, verbose_name="locked until")),
                ("account_lock_reason", models.CharField(blank=True, default="", max_length=255, verbose_name="lock reason")),
                ("failed_login_attempts", models.PositiveIntegerField(default=0, verbose_name="failed login attempts")),
                ("meta", models.JSONField(blank=True, default=dict, verbose_name="metadata")),
                ("groups", models.ManyToManyField(blank=True, help_text="The groups this user belongs to. A user will get all permissions granted to each of their groups.", related_name="user_set", related_query_name="user", to="auth.group", verbose_name="groups")),
                ("user_permissions", models.ManyToManyField(blank=True, help_text="Specific permissions for this user.", related_name="user_set", related_query_name="user", to="auth.permission", verbose_name="user permissions")),
            ],
            options={
                "verbose_name": "admin",
                "verbose_name_plural": "admins",
                "ordering": ["-date_joined"],
                "indexes": [models.Index(fields=["status", "account_locked_until"], name="user_lock_state_idx")],
            },
        ),
    ]
