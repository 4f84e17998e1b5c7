from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="EmailLog",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("email", models.EmailField(db_index=True, max_length=254, verbose_name="recipient")),
                ("type", models.CharField(choices=[("security_alert", "Security alert"), ("other", "Other")], default="other", max_length=20, verbose_name="type")),
                ("status", models.CharField(choices=[("pending", "Pending"), ("sent", "Sent"), ("failed", "Failed")], max_length=10, verbose_name="status")),
                ("error", models.TextField(blank=True, default="", verbose_name="error")),
                ("metadata", models.JSONField(blank=True, default=dict, verbose_name="metadata")),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
            ],
            options={
                "verbose_name": "email log",
                "verbose_name_plural": "email logs",
                "ordering": ["-created_at", "-id"],
                "indexes": [models.Index(fields=["email", "created_at"], name="emaillog_email_created_idx")],
            },
        ),
    ]
