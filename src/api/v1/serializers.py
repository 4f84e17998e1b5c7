"""Serializers for admin accounts and e-mail logs."""
from django.contrib.auth.password_validation import validate_password
from rest_framework import serializers

from accounts.lockout import lock_state
from accounts.models import User
from core.models import EmailLog


# ---------------------------------------------------------------------------
# Admin accounts
# ---------------------------------------------------------------------------

class AdminSerializer(serializers.ModelSerializer):
    """Read representation of an admin account, with its derived lock state."""
    is_super_admin = serializers.BooleanField(read_only=True)
    lock_state = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = [
            "id", "username", "email", "phone", "address",
            "role", "is_super_admin", "status", "lock_state",
            "account_locked_until", "account_lock_reason", "failed_login_attempts",
            "last_login", "last_login_ip", "date_joined", "meta",
        ]
        read_only_fields = fields

    def get_lock_state(self, obj):
        return lock_state(obj).value


class AdminCreateSerializer(serializers.ModelSerializer):
    password = serializers.CharField(write_only=True, min_length=8, style={"input_type": "password"})

    class Meta:
        model = User
        fields = ["id", "username", "email", "password", "phone", "address", "role"]
        read_only_fields = ["id"]

    def validate_email(self, value):
        value = value.strip().lower()
        if User.objects.filter(email__iexact=value).exists():
            raise serializers.ValidationError("An admin with this email address already exists.")
        return value

    def validate_password(self, value):
        validate_password(value)
        return value

    def create(self, validated_data):
        password = validated_data.pop("password")
        email = validated_data.pop("email")
        return User.objects.create_user(email, password, **validated_data)


class AdminUpdateSerializer(serializers.ModelSerializer):
    """Profile fields an admin record may change through PATCH."""

    class Meta:
        model = User
        fields = ["username", "phone", "address", "meta"]


class AdminLoginSerializer(serializers.Serializer):
    email = serializers.EmailField(
        error_messages={"required": "Email and password are required."},
    )
    password = serializers.CharField(
        trim_whitespace=False,
        style={"input_type": "password"},
        error_messages={"required": "Email and password are required."},
    )


class AdminStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=User.Status.choices)
    account_lock_reason = serializers.CharField(required=False, allow_blank=True, max_length=255)
    account_locked_until = serializers.DateTimeField(required=False, allow_null=True)


class AdminSuperAdminSerializer(serializers.Serializer):
    is_super_admin = serializers.BooleanField(
        error_messages={"invalid": "Invalid data. is_super_admin must be boolean."},
    )

    def validate_is_super_admin(self, value):
        if not isinstance(self.initial_data.get("is_super_admin"), bool):
            raise serializers.ValidationError("Invalid data. is_super_admin must be boolean.")
        return value


class AdminLockSerializer(serializers.Serializer):
    lock = serializers.BooleanField(
        error_messages={"invalid": "Invalid data. lock must be boolean."},
    )
    reason = serializers.CharField(allow_blank=True, max_length=255, default="")

    def validate_lock(self, value):
        if not isinstance(self.initial_data.get("lock"), bool):
            raise serializers.ValidationError("Invalid data. lock must be boolean.")
        return value


# ---------------------------------------------------------------------------
# E-mail logs
# ---------------------------------------------------------------------------

class EmailLogSerializer(serializers.ModelSerializer):
    class Meta:
        model = EmailLog
        fields = ["id", "email", "type", "status", "error", "metadata", "created_at"]
        read_only_fields = fields
