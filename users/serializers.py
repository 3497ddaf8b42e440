"""Serializers for user profile, directory, and sign-in flows.

- UserMeSerializer: profile data for the authenticated user (editable contact fields).
- UserDirectorySerializer: read-only directory entry for admins.
- InviteUserSerializer: action serializer to invite or update a user by email.
- RoleSerializer: action serializer to change a user's role.
- EmailOrPhoneTokenObtainPairSerializer: obtain JWTs using email or phone.
"""

from rest_framework import serializers
from rest_framework_simplejwt.tokens import RefreshToken

from .models import User


class UserMeSerializer(serializers.ModelSerializer):
    """Profile of the current user; only contact fields are writable."""

    whatsapp_url = serializers.CharField(read_only=True)

    class Meta:
        model = User
        fields = ["id", "username", "email", "display_name", "photo_url", "phone", "role", "whatsapp_url"]
        read_only_fields = ["id", "username", "email", "role", "whatsapp_url"]


class UserDirectorySerializer(serializers.ModelSerializer):
    whatsapp_url = serializers.CharField(read_only=True)

    class Meta:
        model = User
        fields = [
            "id",
            "email",
            "display_name",
            "photo_url",
            "phone",
            "role",
            "is_active",
            "whatsapp_url",
            "date_joined",
        ]
        read_only_fields = fields


class InviteUserSerializer(serializers.Serializer):
    email = serializers.EmailField()
    display_name = serializers.CharField(required=False, allow_blank=True, max_length=150)
    phone = serializers.RegexField(r"^\+?[1-9]\d{1,14}$", required=False, allow_blank=True)
    photo_url = serializers.URLField(required=False, allow_blank=True)
    role = serializers.ChoiceField(choices=User.ROLE_CHOICES, required=False)


class RoleSerializer(serializers.Serializer):
    role = serializers.ChoiceField(choices=User.ROLE_CHOICES)


class SignOutSerializer(serializers.Serializer):
    """Request body for signing out (blacklisting refresh token)."""

    refresh = serializers.CharField()


class EmailOrPhoneTokenObtainPairSerializer(serializers.Serializer):
    """Obtain JWTs by authenticating with either email or phone.

    Accepts a single `identifier` field which may be an email address
    (case-insensitive) or an E.164 phone number, and a `password`.
    Returns `access` and `refresh` tokens on success.
    """

    identifier = serializers.CharField()
    password = serializers.CharField(write_only=True)

    def validate(self, attrs):
        identifier = (attrs.get("identifier") or "").strip()
        password = attrs.get("password") or ""

        if not identifier or not password:
            raise serializers.ValidationError({"detail": "identifier and password are required."})

        user = None
        lookup = {"email": identifier.lower()} if "@" in identifier else {"phone": identifier}
        try:
            user = User.objects.get(**lookup)
        except (User.DoesNotExist, User.MultipleObjectsReturned):
            pass

        if not user or not user.check_password(password) or not user.is_active:
            raise serializers.ValidationError({"detail": "Invalid credentials."})

        refresh = RefreshToken.for_user(user)
        return {"access": str(refresh.access_token), "refresh": str(refresh)}
