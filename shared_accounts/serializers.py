from rest_framework import serializers

from .models import SharedAccount


class SharedAccountSerializer(serializers.ModelSerializer):
    authorized_emails = serializers.ListField(child=serializers.EmailField(), required=False)

    class Meta:
        model = SharedAccount
        fields = [
            "id",
            "platform",
            "username",
            "email",
            "password",
            "notes",
            "is_active",
            "authorized_emails",
            "url",
            "icon_url",
            "login_method",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "created_at", "updated_at"]

    def validate_authorized_emails(self, value):
        seen = []
        for email in value:
            email = email.strip().lower()
            if email not in seen:
                seen.append(email)
        return seen
