"""Serializers for user-related API endpoints."""

from __future__ import annotations

from django.contrib.auth import get_user_model  # type: ignore
from rest_framework import serializers  # type: ignore

User = get_user_model()


class UserSerializer(serializers.ModelSerializer):
    """Account profile as returned by the auth endpoints."""

    is_resort_staff = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = [
            "id",
            "email",
            "username",
            "first_name",
            "last_name",
            "phone",
            "address",
            "role",
            "is_resort_staff",
            "created_at",
            "updated_at",
        ]
        read_only_fields = [
            "id",
            "role",
            "is_resort_staff",
            "created_at",
            "updated_at",
        ]

    def get_is_resort_staff(self, obj) -> bool:
        return obj.is_resort_staff()
