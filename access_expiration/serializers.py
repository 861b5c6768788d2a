from django.contrib.auth import get_user_model
from rest_framework import serializers
from rest_framework.fields import CharField, ChoiceField, DateTimeField

from access_expiration.models import AccessFlag
from access_expiration.store import get_registration_field, set_access_flag


class AccessExpirationSerializer(serializers.ModelSerializer):
    """
    A user with the access expiration metadata, the queryset has to be annotated with the metadata values.
    Only the access flag can be changed.
    """

    registered_at = DateTimeField(source=get_registration_field(), read_only=True)
    access_flag = ChoiceField(choices=AccessFlag.choices)
    registered_date = CharField(read_only=True)
    expiration_date = CharField(read_only=True)
    expiration_notification_count = CharField(read_only=True)
    welcome_notification_count = CharField(read_only=True)

    class Meta:
        model = get_user_model()
        fields = [
            "id",
            "username",
            "email",
            "is_active",
            "registered_at",
            "access_flag",
            "registered_date",
            "expiration_date",
            "expiration_notification_count",
            "welcome_notification_count",
        ]
        read_only_fields = ["id", "username", "email", "is_active"]

    def update(self, instance, validated_data):
        if "access_flag" in validated_data:
            access_flag = validated_data["access_flag"]
            set_access_flag(instance, access_flag, self.context["request"].user)
            instance.access_flag = access_flag
        return instance
