from django.contrib.auth import get_user_model
from django_filters import ChoiceFilter, FilterSet
from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import mixins, viewsets

from access_expiration.models import AccessFlag
from access_expiration.permissions import IsAdministrator
from access_expiration.serializers import AccessExpirationSerializer
from access_expiration.store import annotate_meta

string_filters = ["exact", "iexact", "contains", "icontains"]
boolean_filters = ["exact"]


class AccessExpirationFilterSet(FilterSet):
    # annotated metadata value, not a model field
    access_flag = ChoiceFilter(field_name="access_flag", choices=AccessFlag.choices)

    class Meta:
        model = get_user_model()
        fields = {
            "username": string_filters,
            "email": string_filters,
            "is_active": boolean_filters,
        }


class AccessExpirationViewSet(
    mixins.ListModelMixin, mixins.RetrieveModelMixin, mixins.UpdateModelMixin, viewsets.GenericViewSet
):
    """Users' access expiration data. Administrators can allow or deny access with a PATCH of access_flag"""

    serializer_class = AccessExpirationSerializer
    permission_classes = [IsAdministrator]
    filter_backends = [DjangoFilterBackend]
    filterset_class = AccessExpirationFilterSet
    http_method_names = ["get", "patch", "head", "options"]

    def get_queryset(self):
        return annotate_meta(get_user_model().objects.all()).order_by("id")
