"""API views for blocked ranges and availability checks."""

from __future__ import annotations

import logging

from rest_framework import mixins, permissions, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.response import Response  # type: ignore
from rest_framework.views import APIView  # type: ignore

from apps.users.permissions import IsResortStaff

from .models import BlockedRange
from .serializers import AvailabilityCheckSerializer, BlockedRangeSerializer, BlockedRangeWriteSerializer
from .services import is_available

logger = logging.getLogger(__name__)


class BlockedRangeViewSet(
    mixins.ListModelMixin,
    mixins.CreateModelMixin,
    mixins.DestroyModelMixin,
    viewsets.GenericViewSet,
):
    """Blocked date ranges. Active ranges are public; staff manage them."""

    queryset = BlockedRange.objects.select_related("blocked_by").prefetch_related("services")

    def get_permissions(self):  # type: ignore
        if self.action == "list":
            return [permissions.AllowAny()]
        return [IsResortStaff()]

    def get_serializer_class(self):  # type: ignore
        if self.action == "create":
            return BlockedRangeWriteSerializer
        return BlockedRangeSerializer

    def get_queryset(self):  # type: ignore
        qs = super().get_queryset()
        if self.action == "list":
            return qs.active()
        return qs

    def create(self, request, *args, **kwargs):  # type: ignore
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        blocked_range = serializer.save(blocked_by=request.user)
        logger.info(
            f"Blocked range {blocked_range.pk} created by {request.user.pk}: "
            f"{blocked_range.start_date}..{blocked_range.end_date}"
        )
        return Response(BlockedRangeSerializer(blocked_range).data, status=status.HTTP_201_CREATED)

    def perform_destroy(self, instance):  # type: ignore
        logger.info(f"Blocked range {instance.pk} deleted by {self.request.user.pk}")
        instance.delete()

    @action(detail=False, methods=["get"])
    def all(self, request):  # type: ignore
        """Every blocked range including past ones, for staff."""
        serializer = BlockedRangeSerializer(self.get_queryset().order_by("start_date", "id"), many=True)
        return Response(serializer.data)


class AvailabilityCheckView(APIView):
    permission_classes = [permissions.AllowAny]

    def post(self, request):  # type: ignore
        serializer = AvailabilityCheckSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        result = is_available(data["service"], data["check_in"], data["check_out"])
        return Response(result.as_dict(), status=status.HTTP_200_OK)
