"""API views for the reservations domain."""

from __future__ import annotations

import secrets

from django_filters.rest_framework import DjangoFilterBackend  # type: ignore
from rest_framework import filters, mixins, permissions, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.response import Response  # type: ignore

from apps.catalog.models import Service
from apps.users.permissions import IsResortStaff, is_resort_staff
from shared.domain.exceptions import NotFoundError

from . import reschedule
from .cart import add_to_cart, cart_items, remove_from_cart, submit_cart
from .domain.states import SUBMITTED_PAYMENT_STATUSES, ReservationStatus, RescheduleStatus
from .filters import ReservationFilterSet
from .groups import GroupAction, apply_group_action, create_group
from .models import Reservation
from .serializers import (
    ActionReasonSerializer,
    CartSubmitSerializer,
    MultiReservationCreateSerializer,
    ReceiptUploadSerializer,
    ReservationCreateSerializer,
    ReservationSerializer,
    ReservationWindowSerializer,
    RescheduleRejectSerializer,
    RescheduleRequestSerializer,
)
from .services import (
    check_in_reservation,
    complete_reservation,
    create_reservation,
    find_reservation,
    submit_receipt,
)
from .tasks import notify_reschedule_decision, notify_reservation_completed, schedule

PUBLIC_ACTIONS = ("create", "multi", "by_hash", "by_service", "upload_receipt", "cancel", "reschedule_request")
STAFF_ACTIONS = (
    "approve",
    "reject",
    "settle_balance",
    "check_in",
    "checkout",
    "approve_reschedule",
    "reject_reschedule",
    "pending_payments",
    "reschedule_requests",
)


def holds_reservation(request, reservation: Reservation) -> bool:
    """Owner, resort staff, or a caller presenting the reservation hash."""
    user = request.user
    if is_resort_staff(user):
        return True
    if user.is_authenticated and reservation.account_id == user.id:
        return True
    presented = request.data.get("reservation_hash") or request.query_params.get("hash") or ""
    return bool(presented) and secrets.compare_digest(str(presented), reservation.reservation_hash)


class IsReservationHolder(permissions.BasePermission):
    message = "You are not allowed to manage this reservation."

    def has_object_permission(self, request, view, obj: Reservation):  # type: ignore
        return holds_reservation(request, obj)


class ReservationViewSet(mixins.ListModelMixin, mixins.RetrieveModelMixin, viewsets.GenericViewSet):
    """
    Reservations: creation, payment review, reschedules and on-site lifecycle.

    Detail routes accept the internal id, the formal id (``TRR-...``) or the
    reservation hash.
    """

    queryset = Reservation.objects.visible().select_related("service", "pricing_option")
    serializer_class = ReservationSerializer
    lookup_value_regex = "[^/]+"
    filter_backends = [DjangoFilterBackend, filters.OrderingFilter, filters.SearchFilter]
    filterset_class = ReservationFilterSet
    ordering_fields = ["created_at", "check_in", "final_total"]
    search_fields = ["formal_id", "full_name", "email", "phone"]

    def get_permissions(self):  # type: ignore
        if self.action in STAFF_ACTIONS:
            return [IsResortStaff()]
        if self.action in ("cancel", "reschedule_request"):
            return [IsReservationHolder()]
        if self.action in PUBLIC_ACTIONS:
            return [permissions.AllowAny()]
        return [permissions.IsAuthenticated(), IsReservationHolder()]

    def get_serializer_class(self):  # type: ignore
        if self.action == "create":
            return ReservationCreateSerializer
        if self.action == "multi":
            return MultiReservationCreateSerializer
        return ReservationSerializer

    def get_queryset(self):  # type: ignore
        qs = super().get_queryset()
        user = self.request.user
        if is_resort_staff(user):
            return qs
        if not user.is_authenticated:
            return qs.none()
        return qs.filter(account=user)

    def get_object(self):  # type: ignore
        reservation = find_reservation(self.kwargs[self.lookup_url_kwarg or self.lookup_field])
        self.check_object_permissions(self.request, reservation)
        return reservation

    def _respond(self, reservation: Reservation, status_code=status.HTTP_200_OK) -> Response:
        serializer = ReservationSerializer(reservation, context=self.get_serializer_context())
        return Response(serializer.data, status=status_code)

    def _group_response(self, reservation: Reservation, group_action: GroupAction, reason: str = "") -> Response:
        ids = apply_group_action(
            reservation.pk,
            group_action,
            reason=reason,
            performed_by=self.request.user if self.request.user.is_authenticated else None,
        )
        members = (
            Reservation.objects.filter(pk__in=ids)
            .select_related("service")
            .order_by("multi_amenity_index", "pk")
        )
        return Response(
            {
                "affected_ids": ids,
                "reservations": ReservationSerializer(members, many=True).data,
            }
        )

    # -------------------------------------------------------------------
    # Creation and public lookups
    # -------------------------------------------------------------------

    def create(self, request, *args, **kwargs):  # type: ignore
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        reservation = create_reservation(
            serializer.reservation_request(),
            account=request.user,
            promo_code=serializer.validated_data.get("promo_code") or None,
        )
        return self._respond(reservation, status.HTTP_201_CREATED)

    @action(detail=False, methods=["post"])
    def multi(self, request):  # type: ignore
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        reservations = create_group(
            serializer.reservation_requests(),
            account=request.user,
            promo_code=serializer.validated_data.get("promo_code") or None,
        )
        data = ReservationSerializer(reservations, many=True).data
        return Response(
            {
                "ids": [reservation.pk for reservation in reservations],
                "multi_amenity_group_id": reservations[0].multi_amenity_group_id,
                "reservations": data,
            },
            status=status.HTTP_201_CREATED,
        )

    @action(detail=False, methods=["get"], url_path=r"by-hash/(?P<reservation_hash>[^/]+)")
    def by_hash(self, request, reservation_hash=None):  # type: ignore
        reservation = (
            Reservation.objects.visible().select_related("service").filter(reservation_hash=reservation_hash).first()
        )
        if reservation is None:
            raise NotFoundError("Reservation not found.")
        group = []
        if reservation.multi_amenity_group_id:
            group = ReservationSerializer(
                Reservation.objects.in_group(reservation.multi_amenity_group_id).select_related("service"),
                many=True,
            ).data
        return Response({"reservation": self.get_serializer(reservation).data, "group": group})

    @action(detail=False, methods=["get"], url_path=r"by-service/(?P<service_code>[^/]+)")
    def by_service(self, request, service_code=None):  # type: ignore
        service = Service.objects.filter(code=service_code).first()
        if service is None:
            raise NotFoundError(f"Service {service_code} not found.")
        windows = Reservation.objects.blocking().filter(service=service).order_by("check_in")
        return Response(ReservationWindowSerializer(windows, many=True).data)

    @action(detail=False, methods=["post"], url_path="upload-receipt")
    def upload_receipt(self, request):  # type: ignore
        serializer = ReceiptUploadSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        members = submit_receipt(
            serializer.validated_data["hashes"],
            gcash_reference_number=serializer.validated_data["gcash_reference_number"],
            receipt_file_name=serializer.validated_data["receipt_file_name"],
            payment_type=serializer.validated_data["payment_type"],
        )
        return Response(
            {
                "affected_ids": [member.pk for member in members],
                "reservations": ReservationSerializer(members, many=True).data,
            }
        )

    # -------------------------------------------------------------------
    # Staff queues
    # -------------------------------------------------------------------

    @action(detail=False, methods=["get"], url_path="pending-payments")
    def pending_payments(self, request):  # type: ignore
        qs = self.filter_queryset(
            self.get_queryset().filter(
                status=ReservationStatus.PENDING,
                payment_status__in=SUBMITTED_PAYMENT_STATUSES,
            )
        ).order_by("receipt_uploaded_at", "pk")
        return Response(self.get_serializer(qs, many=True).data)

    @action(detail=False, methods=["get"], url_path="reschedule-requests")
    def reschedule_requests(self, request):  # type: ignore
        qs = self.get_queryset().filter(reschedule_status=RescheduleStatus.PENDING).order_by(
            "reschedule_requested_at", "pk"
        )
        return Response(self.get_serializer(qs, many=True).data)

    # -------------------------------------------------------------------
    # Group actions
    # -------------------------------------------------------------------

    @action(detail=True, methods=["patch"])
    def approve(self, request, pk=None):  # type: ignore
        return self._group_response(self.get_object(), GroupAction.APPROVE)

    @action(detail=True, methods=["patch"])
    def reject(self, request, pk=None):  # type: ignore
        serializer = ActionReasonSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        return self._group_response(self.get_object(), GroupAction.REJECT, serializer.validated_data["reason"])

    @action(detail=True, methods=["post"])
    def cancel(self, request, pk=None):  # type: ignore
        serializer = ActionReasonSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        return self._group_response(self.get_object(), GroupAction.CANCEL, serializer.validated_data["reason"])

    @action(detail=True, methods=["patch"], url_path="settle-balance")
    def settle_balance(self, request, pk=None):  # type: ignore
        return self._group_response(self.get_object(), GroupAction.SETTLE_BALANCE)

    # -------------------------------------------------------------------
    # On-site lifecycle
    # -------------------------------------------------------------------

    @action(detail=True, methods=["patch"], url_path="check-in")
    def check_in(self, request, pk=None):  # type: ignore
        return self._respond(check_in_reservation(self.get_object()))

    @action(detail=True, methods=["patch"])
    def checkout(self, request, pk=None):  # type: ignore
        reservation = complete_reservation(self.get_object())
        schedule(notify_reservation_completed, reservation.pk)
        return self._respond(reservation)

    # -------------------------------------------------------------------
    # Reschedule
    # -------------------------------------------------------------------

    @action(detail=True, methods=["put"], url_path="reschedule-request")
    def reschedule_request(self, request, pk=None):  # type: ignore
        reservation = self.get_object()
        serializer = RescheduleRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        reservation = reschedule.request_reschedule(
            reservation,
            serializer.validated_data["proposed_check_in"],
            serializer.validated_data.get("proposed_check_out"),
            serializer.validated_data["reason"],
        )
        return self._respond(reservation)

    @action(detail=True, methods=["put"], url_path="approve-reschedule")
    def approve_reschedule(self, request, pk=None):  # type: ignore
        reservation = reschedule.approve_reschedule(self.get_object())
        schedule(notify_reschedule_decision, reservation.pk)
        return self._respond(reservation)

    @action(detail=True, methods=["put"], url_path="reject-reschedule")
    def reject_reschedule(self, request, pk=None):  # type: ignore
        serializer = RescheduleRejectSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        reservation = reschedule.reject_reschedule(self.get_object(), serializer.validated_data["reason"])
        schedule(notify_reschedule_decision, reservation.pk)
        return self._respond(reservation)


class CartViewSet(viewsets.ViewSet):
    """Server-side cart drafts of the signed-in customer."""

    permission_classes = [permissions.IsAuthenticated]

    def list(self, request):  # type: ignore
        return Response(ReservationSerializer(cart_items(request.user), many=True).data)

    def create(self, request):  # type: ignore
        serializer = ReservationCreateSerializer(data=request.data, context={"request": request})
        serializer.is_valid(raise_exception=True)
        draft = add_to_cart(request.user, serializer.reservation_request())
        return Response(ReservationSerializer(draft).data, status=status.HTTP_201_CREATED)

    def destroy(self, request, pk=None):  # type: ignore
        remove_from_cart(request.user, int(pk))
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=False, methods=["post"])
    def submit(self, request):  # type: ignore
        serializer = CartSubmitSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        reservations = submit_cart(
            request.user,
            serializer.validated_data["ids"],
            promo_code=serializer.validated_data.get("promo_code") or None,
        )
        return Response(
            {
                "ids": [reservation.pk for reservation in reservations],
                "multi_amenity_group_id": reservations[0].multi_amenity_group_id,
                "reservations": ReservationSerializer(reservations, many=True).data,
            },
            status=status.HTTP_201_CREATED,
        )
