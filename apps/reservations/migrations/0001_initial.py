import django.db.models.deletion
from decimal import Decimal
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("catalog", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Reservation",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("formal_id", models.CharField(editable=False, max_length=32, unique=True)),
                ("reservation_hash", models.CharField(editable=False, max_length=64, unique=True)),
                ("option_label", models.CharField(blank=True, max_length=100)),
                ("check_in", models.DateTimeField()),
                ("check_out", models.DateTimeField()),
                ("full_name", models.CharField(max_length=150)),
                ("email", models.EmailField(max_length=254)),
                ("phone", models.CharField(max_length=20)),
                ("address", models.CharField(blank=True, max_length=255)),
                ("notes", models.TextField(blank=True)),
                ("guests", models.PositiveSmallIntegerField(default=1)),
                ("base_price", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=12)),
                ("discount_code", models.CharField(blank=True, max_length=32)),
                ("discount_amount", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=12)),
                ("final_total", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=12)),
                ("downpayment_amount", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=12)),
                ("remaining_balance", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=12)),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("CART", "Cart"),
                            ("PENDING", "Pending"),
                            ("PAID", "Paid"),
                            ("CONFIRMED", "Confirmed"),
                            ("CHECKED_IN", "Checked in"),
                            ("COMPLETED", "Completed"),
                            ("CANCELLED", "Cancelled"),
                            ("REJECTED", "Rejected"),
                        ],
                        default="PENDING",
                        max_length=20,
                    ),
                ),
                (
                    "payment_status",
                    models.CharField(
                        choices=[
                            ("cart", "Cart"),
                            ("pending", "Awaiting payment"),
                            ("partial-payment", "Downpayment submitted"),
                            ("partially-paid", "Downpayment approved"),
                            ("full-payment", "Full payment submitted"),
                            ("fully-paid", "Fully paid"),
                            ("rejected", "Payment rejected"),
                            ("refunded", "Refunded"),
                        ],
                        default="pending",
                        max_length=20,
                    ),
                ),
                (
                    "payment_type",
                    models.CharField(
                        blank=True,
                        choices=[("downpayment", "Downpayment"), ("full", "Full payment")],
                        max_length=20,
                    ),
                ),
                ("gcash_reference_number", models.CharField(blank=True, max_length=64)),
                (
                    "receipt_file_name",
                    models.CharField(blank=True, help_text="File name returned by the receipt storage.", max_length=255),
                ),
                ("receipt_uploaded_at", models.DateTimeField(blank=True, null=True)),
                ("payment_reviewed_at", models.DateTimeField(blank=True, null=True)),
                ("payment_rejection_reason", models.CharField(blank=True, max_length=255)),
                ("promo_usage_applied", models.BooleanField(default=False)),
                ("is_multi_amenity", models.BooleanField(default=False)),
                ("multi_amenity_group_id", models.UUIDField(blank=True, db_index=True, null=True)),
                ("multi_amenity_index", models.PositiveSmallIntegerField(default=0)),
                ("multi_amenity_total", models.PositiveSmallIntegerField(default=1)),
                ("multi_amenity_group_primary", models.BooleanField(default=False)),
                (
                    "group_final_total",
                    models.DecimalField(
                        blank=True,
                        decimal_places=2,
                        help_text="Total of the whole group, stored on the primary member only.",
                        max_digits=12,
                        null=True,
                    ),
                ),
                (
                    "reschedule_status",
                    models.CharField(
                        choices=[
                            ("NONE", "No request"),
                            ("PENDING", "Pending review"),
                            ("APPROVED", "Approved"),
                            ("REJECTED", "Rejected"),
                        ],
                        default="NONE",
                        max_length=10,
                    ),
                ),
                ("reschedule_proposed_check_in", models.DateTimeField(blank=True, null=True)),
                ("reschedule_proposed_check_out", models.DateTimeField(blank=True, null=True)),
                ("reschedule_reason", models.TextField(blank=True)),
                ("reschedule_requested_at", models.DateTimeField(blank=True, null=True)),
                ("reschedule_decided_at", models.DateTimeField(blank=True, null=True)),
                ("reschedule_rejection_reason", models.TextField(blank=True)),
                ("checked_in_at", models.DateTimeField(blank=True, null=True)),
                ("checked_out_at", models.DateTimeField(blank=True, null=True)),
                ("cancelled_at", models.DateTimeField(blank=True, null=True)),
                ("cancellation_reason", models.CharField(blank=True, max_length=255)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "account",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="reservations",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "payment_reviewed_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="reviewed_reservations",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "pricing_option",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="reservations",
                        to="catalog.pricingoption",
                    ),
                ),
                (
                    "service",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="reservations",
                        to="catalog.service",
                    ),
                ),
            ],
            options={
                "verbose_name": "Reservation",
                "verbose_name_plural": "Reservations",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["service", "check_in", "check_out"], name="reservation_service_window_idx"),
                    models.Index(fields=["status"], name="reservation_status_idx"),
                    models.Index(fields=["payment_status"], name="reservation_payment_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("check_out__gt", models.F("check_in"))),
                        name="reservation_valid_window",
                    ),
                ],
            },
        ),
    ]
