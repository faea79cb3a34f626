import django.core.validators
import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Service",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("code", models.SlugField(max_length=64, unique=True)),
                ("name", models.CharField(max_length=150)),
                (
                    "category",
                    models.CharField(
                        choices=[
                            ("rooms", "Rooms"),
                            ("venues", "Venues"),
                            ("pools", "Pools"),
                            ("cottages", "Cottages"),
                            ("other", "Other"),
                        ],
                        default="other",
                        max_length=20,
                    ),
                ),
                ("description", models.TextField(blank=True)),
                (
                    "max_guests",
                    models.PositiveIntegerField(default=1, validators=[django.core.validators.MinValueValidator(1)]),
                ),
                (
                    "pricing_model",
                    models.CharField(
                        choices=[("duration", "Duration based"), ("time_slot", "Time slot based")],
                        max_length=20,
                    ),
                ),
                ("inclusions", models.JSONField(blank=True, default=list)),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "verbose_name": "Service",
                "verbose_name_plural": "Services",
                "ordering": ["name"],
            },
        ),
        migrations.CreateModel(
            name="PricingOption",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("code", models.SlugField(max_length=64)),
                ("label", models.CharField(max_length=100)),
                (
                    "price",
                    models.DecimalField(
                        decimal_places=2,
                        max_digits=10,
                        validators=[django.core.validators.MinValueValidator(0)],
                    ),
                ),
                ("hours", models.PositiveIntegerField(blank=True, null=True)),
                (
                    "time_slot",
                    models.CharField(
                        blank=True,
                        choices=[("day", "Day (07:00-17:00)"), ("night", "Night (19:00-05:00)")],
                        max_length=10,
                    ),
                ),
                ("guest_min", models.PositiveIntegerField(blank=True, null=True)),
                ("guest_max", models.PositiveIntegerField(blank=True, null=True)),
                ("sort_order", models.PositiveSmallIntegerField(default=0)),
                (
                    "service",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="pricing_options",
                        to="catalog.service",
                    ),
                ),
            ],
            options={
                "verbose_name": "Pricing option",
                "verbose_name_plural": "Pricing options",
                "ordering": ["sort_order", "id"],
                "constraints": [
                    models.UniqueConstraint(fields=("service", "code"), name="unique_pricing_option_code"),
                ],
            },
        ),
    ]
