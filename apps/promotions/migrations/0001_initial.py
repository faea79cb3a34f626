import django.core.validators
from decimal import Decimal
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="PromoCode",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("code", models.CharField(max_length=32, unique=True)),
                ("description", models.CharField(blank=True, max_length=255)),
                (
                    "discount_percentage",
                    models.DecimalField(
                        decimal_places=2,
                        help_text="Fraction of the subtotal, e.g. 0.10 for 10%.",
                        max_digits=3,
                        validators=[
                            django.core.validators.MinValueValidator(Decimal("0.01")),
                            django.core.validators.MaxValueValidator(Decimal("1.00")),
                        ],
                    ),
                ),
                ("expiration_date", models.DateField()),
                ("min_purchase_amount", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=12)),
                ("usage_limit", models.PositiveIntegerField(default=50)),
                ("times_used", models.PositiveIntegerField(default=0)),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
            options={
                "verbose_name": "Promo code",
                "verbose_name_plural": "Promo codes",
                "ordering": ["-created_at"],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(
                            ("discount_percentage__gte", Decimal("0.01")),
                            ("discount_percentage__lte", Decimal("1.00")),
                        ),
                        name="promo_code_discount_range",
                    ),
                ],
            },
        ),
    ]
