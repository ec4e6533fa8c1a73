import django.core.validators
import django.db.models.deletion
from decimal import Decimal
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Expense",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("amount", models.DecimalField(decimal_places=2, help_text="Positive amount (e.g., 250.00)", max_digits=12, validators=[django.core.validators.MinValueValidator(Decimal("0.01"))])),
                ("occurred_at", models.DateTimeField(blank=True, help_text="When did this happen?", null=True)),
                ("recorded_at", models.DateTimeField(auto_now_add=True)),
                ("title", models.CharField(blank=True, help_text="Short description, e.g., 'UPI/ZOMATO/1234'", max_length=200)),
                ("category", models.CharField(help_text="e.g., Groceries, Rent, Travel", max_length=60)),
                ("owner", models.ForeignKey(help_text="Owner of this record", on_delete=django.db.models.deletion.CASCADE, related_name="expense_records", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "ordering": ["-recorded_at", "-id"],
                "abstract": False,
                "indexes": [models.Index(fields=["owner", "recorded_at"], name="expense_owner_recorded_idx")],
            },
        ),
        migrations.CreateModel(
            name="Income",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("amount", models.DecimalField(decimal_places=2, help_text="Positive amount (e.g., 250.00)", max_digits=12, validators=[django.core.validators.MinValueValidator(Decimal("0.01"))])),
                ("occurred_at", models.DateTimeField(blank=True, help_text="When did this happen?", null=True)),
                ("recorded_at", models.DateTimeField(auto_now_add=True)),
                ("title", models.CharField(blank=True, help_text="Short description, e.g., 'UPI/ZOMATO/1234'", max_length=200)),
                ("source", models.CharField(help_text="e.g., Salary, Freelancing, Gift", max_length=60)),
                ("owner", models.ForeignKey(help_text="Owner of this record", on_delete=django.db.models.deletion.CASCADE, related_name="income_records", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "ordering": ["-recorded_at", "-id"],
                "abstract": False,
                "indexes": [models.Index(fields=["owner", "recorded_at"], name="income_owner_recorded_idx")],
            },
        ),
    ]
