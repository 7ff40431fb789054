import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("tokens", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="LedgerState",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("administrator", models.CharField(max_length=255)),
                ("paused", models.BooleanField(default=False)),
                ("reward_rate", models.PositiveBigIntegerField()),
                ("engine_account", models.CharField(max_length=255, unique=True)),
                (
                    "token",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT, related_name="ledger_states", to="tokens.token"
                    ),
                ),
            ],
            options={
                "abstract": False,
            },
        ),
        migrations.CreateModel(
            name="Merchant",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("principal", models.CharField(max_length=255)),
                (
                    "state",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="merchants",
                        to="rewards.ledgerstate",
                    ),
                ),
            ],
            options={
                "unique_together": {("state", "principal")},
            },
        ),
        migrations.CreateModel(
            name="RewardItem",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("reward_id", models.CharField(max_length=64)),
                ("name", models.CharField(blank=True, max_length=255)),
                ("cost", models.PositiveBigIntegerField(default=0)),
                ("stock", models.PositiveBigIntegerField(default=0)),
                ("available", models.BooleanField(default=False)),
                ("limited", models.BooleanField(default=False)),
                (
                    "state",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="catalogue",
                        to="rewards.ledgerstate",
                    ),
                ),
            ],
            options={
                "unique_together": {("state", "reward_id")},
            },
        ),
    ]
