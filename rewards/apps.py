from django.apps import AppConfig


class RewardsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "rewards"
    verbose_name = "Reward Ledger"

    def ready(self):
        # Registers notification forwarding and cache invalidation receivers.
        from rewards import signals  # noqa: F401
