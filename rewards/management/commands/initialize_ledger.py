"""
Management command that deploys a point token and a reward program on top of it.
"""

from django.core.management.base import BaseCommand, CommandError
from django.db import transaction

from core.exceptions import RewardLedgerError
from rewards.services import RewardEngine
from tokens.services import TokenLedger


class Command(BaseCommand):
    help = "Deploys a loyalty token and initializes a reward ledger that may mint it"

    def add_arguments(self, parser):
        parser.add_argument("--admin", required=True, help="Principal administering the program and owning the token")
        parser.add_argument("--token-name", default="Loyalty Points", help="Human readable token name")
        parser.add_argument("--token-symbol", default="LOYAL", help="Token ticker symbol")
        parser.add_argument("--rate", type=int, default=1, help="Points issued per purchase unit")
        parser.add_argument("--engine-account", default=None, help="Principal of the engine on the token ledger")

    def handle(self, *args, **options):
        admin = options["admin"]

        try:
            with transaction.atomic():
                token_ledger = TokenLedger.deploy(options["token_name"], options["token_symbol"], owner=admin)
                engine = RewardEngine.initialize(
                    token_ledger, options["rate"], administrator=admin, engine_account=options["engine_account"]
                )
                # Issuance needs the engine to hold minting authority on the token.
                token_ledger.grant_minter(admin, engine.state.engine_account)
        except RewardLedgerError as e:
            raise CommandError(f"Could not initialize ledger: {e}") from e

        self.stdout.write(
            self.style.SUCCESS(
                f"Ledger #{engine.state.pk} initialized for {token_ledger.token} "
                f"(engine account: {engine.state.engine_account})."
            )
        )
        return str(engine.state.pk)
