"""
Custom management command to generate demo data.
"""

import random

from django.core.management.base import BaseCommand

from core.exceptions import RewardLedgerError
from rewards.models import LedgerState
from rewards.services import RewardEngine
from tokens.services import TokenLedger

DEMO_ADMIN = "demo-admin"
DEMO_MERCHANTS = ["demo-merchant-cafe", "demo-merchant-bakery"]
DEMO_CATALOGUE = [
    ("FREE_COFFEE", "Free Coffee", 150, 0),
    ("TEN_OFF", "10% Off", 100, 50),
    ("TOTE_BAG", "Tote Bag", 800, 10),
]


class Command(BaseCommand):
    help = "Generates demo data for the Reward Ledger"

    def add_arguments(self, parser):
        parser.add_argument("--customers", type=int, default=100, help="Number of customers to generate")
        parser.add_argument("--issuances", type=int, default=1000, help="Number of purchases to reward")

    def handle(self, *args, **options):
        num_customers = options["customers"]
        num_issuances = options["issuances"]

        self.stdout.write(
            f" Starting demo data generation (Customers: {num_customers}, Issuances: {num_issuances})..."
        )

        state = LedgerState.objects.filter(administrator=DEMO_ADMIN).first()
        if state:
            engine = RewardEngine(state)
        else:
            token_ledger = TokenLedger.deploy("Demo Points", "DEMO", owner=DEMO_ADMIN)
            engine = RewardEngine.initialize(token_ledger, 10, administrator=DEMO_ADMIN)
            token_ledger.grant_minter(DEMO_ADMIN, engine.state.engine_account)

        for merchant in DEMO_MERCHANTS:
            engine.set_merchant(DEMO_ADMIN, merchant, True)
        for reward_id, name, cost, stock in DEMO_CATALOGUE:
            if not engine.get_reward_details(reward_id).exists:
                engine.add_reward(DEMO_ADMIN, reward_id, name, cost, stock)

        customers = [f"DEMO_USER_{i}_{random.randint(1000, 9999)}" for i in range(1, num_customers + 1)]

        for _ in range(num_issuances):
            engine.issue_rewards(random.choice(DEMO_MERCHANTS), random.choice(customers), random.randint(1, 50))

        redemptions = 0
        for customer in customers:
            reward_id, _, cost, _ = random.choice(DEMO_CATALOGUE)
            engine.token_ledger.approve(customer, engine.state.engine_account, cost)
            try:
                engine.redeem_reward(customer, reward_id)
                redemptions += 1
            except RewardLedgerError as e:
                # Customers without enough points or sold out rewards are part of the demo.
                self.stdout.write(f" {customer} could not redeem {reward_id}: {e.code}")

        self.stdout.write(
            self.style.SUCCESS(
                f" Done! Ledger #{engine.state.pk}: {num_issuances} issuances, {redemptions} redemptions "
                f"for {num_customers} customers."
            )
        )
