from __future__ import annotations

import random
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand
from django.db import transaction

from modules.accounts.models import Account, Role
from modules.core.repositories.django_repository import SettingsDjangoRepository
from modules.pricing.constants import DEFAULT_DELIVERY_FEE_SETTING
from modules.pricing.models import DeliveryPricing, Zone
from modules.shipments.dtos import CreateShipmentDTO
from modules.shipments.factories import build_shipment_service, build_status_registry
from modules.shipments.models import Shipment


class Command(BaseCommand):
    help = "Seed database with the status vocabulary and development data."

    def add_arguments(self, parser):
        parser.add_argument(
            "--statuses-only",
            action="store_true",
            help="Only seed the canonical shipment statuses (safe in production).",
        )

    def handle(self, *args, **options):
        random.seed(42)
        self.stdout.write("Seeding shipment statuses...")
        statuses_created = build_status_registry().ensure_canonical()
        self.stdout.write(
            self.style.SUCCESS(f"Seeding shipment statuses... {statuses_created} new")
        )
        if options["statuses_only"]:
            return

        with transaction.atomic():
            self._seed_settings()
            accounts = self._seed_accounts()
            zones = self._seed_zones()
            self._seed_pricing(accounts[Role.MERCHANT.value], zones)
            shipments_created = self._seed_shipments(
                accounts[Role.MERCHANT.value], zones
            )

        self.stdout.write(
            self.style.SUCCESS(
                "Seed completed: "
                f"statuses={statuses_created}, "
                f"accounts={sum(len(group) for group in accounts.values())}, "
                f"zones={len(zones)}, "
                f"shipments={shipments_created}"
            )
        )

    def _seed_settings(self) -> None:
        SettingsDjangoRepository().set_value(
            DEFAULT_DELIVERY_FEE_SETTING,
            "50.00",
            description="Fee used when neither an override nor a zone fee applies.",
        )

    def _seed_accounts(self) -> dict[str, list[Account]]:
        self.stdout.write("Creating accounts...")
        User = get_user_model()
        if not User.objects.filter(username="admin").exists():
            User.objects.create_superuser("admin", password="admin123")

        people = [
            ("owner", "Olivia Owner", "+201000000001", Role.OWNER),
            ("ops", "Adam Admin", "+201000000002", Role.ADMIN),
            ("shop1", "Nile Gadgets", "+201000000010", Role.MERCHANT),
            ("shop2", "Delta Books", "+201000000011", Role.MERCHANT),
            ("courier1", "Karim Courier", "+201000000020", Role.COURIER),
            ("courier2", "Mona Courier", "+201000000021", Role.COURIER),
            ("hub", "Hana Hub", "+201000000030", Role.WAREHOUSE_MANAGER),
        ]
        accounts: dict[str, list[Account]] = {role.value: [] for role in Role}
        for username, name, phone, role in people:
            user = User.objects.filter(username=username).first()
            if user is None:
                user = User.objects.create_user(username, password=f"{username}123")
            account, _ = Account.objects.get_or_create(
                phone=phone,
                defaults={"name": name, "role": role, "user": user},
            )
            accounts[role.value].append(account)
        self.stdout.write(self.style.SUCCESS("Creating accounts... Done!"))
        return accounts

    def _seed_zones(self) -> list[Zone]:
        self.stdout.write("Creating zones...")
        catalog = [
            ("Downtown", Decimal("40.00")),
            ("Suburbs", Decimal("55.00")),
            ("Outskirts", None),
        ]
        zones = []
        for name, fee in catalog:
            zone, _ = Zone.objects.get_or_create(
                name=name, defaults={"default_fee": fee}
            )
            zones.append(zone)
        self.stdout.write(self.style.SUCCESS("Creating zones... Done!"))
        return zones

    def _seed_pricing(self, merchants: list[Account], zones: list[Zone]) -> None:
        DeliveryPricing.objects.get_or_create(
            merchant=merchants[0],
            zone=zones[0],
            defaults={"delivery_fee": Decimal("35.00")},
        )

    def _seed_shipments(self, merchants: list[Account], zones: list[Zone]) -> int:
        if Shipment.objects.exists():
            self.stdout.write("Shipments already present, skipping.")
            return 0

        self.stdout.write("Creating shipments...")
        service = build_shipment_service()
        created = 0
        for index in range(12):
            merchant = random.choice(merchants)
            service.create_shipment(
                CreateShipmentDTO(
                    merchant_id=merchant.id,
                    zone_id=random.choice(zones).id,
                    recipient_name=f"Recipient {index + 1}",
                    recipient_phone=f"+20111{index:07d}",
                    recipient_address=f"{index + 1} Corniche Street",
                    item_value=Decimal(random.randint(50, 900)),
                    cod_amount=Decimal(random.choice([0, 150, 300])),
                )
            )
            created += 1
        self.stdout.write(self.style.SUCCESS("Creating shipments... Done!"))
        return created
