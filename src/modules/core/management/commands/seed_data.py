from __future__ import annotations

from decimal import Decimal

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand

from modules.catalog.models import Food, Restaurant
from modules.couriers.models import Courier


class Command(BaseCommand):
    help = "Seed database with realistic development data."

    def handle(self, *args, **options):
        self.stdout.write("Seeding development data...")

        users_created = self._seed_users()
        foods = self._seed_catalog()
        couriers = self._seed_couriers()

        self.stdout.write(
            self.style.SUCCESS(
                "Seed completed: "
                f"users={users_created}, "
                f"foods={len(foods)}, "
                f"couriers={len(couriers)}"
            )
        )

    def _seed_users(self) -> int:
        User = get_user_model()
        created = 0
        if not User.objects.filter(username="admin").exists():
            User.objects.create_superuser("admin", password="admin123")
            created += 1
        if not User.objects.filter(username="customer").exists():
            User.objects.create_user(
                "customer", email="customer@example.com", password="customer123"
            )
            created += 1
        return created

    def _seed_catalog(self) -> list[Food]:
        self.stdout.write("Creating restaurants and foods...")
        foods: list[Food] = []
        menus = {
            ("Spice Route", "Indiranagar, Bengaluru"): [
                ("Masala Dosa", Decimal("120.00")),
                ("Paneer Butter Masala", Decimal("240.00")),
                ("Filter Coffee", Decimal("40.00")),
            ],
            ("Tandoor House", "Koramangala, Bengaluru"): [
                ("Chicken Biryani", Decimal("280.00")),
                ("Butter Naan", Decimal("45.00")),
                ("Gulab Jamun", Decimal("60.00")),
            ],
            ("Green Bowl", "HSR Layout, Bengaluru"): [
                ("Quinoa Salad", Decimal("220.00")),
                ("Cold Pressed Juice", Decimal("150.00")),
            ],
        }
        for (restaurant_name, location), menu in menus.items():
            restaurant, _ = Restaurant.objects.get_or_create(
                name=restaurant_name,
                defaults={"location": location},
            )
            for food_name, price in menu:
                food, _ = Food.objects.get_or_create(
                    restaurant=restaurant,
                    name=food_name,
                    defaults={"price": price, "is_available": True},
                )
                foods.append(food)
        self.stdout.write(self.style.SUCCESS("Creating restaurants and foods... Done!"))
        return foods

    def _seed_couriers(self) -> list[Courier]:
        """One courier per rider account, all starting available."""
        self.stdout.write("Creating couriers...")
        User = get_user_model()
        couriers: list[Courier] = []
        riders = [
            ("rider1", "Arjun Rao", "arjun@example.com", "9876543210"),
            ("rider2", "Meera Iyer", "meera@example.com", "9876543211"),
            ("rider3", "Kabir Shah", "kabir@example.com", "9876543212"),
        ]
        for username, name, email, phone in riders:
            user = User.objects.filter(username=username).first()
            if user is None:
                user = User.objects.create_user(
                    username, email=email, password=f"{username}123"
                )
            courier, _ = Courier.objects.get_or_create(
                email=email,
                defaults={"user": user, "name": name, "phone": phone},
            )
            couriers.append(courier)
        self.stdout.write(self.style.SUCCESS("Creating couriers... Done!"))
        return couriers
