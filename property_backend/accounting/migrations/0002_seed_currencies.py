"""
======================================================
PATH: accounting/migrations/0002_seed_currencies.py
======================================================
MIGRATION: SEED SUPPORTED CURRENCIES

Purpose:
- Loads the currency registry the journal engine validates against.
- Reverse removes only the codes seeded here.
"""

from __future__ import annotations

from django.db import migrations

CURRENCIES = [
    ("CAD", "Canadian Dollar", "$", 2),
    ("USD", "US Dollar", "$", 2),
    ("GBP", "British Pound", "£", 2),
    ("EUR", "Euro", "€", 2),
    ("AUD", "Australian Dollar", "$", 2),
    ("NZD", "New Zealand Dollar", "$", 2),
    ("CHF", "Swiss Franc", "CHF", 2),
    ("JPY", "Japanese Yen", "¥", 0),
    ("CNY", "Chinese Yuan", "¥", 2),
    ("INR", "Indian Rupee", "₹", 2),
    ("MXN", "Mexican Peso", "$", 2),
    ("BRL", "Brazilian Real", "R$", 2),
]


def seed_currencies(apps, schema_editor):
    Currency = apps.get_model("accounting", "Currency")
    for code, name, symbol, decimal_places in CURRENCIES:
        Currency.objects.update_or_create(
            code=code,
            defaults={"name": name, "symbol": symbol, "decimal_places": decimal_places, "is_active": True},
        )


def unseed_currencies(apps, schema_editor):
    Currency = apps.get_model("accounting", "Currency")
    Currency.objects.filter(code__in=[c[0] for c in CURRENCIES]).delete()


class Migration(migrations.Migration):
    dependencies = [
        ("accounting", "0001_initial"),
    ]

    operations = [
        migrations.RunPython(seed_currencies, unseed_currencies),
    ]
