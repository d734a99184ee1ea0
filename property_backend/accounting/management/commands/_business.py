# accounting/management/commands/_business.py

from django.core.management.base import CommandError

from accounting.models.business import Business


def business_from_options(options) -> Business:
    business_id = options.get("business")
    try:
        return Business.objects.get(pk=business_id)
    except (Business.DoesNotExist, ValueError, TypeError) as exc:
        raise CommandError(f"Business {business_id} not found") from exc
