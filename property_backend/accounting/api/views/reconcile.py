# accounting/api/views/reconcile.py

"""
POST /api/accounting/reconcile/  {"business": 1, "repair": false}

Compares cached account balances with the ledger. A dry run by default;
repair=true rewrites the cache and needs accounting.change_account.
"""

from drf_spectacular.utils import extend_schema
from rest_framework import serializers, status
from rest_framework.generics import GenericAPIView
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from accounting.models.business import Business
from accounting.services.ledger_service import reconcile_account_balances


class ReconcileRequestSerializer(serializers.Serializer):
    business = serializers.PrimaryKeyRelatedField(queryset=Business.objects.all())
    repair = serializers.BooleanField(required=False, default=False)


class ReconcileBalancesView(GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = ReconcileRequestSerializer

    @extend_schema(tags=["accounting"], request=ReconcileRequestSerializer)
    def post(self, request, *args, **kwargs):
        if not request.user.has_perm("accounting.view_account"):
            return Response(
                {"detail": "You do not have permission to reconcile balances."},
                status=status.HTTP_403_FORBIDDEN,
            )

        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        repair = serializer.validated_data["repair"]

        if repair and not request.user.has_perm("accounting.change_account"):
            return Response(
                {"detail": "You do not have permission to repair account balances."},
                status=status.HTTP_403_FORBIDDEN,
            )

        discrepancies = reconcile_account_balances(serializer.validated_data["business"], repair=repair)

        return Response(
            {
                "repaired": repair,
                "discrepancy_count": len(discrepancies),
                "discrepancies": [item.as_dict() for item in discrepancies],
            },
            status=status.HTTP_200_OK,
        )
