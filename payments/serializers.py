"""
Serializers for the payments app.

Request serializers only check shapes and types; pricing, amount
cross-checks and upgrade rules live in ``payments.purchase`` and
``payments.upgrades`` so they run the same way for every caller.
"""
from __future__ import annotations

from rest_framework import serializers

from people.serializers import PaperPubsSerializer, PersonInputSerializer
from .models import Payment


class PaymentSerializer(serializers.ModelSerializer):
    """Serializer for Payment rows (read-only)."""

    person_id = serializers.IntegerField(read_only=True, allow_null=True)

    class Meta:
        model = Payment
        fields = [
            "id",
            "stripe_charge_id",
            "stripe_receipt",
            "status",
            "amount",
            "currency",
            "person_id",
            "payment_email",
            "person_email",
            "person_name",
            "category",
            "type",
            "data",
            "created",
            "updated",
        ]
        read_only_fields = fields


class UpgradeRequestSerializer(serializers.Serializer):
    """An upgrade for an existing person; ``id`` is accepted for ``person_id``."""

    person_id = serializers.IntegerField(required=False)
    id = serializers.IntegerField(required=False)
    membership = serializers.CharField(max_length=32, required=False, allow_blank=True, allow_null=True)
    paper_pubs = PaperPubsSerializer(required=False, allow_null=True)

    def validate(self, attrs):
        person_id = attrs.get("person_id", attrs.get("id"))
        if person_id is None:
            raise serializers.ValidationError({"person_id": "This field is required."})
        return {
            "person_id": person_id,
            "membership": attrs.get("membership") or None,
            "paper_pubs": attrs.get("paper_pubs") or None,
        }


class MembershipPurchaseSerializer(serializers.Serializer):
    amount = serializers.IntegerField(min_value=1)
    email = serializers.EmailField()
    source = serializers.JSONField()
    account = serializers.CharField(max_length=64, required=False, allow_blank=True, allow_null=True)
    new_members = PersonInputSerializer(many=True, required=False, default=list)
    upgrades = UpgradeRequestSerializer(many=True, required=False, default=list)


class PurchaseItemSerializer(serializers.Serializer):
    amount = serializers.IntegerField(min_value=0)
    currency = serializers.CharField(max_length=10, required=False)
    category = serializers.CharField(max_length=64)
    type = serializers.CharField(max_length=64)
    person_id = serializers.IntegerField(required=False, allow_null=True)
    person_name = serializers.CharField(max_length=255, required=False, allow_blank=True)
    person_email = serializers.EmailField(required=False, allow_blank=True)
    data = serializers.DictField(required=False, default=dict)


class OtherPurchaseSerializer(serializers.Serializer):
    email = serializers.EmailField()
    source = serializers.JSONField()
    account = serializers.CharField(max_length=64, required=False, allow_blank=True, allow_null=True)
    items = PurchaseItemSerializer(many=True, allow_empty=False)
