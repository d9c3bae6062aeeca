"""
Views for the payments app.

This module exposes the price catalog, the membership and other purchase
endpoints, payment listings and the Stripe webhook.  Purchases are open
to anonymous callers: buying a membership is how new members first get
an identity, which is stored in their session once their login key has
been issued.  Admin (staff) users may list every payment.
"""
from __future__ import annotations

import json
import logging

import stripe
from django.conf import settings
from django.db import DatabaseError
from django.db.models import Q
from django.http import HttpResponse
from django.utils.decorators import method_decorator
from django.views.decorators.csrf import csrf_exempt
from rest_framework import permissions, views
from rest_framework.response import Response

from common.errors import AuthError, InputError
from people.session import establish_session, identity_email, is_member_admin
from .catalog import get_catalog, get_purchase_data
from .gateway import key_type_prefix
from .models import Payment, StripeKey
from .purchase import MembershipPurchaseRequest, OtherPurchaseRequest, PurchaseOrchestrator
from .serializers import MembershipPurchaseSerializer, OtherPurchaseSerializer, PaymentSerializer
from .upgrades import UpgradeRequest
from .webhooks import WebhookReconciler, parse_charge_event

logger = logging.getLogger(__name__)


class PricesView(views.APIView):
    permission_classes = [permissions.AllowAny]

    def get(self, request):
        return Response(get_catalog().as_dict())


class PurchaseDataView(views.APIView):
    permission_classes = [permissions.AllowAny]

    def get(self, request):
        return Response(dict(get_purchase_data().categories))


class StripeKeysView(views.APIView):
    """Publishable keys for the current Stripe mode, by account name."""

    permission_classes = [permissions.AllowAny]

    def get(self, request):
        keys = StripeKey.objects.filter(type=key_type_prefix())
        return Response({k.name: k.key for k in keys})


class PurchaseListView(views.APIView):
    """
    GET /api/purchase/list/ -> payments for the caller's email.
    Admins may pass ?email=<address> or ?all=1.
    """
    permission_classes = [permissions.AllowAny]

    def get(self, request):
        email = identity_email(request)
        requested = request.query_params.get("email")
        if is_member_admin(request):
            if requested:
                email = requested
            elif request.query_params.get("all"):
                qs = Payment.objects.all().order_by("-created", "id")
                return Response(PaymentSerializer(qs, many=True).data)
        elif requested and requested.lower() != (email or "").lower():
            raise AuthError()
        if not email:
            raise AuthError("Log in to see your purchases.")
        qs = (
            Payment.objects
            .filter(Q(payment_email__iexact=email) | Q(person__email__iexact=email))
            .order_by("-created", "id")
        )
        return Response(PaymentSerializer(qs, many=True).data)


class MembershipPurchaseView(views.APIView):
    """Buy new memberships and/or upgrade existing ones with a single charge."""

    permission_classes = [permissions.AllowAny]

    def post(self, request):
        serializer = MembershipPurchaseSerializer(data=request.data)
        if not serializer.is_valid():
            raise InputError(serializer.errors)
        data = serializer.validated_data
        purchase = MembershipPurchaseRequest(
            amount=data["amount"],
            email=data["email"].strip().lower(),
            source=data["source"],
            account=data.get("account") or None,
            new_members=tuple(dict(m) for m in data["new_members"]),
            upgrades=tuple(UpgradeRequest(**u) for u in data["upgrades"]),
        )
        result = PurchaseOrchestrator(get_catalog()).new_membership_purchase(
            purchase, session_email=identity_email(request)
        )
        if result.login_email:
            establish_session(request, result.login_email)
        return Response({"status": "success", "charge_id": result.charge_id})


class OtherPurchaseView(views.APIView):
    """Pay for sponsorships and other non-membership items."""

    permission_classes = [permissions.AllowAny]

    def post(self, request):
        serializer = OtherPurchaseSerializer(data=request.data)
        if not serializer.is_valid():
            raise InputError(serializer.errors)
        data = serializer.validated_data
        purchase = OtherPurchaseRequest(
            email=data["email"].strip().lower(),
            source=data["source"],
            account=data.get("account") or None,
            items=tuple(dict(i) for i in data["items"]),
        )
        result = PurchaseOrchestrator(get_catalog()).other_purchase(purchase)
        return Response({"status": result.status, "charge_id": result.charge_id})


@method_decorator(csrf_exempt, name="dispatch")
class StripeWebhookView(views.APIView):
    """Handle Stripe charge status webhooks."""

    authentication_classes = []
    permission_classes = [permissions.AllowAny]

    def post(self, request):
        payload = request.body
        secret = settings.STRIPE_WEBHOOK_SECRET
        if secret:
            sig_header = request.META.get("HTTP_STRIPE_SIGNATURE", "")
            try:
                stripe.WebhookSignature.verify_header(payload.decode("utf-8"), sig_header, secret)
            except (UnicodeDecodeError, stripe.SignatureVerificationError):
                logger.warning("Rejected Stripe webhook with a bad signature")
                return HttpResponse(status=400)
        try:
            event = parse_charge_event(json.loads(payload or b"null"))
        except (ValueError, InputError) as e:
            logger.warning("Error: Unexpected Stripe webhook data (%s): %r", e, payload[:500])
            return HttpResponse(status=400)
        try:
            WebhookReconciler().reconcile(event)
        except DatabaseError:
            logger.exception("Could not apply status %s to charge %s", event.status, event.charge_id)
            return HttpResponse(status=500)
        return HttpResponse(status=200)
