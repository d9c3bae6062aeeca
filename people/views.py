"""
Views for the people app.

Members log in with the email + key pair from a login link.  A new link
can be requested for any address that has a membership or a payment on
record; the response is the same either way.
"""
from __future__ import annotations

import logging

from rest_framework import permissions, views
from rest_framework.response import Response

from common.errors import AuthError, InputError
from mailer.dispatch import mail_task
from payments.models import Payment
from .keys import get_key_checked, verify_key
from .models import Person
from .serializers import KeyLoginSerializer, KeyRequestSerializer
from .session import establish_session

logger = logging.getLogger(__name__)


class KeyLoginView(views.APIView):
    permission_classes = [permissions.AllowAny]

    def post(self, request):
        serializer = KeyLoginSerializer(data=request.data)
        if not serializer.is_valid():
            raise InputError(serializer.errors)
        email = serializer.validated_data["email"].strip().lower()
        if not verify_key(email, serializer.validated_data["key"]):
            logger.warning("Rejected login key for %s", email)
            raise AuthError("Invalid or expired login key.")
        establish_session(request, email)
        return Response({"status": "success", "email": email})


class KeyRequestView(views.APIView):
    permission_classes = [permissions.AllowAny]

    def post(self, request):
        serializer = KeyRequestSerializer(data=request.data)
        if not serializer.is_valid():
            raise InputError(serializer.errors)
        email = serializer.validated_data["email"].strip().lower()
        known = (
            Person.objects.filter(email__iexact=email).exists()
            or Payment.objects.filter(payment_email__iexact=email).exists()
        )
        if known:
            result = get_key_checked(email)
            mail_task("login_key", {"email": email, "key": result.key})
        else:
            logger.info("Login key requested for unknown address %s", email)
        return Response({"status": "success", "email": email})
