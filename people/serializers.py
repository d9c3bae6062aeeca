"""
Serializers for the people app.

``PersonInputSerializer`` validates a new member's details as sent with
a membership purchase; ``PaperPubsSerializer`` is shared with upgrade
requests.
"""
from __future__ import annotations

from rest_framework import serializers


class PaperPubsSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255, trim_whitespace=True)
    address = serializers.CharField(trim_whitespace=True)
    country = serializers.CharField(max_length=255, trim_whitespace=True)


class PersonInputSerializer(serializers.Serializer):
    email = serializers.EmailField()
    legal_name = serializers.CharField(max_length=255)
    public_first_name = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")
    public_last_name = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")
    country = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")
    membership = serializers.CharField(max_length=32)
    paper_pubs = PaperPubsSerializer(required=False, allow_null=True, default=None)

    def validate_email(self, value):
        return value.strip().lower()


class KeyLoginSerializer(serializers.Serializer):
    email = serializers.EmailField()
    key = serializers.CharField(max_length=64)


class KeyRequestSerializer(serializers.Serializer):
    email = serializers.EmailField()
