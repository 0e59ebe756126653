"""Read-only polymorphic serialization of sellers."""
from rest_framework import serializers

from .models import Seller


class IndividualProfileSerializer(serializers.Serializer):
    first_name = serializers.CharField()
    last_name = serializers.CharField()
    birth_date = serializers.DateField(allow_null=True)


class CompanyProfileSerializer(serializers.Serializer):
    company_name = serializers.CharField()
    vat_number = serializers.CharField(allow_null=True)
    legal_form = serializers.CharField(allow_null=True)


class SellerSerializer(serializers.ModelSerializer):
    """One view for both variants: shared fields, capability tags and the
    payload of the seller's own variant only."""

    channel_id = serializers.IntegerField(read_only=True, allow_null=True)
    capabilities = serializers.ListField(child=serializers.CharField(), read_only=True)
    profile = serializers.SerializerMethodField()

    class Meta:
        model = Seller
        fields = [
            "id",
            "seller_type",
            "name",
            "email",
            "verification_status",
            "is_active",
            "channel_id",
            "commission_rate",
            "capabilities",
            "profile",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    def get_profile(self, obj):
        if obj.is_company:
            return CompanyProfileSerializer(obj.profile).data
        return IndividualProfileSerializer(obj.profile).data
