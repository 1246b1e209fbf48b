# apps/catalog/serializers.py
from rest_framework import serializers
from .models import Product, Variation, Attribute, Option


class OptionSerializer(serializers.ModelSerializer):
    class Meta:
        model = Option
        fields = ["id", "title", "description", "sort_order"]


class AttributeSerializer(serializers.ModelSerializer):
    options = OptionSerializer(many=True, read_only=True)

    class Meta:
        model = Attribute
        fields = ["id", "title", "description", "sort_order", "options"]


class VariationSerializer(serializers.ModelSerializer):
    price = serializers.SerializerMethodField()
    summary = serializers.CharField(source="summary_of_options", read_only=True)
    option_map = serializers.SerializerMethodField()

    class Meta:
        model = Variation
        fields = ["id", "amount", "status", "price", "summary", "option_map"]

    def get_price(self, obj):
        return obj.price().nice()

    def get_option_map(self, obj):
        return {str(k): v for k, v in obj.option_map().items()}


class ProductSerializer(serializers.ModelSerializer):
    price = serializers.SerializerMethodField()
    requires_variation = serializers.SerializerMethodField()
    attributes = serializers.SerializerMethodField()
    variations = serializers.SerializerMethodField()
    variation_price_map = serializers.SerializerMethodField()
    option_fields = serializers.SerializerMethodField()

    class Meta:
        model = Product
        fields = [
            "id",
            "title",
            "amount",
            "price",
            "version",
            "requires_variation",
            "attributes",
            "variations",
            "variation_price_map",
            "option_fields",
        ]

    def get_price(self, obj):
        return obj.price().nice()

    def get_requires_variation(self, obj):
        return obj.requires_variation()

    def get_attributes(self, obj):
        return AttributeSerializer(obj.attributes.all(), many=True).data

    def get_variations(self, obj):
        return VariationSerializer(obj.enabled_variations(), many=True).data

    def get_variation_price_map(self, obj):
        return obj.variation_price_map()

    def get_option_fields(self, obj):
        """Add-to-cart dropdowns: each attribute chained to the one before it."""
        fields = []
        prev = None
        for attribute in obj.attributes.all():
            field_map = attribute.option_field_map(prev)
            fields.append({
                "name": f"options[{attribute.pk}]",
                "title": attribute.title,
                "source": {o.pk: o.title for o in obj.get_options_for_attribute(attribute.pk)},
                "prev": f"options[{prev.pk}]" if prev else None,
                "map": {
                    str(prev_id): {str(k): v for k, v in options.items()}
                    for prev_id, options in field_map.items()
                },
            })
            prev = attribute
        return fields
