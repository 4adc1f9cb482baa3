from rest_framework import serializers
from .models import IntegrityAdvocateBlock


class IntegrityAdvocateBlockSerializer(serializers.ModelSerializer):
    config_errors = serializers.SerializerMethodField()

    class Meta:
        model = IntegrityAdvocateBlock
        fields = ['id', 'course', 'module', 'context_level', 'app_id', 'visible', 'created_at', 'config_errors']
        read_only_fields = fields

    def get_config_errors(self, obj):
        return obj.get_config_errors()


class SetOverrideSerializer(serializers.Serializer):
    status = serializers.IntegerField()
    reason = serializers.CharField(allow_blank=True, required=False, default='', max_length=255)
    target_user_id = serializers.IntegerField(min_value=1)
    override_user_id = serializers.IntegerField(min_value=1)
    block_instance_id = serializers.IntegerField(min_value=1)
    module_id = serializers.IntegerField(min_value=1)


class SetOverrideResultSerializer(serializers.Serializer):
    submitted = serializers.BooleanField()
    success = serializers.BooleanField()
    warnings = serializers.ListField(child=serializers.CharField())
