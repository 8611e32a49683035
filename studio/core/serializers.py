from rest_framework import serializers
from django.contrib.auth.password_validation import validate_password
from .models import User, AuditLog


def validate_assigned_role(serializer, value):
    """
    Role assignment rules for staff management requests.

    Serializers used without a request in context (self registration) skip
    these checks.
    """
    request = serializer.context.get('request')
    instance = serializer.instance
    if request is None or (instance is not None and value == instance.role):
        return value

    if instance is not None and instance.licensee_id is None:
        raise serializers.ValidationError("The licensee account's role cannot be changed")
    if value == 'licensee':
        raise serializers.ValidationError("Staff members cannot be given the licensee role")
    if instance is not None and not request.user.can_assign_roles:
        raise serializers.ValidationError("Only the licensee or an admin can change roles")
    if value == 'admin' and not request.user.can_assign_roles:
        raise serializers.ValidationError("Only the licensee or an admin can add admins")
    return value


class UserSerializer(serializers.ModelSerializer):
    display_name = serializers.CharField(read_only=True)
    licensee_id = serializers.IntegerField(read_only=True)

    class Meta:
        model = User
        fields = ['id', 'username', 'email', 'first_name', 'last_name', 'display_name', 'role',
                  'licensee_id', 'phone', 'profile_image_url', 'is_active', 'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']

    def validate_role(self, value):
        return validate_assigned_role(self, value)


class StaffSummarySerializer(serializers.ModelSerializer):
    """Compact user representation for photographer/editor pickers"""
    display_name = serializers.CharField(read_only=True)

    class Meta:
        model = User
        fields = ['id', 'username', 'email', 'first_name', 'last_name', 'display_name', 'role', 'profile_image_url']


class UserCreateSerializer(serializers.ModelSerializer):
    password = serializers.CharField(write_only=True, validators=[validate_password])
    password_confirm = serializers.CharField(write_only=True)

    class Meta:
        model = User
        fields = ['username', 'email', 'password', 'password_confirm', 'first_name', 'last_name', 'phone', 'role']

    def validate_role(self, value):
        return validate_assigned_role(self, value)

    def validate(self, attrs):
        if attrs['password'] != attrs['password_confirm']:
            raise serializers.ValidationError({"password": "Passwords don't match"})
        if self.context.get('request') is not None and 'role' not in attrs:
            raise serializers.ValidationError({"role": "Staff members need a role"})
        return attrs

    def create(self, validated_data):
        validated_data.pop('password_confirm')
        password = validated_data.pop('password')
        user = User(**validated_data, is_active=True)
        user.set_password(password)
        user.save()
        return user


class AuditLogSerializer(serializers.ModelSerializer):
    user = StaffSummarySerializer(read_only=True)

    class Meta:
        model = AuditLog
        fields = ['id', 'user', 'action', 'model_name', 'object_id', 'object_name',
                  'object_reference', 'changes', 'ip_address', 'created_at']
