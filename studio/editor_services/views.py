from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.contrib.auth import get_user_model
from django.shortcuts import get_object_or_404

from studio.core.exceptions import ActionNotAllowed
from studio.core.permissions import IsAdminOrVA
from studio.core.utils import scope_to_licensee
from . import services
from .models import EditorServiceCategory, EditorServiceOption, ServiceTemplate, EditorServiceChangeLog
from .serializers import (
    EditorServiceCategorySerializer, EditorServiceOptionSerializer, ReorderSerializer,
    ServiceTemplateSerializer, EditorServiceChangeLogSerializer,
)

User = get_user_model()


def get_editor(request, editor_id):
    """An editor of the caller's licensee that the caller may manage"""
    editor = get_object_or_404(scope_to_licensee(User.objects.filter(role='editor'), request.user), pk=editor_id)
    ensure_can_manage(request.user, editor)
    return editor


def ensure_can_manage(user, editor):
    if user.id != editor.id and not user.is_admin_or_va:
        raise ActionNotAllowed("You can only manage your own services")


def categories_for(user):
    return scope_to_licensee(EditorServiceCategory.objects.select_related('editor'), user)


def options_for(user):
    return scope_to_licensee(
        EditorServiceOption.objects.select_related('category__editor'), user, field='category__licensee_id'
    )


# ==================== PRICE LIST ====================

@api_view(['GET'])
@permission_classes([IsAuthenticated])
def editor_services(request, editor_id):
    """An editor's categories with options"""
    editor = get_object_or_404(scope_to_licensee(User.objects.filter(role='editor'), request.user), pk=editor_id)
    categories = services.service_structure(editor)
    return Response(EditorServiceCategorySerializer(categories, many=True).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def category_create(request, editor_id):
    editor = get_editor(request, editor_id)
    serializer = EditorServiceCategorySerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    category = services.create_category(editor, request.user, dict(serializer.validated_data))
    return Response(EditorServiceCategorySerializer(category).data, status=status.HTTP_201_CREATED)


@api_view(['PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def category_detail(request, pk):
    category = get_object_or_404(categories_for(request.user), pk=pk)
    ensure_can_manage(request.user, category.editor)

    if request.method in ('PUT', 'PATCH'):
        serializer = EditorServiceCategorySerializer(category, data=request.data, partial=True)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        category = services.update_category(category, request.user, dict(serializer.validated_data))
        return Response(EditorServiceCategorySerializer(category).data)
    else:  # DELETE
        services.delete_category(category, request.user)
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def option_create(request, category_id):
    category = get_object_or_404(categories_for(request.user), pk=category_id)
    ensure_can_manage(request.user, category.editor)
    serializer = EditorServiceOptionSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    option = services.create_option(category, request.user, dict(serializer.validated_data))
    return Response(EditorServiceOptionSerializer(option).data, status=status.HTTP_201_CREATED)


@api_view(['PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def option_detail(request, pk):
    option = get_object_or_404(options_for(request.user), pk=pk)
    ensure_can_manage(request.user, option.category.editor)

    if request.method in ('PUT', 'PATCH'):
        serializer = EditorServiceOptionSerializer(option, data=request.data, partial=True)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        option = services.update_option(option, request.user, dict(serializer.validated_data))
        return Response(EditorServiceOptionSerializer(option).data)
    else:  # DELETE
        services.delete_option(option, request.user)
        return Response(status=status.HTTP_204_NO_CONTENT)


def _reorder(request, queryset, editor_field):
    serializer = ReorderSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    ids = serializer.validated_data['ids']
    rows = queryset.filter(id__in=ids)
    if not request.user.is_admin_or_va and rows.exclude(**{editor_field: request.user.id}).exists():
        raise ActionNotAllowed("You can only manage your own services")
    updated = services.reorder(queryset, ids)
    return Response({'message': 'Order updated', 'updated': updated})


@api_view(['PUT'])
@permission_classes([IsAuthenticated])
def category_order(request):
    return _reorder(request, categories_for(request.user), 'editor_id')


@api_view(['PUT'])
@permission_classes([IsAuthenticated])
def option_order(request):
    return _reorder(request, options_for(request.user), 'category__editor_id')


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def change_history(request, editor_id):
    editor = get_editor(request, editor_id)
    logs = EditorServiceChangeLog.objects.filter(editor=editor).select_related('changed_by')
    return Response(EditorServiceChangeLogSerializer(logs, many=True).data)


# ==================== TEMPLATES ====================

@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def template_list_create(request):
    """Service templates of the licensee, defaults first"""
    if request.method == 'GET':
        templates = scope_to_licensee(ServiceTemplate.objects.select_related('created_by'), request.user)
        return Response(ServiceTemplateSerializer(templates, many=True).data)

    if not request.user.is_admin_or_va:
        raise ActionNotAllowed('Admin or VA access required.')
    serializer = ServiceTemplateSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    template = serializer.save(licensee_id=request.user.get_licensee_id(), created_by=request.user)
    return Response(ServiceTemplateSerializer(template).data, status=status.HTTP_201_CREATED)


@api_view(['PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, IsAdminOrVA])
def template_detail(request, pk):
    template = get_object_or_404(scope_to_licensee(ServiceTemplate.objects.all(), request.user), pk=pk)

    if request.method in ('PUT', 'PATCH'):
        serializer = ServiceTemplateSerializer(template, data=request.data, partial=True)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        template = serializer.save()
        return Response(ServiceTemplateSerializer(template).data)
    else:  # DELETE
        template.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def template_apply(request, pk, editor_id):
    """Replace an editor's price list with a template"""
    template = get_object_or_404(scope_to_licensee(ServiceTemplate.objects.all(), request.user), pk=pk)
    editor = get_editor(request, editor_id)
    categories = services.apply_template(template, editor, request.user)
    return Response(EditorServiceCategorySerializer(categories, many=True).data)
