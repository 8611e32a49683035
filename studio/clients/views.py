import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.core.cache import cache
from django.db.models import Q, Count
from django.shortcuts import get_object_or_404
from studio.core.model_cache import (
    get_client_list_cache_key, get_cached_client, cache_client_data, CLIENT_LIST_CACHE_TTL
)
from studio.core.permissions import IsProductionStaff
from studio.core.utils import create_audit_log, scope_to_licensee
from .models import Client, Office, Communication
from .serializers import ClientSerializer, OfficeSerializer, CommunicationSerializer

logger = logging.getLogger(__name__)


# Client views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsProductionStaff])
def client_list_create(request):
    """List the licensee's clients or create a new client"""
    licensee_id = request.user.get_licensee_id()

    if request.method == 'GET':
        search = request.query_params.get('search', '').strip()
        office = request.query_params.get('office', '')

        cache_key = get_client_list_cache_key(licensee_id, search, office)
        cached_data = cache.get(cache_key)
        if cached_data is not None:
            return Response(cached_data)

        queryset = scope_to_licensee(Client.objects.select_related('office'), request.user).order_by('-created_at')
        if search:
            queryset = queryset.filter(
                Q(name__icontains=search) |
                Q(email__icontains=search) |
                Q(phone__icontains=search) |
                Q(contact_name__icontains=search)
            )
        if office:
            queryset = queryset.filter(office_id=office)
        response_data = ClientSerializer(queryset, many=True).data
        cache.set(cache_key, response_data, CLIENT_LIST_CACHE_TTL)
        return Response(response_data)
    else:
        serializer = ClientSerializer(data=request.data, context={'request': request})
        if serializer.is_valid():
            try:
                client = serializer.save(licensee_id=licensee_id)
            except Exception as e:
                logger.error(f"Failed to create client: {e}")
                return Response({'message': 'Failed to create client'}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)
            create_audit_log(
                request=request, action='create', model_name='Client',
                object_id=client.id, object_name=client.name,
                changes={'email': client.email}
            )
            return Response(ClientSerializer(client).data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, IsProductionStaff])
def client_detail(request, pk):
    """Retrieve, update or delete a client"""
    client = get_object_or_404(scope_to_licensee(Client.objects.select_related('office'), request.user), pk=pk)

    if request.method == 'GET':
        cached_data = get_cached_client(pk)
        if cached_data:
            return Response(cached_data)
        response_data = ClientSerializer(client).data
        cache_client_data(client.id, response_data)
        return Response(response_data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = ClientSerializer(
            client, data=request.data, partial=request.method == 'PATCH', context={'request': request}
        )
        if serializer.is_valid():
            serializer.save()
            create_audit_log(
                request=request, action='update', model_name='Client',
                object_id=client.id, object_name=client.name,
                changes={field: str(value) for field, value in serializer.validated_data.items()}
            )
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        if client.bookings.exists():
            return Response(
                {'message': 'Client has bookings and cannot be deleted'},
                status=status.HTTP_400_BAD_REQUEST
            )
        create_audit_log(
            request=request, action='delete', model_name='Client',
            object_id=client.id, object_name=client.name
        )
        client.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsProductionStaff])
def client_communications(request, pk):
    """List or log communications with a client"""
    client = get_object_or_404(scope_to_licensee(Client.objects.all(), request.user), pk=pk)

    if request.method == 'GET':
        communications = client.communications.select_related('user').order_by('-timestamp')
        return Response(CommunicationSerializer(communications, many=True).data)
    else:
        serializer = CommunicationSerializer(data=request.data)
        if serializer.is_valid():
            booking = serializer.validated_data.get('booking')
            if booking and booking.client_id != client.id:
                return Response({'booking': ['Booking does not belong to this client']},
                                status=status.HTTP_400_BAD_REQUEST)
            serializer.save(client=client, user=request.user, licensee_id=client.licensee_id)
            return Response(serializer.data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


# Office views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsProductionStaff])
def office_list_create(request):
    """List all offices or create a new office"""
    if request.method == 'GET':
        offices = scope_to_licensee(Office.objects.all(), request.user).annotate(
            client_count=Count('clients')
        ).order_by('name')
        search = request.query_params.get('search')
        if search:
            offices = offices.filter(Q(name__icontains=search) | Q(contact_name__icontains=search))
        return Response(OfficeSerializer(offices, many=True).data)
    else:
        serializer = OfficeSerializer(data=request.data)
        if serializer.is_valid():
            office = serializer.save(licensee_id=request.user.get_licensee_id())
            create_audit_log(
                request=request, action='create', model_name='Office',
                object_id=office.id, object_name=office.name
            )
            return Response(serializer.data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, IsProductionStaff])
def office_detail(request, pk):
    """Retrieve, update or delete an office"""
    office = get_object_or_404(scope_to_licensee(Office.objects.all(), request.user), pk=pk)

    if request.method == 'GET':
        return Response(OfficeSerializer(office).data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = OfficeSerializer(office, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            create_audit_log(
                request=request, action='update', model_name='Office',
                object_id=office.id, object_name=office.name
            )
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        create_audit_log(
            request=request, action='delete', model_name='Office',
            object_id=office.id, object_name=office.name
        )
        office.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)
