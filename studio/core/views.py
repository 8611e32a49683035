from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated, AllowAny
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer, TokenRefreshSerializer
from rest_framework_simplejwt.exceptions import InvalidToken, TokenError, AuthenticationFailed
from django.contrib.auth import get_user_model
from django.core.exceptions import ObjectDoesNotExist
from django.db import connection
from django.db.models import Q
from django.shortcuts import get_object_or_404
from .models import AuditLog
from .permissions import IsAdminOrVA
from .serializers import UserSerializer, UserCreateSerializer, StaffSummarySerializer, AuditLogSerializer
from .utils import scope_to_licensee, parse_query_date

User = get_user_model()


class CustomTokenObtainPairSerializer(TokenObtainPairSerializer):
    def validate(self, attrs):
        data = super().validate(attrs)
        if not self.user.is_active:
            raise AuthenticationFailed('User account is disabled.')
        data['user'] = UserSerializer(self.user).data
        return data

    @classmethod
    def get_token(cls, user):
        token = super().get_token(user)
        token['username'] = user.username
        token['role'] = user.role
        token['licensee_id'] = user.get_licensee_id()
        return token


class CustomTokenObtainPairView(TokenObtainPairView):
    serializer_class = CustomTokenObtainPairSerializer


class CustomTokenRefreshSerializer(TokenRefreshSerializer):
    """Token refresh that rejects tokens of deleted users cleanly"""
    def validate(self, attrs):
        try:
            return super().validate(attrs)
        except (InvalidToken, TokenError):
            raise InvalidToken('Token is invalid or expired.')
        except (ObjectDoesNotExist, User.DoesNotExist):
            raise InvalidToken('Token is invalid. User no longer exists.')


class CustomTokenRefreshView(TokenRefreshView):
    serializer_class = CustomTokenRefreshSerializer


def _user_capabilities(user):
    return {
        'is_admin': user.role == 'admin' or user.is_superuser,
        'can_manage_production': user.is_admin_or_va,
        'can_edit': user.is_editor,
        'can_photograph': user.role == 'photographer',
    }


@api_view(['POST'])
@permission_classes([AllowAny])
def register(request):
    """User registration endpoint"""
    serializer = UserCreateSerializer(data=request.data)
    if serializer.is_valid():
        user = serializer.save()
        token = CustomTokenObtainPairSerializer.get_token(user)
        return Response({
            'user': UserSerializer(user).data,
            'access': str(token.access_token),
            'refresh': str(token),
        }, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def user_me(request):
    """Current user with role capabilities"""
    user_data = UserSerializer(request.user).data
    user_data.update(_user_capabilities(request.user))
    return Response(user_data)


def _licensee_users(user):
    licensee_id = user.get_licensee_id()
    return User.objects.filter(Q(licensee_id=licensee_id) | Q(id=licensee_id))


# User views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsAdminOrVA])
def user_list_create(request):
    """List the licensee's staff or add a staff member"""
    if request.method == 'GET':
        users = _licensee_users(request.user).order_by('first_name', 'username')
        role = request.query_params.get('role')
        if role:
            users = users.filter(role=role)
        serializer = UserSerializer(users, many=True)
        return Response(serializer.data)
    else:
        serializer = UserCreateSerializer(data=request.data, context={'request': request})
        if serializer.is_valid():
            user = serializer.save(licensee_id=request.user.get_licensee_id())
            return Response(UserSerializer(user).data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, IsAdminOrVA])
def user_detail(request, pk):
    """Retrieve, update or delete a staff member"""
    user = get_object_or_404(_licensee_users(request.user), pk=pk)

    if request.method == 'GET':
        serializer = UserSerializer(user)
        return Response(serializer.data)

    # The licensee account owns every row of the tenant
    if user.pk == request.user.get_licensee_id() and user.pk != request.user.pk:
        return Response(
            {'message': 'Only the licensee can change the licensee account'},
            status=status.HTTP_403_FORBIDDEN
        )

    if request.method in ('PUT', 'PATCH'):
        serializer = UserSerializer(
            user, data=request.data, partial=request.method == 'PATCH', context={'request': request}
        )
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        if user.pk == request.user.pk:
            return Response({'message': 'You cannot delete your own account'}, status=status.HTTP_400_BAD_REQUEST)
        user.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


def _staff_with_role(request, role):
    users = _licensee_users(request.user).filter(role=role, is_active=True).order_by('first_name')
    return Response(StaffSummarySerializer(users, many=True).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def photographer_list(request):
    """Photographers of the current licensee, ordered by first name"""
    return _staff_with_role(request, 'photographer')


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def editor_list(request):
    """Editors of the current licensee, ordered by first name"""
    return _staff_with_role(request, 'editor')


# AuditLog views (read-only)
@api_view(['GET'])
@permission_classes([IsAuthenticated, IsAdminOrVA])
def audit_log_list(request):
    """List audit logs with filtering"""
    queryset = scope_to_licensee(AuditLog.objects.select_related('user'), request.user)

    action_filter = request.query_params.get('action', None)
    if action_filter:
        queryset = queryset.filter(action=action_filter)

    model_filter = request.query_params.get('model', None)
    if model_filter:
        queryset = queryset.filter(model_name=model_filter)

    date_from = request.query_params.get('date_from', None)
    date_to = request.query_params.get('date_to', None)
    if date_from:
        queryset = queryset.filter(created_at__date__gte=parse_query_date(date_from, 'date_from'))
    if date_to:
        queryset = queryset.filter(created_at__date__lte=parse_query_date(date_to, 'date_to'))

    queryset = queryset.order_by('-created_at')[:500]
    serializer = AuditLogSerializer(queryset, many=True)
    return Response(serializer.data)


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsAdminOrVA])
def audit_log_detail(request, pk):
    """Retrieve an audit log"""
    audit_log = get_object_or_404(scope_to_licensee(AuditLog.objects.all(), request.user), pk=pk)
    serializer = AuditLogSerializer(audit_log)
    return Response(serializer.data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def global_search(request):
    """Search clients, bookings, job cards, products and offices"""
    query = request.query_params.get('q', '').strip()

    if not query:
        return Response({
            'clients': [],
            'bookings': [],
            'job_cards': [],
            'products': [],
            'offices': [],
        })

    from studio.clients.models import Client, Office
    from studio.bookings.models import Booking
    from studio.production.models import JobCard
    from studio.products.models import Product
    from studio.clients.serializers import ClientSerializer, OfficeSerializer
    from studio.bookings.serializers import BookingSerializer
    from studio.production.serializers import JobCardSerializer
    from studio.products.serializers import ProductSerializer

    user = request.user
    results = {}

    clients = scope_to_licensee(Client.objects.all(), user).filter(
        Q(name__icontains=query) |
        Q(email__icontains=query) |
        Q(phone__icontains=query) |
        Q(contact_name__icontains=query)
    )[:20]
    results['clients'] = ClientSerializer(clients, many=True).data

    bookings = scope_to_licensee(Booking.objects.select_related('client', 'photographer'), user).filter(
        Q(property_address__icontains=query) |
        Q(client__name__icontains=query)
    )[:20]
    results['bookings'] = BookingSerializer(bookings, many=True).data

    job_cards = scope_to_licensee(JobCard.objects.select_related('client', 'booking'), user).filter(
        Q(job_id__icontains=query) |
        Q(booking__property_address__icontains=query) |
        Q(client__name__icontains=query)
    )
    if user.is_editor:
        job_cards = job_cards.filter(editor=user)
    results['job_cards'] = JobCardSerializer(job_cards[:20], many=True).data

    products = scope_to_licensee(Product.objects.all(), user).filter(
        Q(title__icontains=query) |
        Q(category__icontains=query)
    )[:20]
    results['products'] = ProductSerializer(products, many=True).data

    offices = scope_to_licensee(Office.objects.all(), user).filter(
        Q(name__icontains=query) |
        Q(contact_name__icontains=query)
    )[:20]
    results['offices'] = OfficeSerializer(offices, many=True).data

    return Response(results)


@api_view(['GET'])
@permission_classes([AllowAny])
def health(request):
    """Liveness check with a database round-trip"""
    with connection.cursor() as cursor:
        cursor.execute('SELECT 1')
    return Response({'status': 'ok'})
