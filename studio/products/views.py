from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.shortcuts import get_object_or_404

from studio.core.utils import create_audit_log, scope_to_licensee
from .filters import ProductFilter
from .models import Product
from .serializers import ProductSerializer


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def product_list_create(request):
    """List products or create a new product"""
    if request.method == 'GET':
        queryset = scope_to_licensee(Product.objects.prefetch_related('exclusive_clients'), request.user)
        filterset = ProductFilter(request.query_params, queryset=queryset)
        if not filterset.is_valid():
            return Response(filterset.errors, status=status.HTTP_400_BAD_REQUEST)
        return Response(ProductSerializer(filterset.qs, many=True).data)

    if not request.user.is_admin_or_va:
        return Response({'message': 'Admin or VA access required.'}, status=status.HTTP_403_FORBIDDEN)
    serializer = ProductSerializer(data=request.data, context={'request': request})
    if serializer.is_valid():
        product = serializer.save(licensee_id=request.user.get_licensee_id())
        create_audit_log(
            request=request, action='create', model_name='Product',
            object_id=product.id, object_name=product.title,
            changes={'price': str(product.price), 'type': product.type}
        )
        return Response(ProductSerializer(product).data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def product_detail(request, pk):
    """Retrieve, update or delete a product"""
    product = get_object_or_404(scope_to_licensee(Product.objects.all(), request.user), pk=pk)

    if request.method == 'GET':
        return Response(ProductSerializer(product).data)

    if not request.user.is_admin_or_va:
        return Response({'message': 'Admin or VA access required.'}, status=status.HTTP_403_FORBIDDEN)

    if request.method in ('PUT', 'PATCH'):
        serializer = ProductSerializer(
            product, data=request.data, partial=request.method == 'PATCH', context={'request': request}
        )
        if serializer.is_valid():
            serializer.save()
            create_audit_log(
                request=request, action='update', model_name='Product',
                object_id=product.id, object_name=product.title,
                changes={field: str(value) for field, value in serializer.validated_data.items()}
            )
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        create_audit_log(
            request=request, action='delete', model_name='Product',
            object_id=product.id, object_name=product.title
        )
        product.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)
