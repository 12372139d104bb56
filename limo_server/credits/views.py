from rest_framework import viewsets, status
from rest_framework.response import Response
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework_simplejwt.authentication import JWTAuthentication
from rest_framework.generics import get_object_or_404

from limo_main_app.permissions import IsAdminOrDispatcher
from .models import RideCreditAccount, RideCreditTransaction
from .serializers import RideCreditAccountSerializer, RideCreditTransactionSerializer, CreditGrantSerializer
from . import ledger


class RideCreditView(viewsets.GenericViewSet):
    permission_classes = [IsAuthenticated]
    authentication_classes = [JWTAuthentication]
    serializer_class = RideCreditAccountSerializer
    queryset = RideCreditAccount.objects.select_related('user')

    def list(self, request, *args, **kwargs):
        account, _ = RideCreditAccount.objects.get_or_create(user=request.user)
        serializer = self.get_serializer(account)
        return Response(serializer.data, status=status.HTTP_200_OK)

    @action(detail=True, methods=['POST'], url_path='grant', permission_classes=[IsAuthenticated, IsAdminOrDispatcher])
    def grant(self, request, pk=None):
        account = get_object_or_404(RideCreditAccount, pk=pk)
        serializer = CreditGrantSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        account = ledger.credit(
            account.user,
            serializer.validated_data['amount'],
            reference_id=f'grant-{request.user.id}',
            title='grant',
            description=serializer.validated_data.get('description', ''),
        )
        return Response(RideCreditAccountSerializer(account).data, status=status.HTTP_200_OK)


class RideCreditTransactionView(viewsets.ReadOnlyModelViewSet):
    serializer_class = RideCreditTransactionSerializer
    permission_classes = [IsAuthenticated]
    authentication_classes = [JWTAuthentication]

    def get_queryset(self):
        return RideCreditTransaction.objects.filter(account__user=self.request.user)
