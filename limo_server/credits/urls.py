from django.urls import path, include
from rest_framework.routers import DefaultRouter
from .views import RideCreditView, RideCreditTransactionView

router = DefaultRouter()
router.register(r'balance', RideCreditView, basename='credit-balance')
router.register(r'transactions', RideCreditTransactionView, basename='credit-transactions')

urlpatterns = [
    path('credits/', include(router.urls)),
]
