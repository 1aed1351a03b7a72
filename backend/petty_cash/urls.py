from django.urls import path
from . import views

urlpatterns = [
    path('petty-cash/deposits/', views.deposit_list_create, name='petty-cash-deposit-list-create'),
    path('petty-cash/deposits/<int:pk>/', views.deposit_detail, name='petty-cash-deposit-detail'),
    path('petty-cash/withdrawals/', views.withdrawal_list_create, name='petty-cash-withdrawal-list-create'),
    path('petty-cash/withdrawals/<int:pk>/', views.withdrawal_detail, name='petty-cash-withdrawal-detail'),
    path('petty-cash/spends/', views.spend_list_create, name='petty-cash-spend-list-create'),
    path('petty-cash/movements/', views.movement_list, name='petty-cash-movements'),
]
