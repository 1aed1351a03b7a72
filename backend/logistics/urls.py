from django.urls import path
from . import views

urlpatterns = [
    path('logistic-providers/', views.provider_list_create, name='logistic-provider-list-create'),
    path('logistic-providers/<int:pk>/', views.provider_detail, name='logistic-provider-detail'),
    path('transfers/', views.transfer_list_create, name='transfer-list-create'),
    path('transfers/in-transit/', views.transfers_in_transit, name='transfers-in-transit'),
    path('transfers/available-motorcycles/', views.motorcycles_for_transfer, name='motorcycles-for-transfer'),
    path('transfers/<int:pk>/', views.transfer_detail, name='transfer-detail'),
    path('transfers/<int:pk>/status/', views.transfer_status, name='transfer-status'),
    path('transfers/<int:pk>/confirm-arrival/', views.transfer_confirm_arrival, name='transfer-confirm-arrival'),
]
