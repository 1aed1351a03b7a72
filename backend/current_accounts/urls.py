from django.urls import path
from . import views

urlpatterns = [
    path('current-accounts/', views.current_account_list_create, name='current-account-list-create'),
    path('current-accounts/<int:pk>/', views.current_account_detail, name='current-account-detail'),
    path('current-accounts/<int:pk>/payments/', views.current_account_payments, name='current-account-payments'),
    path('payments/<int:pk>/undo/', views.payment_undo, name='payment-undo'),
    path('payments/<int:pk>/cancel/', views.payment_cancel, name='payment-cancel'),
]
