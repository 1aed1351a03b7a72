from django.urls import path
from . import views

urlpatterns = [
    path('reservations/', views.reservation_list_create, name='reservation-list-create'),
    path('reservations/<int:pk>/', views.reservation_detail, name='reservation-detail'),
    path('reservations/<int:pk>/cancel/', views.reservation_cancel, name='reservation-cancel'),
    path('sales/', views.sale_list_create, name='sale-list-create'),
    path('sales/<int:pk>/', views.sale_detail, name='sale-detail'),
]
