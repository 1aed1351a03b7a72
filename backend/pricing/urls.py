from django.urls import path
from . import views

urlpatterns = [
    # Banks and cards
    path('banks/', views.bank_list_create, name='bank-list-create'),
    path('banks/<int:pk>/', views.bank_detail, name='bank-detail'),
    path('card-types/', views.card_type_list_create, name='card-type-list-create'),
    path('bank-cards/', views.bank_card_list_create, name='bank-card-list-create'),
    path('bank-cards/<int:pk>/', views.bank_card_detail, name='bank-card-detail'),

    # Banking promotions
    path('promotions/', views.promotion_list_create, name='promotion-list-create'),
    path('promotions/calculate/', views.promotion_calculate, name='promotion-calculate'),
    path('promotions/by-day/', views.promotions_by_day, name='promotions-by-day'),
    path('promotions/<int:pk>/', views.promotion_detail, name='promotion-detail'),
    path('promotions/<int:pk>/toggle/', views.promotion_toggle, name='promotion-toggle'),
    path('installment-plans/<int:pk>/toggle/', views.installment_plan_toggle, name='installment-plan-toggle'),
]
