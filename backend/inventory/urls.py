from django.urls import path
from . import views

urlpatterns = [
    path('motorcycles/', views.motorcycle_list_create, name='motorcycle-list-create'),
    path('motorcycles/batch/', views.motorcycle_batch_create, name='motorcycle-batch-create'),
    path('motorcycles/search/', views.motorcycle_fuzzy_search, name='motorcycle-fuzzy-search'),
    path('motorcycles/<int:pk>/', views.motorcycle_detail, name='motorcycle-detail'),
    path('motorcycles/<int:pk>/status/', views.motorcycle_status, name='motorcycle-status'),
    path('motorcycles/<int:pk>/label/', views.motorcycle_label, name='motorcycle-label'),
]
