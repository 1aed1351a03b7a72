from django.urls import path
from . import views

urlpatterns = [
    path('brands/', views.brand_list_create, name='brand-list-create'),
    path('brands/<int:pk>/', views.brand_detail, name='brand-detail'),
    path('models/', views.model_list_create, name='model-list-create'),
    path('models/<int:pk>/', views.model_detail, name='model-detail'),
    path('models/<int:model_id>/files/', views.model_files, name='model-files'),
    path('models/<int:model_id>/files/<int:file_id>/', views.model_file_detail, name='model-file-detail'),
    path('organization-brands/', views.organization_brand_list_create, name='organization-brand-list-create'),
    path('organization-brands/<int:pk>/', views.organization_brand_detail, name='organization-brand-detail'),
    path('catalog/quick-brand-model/', views.quick_brand_model, name='quick-brand-model'),
    path('colors/', views.color_list_create, name='color-list-create'),
    path('colors/<int:pk>/', views.color_detail, name='color-detail'),
]
