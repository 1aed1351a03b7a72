from django.urls import path
from .views import branch_list_create, branch_detail, branch_reorder

urlpatterns = [
    path('branches/', branch_list_create, name='branch-list-create'),
    path('branches/reorder/', branch_reorder, name='branch-reorder'),
    path('branches/<int:pk>/', branch_detail, name='branch-detail'),
]
