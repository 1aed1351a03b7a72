from django.urls import path
from . import views

urlpatterns = [
    path('reports/sales/', views.sales_report, name='sales-report'),
    path('reports/inventory/', views.inventory_report, name='inventory-report'),
    path('reports/reservations/', views.reservations_report, name='reservations-report'),
    path('reports/current-accounts/', views.current_accounts_report, name='current-accounts-report'),
    path('reports/suppliers/', views.suppliers_report, name='suppliers-report'),

    path('reports/sales/pdf/', views.sales_report_pdf, name='sales-report-pdf'),
    path('reports/inventory/pdf/', views.inventory_report_pdf, name='inventory-report-pdf'),
    path('reports/reservations/pdf/', views.reservations_report_pdf, name='reservations-report-pdf'),
    path('reports/current-accounts/pdf/', views.current_accounts_report_pdf, name='current-accounts-report-pdf'),
    path('reports/current-accounts/<int:pk>/pdf/', views.current_account_statement_pdf,
         name='current-account-statement-pdf'),
    path('reports/petty-cash-movements/pdf/', views.petty_cash_movements_pdf, name='petty-cash-movements-pdf'),
    path('reports/transfers/<int:pk>/pdf/', views.transfer_pdf, name='transfer-pdf'),
    path('reports/quote/pdf/', views.quote_pdf, name='quote-pdf'),
]
