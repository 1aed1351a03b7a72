from django.contrib import admin
from .models import PettyCashDeposit, PettyCashWithdrawal, PettyCashSpend


@admin.register(PettyCashDeposit)
class PettyCashDepositAdmin(admin.ModelAdmin):
    list_display = ['id', 'organization', 'branch', 'amount', 'date', 'description', 'status']
    list_filter = ['organization', 'status', 'branch']
    search_fields = ['description', 'reference']


@admin.register(PettyCashWithdrawal)
class PettyCashWithdrawalAdmin(admin.ModelAdmin):
    list_display = ['id', 'deposit', 'user_name', 'amount_given', 'amount_justified', 'date', 'status']
    list_filter = ['organization', 'status']
    search_fields = ['user_name']


@admin.register(PettyCashSpend)
class PettyCashSpendAdmin(admin.ModelAdmin):
    list_display = ['id', 'withdrawal', 'motive', 'amount', 'date', 'ticket_url']
    list_filter = ['organization', 'motive']
    search_fields = ['description']
