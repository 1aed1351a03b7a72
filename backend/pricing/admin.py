from django.contrib import admin
from .models import Bank, CardType, BankCard, BankingPromotion, InstallmentPlan


@admin.register(Bank)
class BankAdmin(admin.ModelAdmin):
    list_display = ['name', 'is_enabled', 'created_at']
    list_filter = ['is_enabled']
    search_fields = ['name']


@admin.register(CardType)
class CardTypeAdmin(admin.ModelAdmin):
    list_display = ['name', 'type']
    list_filter = ['type']


@admin.register(BankCard)
class BankCardAdmin(admin.ModelAdmin):
    list_display = ['bank', 'card_type', 'organization', 'is_enabled', 'order']
    list_filter = ['organization', 'is_enabled', 'bank']


class InstallmentPlanInline(admin.TabularInline):
    model = InstallmentPlan
    extra = 0


@admin.register(BankingPromotion)
class BankingPromotionAdmin(admin.ModelAdmin):
    list_display = ['name', 'organization', 'discount_rate', 'surcharge_rate', 'payment_method', 'is_enabled',
                    'start_date', 'end_date']
    list_filter = ['organization', 'is_enabled', 'payment_method']
    search_fields = ['name', 'description']
    inlines = [InstallmentPlanInline]
