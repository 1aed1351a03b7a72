from django.contrib import admin
from .models import CurrentAccount, Payment


class PaymentInline(admin.TabularInline):
    model = Payment
    extra = 0
    fields = ['installment_number', 'amount_paid', 'payment_date', 'installment_version', 'status']
    readonly_fields = fields


@admin.register(CurrentAccount)
class CurrentAccountAdmin(admin.ModelAdmin):
    list_display = ['id', 'client', 'motorcycle', 'total_amount', 'remaining_amount',
                    'number_of_installments', 'installment_amount', 'status', 'next_due_date']
    list_filter = ['organization', 'status', 'payment_frequency']
    search_fields = ['client__last_name', 'client__company_name', 'motorcycle__chassis_number']
    raw_id_fields = ['client', 'motorcycle']
    inlines = [PaymentInline]


@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    list_display = ['id', 'current_account', 'amount_paid', 'currency', 'installment_number',
                    'installment_version', 'status', 'payment_date']
    list_filter = ['organization', 'status', 'installment_version', 'payment_method']
    search_fields = ['transaction_reference', 'notes']
    raw_id_fields = ['current_account']
