"""
PDF documents built with reportlab platypus.

Every builder returns the document as bytes so views can stream it and
tests can check the %PDF header.
"""
from datetime import datetime
from decimal import Decimal
from io import BytesIO

from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER, TA_RIGHT
from reportlab.lib.pagesizes import A4, landscape
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.lib.units import cm
from reportlab.platypus import SimpleDocTemplate, Paragraph, Spacer, Table, TableStyle

PRIMARY = colors.HexColor('#1e3c72')
LIGHT_ROW = colors.HexColor('#f0f4fa')
GREY = colors.HexColor('#666666')


def _styles():
    styles = getSampleStyleSheet()
    styles.add(ParagraphStyle(
        name='ReportTitle', parent=styles['Title'], fontSize=18,
        textColor=PRIMARY, spaceAfter=6, alignment=TA_CENTER, fontName='Helvetica-Bold'
    ))
    styles.add(ParagraphStyle(
        name='ReportSubtitle', parent=styles['Normal'], fontSize=10,
        textColor=GREY, spaceAfter=12, alignment=TA_CENTER
    ))
    styles.add(ParagraphStyle(
        name='Section', parent=styles['Heading2'], fontSize=12,
        textColor=PRIMARY, spaceBefore=12, spaceAfter=6, fontName='Helvetica-Bold'
    ))
    styles.add(ParagraphStyle(name='Right', parent=styles['Normal'], alignment=TA_RIGHT))
    return styles


def money(value, currency='ARS'):
    """Argentine format: thousands with dots, two decimals with comma"""
    if value is None:
        return '-'
    text = f"{Decimal(value):,.2f}".replace(',', 'X').replace('.', ',').replace('X', '.')
    return f"{currency} {text}"


def _currency_lines(amounts):
    if not amounts:
        return '-'
    return ' / '.join(money(value, currency) for currency, value in amounts.items())


def _date(value):
    if not value:
        return '-'
    return value.strftime('%d/%m/%Y')


def _table(rows, col_widths=None, header=True):
    table = Table(rows, colWidths=col_widths, repeatRows=1 if header else 0)
    commands = [
        ('FONTSIZE', (0, 0), (-1, -1), 8),
        ('GRID', (0, 0), (-1, -1), 0.25, colors.HexColor('#cccccc')),
        ('VALIGN', (0, 0), (-1, -1), 'MIDDLE'),
        ('ROWBACKGROUNDS', (0, 1), (-1, -1), [colors.white, LIGHT_ROW]),
    ]
    if header:
        commands += [
            ('BACKGROUND', (0, 0), (-1, 0), PRIMARY),
            ('TEXTCOLOR', (0, 0), (-1, 0), colors.white),
            ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
        ]
    table.setStyle(TableStyle(commands))
    return table


def _footer(canvas, doc):
    canvas.saveState()
    canvas.setFont('Helvetica', 7)
    canvas.setFillColor(GREY)
    width = doc.pagesize[0]
    canvas.drawString(doc.leftMargin, 1 * cm, f"Generado: {datetime.now().strftime('%d/%m/%Y %H:%M')}")
    canvas.drawRightString(width - doc.rightMargin, 1 * cm, f"Página {doc.page}")
    canvas.restoreState()


def _build(story, title, pagesize=A4):
    buffer = BytesIO()
    doc = SimpleDocTemplate(
        buffer, pagesize=pagesize, title=title,
        leftMargin=1.5 * cm, rightMargin=1.5 * cm, topMargin=1.5 * cm, bottomMargin=1.8 * cm
    )
    doc.build(story, onFirstPage=_footer, onLaterPages=_footer)
    return buffer.getvalue()


def _header(story, styles, title, organization, period=None):
    story.append(Paragraph(title, styles['ReportTitle']))
    subtitle = organization.name if organization else ''
    if period:
        subtitle = f"{subtitle} | {period}"
    story.append(Paragraph(subtitle, styles['ReportSubtitle']))


def _period(date_from=None, date_to=None):
    if not date_from and not date_to:
        return 'Todos los períodos'
    return f"Del {date_from or '-'} al {date_to or '-'}"


def sales_pdf(organization, report, date_from=None, date_to=None):
    styles = _styles()
    story = []
    _header(story, styles, 'Reporte de Ventas', organization, _period(date_from, date_to))

    summary = report['summary']
    story.append(_table([
        ['Ventas', 'Ingresos', 'Ganancia', 'Precio promedio'],
        [summary['total_sales'], _currency_lines(summary['total_revenue']),
         _currency_lines(summary['total_profit']), _currency_lines(summary['average_price'])],
    ]))

    story.append(Paragraph('Ventas por vendedor', styles['Section']))
    rows = [['Vendedor', 'Cantidad', 'Ingresos', 'Ganancia']]
    for seller in report['sales_by_seller'].values():
        rows.append([seller['name'], seller['count'], _currency_lines(seller['revenue']),
                     _currency_lines(seller['profit'])])
    story.append(_table(rows))

    story.append(Paragraph('Ventas por sucursal', styles['Section']))
    rows = [['Sucursal', 'Cantidad', 'Ingresos']]
    for branch in report['sales_by_branch'].values():
        rows.append([branch['name'], branch['count'], _currency_lines(branch['revenue'])])
    story.append(_table(rows))

    story.append(Paragraph('Ventas por mes', styles['Section']))
    rows = [['Mes', 'Cantidad', 'Ingresos']]
    for month, data in report['sales_by_month'].items():
        rows.append([month, data['count'], _currency_lines(data['revenue'])])
    story.append(_table(rows))
    return _build(story, 'Reporte de Ventas')


def inventory_pdf(organization, report):
    styles = _styles()
    story = []
    _header(story, styles, 'Reporte de Inventario', organization, f"Total de unidades: {report['total']}")

    story.append(Paragraph('Unidades por estado', styles['Section']))
    rows = [['Estado', 'Cantidad', 'Valor']]
    for state, count in report['by_state'].items():
        rows.append([state, count, _currency_lines(report['value_by_state'].get(state))])
    story.append(_table(rows))

    story.append(Paragraph('Unidades por marca', styles['Section']))
    rows = [['Marca', 'Cantidad', 'Valor']]
    for brand, data in sorted(report['by_brand'].items()):
        rows.append([brand, data['count'], _currency_lines(data['value'])])
    story.append(_table(rows))

    story.append(Paragraph('Unidades por sucursal', styles['Section']))
    rows = [['Sucursal', 'Cantidad']] + [[name, count] for name, count in report['by_branch'].items()]
    story.append(_table(rows))
    return _build(story, 'Reporte de Inventario')


def reservations_pdf(organization, report, date_from=None, date_to=None):
    styles = _styles()
    story = []
    _header(story, styles, 'Reporte de Reservas', organization, _period(date_from, date_to))

    summary = report['summary']
    story.append(_table([
        ['Total', 'Activas', 'Completadas', 'Canceladas', 'Vencidas', 'Conversión', 'Monto'],
        [summary['total_reservations'], summary['active_reservations'], summary['completed_reservations'],
         summary['cancelled_reservations'], summary['expired_reservations'],
         f"{summary['conversion_rate']}%", _currency_lines(summary['total_amount'])],
    ]))

    story.append(Paragraph('Reservas por sucursal', styles['Section']))
    rows = [['Sucursal', 'Total', 'Activas', 'Completadas', 'Canceladas', 'Vencidas', 'Monto']]
    for branch in report['reservations_by_branch'].values():
        rows.append([branch['name'], branch['total'], branch['active'], branch['completed'],
                     branch['cancelled'], branch['expired'], _currency_lines(branch['amount'])])
    story.append(_table(rows))
    return _build(story, 'Reporte de Reservas', pagesize=landscape(A4))


def current_accounts_pdf(organization, report):
    styles = _styles()
    story = []
    _header(story, styles, 'Reporte de Cuentas Corrientes', organization)

    story.append(_table([
        ['Cuentas', 'Financiado', 'Cobrado', 'Pendiente'],
        [report['total_accounts'], money(report['total_financed_amount']),
         money(report['total_paid_amount']), money(report['total_pending_amount'])],
    ]))

    story.append(Paragraph('Cuentas por estado', styles['Section']))
    rows = [['Estado', 'Cantidad', 'Monto']]
    for entry in report['accounts_by_status']:
        rows.append([entry['status'], entry['count'], money(entry['total_amount'])])
    story.append(_table(rows))

    if report['overdue_accounts']:
        story.append(Paragraph('Cuentas vencidas', styles['Section']))
        rows = [['Cuenta', 'Próximo vencimiento', 'Saldo']]
        for entry in report['overdue_accounts']:
            rows.append([f"#{entry['id']}", _date(entry['next_due_date']),
                         money(entry['remaining_amount'], entry['currency'])])
        story.append(_table(rows))

    story.append(Paragraph('Cobranzas por mes', styles['Section']))
    rows = [['Mes', 'Pagos', 'Monto']]
    for entry in report['payments_by_month']:
        rows.append([entry['month'], entry['total_payments'], money(entry['total_amount'])])
    story.append(_table(rows))
    return _build(story, 'Reporte de Cuentas Corrientes')


def account_statement_pdf(organization, statement, schedule):
    """Statement of a single current account with its payments and amortization plan"""
    account = statement['account']
    currency = account.currency
    styles = _styles()
    story = []
    _header(story, styles, f"Estado de Cuenta Corriente #{account.id}", organization)

    story.append(_table([
        ['Cliente', account.client.display_name, 'Unidad', str(account.motorcycle)],
        ['Monto total', money(account.total_amount, currency), 'Anticipo', money(account.down_payment, currency)],
        ['Cuotas', f"{account.number_of_installments} x {money(account.installment_amount, currency)}",
         'Tasa (TNA)', f"{account.interest_rate}%"],
        ['Saldo', money(account.remaining_amount, currency), 'Estado', account.get_status_display()],
        ['Inicio', _date(account.start_date), 'Próximo vencimiento', _date(account.next_due_date)],
    ], header=False))

    story.append(Paragraph('Pagos registrados', styles['Section']))
    rows = [['Fecha', 'Cuota', 'Monto', 'Medio', 'Estado']]
    for payment in statement['payments']:
        rows.append([
            _date(payment.payment_date), payment.installment_number or ('Anticipo' if payment.is_down_payment else '-'),
            money(payment.amount_paid, payment.currency), payment.payment_method or '-', payment.get_status_display(),
        ])
    story.append(_table(rows))
    story.append(Spacer(1, 6))
    story.append(Paragraph(
        f"Total pagado: {money(statement['total_paid'], currency)} | Pendiente: {money(statement['pending'], currency)}",
        styles['Right']
    ))

    if schedule:
        story.append(Paragraph('Plan de amortización', styles['Section']))
        story.append(_schedule_table(schedule, currency))
    return _build(story, f"Cuenta corriente {account.id}")


def _schedule_table(schedule, currency):
    rows = [['Cuota', 'Capital inicial', 'Interés', 'Amortización', 'Cuota total', 'Capital final']]
    for entry in schedule:
        rows.append([
            entry['installment_number'], money(entry['capital_start'], currency), money(entry['interest'], currency),
            money(entry['amortization'], currency), money(entry['installment_amount'], currency),
            money(entry['capital_end'], currency),
        ])
    return _table(rows)


def petty_cash_pdf(organization, rows, totals, branch_name=None, date_from=None, date_to=None):
    styles = _styles()
    story = []
    period = _period(date_from, date_to)
    if branch_name:
        period = f"{branch_name} | {period}"
    _header(story, styles, 'Movimientos de Caja Chica', organization, period)

    story.append(_table([
        ['Total DEBE', 'Total HABER', 'Saldo'],
        [money(totals['total_debe']), money(totals['total_haber']), money(totals['balance'])],
    ]))
    story.append(Spacer(1, 10))

    table_rows = [['Fecha', 'Tipo', 'Descripción', 'Comprobante', 'Usuario', 'DEBE', 'HABER', 'Saldo']]
    for row in rows:
        is_debe = row['type'] == 'DEBE'
        table_rows.append([
            _date(row['date']), row['type'], Paragraph(row['description'] or '', styles['BodyText']),
            row['ticket_number'] or '-', (row['user'] or {}).get('name', '-'),
            money(row['amount']) if is_debe else '', '' if is_debe else money(row['amount']),
            money(row['balance']),
        ])
    story.append(_table(table_rows, col_widths=[2 * cm, 1.6 * cm, 7 * cm, 3 * cm, 3.5 * cm, 3 * cm, 3 * cm, 3 * cm]))
    return _build(story, 'Movimientos de Caja Chica', pagesize=landscape(A4))


def transfer_pdf(organization, transfer):
    """Remito de traslado between branches"""
    styles = _styles()
    story = []
    _header(story, styles, f"Remito de Traslado #{transfer.id}", organization, _date(transfer.request_date))

    motorcycle = transfer.motorcycle
    provider = transfer.logistic_provider
    story.append(_table([
        ['Unidad', motorcycle.title, 'Chasis', motorcycle.chassis_number],
        ['Motor', motorcycle.engine_number or '-', 'Color', str(motorcycle.color) if motorcycle.color else '-'],
        ['Origen', transfer.from_branch.name, 'Destino', transfer.to_branch.name],
        ['Transportista', provider.name if provider else 'Propio', 'Seguimiento', transfer.tracking_number or '-'],
        ['Retiro programado', _date(transfer.scheduled_pickup_date), 'Entrega estimada',
         _date(transfer.estimated_delivery_date)],
        ['Costo', money(transfer.cost, transfer.currency) if transfer.cost is not None else '-',
         'Estado', transfer.get_status_display()],
    ], header=False))

    if transfer.notes:
        story.append(Paragraph('Observaciones', styles['Section']))
        story.append(Paragraph(transfer.notes, styles['BodyText']))

    story.append(Spacer(1, 60))
    story.append(_table([
        ['Entrega (firma y aclaración)', 'Recepción (firma y aclaración)'],
        ['\n\n\n', '\n\n\n'],
    ], col_widths=[8.5 * cm, 8.5 * cm]))
    return _build(story, f"Remito {transfer.id}")


def quote_pdf(organization, motorcycle, client_name, price, currency, down_payment=None,
              financing=None, promotion=None, notes=None):
    """
    Sale quote (presupuesto). `financing` holds installments, interest_rate,
    frequency and the amortization schedule; `promotion` the output of the
    promotion calculator.
    """
    styles = _styles()
    story = []
    _header(story, styles, 'Presupuesto', organization, datetime.now().strftime('%d/%m/%Y'))

    story.append(_table([
        ['Cliente', client_name or '-'],
        ['Unidad', motorcycle.title],
        ['Chasis', motorcycle.chassis_number],
        ['Precio de lista', money(price, currency)],
    ], header=False, col_widths=[4 * cm, 13 * cm]))

    if promotion:
        story.append(Paragraph('Promoción bancaria', styles['Section']))
        rows = [['Precio final', money(promotion['final_amount'], currency)]]
        if promotion.get('discount_amount'):
            rows.append(['Descuento', money(promotion['discount_amount'], currency)])
        if promotion.get('surcharge_amount'):
            rows.append(['Recargo', money(promotion['surcharge_amount'], currency)])
        if promotion.get('installments'):
            rows.append(['Cuotas', f"{promotion['installments']} x {money(promotion['installment_amount'], currency)}"])
        story.append(_table(rows, header=False, col_widths=[4 * cm, 13 * cm]))

    if financing:
        story.append(Paragraph('Financiación', styles['Section']))
        story.append(_table([
            ['Anticipo', money(down_payment or 0, currency)],
            ['Monto financiado', money(financing['principal'], currency)],
            ['Cuotas', f"{financing['installments']} x {money(financing['installment_amount'], currency)}"],
            ['Tasa (TNA)', f"{financing['interest_rate']}%"],
        ], header=False, col_widths=[4 * cm, 13 * cm]))
        if financing.get('schedule'):
            story.append(Spacer(1, 8))
            story.append(_schedule_table(financing['schedule'], currency))

    if notes:
        story.append(Paragraph('Observaciones', styles['Section']))
        story.append(Paragraph(notes, styles['BodyText']))

    story.append(Spacer(1, 12))
    story.append(Paragraph('Presupuesto válido por 7 días. Precios sujetos a modificación sin previo aviso.',
                           styles['ReportSubtitle']))
    return _build(story, 'Presupuesto')
