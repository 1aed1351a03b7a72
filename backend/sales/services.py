import logging
from django.db import transaction
from django.utils import timezone
from backend.inventory.models import Motorcycle
from .models import Reservation, Sale

logger = logging.getLogger('backend.sales')

RESERVABLE_STATES = (Motorcycle.STATE_STOCK, Motorcycle.STATE_PAUSED)


def create_reservation(organization, motorcycle_id, client, user=None, **data):
    """
    Reserve a unit for a client. Only STOCK or PAUSADO units can be
    reserved; an existing active reservation is reported as a warning.

    Returns (reservation, warning).
    """
    with transaction.atomic():
        try:
            motorcycle = Motorcycle.objects.select_for_update().get(pk=motorcycle_id, organization=organization)
        except Motorcycle.DoesNotExist:
            raise ValueError('No se encontró la motocicleta especificada')

        if motorcycle.state not in RESERVABLE_STATES:
            raise ValueError(
                f'La motocicleta no está disponible para reserva (Estado actual: {motorcycle.state})'
            )

        warning = None
        if Reservation.objects.filter(motorcycle=motorcycle, status='active').exists():
            warning = f'La moto {motorcycle.id} ya tiene una reserva activa.'
            logger.warning(warning)

        reservation = Reservation.objects.create(
            organization=organization,
            motorcycle=motorcycle,
            client=client,
            created_by=user,
            status='active',
            **data
        )

        motorcycle.state = Motorcycle.STATE_RESERVED
        motorcycle.client = client
        motorcycle.save(update_fields=['state', 'client', 'updated_at'])

    return reservation, warning


def cancel_reservation(reservation):
    if reservation.status != 'active':
        raise ValueError('Solo se pueden cancelar reservas activas.')

    with transaction.atomic():
        reservation.status = 'cancelled'
        reservation.save(update_fields=['status', 'updated_at'])

        motorcycle = reservation.motorcycle
        if motorcycle.state == Motorcycle.STATE_RESERVED:
            motorcycle.state = Motorcycle.STATE_STOCK
            motorcycle.client = None
            motorcycle.save(update_fields=['state', 'client', 'updated_at'])
    return reservation


def complete_sale(organization, motorcycle_id, client, seller, price=None, **data):
    """
    Mark a unit as sold to a client by the given seller and record the sale.
    Any active reservation of the unit is completed.
    """
    with transaction.atomic():
        try:
            motorcycle = Motorcycle.objects.select_for_update().get(pk=motorcycle_id, organization=organization)
        except Motorcycle.DoesNotExist:
            raise ValueError('No se encontró la motocicleta especificada')

        if motorcycle.state == Motorcycle.STATE_SOLD:
            raise ValueError('La motocicleta ya fue vendida.')
        if motorcycle.state == Motorcycle.STATE_IN_TRANSIT:
            raise ValueError('La motocicleta está en tránsito entre sucursales y no puede venderse.')
        if motorcycle.state == Motorcycle.STATE_DELETED:
            raise ValueError('La motocicleta fue eliminada y no puede venderse.')

        now = timezone.now()
        reservation = Reservation.objects.filter(motorcycle=motorcycle, status='active').order_by('-created_at').first()

        motorcycle.state = Motorcycle.STATE_SOLD
        motorcycle.sold_at = now
        motorcycle.seller = seller
        motorcycle.client = client
        motorcycle.save(update_fields=['state', 'sold_at', 'seller', 'client', 'updated_at'])

        Reservation.objects.filter(motorcycle=motorcycle, status='active').update(status='completed', updated_at=now)

        sale = Sale.objects.create(
            organization=organization,
            motorcycle=motorcycle,
            client=client,
            seller=seller,
            branch=motorcycle.branch,
            price=price if price is not None else motorcycle.retail_price,
            cost_price=motorcycle.cost_price,
            currency=data.pop('currency', None) or motorcycle.currency,
            reservation=reservation,
            sold_at=now,
            **data
        )

    logger.info(f"Motorcycle {motorcycle.id} sold to client {client.id} by user {seller.id if seller else None}")
    return sale
