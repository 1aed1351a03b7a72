"""
Branch to branch transfers of motorcycles.
"""
import logging
from django.conf import settings
from django.core.mail import send_mail
from django.db import transaction
from django.utils import timezone
from backend.core.utils import ADMIN_ROLES
from backend.inventory.models import Motorcycle
from .models import MotorcycleTransfer

logger = logging.getLogger('backend.logistics')

TRANSFER_TRANSITIONS = {
    MotorcycleTransfer.STATUS_REQUESTED: (MotorcycleTransfer.STATUS_CONFIRMED, MotorcycleTransfer.STATUS_CANCELLED),
    MotorcycleTransfer.STATUS_CONFIRMED: (MotorcycleTransfer.STATUS_IN_TRANSIT, MotorcycleTransfer.STATUS_CANCELLED),
    MotorcycleTransfer.STATUS_IN_TRANSIT: (MotorcycleTransfer.STATUS_DELIVERED, MotorcycleTransfer.STATUS_CANCELLED),
    MotorcycleTransfer.STATUS_DELIVERED: (),
    MotorcycleTransfer.STATUS_CANCELLED: (),
}

UPDATABLE_FIELDS = ('actual_pickup_date', 'actual_delivery_date', 'estimated_delivery_date',
                    'cost', 'tracking_number', 'notes')


def notify_admins(transfer):
    """Email admins and roots of the organization about a transfer in transit; returns sent count"""
    recipients = list(
        transfer.organization.users.filter(role__in=ADMIN_ROLES, is_active=True)
        .exclude(email='').values_list('email', flat=True)
    )
    if not recipients:
        return 0

    motorcycle = transfer.motorcycle
    pickup = transfer.scheduled_pickup_date.strftime('%d/%m/%Y') if transfer.scheduled_pickup_date else 'No especificada'
    provider = transfer.logistic_provider.name if transfer.logistic_provider else 'Sin proveedor asignado'
    message = (
        "Se ha iniciado una nueva transferencia de motocicleta:\n\n"
        f"Motocicleta: {motorcycle.title}\n"
        f"Chasis: {motorcycle.chassis_number}\n"
        f"Origen: {transfer.from_branch.name}\n"
        f"Destino: {transfer.to_branch.name}\n"
        f"Proveedor: {provider}\n"
        f"Fecha programada de retiro: {pickup}\n\n"
        "La motocicleta está ahora en tránsito. Cuando llegue al destino, "
        "deberás confirmar la recepción en el sistema.\n"
    )
    try:
        return send_mail(
            subject=f"Nueva transferencia de motocicleta en tránsito - {motorcycle.chassis_number}",
            message=message,
            from_email=getattr(settings, 'DEFAULT_FROM_EMAIL', None),
            recipient_list=recipients,
            fail_silently=False,
        )
    except Exception as e:
        # The transfer stays created even if the notification fails
        logger.error(f"Failed to email transfer {transfer.id} notification: {str(e)}", exc_info=True)
        return 0


def request_transfer(organization, motorcycle_id, from_branch, to_branch, user=None,
                     logistic_provider=None, scheduled_pickup_date=None, notes=''):
    """Start a transfer: the motorcycle leaves the origin branch and travels EN_TRANSITO"""
    if from_branch.id == to_branch.id:
        raise ValueError('La sucursal de origen no puede ser la misma que la de destino.')

    with transaction.atomic():
        motorcycle = Motorcycle.objects.select_for_update().filter(
            pk=motorcycle_id, organization=organization, state=Motorcycle.STATE_STOCK
        ).first()
        if motorcycle is None:
            raise ValueError('Motocicleta no encontrada o no disponible para transferencia.')
        if motorcycle.branch_id != from_branch.id:
            raise ValueError('La motocicleta no se encuentra en la sucursal de origen especificada.')
        if motorcycle.transfers.filter(status__in=MotorcycleTransfer.ACTIVE_STATUSES).exists():
            raise ValueError('La motocicleta ya tiene una transferencia activa.')

        transfer = MotorcycleTransfer.objects.create(
            organization=organization,
            motorcycle=motorcycle,
            from_branch=from_branch,
            to_branch=to_branch,
            logistic_provider=logistic_provider,
            status=MotorcycleTransfer.STATUS_IN_TRANSIT,
            scheduled_pickup_date=scheduled_pickup_date,
            notes=notes or '',
            requested_by=user,
        )
        motorcycle.state = Motorcycle.STATE_IN_TRANSIT
        motorcycle.save(update_fields=['state', 'updated_at'])

    logger.info(f"Transfer {transfer.id} of motorcycle {motorcycle.id} from branch {from_branch.id} to {to_branch.id}")
    notify_admins(transfer)
    return transfer


def _deliver(transfer):
    """Place the unit in the destination branch; units that left transit some other way stay as they are"""
    motorcycle = transfer.motorcycle
    if motorcycle.state != Motorcycle.STATE_IN_TRANSIT:
        logger.warning(f"Transfer {transfer.id} delivered but motorcycle {motorcycle.id} is "
                       f"{motorcycle.state}; left unchanged")
        return
    motorcycle.branch = transfer.to_branch
    motorcycle.state = Motorcycle.STATE_STOCK
    motorcycle.save(update_fields=['branch', 'state', 'updated_at'])


def update_transfer_status(transfer, new_status, user=None, **changes):
    """Move a transfer along REQUESTED -> CONFIRMED -> IN_TRANSIT -> DELIVERED, or cancel it"""
    allowed = TRANSFER_TRANSITIONS.get(transfer.status, ())
    if new_status not in allowed:
        raise ValueError(f'Transición de estado inválida de {transfer.status} a {new_status}.')

    with transaction.atomic():
        for field in UPDATABLE_FIELDS:
            if field in changes and changes[field] is not None:
                setattr(transfer, field, changes[field])
        transfer.status = new_status
        if new_status == MotorcycleTransfer.STATUS_CONFIRMED:
            transfer.confirmed_by = user
        if new_status == MotorcycleTransfer.STATUS_DELIVERED:
            transfer.actual_delivery_date = transfer.actual_delivery_date or timezone.now()
            _deliver(transfer)
        elif new_status == MotorcycleTransfer.STATUS_CANCELLED:
            motorcycle = transfer.motorcycle
            if motorcycle.state == Motorcycle.STATE_IN_TRANSIT:
                motorcycle.state = Motorcycle.STATE_STOCK
                motorcycle.save(update_fields=['state', 'updated_at'])
        transfer.save()

    logger.info(f"Transfer {transfer.id} moved to {new_status}")
    return transfer


def confirm_arrival(transfer, user=None):
    """Receive an IN_TRANSIT transfer at the destination branch"""
    if transfer.status != MotorcycleTransfer.STATUS_IN_TRANSIT:
        raise ValueError('Transferencia no encontrada o no está en tránsito.')

    with transaction.atomic():
        transfer.status = MotorcycleTransfer.STATUS_DELIVERED
        transfer.actual_delivery_date = timezone.now()
        transfer.confirmed_by = user
        transfer.save()
        _deliver(transfer)

    logger.info(f"Transfer {transfer.id} arrival confirmed at branch {transfer.to_branch_id}")
    return transfer
