"""
Business rules for motorcycle units: batch intake, state transitions
and the tolerant search used by the sales screen.
"""
import logging
import re
from django.db import IntegrityError, transaction
from django.db.models import Q
from backend.catalog.models import Brand, MotorcycleModel, Color
from backend.locations.models import Branch
from backend.parties.models import Supplier
from .models import Motorcycle

logger = logging.getLogger('backend.inventory')

# target state -> states it may be reached from
ALLOWED_TRANSITIONS = {
    Motorcycle.STATE_STOCK: (
        Motorcycle.STATE_PAUSED,
        Motorcycle.STATE_RESERVED,
        Motorcycle.STATE_PROCESSING,
        Motorcycle.STATE_DELETED,
    ),
    Motorcycle.STATE_PAUSED: (Motorcycle.STATE_STOCK,),
    Motorcycle.STATE_PROCESSING: (Motorcycle.STATE_STOCK,),
    Motorcycle.STATE_DELETED: (Motorcycle.STATE_STOCK, Motorcycle.STATE_PAUSED),
}

RELEASE_CLIENT_FROM = (
    Motorcycle.STATE_RESERVED,
    Motorcycle.STATE_PROCESSING,
    Motorcycle.STATE_DELETED,
)

COMMON_BATCH_FIELDS = (
    'year', 'displacement', 'cost_price', 'retail_price', 'wholesale_price',
    'currency', 'image_url', 'license_plate', 'observations',
)


def change_status(motorcycle, new_state):
    """
    Move a unit to another state following the allowed transitions.
    Raises ValueError when the transition is not permitted.
    """
    valid_targets = [state for state, _ in Motorcycle.STATE_CHOICES if state != Motorcycle.STATE_SOLD]
    if new_state not in valid_targets:
        raise ValueError(f'Estado objetivo inválido: {new_state}')

    allowed_from = ALLOWED_TRANSITIONS.get(new_state)
    if allowed_from is None:
        raise ValueError('Transición de estado no manejada.')

    previous_state = motorcycle.state
    if previous_state not in allowed_from:
        raise ValueError(
            f'No se pudo actualizar el estado. La moto en su estado actual ({previous_state}) '
            f'no permite esta transición a {new_state}.'
        )

    with transaction.atomic():
        update_fields = ['state', 'updated_at']
        motorcycle.state = new_state
        if new_state == Motorcycle.STATE_STOCK and previous_state in RELEASE_CLIENT_FROM:
            motorcycle.client = None
            update_fields.append('client')
            if previous_state == Motorcycle.STATE_RESERVED:
                from backend.sales.models import Reservation
                Reservation.objects.filter(motorcycle=motorcycle, status='active').update(status='cancelled')
        motorcycle.save(update_fields=update_fields)

    logger.info(f"Motorcycle {motorcycle.id} status updated from {previous_state} to {new_state}")
    return previous_state


def _get_scoped(model, pk, organization, label):
    if pk in (None, ''):
        return None
    queryset = model.objects.all()
    if organization is not None and hasattr(model, 'organization'):
        queryset = queryset.filter(organization=organization)
    try:
        return queryset.get(pk=pk)
    except (model.DoesNotExist, ValueError, TypeError):
        raise ValueError(f'{label} seleccionado no existe.')


def _get_color(pk, organization):
    if pk in (None, ''):
        return None
    try:
        return Color.objects.get(Q(organization=organization) | Q(organization__isnull=True), pk=pk)
    except (Color.DoesNotExist, ValueError, TypeError):
        raise ValueError('El color seleccionado no existe.')


def create_batch(organization, common, units):
    """
    Create every unit of a batch in one transaction.

    `common` holds brand, model, supplier and pricing data shared by all
    units; each entry of `units` carries chassis, engine, color, mileage,
    branch and state. Any duplicate or missing reference fails the batch.
    """
    if not units:
        raise ValueError('El lote debe contener al menos una unidad.')

    brand = _get_scoped(Brand, common.get('brand'), None, 'La marca')
    model = _get_scoped(MotorcycleModel, common.get('model'), None, 'El modelo')
    if brand is None or model is None:
        raise ValueError('Marca y modelo son requeridos.')
    if model.brand_id != brand.id:
        raise ValueError('El modelo no pertenece a la marca seleccionada.')
    supplier = _get_scoped(Supplier, common.get('supplier'), organization, 'El proveedor')

    chassis_seen = set()
    engines_seen = set()
    for unit in units:
        chassis = (unit.get('chassis_number') or '').strip().upper()
        if not chassis:
            raise ValueError('Cada unidad requiere número de chasis.')
        if chassis in chassis_seen:
            raise ValueError(f'Número de chasis duplicado en el lote: {chassis}')
        chassis_seen.add(chassis)
        engine = (unit.get('engine_number') or '').strip().upper()
        if engine:
            if engine in engines_seen:
                raise ValueError(f'Número de motor duplicado en el lote: {engine}')
            engines_seen.add(engine)

    existing = Motorcycle.objects.filter(organization=organization).filter(
        Q(chassis_number__in=chassis_seen) | Q(engine_number__in=engines_seen)
    ).values_list('chassis_number', 'engine_number')
    for chassis, engine in existing:
        if chassis in chassis_seen:
            raise ValueError(f'Ya existe una moto con chasis {chassis}.')
        raise ValueError(f'Ya existe una moto con motor {engine}.')

    created = []
    try:
        with transaction.atomic():
            for unit in units:
                engine = (unit.get('engine_number') or '').strip().upper() or None
                motorcycle = Motorcycle(
                    organization=organization,
                    brand=brand,
                    model=model,
                    supplier=supplier,
                    color=_get_color(unit.get('color'), organization),
                    branch=_get_scoped(Branch, unit.get('branch'), organization, 'La sucursal'),
                    chassis_number=unit['chassis_number'].strip().upper(),
                    engine_number=engine,
                    mileage=unit.get('mileage') or 0,
                    state=unit.get('state') or Motorcycle.STATE_STOCK,
                )
                for field in COMMON_BATCH_FIELDS:
                    if common.get(field) not in (None, ''):
                        setattr(motorcycle, field, common[field])
                motorcycle.save()
                created.append(motorcycle)
    except IntegrityError:
        logger.error("Batch creation failed on integrity error", exc_info=True)
        raise ValueError('Posible número de chasis o motor duplicado.')

    logger.info(f"Created batch of {len(created)} motorcycles for organization {organization.id}")
    return created


# Fuzzy search

SWAP_MAP = {
    'v': ['b'],
    'b': ['v', 'p'],
    's': ['z', 'c'],
    'z': ['s'],
    'c': ['k', 's', 'z'],
    'k': ['c', 'q'],
    'q': ['k', 'c'],
    'i': ['y'],
    'y': ['i'],
    'j': ['g', 'y'],
    'g': ['j'],
}

VOWELS = 'aeiou'


def swap_variations(term):
    """Single character swaps of commonly confused letters (v/b, s/z, c/k...)"""
    variations = []
    for index, char in enumerate(term):
        for replacement in SWAP_MAP.get(char, []):
            candidate = term[:index] + replacement + term[index + 1:]
            if candidate not in variations and candidate != term:
                variations.append(candidate)
    for double, single in (('ll', 'y'), ('rr', 'r')):
        if double in term:
            candidate = term.replace(double, single)
            if candidate not in variations:
                variations.append(candidate)
    return variations


def strip_vowels(term):
    return re.sub(f'[{VOWELS}]', '', term, flags=re.IGNORECASE)


def main_consonants(term):
    """First four distinct consonants (repeats collapsed)"""
    consonants = re.sub(f'[{VOWELS}\\s]', '', term.lower())
    consonants = re.sub(r'(.)\1+', r'\1', consonants)
    return consonants[:4]


def _contains_query(term):
    query = (
        Q(brand__name__icontains=term) |
        Q(model__name__icontains=term) |
        Q(chassis_number__icontains=term) |
        Q(engine_number__icontains=term) |
        Q(license_plate__icontains=term)
    )
    if term.isdigit() and len(term) == 4:
        query |= Q(year=int(term))
    return query


def _name_regex_query(pattern):
    return Q(brand__name__iregex=pattern) | Q(model__name__iregex=pattern)


def fuzzy_search(queryset, search_input, limit=50):
    """
    Search units tolerating typos. Strategies run in order and the first
    one with results wins: plain contains, letter swaps, consonant skeleton
    (vowels optional) and main consonants in order.
    """
    term = (search_input or '').strip().lower()
    if not term:
        return queryset, None

    ordered = queryset.order_by('state', '-id')

    results = ordered.filter(_contains_query(term))
    if results.exists():
        return results[:limit], 'contains'

    for variation in swap_variations(term):
        results = ordered.filter(_contains_query(variation))
        if results.exists():
            logger.debug(f"Fuzzy search matched variation '{variation}' for '{term}'")
            return results[:limit], 'character_swap'

    skeleton = strip_vowels(term).replace(' ', '')
    if len(skeleton) >= 2:
        pattern = f'[{VOWELS}\\s-]*'.join(re.escape(char) for char in skeleton)
        results = ordered.filter(_name_regex_query(pattern))
        if results.exists():
            return results[:limit], 'no_vowels'

    consonants = main_consonants(term)
    if len(consonants) >= 2:
        pattern = '.*'.join(re.escape(char) for char in consonants)
        results = ordered.filter(_name_regex_query(pattern))
        if results.exists():
            return results[:limit], 'main_consonants'

    return ordered.none(), None
