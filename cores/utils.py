import math

from rest_framework.exceptions import ValidationError


def round_half_up(value):
    """Round to the nearest integer, halves away from zero for positives (2.5 -> 3)."""
    return int(math.floor(value + 0.5))


def id_query_param(request, name):
    """Return ``?<name>=`` as an int, None when absent; non-numeric values are a 400."""
    value = request.query_params.get(name)
    if not value:
        return None
    if not value.isdigit():
        raise ValidationError({name: "Must be a numeric id."})
    return int(value)
