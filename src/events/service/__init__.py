import typing as t

from django.db import models, transaction
from pydantic import BaseModel

M = t.TypeVar("M", bound=models.Model)


@transaction.atomic
def update_db_instance(instance: M, payload: BaseModel | None = None, **changes: t.Any) -> M:
    """Apply the set fields of a payload, plus explicit changes, to a locked fresh copy of ``instance``.

    Only fields the caller actually sent are written, so a PATCH with ``{"phone": null}``
    clears the phone while an omitted field is left alone. The row is locked for the
    duration of the update and ``save()`` runs the model validation.
    """
    fresh = type(instance)._default_manager.select_for_update().get(pk=instance.pk)
    data = payload.model_dump(exclude_unset=True) if payload is not None else {}
    data |= changes
    unknown = [name for name in data if not hasattr(fresh, name)]
    if unknown:
        raise AttributeError(f"{type(fresh).__name__} has no field(s): {', '.join(sorted(unknown))}")
    for name, value in data.items():
        setattr(fresh, name, value)
    fresh.save()
    return fresh
