from typing import Generic, Iterable, Optional, Sequence, Type, TypeVar

from django.db import models

T = TypeVar('T', bound=models.Model)


class GenericRepository(Generic[T]):
    """Filter/insert/update/delete access to a single model table."""

    ordering: Sequence[str] = ()

    def __init__(self, model: Type[T]):
        self.model = model

    def _base_queryset(self):
        qs = self.model.objects.all()
        return qs.order_by(*self.ordering) if self.ordering else qs

    def get(self, **filters) -> Optional[T]:
        return self._base_queryset().filter(**filters).first()

    def list(self, **filters) -> Iterable[T]:
        return self._base_queryset().filter(**filters)

    def create(self, **data) -> T:
        return self.model.objects.create(**data)

    def update(self, obj: T, **data) -> T:
        for k, v in data.items():
            setattr(obj, k, v)
        obj.save()
        return obj

    def update_scalar(self, obj: T, **fields) -> T:
        """Apply only the fields that are not None; skip the write when nothing changed."""
        dirty = [k for k, v in fields.items() if v is not None]
        for k in dirty:
            setattr(obj, k, fields[k])
        if dirty:
            obj.save()
        return obj

    def delete(self, obj: T):
        obj.delete()
