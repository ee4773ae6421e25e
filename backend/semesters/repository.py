from erp.exceptions import NoActiveAllocationError

from .models import Semester


class SemesterRepository:
    """
    Resolves "the latest semester", the implicit subject of every lifecycle
    and allocation operation. Pass a different ``queryset`` to scope lookups.
    """

    def __init__(self, queryset=None):
        self._queryset = queryset

    @property
    def queryset(self):
        if self._queryset is not None:
            return self._queryset.all()
        return Semester.objects.all()

    def latest(self, for_update=False):
        qs = self.queryset.order_by("-academic_year", "-semester_type")
        if for_update:
            qs = qs.select_for_update()
        return qs.first()

    def latest_or_raise(self, for_update=False):
        semester = self.latest(for_update=for_update)
        if semester is None:
            raise NoActiveAllocationError()
        return semester


def resolve(repository=None):
    return repository if repository is not None else SemesterRepository()
