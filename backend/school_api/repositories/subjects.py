"""Subject persistence."""

from school_api.models import Subject
from school_api.repositories.named import NamedRepository


class SubjectRepository(NamedRepository[Subject]):
    model = Subject
