"""Abstract base class for the record fetching backend.

The batch collector talks to storage exclusively through this interface.
Every method receives a whole group of parent ids at once and returns
results keyed by parent id, so one call serves all siblings of a group.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from .querydsl.arguments import QueryArguments
from .schema import Model, Record, RelationField, ScalarField
from .types import RecordId, RecordIds

__all__ = ("RecordFetcher",)


class RecordFetcher(ABC):
    """Abstract base class for backends executing batched fetches.

    Implementations are free to translate the compiled filter expressions
    found in `QueryArguments` into whatever query language they speak.
    """

    @abstractmethod
    def fetch_scalar_lists(
        self,
        model: Model,
        field: ScalarField,
        parent_ids: RecordIds,
    ) -> Dict[RecordId, List[Any]]:
        """Fetch stored list values of a scalar list field.

        Args:
            model: Model owning the field
            field: Scalar list field
            parent_ids: Distinct ids of the records the lists belong to

        Returns:
            Mapping of parent id to list of values; missing ids mean an empty list
        """
        raise NotImplementedError

    @abstractmethod
    def fetch_related(
        self,
        model: Model,
        field: RelationField,
        parent_ids: RecordIds,
        query_arguments: Optional[QueryArguments] = None,
    ) -> Dict[RecordId, List[Record]]:
        """Fetch related records for a group of parents.

        Filtering, ordering and pagination in `query_arguments` apply per parent.

        Args:
            model: Model of the parent records, declaring `field`
            field: Relation field traversed from the parents
            parent_ids: Distinct ids of the parent records
            query_arguments: Arguments given at the relation's call site

        Returns:
            Mapping of parent id to related records; missing ids mean no records
        """
        raise NotImplementedError

    @abstractmethod
    def count(self, model: Model, query_arguments: Optional[QueryArguments] = None) -> int:
        """Count records of `model` matching the arguments."""
        raise NotImplementedError
