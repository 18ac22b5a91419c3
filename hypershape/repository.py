"""
Query adapter used by ShapedResourceEndpoint

The adapter doesn't own the persistence, it is handed callables that create the
collection query (a SQLAlchemy query or a list), look up and delete a single entity.
"""

from typing import Any, Callable, Optional, Type
import hypershape
from .config import get_config
from .errors import ConfigurationMissingError
from .pagination import PaginatedList, QueryParameters
from .sorting import SortMapping


class QueryRepository:
    """
    :param query_factory: returns the (unsorted) collection query, eg. `lambda: db.session.query(Post)`
    :param get_by_id: returns a single entity or None
    :param delete: deletes a single entity, returns False if it didn't exist
    :param model: the mapped class used to sort the query, defaults to the sort mapping destination
    """

    def __init__(
        self,
        query_factory: Callable[[], Any],
        get_by_id: Callable[[Any], Optional[Any]],
        delete: Optional[Callable[[Any], bool]] = None,
        model: Optional[Type[Any]] = None,
    ) -> None:
        self.query_factory = query_factory
        self._get_by_id = get_by_id
        self._delete = delete
        self.model = model

    def __repr__(self) -> str:
        return f"<QueryRepository {self.model or self.query_factory}>"

    def get_page(self, params: QueryParameters, sort_mapping: SortMapping) -> PaginatedList:
        """
        Sort and paginate the collection query, the default sort order is used when no orderBy is given
        """
        order_by = (params.order_by or "").strip() or None
        if not order_by:
            default_order_by = get_config("DEFAULT_ORDER_BY")
            if default_order_by and default_order_by in sort_mapping:
                order_by = default_order_by
        query = sort_mapping.apply_sort(self.query_factory(), order_by, model=self.model)
        hypershape.log.debug(f"{self}: page {params.page_index} ({params.page_size}), orderBy: {order_by!r}")
        return PaginatedList.from_query(query, params)

    def get_by_id(self, id: Any) -> Optional[Any]:
        return self._get_by_id(id)

    def delete(self, id: Any) -> bool:
        if self._delete is None:
            raise ConfigurationMissingError(f"{self} doesn't support deletes")
        return bool(self._delete(id))
