from typing import Any, List, Sequence, Tuple

from sqlalchemy.orm import Query

from tipjar.schemas.my_base_model import Pagination


def paginate(query: Query, order_by: Sequence[Any], page: int, limit: int) -> Tuple[List[Any], Pagination]:
    """Offset pagination; returns the page of rows and the pagination block.

    ``order_by`` should end with a unique column so pages never overlap.
    """
    total = query.count()
    rows = query.order_by(*order_by).offset((page - 1) * limit).limit(limit).all()
    return rows, Pagination.build(page=page, limit=limit, total=total)
