"""Reading every row a query matches, one page at a time.

A protean query without an explicit limit stops at the aggregate's default
limit. Sweeps and full histories page through instead, on a stable ordering.
"""

PAGE_SIZE = 100


def fetch_all(query, order_by: str = "id", page_size: int | None = None) -> list:
    page_size = page_size or PAGE_SIZE
    query = query.order_by(order_by)
    rows, offset = [], 0
    while True:
        page = query.limit(page_size).offset(offset).all()
        rows.extend(page.items)
        if not page.has_next:
            return rows
        offset += page_size
