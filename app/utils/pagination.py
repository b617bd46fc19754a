from app.extensions import db


def paginate(select, page, limit):
    """Run a select through Flask-SQLAlchemy's paginator and build the pagination block."""
    result = db.paginate(select, page=page, per_page=limit, error_out=False, count=True)
    return result.items, {
        'currentPage': page,
        'totalPages': result.pages,
        'totalItems': result.total,
        'itemsPerPage': limit
    }
