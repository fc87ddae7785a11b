from flask import jsonify


def success_response(data=None, message=None, status_code=200):
    """Render the success envelope: {status, message?, data?}"""
    body = {'status': 'success'}
    if message:
        body['message'] = message
    if data is not None:
        body['data'] = data
    return jsonify(body), status_code


def pagination_meta(page_obj, noun):
    """Pagination block for a Flask-SQLAlchemy Pagination object"""
    return {
        'current_page': page_obj.page,
        'total_pages': page_obj.pages,
        f'total_{noun}': page_obj.total,
        'has_next_page': page_obj.has_next,
        'has_prev_page': page_obj.has_prev,
    }
