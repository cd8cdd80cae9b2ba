# ecommerce_admin/responses.py
# Uniform JSON envelope returned by every endpoint:
#   {success, message, status_code, data?, errors?, meta?}
from flask import current_app, has_app_context, jsonify

from .constants import StatusCode
from .i18n import translate


class ApiResponse:
    """
    Envelope value object. The HTTP status carries transport semantics; the
    symbolic ``status_code`` discriminates business results and is also the
    default translation key for ``message``.

    Views and error handlers may return an ``ApiResponse`` directly: the
    application class converts it through :meth:`to_response`.
    """

    def __init__(self, success, message, data=None, errors=None, http_status=200,
                 headers=None, meta=None, status_code=None, translation_key=None):
        self.success = success
        self.message = message
        self.data = data
        self.errors = errors
        self.http_status = http_status
        self.headers = dict(headers or {})
        self.meta = dict(meta or {})
        self.status_code = status_code if status_code is not None else http_status
        self.translation_key = translation_key

    # --- Generic constructors ---
    @classmethod
    def success(cls, message='Success', data=None, http_status=200, headers=None, meta=None,
                status_code=StatusCode.OK, translation_key=None):
        return cls(True, message, data, None, http_status, headers, meta, status_code, translation_key)

    @classmethod
    def error(cls, message='Error', errors=None, http_status=400, headers=None, meta=None,
              status_code=StatusCode.BAD_REQUEST, translation_key=None):
        return cls(False, message, None, errors, http_status, headers, meta, status_code, translation_key)

    # --- Success shortcuts ---
    @classmethod
    def ok(cls, data=None, message='OK', meta=None, status_code=StatusCode.OK, translation_key=None):
        return cls.success(message, data, 200, None, meta, status_code, translation_key)

    @classmethod
    def created(cls, data=None, message='Created successfully', meta=None,
                status_code=StatusCode.CREATED, translation_key=None):
        return cls.success(message, data, 201, None, meta, status_code, translation_key)

    @classmethod
    def accepted(cls, data=None, message='Accepted', meta=None,
                 status_code=StatusCode.ACCEPTED, translation_key=None):
        return cls.success(message, data, 202, None, meta, status_code, translation_key)

    @classmethod
    def no_content(cls, message='No Content', status_code=StatusCode.NO_CONTENT, translation_key=None):
        return cls.success(message, None, 204, None, None, status_code, translation_key)

    # --- Error shortcuts ---
    @classmethod
    def bad_request(cls, message='Bad Request', errors=None, status_code=StatusCode.BAD_REQUEST,
                    translation_key=None):
        return cls.error(message, errors, 400, None, None, status_code, translation_key)

    @classmethod
    def unauthorized(cls, message='Unauthorized', errors=None, status_code=StatusCode.UNAUTHORIZED,
                     translation_key=None):
        return cls.error(message, errors, 401, None, None, status_code, translation_key)

    @classmethod
    def forbidden(cls, message='Forbidden', errors=None, status_code=StatusCode.FORBIDDEN,
                  translation_key=None):
        return cls.error(message, errors, 403, None, None, status_code, translation_key)

    @classmethod
    def not_found(cls, message='Resource not found', errors=None, status_code=StatusCode.NOT_FOUND,
                  translation_key=None):
        return cls.error(message, errors, 404, None, None, status_code, translation_key)

    @classmethod
    def validation_error(cls, message='Validation Error', errors=None,
                         status_code=StatusCode.VALIDATION_ERROR, translation_key=None):
        return cls.error(message, errors, 422, None, None, status_code, translation_key)

    @classmethod
    def server_error(cls, message='Internal Server Error', errors=None,
                     status_code=StatusCode.SERVER_ERROR, translation_key=None):
        return cls.error(message, errors, 500, None, None, status_code, translation_key)

    # --- Fluent modifiers ---
    def with_pagination(self, pagination):
        """Merge a pagination block into meta, leaving other meta keys untouched.

        Accepts a Flask-SQLAlchemy ``Pagination`` or a plain mapping with
        ``total``, ``per_page``, ``current_page`` and ``last_page``.
        """
        if isinstance(pagination, dict):
            block = {
                'total': pagination['total'],
                'per_page': pagination['per_page'],
                'current_page': pagination['current_page'],
                'last_page': pagination['last_page'],
            }
        else:
            block = {
                'total': pagination.total,
                'per_page': pagination.per_page,
                'current_page': pagination.page,
                'last_page': max(pagination.pages, 1),
            }
        self.meta['pagination'] = block
        return self

    def with_meta(self, key, value):
        self.meta[key] = value
        return self

    def with_headers(self, headers):
        self.headers.update(headers)
        return self

    def with_status_code(self, status_code):
        self.status_code = status_code
        return self

    def with_translation_key(self, translation_key):
        self.translation_key = translation_key
        return self

    # --- Serialisation ---
    @property
    def resolved_translation_key(self):
        if self.translation_key:
            return self.translation_key
        code = self.status_code
        return str(int(code)) if isinstance(code, int) else str(code)

    def resolve_message(self, locale=None):
        if locale is None and not has_app_context():
            return self.message
        return translate(self.resolved_translation_key, self.message, locale)

    def to_dict(self, locale=None):
        code = self.status_code
        payload = {
            'success': self.success,
            'message': self.resolve_message(locale),
            'status_code': int(code) if isinstance(code, int) else code,
        }
        if self.data is not None:
            payload['data'] = self.data
        if self.errors is not None:
            payload['errors'] = self.errors
        if self.meta:
            payload['meta'] = self.meta
        return payload

    def to_response(self):
        if self.http_status == 204:
            response = current_app.response_class(status=204)
        else:
            response = jsonify(self.to_dict())
        response.status_code = self.http_status
        for name, value in self.headers.items():
            response.headers[name] = value
        return response

    def __repr__(self):
        return f'<ApiResponse {self.http_status} {self.status_code!r} success={self.success}>'
