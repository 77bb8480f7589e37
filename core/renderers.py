"""
Core — Response Renderer

Successful responses are wrapped as
  { "success": true, "data": ..., "meta": {...} }
Paginated lists move their counters into meta; unpaginated lists (the
movements sub-resources) get a bare count. Error responses already carry
the envelope built by core.exceptions and pass through untouched.

@file core/renderers.py
"""

from rest_framework.renderers import JSONRenderer

PAGINATION_KEYS = ('count', 'page', 'total_pages', 'next', 'previous')


class StandardJSONRenderer(JSONRenderer):

    def render(self, data, accepted_media_type=None, renderer_context=None):
        response = renderer_context.get('response') if renderer_context else None

        if response is not None and response.status_code >= 400:
            return super().render(data, accepted_media_type, renderer_context)

        if isinstance(data, dict) and 'success' in data:
            return super().render(data, accepted_media_type, renderer_context)

        if isinstance(data, dict) and 'results' in data:
            envelope = {
                'success': True,
                'data': data['results'],
                'meta': {key: data.get(key) for key in PAGINATION_KEYS},
            }
        elif isinstance(data, list):
            envelope = {'success': True, 'data': data, 'meta': {'count': len(data)}}
        else:
            envelope = {'success': True, 'data': data}

        return super().render(envelope, accepted_media_type, renderer_context)
