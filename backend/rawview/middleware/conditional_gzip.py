from starlette.middleware.base import BaseHTTPMiddleware
import gzip
from starlette.responses import Response as StarletteResponse

# Slice payloads (octet-stream, PNG) are sent as-is; the viewer reads them
# byte-for-byte and PNG is already deflated.
COMPRESSIBLE_PREFIXES = ('text/', 'application/json')


def _is_compressible(content_type: str) -> bool:
    content_type = content_type.lower()
    return content_type.startswith(COMPRESSIBLE_PREFIXES) or '+json' in content_type


class ConditionalGZipMiddleware(BaseHTTPMiddleware):
    """Gzip JSON/text responses (volume listings, histograms) when the client
    accepts gzip and the body is at least ``minimum_size`` bytes.
    """
    def __init__(self, app, minimum_size: int = 1024):
        super().__init__(app)
        self.minimum_size = minimum_size

    async def dispatch(self, request, call_next):
        response = await call_next(request)

        if response.headers.get('content-encoding'):
            return response
        if 'gzip' not in request.headers.get('accept-encoding', '').lower():
            return response
        if not _is_compressible(response.headers.get('content-type', '')):
            return response

        body = b''
        async for chunk in response.body_iterator:
            body += chunk

        headers = dict(response.headers)
        if len(body) < self.minimum_size:
            # body_iterator is consumed, rebuild the response unchanged
            return StarletteResponse(content=body, status_code=response.status_code,
                                     headers=headers, media_type=response.media_type)

        gzipped = gzip.compress(body)
        headers.pop('content-length', None)
        headers['Content-Encoding'] = 'gzip'
        vary = headers.pop('vary', '')
        if 'accept-encoding' not in vary.lower():
            vary = (vary + ', Accept-Encoding').strip(', ')
        headers['Vary'] = vary

        return StarletteResponse(content=gzipped, status_code=response.status_code,
                                 headers=headers, media_type=response.media_type)
