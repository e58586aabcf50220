from rest_framework.negotiation import DefaultContentNegotiation
from rest_framework.renderers import BaseRenderer

from .exports import to_csv


class CSVRenderer(BaseRenderer):
    """
    Renders a list of rows as CSV. Error payloads (dicts) come out as
    key/value rows.
    """
    media_type = "text/csv"
    format = "csv"
    charset = "utf-8"

    def render(self, data, accepted_media_type=None, renderer_context=None):
        if data is None:
            return b""
        if isinstance(data, dict):
            data = [[key, value] for key, value in data.items()]
        return to_csv(data).encode(self.charset)


class ExportContentNegotiation(DefaultContentNegotiation):
    """
    Downloads default to the first renderer whatever the Accept header says;
    ``?format=`` still selects another one.
    """

    def select_renderer(self, request, renderers, format_suffix=None):
        requested = format_suffix or request.query_params.get(self.settings.URL_FORMAT_OVERRIDE)
        if not requested:
            return renderers[0], renderers[0].media_type
        return super().select_renderer(request, renderers, format_suffix)
