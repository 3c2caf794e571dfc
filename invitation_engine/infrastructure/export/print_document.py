# invitation_engine/infrastructure/export/print_document.py
import html

from PIL import Image

from invitation_engine.config.settings import settings
from invitation_engine.domain.locales import get_locale
from invitation_engine.infrastructure.export.raster import to_data_url


def build_print_document(surface: Image.Image, child_name: str, locale: str = "en") -> str:
    """Standalone page holding only the rendered invitation; it prints itself and then closes."""
    title = html.escape(get_locale(locale).print_title(child_name))
    return f"""<!DOCTYPE html>
<html>
  <head>
    <meta charset="utf-8" />
    <title>{title}</title>
    <style>
      body {{ margin: 0; display: flex; justify-content: center; align-items: center; min-height: 100vh; }}
      img {{ max-width: 100%; height: auto; }}
      @media print {{
        img {{ width: 6in; height: auto; }}
      }}
    </style>
  </head>
  <body>
    <img src="{to_data_url(surface)}" alt="{title}" />
    <script>
      window.onload = function () {{
        setTimeout(function () {{ window.print(); }}, {settings.PRINT_DELAY_MS});
        setTimeout(function () {{ window.close(); }}, {settings.PRINT_CLOSE_MS});
      }};
    </script>
  </body>
</html>
"""
