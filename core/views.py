import logging

import markdown

from django.contrib.auth.decorators import login_required
from django.http import Http404
from django.shortcuts import render

from extensions.runtime import get_descriptor, resolve_page
from extensions.validation import ExtensionCompileError

logger = logging.getLogger(__name__)


@login_required
def extension_page(request, path=""):
    extension = resolve_page(f"/{path}")
    if extension is None:
        if not path:
            return render(request, 'core/index.html')
        raise Http404("No page is registered at this path.")

    md = markdown.Markdown(extensions=["fenced_code"])
    description_html = md.convert(extension.description or "")

    try:
        descriptor = get_descriptor(extension)
    except ExtensionCompileError as exc:
        logger.warning("Extension %s could not be served: %s", extension.extension_id, exc)
        return render(request, 'core/extension_page.html', {
            "extension": extension,
            "description_html": description_html,
            "compile_error": str(exc),
        }, status=500)

    return render(request, 'core/extension_page.html', {
        "extension": extension,
        "descriptor": descriptor,
        "description_html": description_html,
    })
