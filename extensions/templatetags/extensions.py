import logging

from django import template
from django.template.loader import render_to_string
from django.utils.safestring import mark_safe

register = template.Library()
logger = logging.getLogger(__name__)

HOST_SCRIPTS_KEY = "extensions.host_scripts_rendered"
WIDGET_COUNT_KEY = "extensions.widget_count"


def _host_scripts_once(context) -> str:
    if context.render_context.get(HOST_SCRIPTS_KEY):
        return ""
    context.render_context[HOST_SCRIPTS_KEY] = True
    return render_to_string("extensions/host_scripts.html", request=context.get("request"))


@register.simple_tag(takes_context=True)
def extension_host_scripts(context) -> str:
    """Vue runtime and extension host, emitted at most once per render."""
    return mark_safe(_host_scripts_once(context))


@register.simple_tag(takes_context=True)
def render_extension_widget(context, widget_id) -> str:
    from extensions.runtime import get_descriptor, get_widget
    from extensions.validation import ExtensionCompileError

    extension = get_widget(widget_id)
    if extension is None:
        return ""

    try:
        descriptor = get_descriptor(extension)
    except ExtensionCompileError:
        logger.exception("Widget extension pk=%s failed to render", extension.pk)
        return ""

    # Element ids stay unique when a widget is embedded more than once.
    count = context.render_context.get(WIDGET_COUNT_KEY, 0) + 1
    context.render_context[WIDGET_COUNT_KEY] = count

    html = render_to_string(
        "extensions/widget.html",
        {
            "extension": extension,
            "descriptor": descriptor,
            "element_id": f"{extension.extension_id}-{count}",
        },
        request=context.get("request"),
    )
    return mark_safe(html + _host_scripts_once(context))
