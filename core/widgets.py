from django import forms
from django.templatetags.static import static

CODEMIRROR_CDN = "https://cdnjs.cloudflare.com/ajax/libs/codemirror/5.65.16"
EASYMDE_CDN = "https://cdn.jsdelivr.net/npm/easymde@2.18.0/dist"

# The vue mode multiplexes these modes for template, script and style blocks.
VUE_MODE_SCRIPTS = (
    "codemirror.min.js",
    "mode/xml/xml.min.js",
    "mode/javascript/javascript.min.js",
    "mode/css/css.min.js",
    "mode/htmlmixed/htmlmixed.min.js",
    "addon/mode/overlay.min.js",
    "addon/mode/simple.min.js",
    "addon/mode/multiplex.min.js",
    "mode/vue/vue.min.js",
    "addon/edit/closebrackets.min.js",
    "addon/edit/closetag.min.js",
    "addon/edit/matchbrackets.min.js",
)


class VueSourceTextarea(forms.Textarea):
    """Extension source textarea, upgraded to a CodeMirror Vue editor in the admin."""

    def __init__(self, *args, height="600px", **kwargs):
        attrs = kwargs.setdefault("attrs", {})
        attrs["class"] = f"{attrs.get('class', '')} codemirror-widget".strip()
        attrs.setdefault("data-codemirror-mode", "vue")
        attrs.setdefault("data-codemirror-height", height)
        super().__init__(*args, **kwargs)

    @property
    def media(self):
        return forms.Media(
            css={"all": (f"{CODEMIRROR_CDN}/codemirror.min.css",)},
            js=tuple(f"{CODEMIRROR_CDN}/{path}" for path in VUE_MODE_SCRIPTS)
            + (static("core/js/codemirror-init.js"),),
        )


class EasyMDETextarea(forms.Textarea):
    """Markdown editor for extension descriptions."""

    def __init__(self, *args, **kwargs):
        attrs = kwargs.setdefault("attrs", {})
        attrs["data-easymde"] = "true"
        super().__init__(*args, **kwargs)

    @property
    def media(self):
        return forms.Media(
            css={"all": (f"{EASYMDE_CDN}/easymde.min.css",)},
            js=(f"{EASYMDE_CDN}/easymde.min.js", static("core/js/easymde-init.js")),
        )
