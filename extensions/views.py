import json
import logging

from django.http import JsonResponse
from django.utils.decorators import method_decorator
from django.views import View
from django.views.decorators.csrf import csrf_exempt

from core.models import Menu, sidebar_tree

from .runtime import extension_json, get_widget, resolve_page
from .validation import ExtensionCompileError, compile_source

logger = logging.getLogger(__name__)


def _error(error: str, description: str, status: int) -> JsonResponse:
    return JsonResponse({"error": error, "error_description": description}, status=status)


class AuthenticatedApiView(View):
    staff_only = False

    def dispatch(self, request, *args, **kwargs):
        user = request.user
        if not user.is_authenticated:
            return _error("unauthorized", "Authentication required.", 401)
        if self.staff_only and not user.is_staff:
            return _error("forbidden", "Staff access required.", 403)
        return super().dispatch(request, *args, **kwargs)


class MenuTreeView(AuthenticatedApiView):
    def get(self, request):
        return JsonResponse({"menus": sidebar_tree()})


class ResolvePageView(AuthenticatedApiView):
    def get(self, request):
        path = request.GET.get("path", "")
        if not path:
            return _error("invalid_request", "Missing path parameter.", 400)

        extension = resolve_page(path)
        if extension is None:
            return _error("not_found", f"No page extension at {Menu.normalize_path(path)}.", 404)
        try:
            return JsonResponse({"extension": extension_json(extension)})
        except ExtensionCompileError as exc:
            logger.warning("Extension %s could not be served: %s", extension.extension_id, exc)
            return _error("compile_error", str(exc), 500)


class WidgetView(AuthenticatedApiView):
    def get(self, request, widget_id):
        extension = get_widget(widget_id)
        if extension is None:
            return _error("not_found", f"No enabled widget with id {widget_id}.", 404)
        try:
            return JsonResponse({"extension": extension_json(extension)})
        except ExtensionCompileError as exc:
            logger.warning("Extension %s could not be served: %s", extension.extension_id, exc)
            return _error("compile_error", str(exc), 500)


@method_decorator(csrf_exempt, name="dispatch")
class CompilePreviewView(AuthenticatedApiView):
    staff_only = True

    def post(self, request):
        try:
            payload = json.loads(request.body or b"{}")
        except json.JSONDecodeError:
            return _error("invalid_request", "Body must be JSON.", 400)
        if not isinstance(payload, dict) or not isinstance(payload.get("code"), str):
            return _error("invalid_request", "Body must contain a 'code' string.", 400)

        result = compile_source(payload["code"], extension_id=str(payload.get("extension_id") or ""))
        if not result.is_valid:
            return JsonResponse(
                {
                    "error": "compile_error",
                    "errors": [
                        {"code": issue.code, "message": issue.message, "line": issue.line}
                        for issue in result.errors
                    ],
                },
                status=400,
            )
        return JsonResponse({"descriptor": result.descriptor, "warnings": result.warnings})
