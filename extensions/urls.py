from django.urls import path

from .views import CompilePreviewView, MenuTreeView, ResolvePageView, WidgetView

urlpatterns = [
    path("menus/", MenuTreeView.as_view(), name="api-menus"),
    path("extensions/resolve/", ResolvePageView.as_view(), name="api-extension-resolve"),
    path("extensions/compile/", CompilePreviewView.as_view(), name="api-extension-compile"),
    path("extensions/<int:widget_id>/", WidgetView.as_view(), name="api-extension-widget"),
]
