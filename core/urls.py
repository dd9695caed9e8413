from django.urls import re_path

from . import views

urlpatterns = [
    re_path(
        r'^(?!(?:admin|api|static|media)(?:/|$))(?P<path>.*?)/?$',
        views.extension_page,
        name='extension_page',
    ),
]
