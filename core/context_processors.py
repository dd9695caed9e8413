from .models import sidebar_tree


def navigation(request):
    if not getattr(request, "user", None) or not request.user.is_authenticated:
        return {"sidebar": []}
    return {"sidebar": sidebar_tree()}
