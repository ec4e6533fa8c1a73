# fintrack/views.py
from django.shortcuts import render  # ✅ render a template into a response


def page_not_found_view(request, exception):  # ✅ handler404 target (see fintrack/urls.py)
    # ✅ keep the site chrome on unknown URLs and still answer with HTTP 404
    return render(request, "404.html", {"path": request.path}, status=404)
