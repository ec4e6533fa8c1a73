# accounts/views.py

import logging

from django.contrib import messages                             # ✅ flash messages
from django.contrib.auth import login, logout                   # ✅ auth helpers
from django.contrib.auth.decorators import login_required       # ✅ protect views
from django.shortcuts import redirect, render                   # ✅ render/redirect
from django.views.decorators.http import require_POST           # ✅ POST-only decorator

from .forms import DisplayNameForm, SignupForm

logger = logging.getLogger(__name__)


def signup(request):
    """
    Show the signup form and create a new user.
    After successful signup, log the user in and send them to the dashboard.
    """
    if request.method == "POST":                     # if the browser is submitting the form
        form = SignupForm(request.POST)              # bind POST data to our form
        if form.is_valid():                          # check all fields/validation rules
            user = form.save()                       # create the new user
            login(request, user)                     # log the user in immediately
            logger.info("user_signed_up id=%s", user.pk)
            return redirect("finance:dashboard")
    else:
        form = SignupForm()                          # GET: show a blank form

    return render(request, "registration/signup.html", {"form": form})


@login_required
def account(request):
    """Let a logged-in user change the name shown on the dashboard."""
    if request.method == "POST":
        form = DisplayNameForm(request.POST, instance=request.user)
        if form.is_valid():
            form.save()                                        # 💾 write first_name
            messages.success(request, "Display name updated.")
            return redirect("accounts:account")
    else:
        form = DisplayNameForm(instance=request.user)

    return render(request, "accounts/account.html", {"form": form})


@require_POST                                  # ✅ only allow POST (no GET) for logout
def logout_view(request):
    logout(request)                            # ✅ clear session
    messages.success(request, "You have been logged out.")
    return redirect("accounts:login")          # ✅ back to login page
